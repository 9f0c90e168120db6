"""Controller layer for operator login and the price-adjustment table."""

from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials
from pydantic import BaseModel, Field

from kino.controllers.dependencies import (
    bearer_scheme,
    get_auth_service,
    get_price_adjustment_service,
    require_admin,
)
from kino.services.auth_service import (
    AdminAuthService,
    AdminTokenNotConfiguredError,
    InvalidAdminTokenError,
)
from kino.services.price_adjustment_service import (
    PriceAdjustmentService,
    PriceAdjustmentValidationError,
)
from kino.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["admin"])


class LoginRequest(BaseModel):
    admin_token: str = Field(min_length=1)


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class PriceAdjustmentResponse(BaseModel):
    name: str
    adjustment: Decimal


class PriceAdjustmentUpdateRequest(BaseModel):
    adjustment: Decimal = Field(ge=0, allow_inf_nan=False)


@router.get("/health", status_code=status.HTTP_200_OK)
async def health() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/login", response_model=LoginResponse, status_code=status.HTTP_200_OK)
async def login(
    payload: LoginRequest,
    auth_service: AdminAuthService = Depends(get_auth_service),
) -> LoginResponse:
    try:
        bearer = auth_service.login(payload.admin_token)
        return LoginResponse(access_token=bearer)
    except (AdminTokenNotConfiguredError, InvalidAdminTokenError) as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
async def logout(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    auth_service: AdminAuthService = Depends(get_auth_service),
) -> None:
    if credentials is not None:
        auth_service.logout(credentials.credentials)


@router.get(
    "/price-adjustments",
    response_model=list[PriceAdjustmentResponse],
    status_code=status.HTTP_200_OK,
)
async def list_price_adjustments(
    service: PriceAdjustmentService = Depends(get_price_adjustment_service),
) -> list[PriceAdjustmentResponse]:
    return [
        PriceAdjustmentResponse(name=item.name, adjustment=item.adjustment)
        for item in service.list_price_adjustments()
    ]


@router.put(
    "/price-adjustments/{name}",
    response_model=PriceAdjustmentResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_admin)],
)
async def update_price_adjustment(
    name: str,
    payload: PriceAdjustmentUpdateRequest,
    service: PriceAdjustmentService = Depends(get_price_adjustment_service),
) -> PriceAdjustmentResponse:
    try:
        updated = service.update_price_adjustment(name, payload.adjustment)
        return PriceAdjustmentResponse(name=updated.name, adjustment=updated.adjustment)
    except PriceAdjustmentValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected price adjustment update failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update price adjustment",
        ) from exc
