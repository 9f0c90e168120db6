"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from kino.services.auth_service import (
    AdminAuthService,
    AdminTokenNotConfiguredError,
    InvalidAdminTokenError,
)
from kino.services.price_adjustment_service import PriceAdjustmentService
from kino.services.pricing_service import ReservationPricingService
from kino.services.reservation_service import ReservationService


bearer_scheme = HTTPBearer(auto_error=False)


def _service_from_state(request: Request, attribute: str, label: str):
    service = getattr(request.app.state, attribute, None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{label} service is not initialized",
        )
    return service


def get_auth_service(request: Request) -> AdminAuthService:
    return _service_from_state(request, "auth_service", "Auth")


def get_pricing_service(request: Request) -> ReservationPricingService:
    return _service_from_state(request, "pricing_service", "Pricing")


def get_reservation_service(request: Request) -> ReservationService:
    return _service_from_state(request, "reservation_service", "Reservation")


def get_price_adjustment_service(request: Request) -> PriceAdjustmentService:
    return _service_from_state(request, "price_adjustment_service", "Price adjustment")


async def require_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    auth_service: AdminAuthService = Depends(get_auth_service),
) -> None:
    if not auth_service.auth_enabled:
        return
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header with Bearer token is required",
        )
    try:
        auth_service.validate_bearer_token(credentials.credentials)
    except (AdminTokenNotConfiguredError, InvalidAdminTokenError) as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc


async def get_current_username(x_username: str | None = Header(default=None)) -> str:
    """Username of the caller, set by the identity layer in front of the API."""
    if x_username is None or not x_username.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-Username header is required",
        )
    return x_username.strip()
