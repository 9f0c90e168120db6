"""HTTP controller layer for reservations and reservation pricing."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator

from kino.controllers.dependencies import (
    get_current_username,
    get_pricing_service,
    get_reservation_service,
    require_admin,
)
from kino.domain.pricing import PricingConfigurationError
from kino.services.pricing_service import ReservationPricingService, ScreeningNotFoundError
from kino.services.reservation_service import (
    ReservationResponse,
    ReservationService,
    ReservationValidationError,
    SeatNotFoundError,
    UserNotFoundError,
)
from kino.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(prefix="/reservations", tags=["reservations"])


class ReservationPriceRequest(BaseModel):
    """Input DTO validated before entering service layer."""

    screening_id: int = Field(gt=0)
    seat_ids: list[int] = Field(min_length=1)

    @field_validator("seat_ids")
    @classmethod
    def validate_seat_ids(cls, value: list[int]) -> list[int]:
        for seat_id in value:
            if seat_id <= 0:
                raise ValueError("seat_ids values must be positive integers")
        return value


class ReservationRequest(ReservationPriceRequest):
    pass


class ReservationPriceResponse(BaseModel):
    seats_sum: Decimal
    fees: Decimal
    discount: Decimal = Field(ge=0)
    total: Decimal


class SeatResponseModel(BaseModel):
    id: int
    theater_name: str
    row_number: int
    seat_number: int
    seat_pricing: str
    price: Decimal


class ScreeningResponseModel(BaseModel):
    id: int
    movie_title: str
    runtime_minutes: int = Field(gt=0)
    theater_name: str
    starts_at: datetime
    is_3d: bool


class ReservationResponseModel(BaseModel):
    id: int
    username: str
    screening: ScreeningResponseModel
    seats: list[SeatResponseModel]
    created_at: datetime

    @classmethod
    def from_response(cls, response: ReservationResponse) -> "ReservationResponseModel":
        return cls(**response.to_dict())


@router.post(
    "/price",
    response_model=ReservationPriceResponse,
    status_code=status.HTTP_200_OK,
)
async def calculate_reservation_price(
    payload: ReservationPriceRequest,
    service: ReservationPricingService = Depends(get_pricing_service),
) -> ReservationPriceResponse:
    """Price a prospective reservation without persisting anything."""
    try:
        result = service.calculate_reservation_price(
            screening_id=payload.screening_id,
            seat_ids=payload.seat_ids,
        )
        return ReservationPriceResponse(
            seats_sum=result.seats_subtotal,
            fees=result.fees,
            discount=result.discount,
            total=result.total,
        )
    except ScreeningNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except PricingConfigurationError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected reservation pricing failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to calculate reservation price",
        ) from exc


@router.post(
    "",
    response_model=ReservationResponseModel,
    status_code=status.HTTP_201_CREATED,
)
async def create_reservation(
    payload: ReservationRequest,
    username: str = Depends(get_current_username),
    service: ReservationService = Depends(get_reservation_service),
) -> ReservationResponseModel:
    try:
        result = service.create_reservation(
            screening_id=payload.screening_id,
            seat_ids=payload.seat_ids,
            username=username,
        )
        return ReservationResponseModel.from_response(result)
    except ReservationValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except (UserNotFoundError, ScreeningNotFoundError, SeatNotFoundError) as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected reservation creation failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create reservation",
        ) from exc


@router.get(
    "",
    response_model=list[ReservationResponseModel],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_admin)],
)
async def list_reservations(
    service: ReservationService = Depends(get_reservation_service),
) -> list[ReservationResponseModel]:
    return [
        ReservationResponseModel.from_response(item)
        for item in service.get_all_reservations()
    ]


@router.get(
    "/screening/{screening_id}",
    response_model=list[ReservationResponseModel],
    status_code=status.HTTP_200_OK,
)
async def list_reservations_by_screening(
    screening_id: int,
    service: ReservationService = Depends(get_reservation_service),
) -> list[ReservationResponseModel]:
    return [
        ReservationResponseModel.from_response(item)
        for item in service.get_reservations_by_screening_id(screening_id)
    ]


@router.get(
    "/user/{username}",
    response_model=list[ReservationResponseModel],
    status_code=status.HTTP_200_OK,
)
async def list_reservations_by_username(
    username: str,
    service: ReservationService = Depends(get_reservation_service),
) -> list[ReservationResponseModel]:
    return [
        ReservationResponseModel.from_response(item)
        for item in service.get_reservations_by_username(username)
    ]
