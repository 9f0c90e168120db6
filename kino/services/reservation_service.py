"""Reservation creation, lookup and response mapping."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional, Sequence

from kino.domain.models import Reservation, Screening, Seat
from kino.repository.data_repository import DataRepository
from kino.services.pricing_service import ScreeningNotFoundError
from kino.utils.config import Settings, get_settings
from kino.utils.logger import get_logger


logger = get_logger(__name__)


class ReservationError(Exception):
    """Base exception for reservation workflow failures."""


class ReservationValidationError(ReservationError):
    """Raised when reservation inputs are invalid."""


class UserNotFoundError(ReservationError):
    """Raised when the reserving user does not exist."""


class SeatNotFoundError(ReservationError):
    """Raised when a requested seat id does not exist."""


@dataclass(frozen=True)
class SeatResponse:
    id: int
    theater_name: str
    row_number: int
    seat_number: int
    seat_pricing: str
    price: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "theater_name": self.theater_name,
            "row_number": self.row_number,
            "seat_number": self.seat_number,
            "seat_pricing": self.seat_pricing,
            "price": self.price,
        }


@dataclass(frozen=True)
class ScreeningResponse:
    id: int
    movie_title: str
    runtime_minutes: int
    theater_name: str
    starts_at: str
    is_3d: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "movie_title": self.movie_title,
            "runtime_minutes": self.runtime_minutes,
            "theater_name": self.theater_name,
            "starts_at": self.starts_at,
            "is_3d": self.is_3d,
        }


@dataclass(frozen=True)
class ReservationResponse:
    id: int
    username: str
    screening: ScreeningResponse
    seats: list[SeatResponse]
    created_at: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "screening": self.screening.to_dict(),
            "seats": [seat.to_dict() for seat in self.seats],
            "created_at": self.created_at,
        }


def to_seat_response(seat: Seat) -> SeatResponse:
    return SeatResponse(
        id=seat.seat_id,
        theater_name=seat.theater_name,
        row_number=seat.row_number,
        seat_number=seat.seat_number,
        seat_pricing=seat.pricing.name,
        price=seat.pricing.price,
    )


def to_screening_response(screening: Screening) -> ScreeningResponse:
    return ScreeningResponse(
        id=screening.screening_id,
        movie_title=screening.movie.title,
        runtime_minutes=screening.movie.runtime_minutes,
        theater_name=screening.theater_name,
        starts_at=screening.starts_at,
        is_3d=screening.is_3d,
    )


class ReservationService:
    """Creates reservations and maps them into response shapes."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)

    def create_reservation(
        self,
        *,
        screening_id: int,
        seat_ids: Sequence[int],
        username: str,
    ) -> ReservationResponse:
        if not seat_ids:
            raise ReservationValidationError("seat_ids must contain at least one seat id")

        user = self._repository.get_user(username)
        if user is None:
            raise UserNotFoundError(f"User '{username}' not found")

        screening = self._repository.get_screening(screening_id)
        if screening is None:
            raise ScreeningNotFoundError(screening_id)

        selected_seats: dict[int, Seat] = {}
        for seat_id in seat_ids:
            if seat_id in selected_seats:
                continue
            seat = self._repository.get_seat(seat_id)
            if seat is None:
                raise SeatNotFoundError(f"Seat with id {seat_id} not found")
            selected_seats[seat_id] = seat

        reservation = self._repository.create_reservation(
            username=user.username,
            screening_id=screening.screening_id,
            seat_ids=selected_seats.keys(),
        )
        logger.info(
            "Reservation %s created for user=%s screening=%s seats=%s",
            reservation.reservation_id,
            user.username,
            screening.screening_id,
            list(reservation.seat_ids),
        )
        return self.to_response(reservation)

    def get_all_reservations(self) -> list[ReservationResponse]:
        return self._to_responses(self._repository.list_reservations())

    def get_reservations_by_screening_id(self, screening_id: int) -> list[ReservationResponse]:
        return self._to_responses(self._repository.list_reservations_by_screening(screening_id))

    def get_reservations_by_username(self, username: str) -> list[ReservationResponse]:
        return self._to_responses(self._repository.list_reservations_by_username(username))

    def _to_responses(self, reservations: list[Reservation]) -> list[ReservationResponse]:
        screenings: dict[int, ScreeningResponse] = {}
        responses = []
        for reservation in reservations:
            if reservation.screening_id not in screenings:
                screenings[reservation.screening_id] = self._screening_response(
                    reservation.screening_id
                )
            responses.append(
                self.to_response(reservation, screening=screenings[reservation.screening_id])
            )
        return responses

    def _screening_response(self, screening_id: int) -> ScreeningResponse:
        screening = self._repository.get_screening(screening_id)
        if screening is None:
            raise ScreeningNotFoundError(screening_id)
        return to_screening_response(screening)

    def to_response(
        self,
        reservation: Reservation,
        screening: Optional[ScreeningResponse] = None,
    ) -> ReservationResponse:
        seats = self._repository.get_seats_by_ids(reservation.seat_ids)
        return ReservationResponse(
            id=reservation.reservation_id,
            username=reservation.username,
            screening=screening or self._screening_response(reservation.screening_id),
            seats=[to_seat_response(seat) for seat in seats],
            created_at=reservation.created_at,
        )
