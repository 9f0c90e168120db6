"""Domain models for screenings, seats, reservations and pricing."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class GroupSize(str, Enum):
    """Group category of a reservation; values match adjustment-table keys."""

    SMALL_GROUP = "smallGroup"
    LARGE_GROUP = "largeGroup"
    NONE = ""


@dataclass(frozen=True)
class SeatPricing:
    pricing_id: int
    name: str
    price: Decimal


@dataclass(frozen=True)
class Seat:
    seat_id: int
    theater_name: str
    row_number: int
    seat_number: int
    pricing: SeatPricing


@dataclass(frozen=True)
class Movie:
    movie_id: int
    title: str
    runtime_minutes: int


@dataclass(frozen=True)
class Screening:
    screening_id: int
    movie: Movie
    theater_name: str
    starts_at: str
    is_3d: bool


@dataclass(frozen=True)
class PriceAdjustment:
    name: str
    adjustment: Decimal


@dataclass(frozen=True)
class User:
    username: str
    email: str


@dataclass(frozen=True)
class Reservation:
    reservation_id: int
    username: str
    screening_id: int
    seat_ids: tuple[int, ...]
    created_at: str


@dataclass(frozen=True)
class PricingResult:
    seats_subtotal: Decimal
    fees: Decimal
    discount: Decimal
    total: Decimal
