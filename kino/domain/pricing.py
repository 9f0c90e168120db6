"""Reservation pricing policy.

Pure computation over a screening, the seats that resolved from the request,
the number of seats the caller asked for, and a snapshot of the named
price-adjustment table. Nothing here touches storage.

Adjustment keys are looked up only when the rule that needs them applies, so
a table lacking ``largeGroup`` still prices a two-seat reservation.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping

from kino.domain.constraints import PricingConfig
from kino.domain.models import GroupSize, PricingResult, Screening, Seat


FEE_3D_KEY = "fee3D"
FEE_RUNTIME_KEY = "feeRuntime"

ZERO = Decimal("0")


class PricingConfigurationError(Exception):
    """Raised when the adjustment table cannot support a calculation."""


class PriceAdjustmentNotConfiguredError(PricingConfigurationError):
    """Raised when a required named adjustment is absent."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Price adjustment '{name}' is not configured")
        self.name = name


def classify_group_size(seat_count: int, config: PricingConfig) -> GroupSize:
    if seat_count <= config.small_group_max_seats:
        return GroupSize.SMALL_GROUP
    if seat_count >= config.large_group_min_seats:
        return GroupSize.LARGE_GROUP
    return GroupSize.NONE


def _require(adjustments: Mapping[str, Decimal], name: str) -> Decimal:
    try:
        return adjustments[name]
    except KeyError as exc:
        raise PriceAdjustmentNotConfiguredError(name) from exc


def _to_currency(amount: Decimal, config: PricingConfig) -> Decimal:
    """Round half-up to a whole multiple of the currency step (0.01, 0.05, ...)."""
    step = config.currency_precision
    return (amount / step).quantize(Decimal("1"), rounding=ROUND_HALF_UP) * step


def calculate_seats_subtotal(seats: Iterable[Seat]) -> Decimal:
    return sum((seat.pricing.price for seat in seats), ZERO)


def calculate_fees(
    screening: Screening,
    group_size: GroupSize,
    seats_subtotal: Decimal,
    adjustments: Mapping[str, Decimal],
    config: PricingConfig,
) -> Decimal:
    fee_3d = _require(adjustments, FEE_3D_KEY) if screening.is_3d else ZERO
    fee_runtime = (
        _require(adjustments, FEE_RUNTIME_KEY)
        if screening.movie.runtime_minutes > config.runtime_fee_threshold_minutes
        else ZERO
    )

    fees = ZERO
    if group_size is GroupSize.SMALL_GROUP:
        coefficient = _require(adjustments, GroupSize.SMALL_GROUP.value)
        fees = coefficient * seats_subtotal - seats_subtotal
    if fee_3d > 0:
        fees += fee_3d
    if fee_runtime > 0:
        fees += fee_runtime
    return _to_currency(fees, config)


def calculate_discount(
    group_size: GroupSize,
    seats_subtotal: Decimal,
    adjustments: Mapping[str, Decimal],
    config: PricingConfig,
) -> Decimal:
    # A largeGroup coefficient above 1 still yields a positive discount.
    if group_size is not GroupSize.LARGE_GROUP:
        return _to_currency(ZERO, config)
    coefficient = _require(adjustments, GroupSize.LARGE_GROUP.value)
    return _to_currency(abs(coefficient * seats_subtotal - seats_subtotal), config)


def compute_price(
    *,
    screening: Screening,
    seats: Iterable[Seat],
    requested_seat_count: int,
    adjustments: Mapping[str, Decimal],
    config: PricingConfig,
) -> PricingResult:
    """Price a prospective reservation.

    ``requested_seat_count`` drives the group category; ``seats`` drives the
    subtotal. The two differ when some requested ids did not resolve.
    """
    seats_subtotal = _to_currency(calculate_seats_subtotal(seats), config)
    group_size = classify_group_size(requested_seat_count, config)

    fees = calculate_fees(screening, group_size, seats_subtotal, adjustments, config)
    discount = calculate_discount(group_size, seats_subtotal, adjustments, config)

    return PricingResult(
        seats_subtotal=seats_subtotal,
        fees=fees,
        discount=discount,
        total=seats_subtotal + fees - discount,
    )
