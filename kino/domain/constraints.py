"""Domain-level validation rules for the pricing policy."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from kino.utils.config import Settings


@dataclass(frozen=True)
class PricingConfig:
    small_group_max_seats: int = 5
    large_group_min_seats: int = 10
    runtime_fee_threshold_minutes: int = 160
    currency_precision: Decimal = Decimal("0.01")

    @classmethod
    def from_settings(cls, settings: Settings) -> "PricingConfig":
        return cls(
            small_group_max_seats=settings.pricing_small_group_max_seats,
            large_group_min_seats=settings.pricing_large_group_min_seats,
            runtime_fee_threshold_minutes=settings.pricing_runtime_fee_threshold_minutes,
            currency_precision=settings.pricing_currency_precision,
        )


def validate_pricing_config(config: PricingConfig) -> None:
    if config.small_group_max_seats < 0:
        raise ValueError("small_group_max_seats must be >= 0")
    if config.large_group_min_seats <= config.small_group_max_seats:
        raise ValueError("large_group_min_seats must be greater than small_group_max_seats")
    if config.runtime_fee_threshold_minutes < 0:
        raise ValueError("runtime_fee_threshold_minutes must be >= 0")
    if config.currency_precision <= 0:
        raise ValueError("currency_precision must be > 0")
