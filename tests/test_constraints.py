"""Tests for pricing configuration validation.

Covers every rejection branch in validate_pricing_config().
"""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal

import pytest

from kino.domain.constraints import PricingConfig, validate_pricing_config
from kino.utils.config import get_settings


def valid_config(**overrides) -> PricingConfig:
    """Return a valid baseline PricingConfig, optionally overriding fields."""
    defaults = {
        "small_group_max_seats": 5,
        "large_group_min_seats": 10,
        "runtime_fee_threshold_minutes": 160,
        "currency_precision": Decimal("0.01"),
    }
    defaults.update(overrides)
    return PricingConfig(**defaults)


def test_valid_config_passes() -> None:
    validate_pricing_config(valid_config())


def test_negative_small_group_max_raises() -> None:
    with pytest.raises(ValueError):
        validate_pricing_config(valid_config(small_group_max_seats=-1))


def test_large_group_min_equal_to_small_max_raises() -> None:
    """A size must never be both small and large."""
    with pytest.raises(ValueError):
        validate_pricing_config(valid_config(small_group_max_seats=5, large_group_min_seats=5))


def test_large_group_min_below_small_max_raises() -> None:
    with pytest.raises(ValueError):
        validate_pricing_config(valid_config(large_group_min_seats=3))


def test_negative_runtime_threshold_raises() -> None:
    with pytest.raises(ValueError):
        validate_pricing_config(valid_config(runtime_fee_threshold_minutes=-1))


def test_zero_currency_precision_raises() -> None:
    with pytest.raises(ValueError):
        validate_pricing_config(valid_config(currency_precision=Decimal("0")))


def test_adjacent_group_bounds_pass() -> None:
    validate_pricing_config(valid_config(small_group_max_seats=5, large_group_min_seats=6))


def test_config_from_settings_reads_pricing_fields() -> None:
    get_settings.cache_clear()
    settings = replace(
        get_settings(),
        pricing_small_group_max_seats=3,
        pricing_large_group_min_seats=12,
        pricing_runtime_fee_threshold_minutes=150,
        pricing_currency_precision=Decimal("0.05"),
    )

    config = PricingConfig.from_settings(settings)

    assert config == PricingConfig(
        small_group_max_seats=3,
        large_group_min_seats=12,
        runtime_fee_threshold_minutes=150,
        currency_precision=Decimal("0.05"),
    )


def test_default_settings_match_documented_policy(monkeypatch) -> None:
    for name in (
        "PRICING_SMALL_GROUP_MAX_SEATS",
        "PRICING_LARGE_GROUP_MIN_SEATS",
        "PRICING_RUNTIME_FEE_THRESHOLD_MINUTES",
        "PRICING_CURRENCY_PRECISION",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    try:
        config = PricingConfig.from_settings(get_settings())
    finally:
        get_settings.cache_clear()

    assert config == PricingConfig()
