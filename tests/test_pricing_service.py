from __future__ import annotations

from dataclasses import replace
from decimal import Decimal

import pytest

from kino.domain.pricing import PriceAdjustmentNotConfiguredError
from kino.repository.data_repository import DataRepository
from kino.services.price_adjustment_service import PriceAdjustmentService
from kino.services.pricing_service import ReservationPricingService, ScreeningNotFoundError
from kino.utils.config import get_settings


# Demo seed: screening 3 is a 96 minute 2D movie, screening 4 the same movie
# in 3D, screening 1 a 166 minute 2D movie. Seats 25..96 are 100.00 each.
PLAIN_SCREENING = 3
SCREENING_3D = 4
LONG_SCREENING = 1


def _build_test_settings(tmp_path, filename: str):
    get_settings.cache_clear()
    base = get_settings()
    return replace(base, database_path=tmp_path / filename)


def _build_service(tmp_path, filename: str = "pricing.db"):
    settings = _build_test_settings(tmp_path, filename)
    repository = DataRepository(settings)
    repository.initialize_database()
    repository.seed_demo_data()
    return ReservationPricingService(repository=repository, settings=settings), repository


def test_small_group_price_from_seeded_adjustments(tmp_path):
    service, _ = _build_service(tmp_path)

    result = service.calculate_reservation_price(screening_id=PLAIN_SCREENING, seat_ids=[25])

    assert result.seats_subtotal == Decimal("100.00")
    assert result.fees == Decimal("10.00")
    assert result.discount == Decimal("0.00")
    assert result.total == Decimal("110.00")


def test_large_group_price_from_seeded_adjustments(tmp_path):
    service, _ = _build_service(tmp_path)

    result = service.calculate_reservation_price(
        screening_id=PLAIN_SCREENING,
        seat_ids=list(range(25, 35)),
    )

    assert result.seats_subtotal == Decimal("1000.00")
    assert result.discount == Decimal("150.00")
    assert result.total == Decimal("850.00")


def test_3d_and_runtime_fees_come_from_screening(tmp_path):
    service, _ = _build_service(tmp_path)
    seven_seats = list(range(25, 32))

    plain = service.calculate_reservation_price(screening_id=PLAIN_SCREENING, seat_ids=seven_seats)
    three_d = service.calculate_reservation_price(screening_id=SCREENING_3D, seat_ids=seven_seats)
    long_movie = service.calculate_reservation_price(
        screening_id=LONG_SCREENING,
        seat_ids=seven_seats,
    )

    assert plain.fees == Decimal("0.00")
    assert three_d.fees == Decimal("2.00")
    assert long_movie.fees == Decimal("1.50")
    assert long_movie.total == Decimal("701.50")


def test_unknown_seat_ids_are_dropped_from_subtotal(tmp_path):
    service, _ = _build_service(tmp_path)

    result = service.calculate_reservation_price(
        screening_id=PLAIN_SCREENING,
        seat_ids=[25, 99999],
    )

    assert result.seats_subtotal == Decimal("100.00")
    assert result.total == Decimal("110.00")


def test_duplicate_seat_ids_count_towards_group_size(tmp_path):
    service, _ = _build_service(tmp_path)

    result = service.calculate_reservation_price(
        screening_id=PLAIN_SCREENING,
        seat_ids=[25] * 10,
    )

    assert result.seats_subtotal == Decimal("100.00")
    assert result.discount == Decimal("15.00")


def test_unknown_screening_raises(tmp_path):
    service, _ = _build_service(tmp_path)

    with pytest.raises(ScreeningNotFoundError):
        service.calculate_reservation_price(screening_id=999, seat_ids=[25])


def test_adjustment_update_is_visible_to_next_calculation(tmp_path):
    service, repository = _build_service(tmp_path)
    adjustments = PriceAdjustmentService(repository=repository)

    before = service.calculate_reservation_price(screening_id=PLAIN_SCREENING, seat_ids=[25])
    adjustments.update_price_adjustment("smallGroup", Decimal("1.20"))
    after = service.calculate_reservation_price(screening_id=PLAIN_SCREENING, seat_ids=[25])

    assert before.total == Decimal("110.00")
    assert after.total == Decimal("120.00")


def test_missing_required_adjustment_raises_configuration_error(tmp_path):
    service, repository = _build_service(tmp_path)
    repository.delete_price_adjustment("fee3D")

    seven_seats = list(range(25, 32))
    assert service.calculate_reservation_price(
        screening_id=PLAIN_SCREENING,
        seat_ids=seven_seats,
    ).total == Decimal("700.00")
    with pytest.raises(PriceAdjustmentNotConfiguredError):
        service.calculate_reservation_price(screening_id=SCREENING_3D, seat_ids=seven_seats)


def test_adjustment_table_snapshot_is_read_only(tmp_path):
    service, _ = _build_service(tmp_path)

    table = service.load_adjustment_table()

    assert table["smallGroup"] == Decimal("1.10")
    with pytest.raises(TypeError):
        table["smallGroup"] = Decimal("2")  # type: ignore[index]


def test_invalid_pricing_settings_are_rejected(tmp_path):
    settings = replace(
        _build_test_settings(tmp_path, "invalid.db"),
        pricing_small_group_max_seats=10,
        pricing_large_group_min_seats=10,
    )

    with pytest.raises(ValueError):
        ReservationPricingService(repository=DataRepository(settings), settings=settings)
