from __future__ import annotations

from dataclasses import replace
from decimal import Decimal

import pytest

from kino.repository.data_repository import DataRepository
from kino.services.pricing_service import ScreeningNotFoundError
from kino.services.reservation_service import (
    ReservationService,
    ReservationValidationError,
    SeatNotFoundError,
    UserNotFoundError,
)
from kino.utils.config import get_settings


def _build_test_settings(tmp_path, filename: str):
    get_settings.cache_clear()
    base = get_settings()
    return replace(base, database_path=tmp_path / filename)


def _build_service(tmp_path, filename: str = "reservations.db"):
    settings = _build_test_settings(tmp_path, filename)
    repository = DataRepository(settings)
    repository.initialize_database()
    repository.seed_demo_data()
    return ReservationService(repository=repository, settings=settings), repository


def test_create_reservation_persists_and_maps_response(tmp_path):
    service, repository = _build_service(tmp_path)

    response = service.create_reservation(screening_id=3, seat_ids=[26, 25], username="user1")

    assert repository.count_reservations() == 1
    assert response.username == "user1"
    assert response.screening.id == 3
    assert response.screening.movie_title == "Inside Out 2"
    assert response.screening.is_3d is False
    assert [seat.id for seat in response.seats] == [25, 26]
    assert all(seat.price == Decimal("100.00") for seat in response.seats)
    assert response.seats[0].seat_pricing == "standard"
    assert response.created_at


def test_duplicate_seat_ids_collapse_to_one_seat(tmp_path):
    service, repository = _build_service(tmp_path)

    response = service.create_reservation(screening_id=3, seat_ids=[25, 25, 25], username="user1")

    assert [seat.id for seat in response.seats] == [25]
    stored = repository.get_reservation(response.id)
    assert stored is not None
    assert stored.seat_ids == (25,)


def test_unknown_user_is_rejected(tmp_path):
    service, repository = _build_service(tmp_path)

    with pytest.raises(UserNotFoundError):
        service.create_reservation(screening_id=3, seat_ids=[25], username="ghost")
    assert repository.count_reservations() == 0


def test_unknown_screening_is_rejected(tmp_path):
    service, _ = _build_service(tmp_path)

    with pytest.raises(ScreeningNotFoundError):
        service.create_reservation(screening_id=404, seat_ids=[25], username="user1")


def test_unknown_seat_is_rejected(tmp_path):
    service, repository = _build_service(tmp_path)

    with pytest.raises(SeatNotFoundError):
        service.create_reservation(screening_id=3, seat_ids=[25, 99999], username="user1")
    assert repository.count_reservations() == 0


def test_empty_seat_list_is_rejected(tmp_path):
    service, _ = _build_service(tmp_path)

    with pytest.raises(ReservationValidationError):
        service.create_reservation(screening_id=3, seat_ids=[], username="user1")


def test_same_seat_can_be_reserved_twice(tmp_path):
    service, repository = _build_service(tmp_path)

    service.create_reservation(screening_id=3, seat_ids=[25], username="user1")
    service.create_reservation(screening_id=3, seat_ids=[25], username="user2")

    assert repository.count_reservations() == 2


def test_listings_filter_by_screening_and_username(tmp_path):
    service, _ = _build_service(tmp_path)
    first = service.create_reservation(screening_id=3, seat_ids=[25], username="user1")
    second = service.create_reservation(screening_id=4, seat_ids=[141, 142], username="user1")
    third = service.create_reservation(screening_id=3, seat_ids=[30], username="user2")

    by_screening = service.get_reservations_by_screening_id(3)
    by_user = service.get_reservations_by_username("user1")
    everything = service.get_all_reservations()

    assert [item.id for item in by_screening] == [first.id, third.id]
    assert [item.id for item in by_user] == [first.id, second.id]
    assert [item.id for item in everything] == [first.id, second.id, third.id]
    assert by_user[1].screening.is_3d is True
    assert [seat.id for seat in by_user[1].seats] == [141, 142]
    assert service.get_reservations_by_username("nobody") == []


def test_response_to_dict_nests_screening_and_seats(tmp_path):
    service, _ = _build_service(tmp_path)

    payload = service.create_reservation(screening_id=3, seat_ids=[25], username="user1").to_dict()

    assert payload["screening"]["id"] == 3
    assert payload["seats"][0]["id"] == 25
    assert payload["seats"][0]["price"] == Decimal("100.00")
