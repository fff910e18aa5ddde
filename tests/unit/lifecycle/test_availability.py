"""
Unit tests for room availability, occupancy and booking guards.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Callable

import pytest

from hotel_backoffice.errors import BookingRejected, InvalidInterval, RoomUnavailable
from hotel_backoffice.lifecycle.availability import (
    conflicting_reservations,
    current_occupancy,
    initial_status,
    is_room_available,
    room_status,
    validate_new_booking,
)
from hotel_backoffice.lifecycle.statuses import ReservationStatus
from hotel_backoffice.schemas.reservations import Guests, Origin, Reservation
from hotel_backoffice.schemas.rooms import Room, RoomStatus

NOW = datetime(2025, 5, 8, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def room(room_factory: Callable[..., Room]) -> Room:
    return room_factory(room_id=1, capacity=2)


@pytest.mark.unit
def test_june_checkout_day_is_bookable(
    room: Room, reservation_factory: Callable[..., Reservation]
) -> None:
    existing = [reservation_factory(date(2025, 6, 1), date(2025, 6, 4))]

    assert is_room_available(room, date(2025, 6, 4), date(2025, 6, 6), existing)
    assert not is_room_available(room, date(2025, 6, 3), date(2025, 6, 6), existing)


@pytest.mark.unit
def test_back_to_back_stays_do_not_conflict(
    room: Room, reservation_factory: Callable[..., Reservation]
) -> None:
    existing = [reservation_factory(date(2025, 5, 10), date(2025, 5, 15))]

    assert is_room_available(room, date(2025, 5, 15), date(2025, 5, 18), existing)
    assert is_room_available(room, date(2025, 5, 7), date(2025, 5, 10), existing)


@pytest.mark.unit
@pytest.mark.parametrize(
    "status, blocks",
    [
        (ReservationStatus.PENDING, True),
        (ReservationStatus.CONFIRMED_PENDING_PAYMENT, True),
        (ReservationStatus.ACCEPTED, True),
        (ReservationStatus.EXPIRED, True),
        (ReservationStatus.CANCELLED, False),
        (ReservationStatus.REJECTED, False),
    ],
)
def test_only_cancelled_and_rejected_release_the_room(
    room: Room,
    reservation_factory: Callable[..., Reservation],
    status: ReservationStatus,
    blocks: bool,
) -> None:
    existing = [reservation_factory(date(2025, 6, 1), date(2025, 6, 4), status=status)]

    assert is_room_available(room, date(2025, 6, 2), date(2025, 6, 3), existing) is not blocks


@pytest.mark.unit
def test_other_rooms_do_not_conflict(
    room: Room, reservation_factory: Callable[..., Reservation]
) -> None:
    existing = [reservation_factory(date(2025, 6, 1), date(2025, 6, 4), room_id=2)]

    assert is_room_available(room, date(2025, 6, 1), date(2025, 6, 4), existing)


@pytest.mark.unit
def test_candidate_interval_must_be_positive(room: Room) -> None:
    with pytest.raises(InvalidInterval):
        is_room_available(room, date(2025, 6, 4), date(2025, 6, 4), [])


@pytest.mark.unit
def test_conflicting_reservations_lists_overlaps(
    room: Room, reservation_factory: Callable[..., Reservation]
) -> None:
    a = reservation_factory(date(2025, 6, 1), date(2025, 6, 4))
    b = reservation_factory(date(2025, 6, 5), date(2025, 6, 8))
    c = reservation_factory(date(2025, 6, 10), date(2025, 6, 12))

    conflicts = conflicting_reservations(room, date(2025, 6, 3), date(2025, 6, 6), [a, b, c])

    assert [r.id for r in conflicts] == [a.id, b.id]


@pytest.mark.unit
def test_current_occupancy_and_room_status(
    room: Room, reservation_factory: Callable[..., Reservation]
) -> None:
    stay = reservation_factory(date(2025, 5, 7), date(2025, 5, 9))
    cancelled = reservation_factory(
        date(2025, 5, 1), date(2025, 5, 20), status=ReservationStatus.CANCELLED
    )

    assert current_occupancy(room, NOW, [cancelled, stay]) == stay
    assert room_status(room, NOW, [stay]) is RoomStatus.OCCUPIED
    assert room_status(room, datetime(2025, 5, 9, tzinfo=timezone.utc), [stay]) is RoomStatus.VACANT


@pytest.mark.unit
def test_initial_status() -> None:
    assert initial_status(Origin.MOBILE) is ReservationStatus.PENDING
    assert initial_status(Origin.MOBILE, payment_received=True) is ReservationStatus.PENDING
    assert initial_status(Origin.STAFF_MANUAL) is ReservationStatus.CONFIRMED_PENDING_PAYMENT
    assert initial_status(Origin.STAFF_MANUAL, payment_received=True) is ReservationStatus.ACCEPTED


def _book(room: Room, check_in: date, check_out: date, **overrides: Any) -> int:
    kwargs = dict(
        guests=Guests(adults=2),
        notes="",
        now=NOW,
        existing_reservations=[],
        max_nights=7,
        capacity_allowance=2,
    )
    kwargs.update(overrides)
    return validate_new_booking(room, check_in, check_out, **kwargs)


@pytest.mark.unit
def test_validate_new_booking_returns_nights(room: Room) -> None:
    assert _book(room, date(2025, 5, 10), date(2025, 5, 13)) == 3


@pytest.mark.unit
def test_validate_new_booking_rejects_inactive_room(room_factory: Callable[..., Room]) -> None:
    with pytest.raises(BookingRejected, match="not active"):
        _book(room_factory(is_active=False), date(2025, 5, 10), date(2025, 5, 12))


@pytest.mark.unit
def test_validate_new_booking_rejects_past_check_in(room: Room) -> None:
    with pytest.raises(BookingRejected, match="past"):
        _book(room, date(2025, 5, 7), date(2025, 5, 9))


@pytest.mark.unit
def test_validate_new_booking_allows_same_day_check_in(room: Room) -> None:
    assert _book(room, date(2025, 5, 8), date(2025, 5, 9)) == 1


@pytest.mark.unit
def test_validate_new_booking_rejects_long_stays(room: Room) -> None:
    assert _book(room, date(2025, 5, 10), date(2025, 5, 17)) == 7
    with pytest.raises(BookingRejected, match="cannot exceed 7"):
        _book(room, date(2025, 5, 10), date(2025, 5, 18))


@pytest.mark.unit
def test_validate_new_booking_rejects_inverted_dates(room: Room) -> None:
    with pytest.raises(InvalidInterval):
        _book(room, date(2025, 5, 12), date(2025, 5, 10))


@pytest.mark.unit
def test_extra_guests_need_notes_and_stay_within_allowance(room: Room) -> None:
    with pytest.raises(BookingRejected, match="Notes are required"):
        _book(room, date(2025, 5, 10), date(2025, 5, 12), guests=Guests(adults=3))

    nights = _book(
        room,
        date(2025, 5, 10),
        date(2025, 5, 12),
        guests=Guests(adults=3, children=1),
        notes="Extra bed",
    )
    assert nights == 2

    with pytest.raises(BookingRejected, match="exceeds the maximum allowed"):
        _book(
            room,
            date(2025, 5, 10),
            date(2025, 5, 12),
            guests=Guests(adults=3, children=2),
            notes="Extra bed",
        )


@pytest.mark.unit
def test_validate_new_booking_reports_conflicts(
    room: Room, reservation_factory: Callable[..., Reservation]
) -> None:
    existing = [reservation_factory(date(2025, 5, 10), date(2025, 5, 15))]

    with pytest.raises(RoomUnavailable) as exc_info:
        _book(room, date(2025, 5, 14), date(2025, 5, 16), existing_reservations=existing)

    assert exc_info.value.room_id == room.id
    assert [r.id for r in exc_info.value.conflicts] == [existing[0].id]
