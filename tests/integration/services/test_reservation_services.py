"""
Integration tests for reservation lifecycle services.
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import Callable

import pytest
from prometheus_client import REGISTRY
from sqlalchemy.engine import Engine

from hotel_backoffice.db.readers.reservations import get_reservation
from hotel_backoffice.errors import (
    BookingRejected,
    InvalidTransition,
    ReservationNotFound,
    RoomNotFound,
    RoomUnavailable,
)
from hotel_backoffice.lifecycle.statuses import ReservationStatus
from hotel_backoffice.schemas.reservations import Origin, Reservation, ReservationCreatePayload
from hotel_backoffice.services.reservations import (
    change_reservation_status,
    create_reservation,
    expire_pending_reservations,
)
from hotel_backoffice.utils.datetime import FixedClock


def _transition_count(from_status: str, to_status: str, outcome: str) -> float:
    value = REGISTRY.get_sample_value(
        "hotel_status_transitions_total",
        {"from_status": from_status, "to_status": to_status, "outcome": outcome},
    )
    return value or 0.0


def _booking(room_id: int, **overrides: object) -> ReservationCreatePayload:
    data: dict[str, object] = {
        "name": "Juan Dela Cruz",
        "phone": "09171234567",
        "room_id": room_id,
        "check_in": date(2025, 5, 10),
        "check_out": date(2025, 5, 13),
        "adults": 2,
        "audited_by": "staff-1",
    }
    data.update(overrides)
    return ReservationCreatePayload(**data)


@pytest.mark.integration
def test_change_status_commits_and_counts(
    db_engine: Engine,
    clock: FixedClock,
    seed_room: Callable[..., int],
    seed_reservation: Callable[..., Reservation],
) -> None:
    room_id = seed_room()
    reservation = seed_reservation(
        room_id,
        date(2025, 5, 10),
        date(2025, 5, 12),
        status=ReservationStatus.PENDING,
        origin=Origin.MOBILE,
    )
    before = _transition_count("Pending", "Confirmed_Pending_Payment", "applied")

    updated = change_reservation_status(
        db_engine,
        reservation.id,
        ReservationStatus.CONFIRMED_PENDING_PAYMENT,
        clock,
        audited_by="staff-2",
    )

    assert updated.status is ReservationStatus.CONFIRMED_PENDING_PAYMENT
    assert updated.confirmation_time == clock.now()
    assert updated.audited_by == "staff-2"
    assert _transition_count("Pending", "Confirmed_Pending_Payment", "applied") == before + 1


@pytest.mark.integration
def test_change_status_rejects_disallowed_move(
    db_engine: Engine,
    clock: FixedClock,
    seed_room: Callable[..., int],
    seed_reservation: Callable[..., Reservation],
) -> None:
    room_id = seed_room()
    reservation = seed_reservation(
        room_id,
        date(2025, 5, 10),
        date(2025, 5, 12),
        status=ReservationStatus.PENDING,
        origin=Origin.MOBILE,
    )
    before = _transition_count("Pending", "Accepted", "rejected")

    with pytest.raises(InvalidTransition):
        change_reservation_status(db_engine, reservation.id, ReservationStatus.ACCEPTED, clock)

    assert _transition_count("Pending", "Accepted", "rejected") == before + 1
    with db_engine.connect() as conn:
        stored = get_reservation(conn, reservation.id)
    assert stored is not None
    assert stored.status is ReservationStatus.PENDING


@pytest.mark.integration
def test_change_status_unknown_reservation(db_engine: Engine, clock: FixedClock) -> None:
    with pytest.raises(ReservationNotFound):
        change_reservation_status(db_engine, "missing", ReservationStatus.CANCELLED, clock)


@pytest.mark.integration
def test_create_reservation_prices_stay_and_confirms(
    db_engine: Engine, clock: FixedClock, seed_room: Callable[..., int]
) -> None:
    room_id = seed_room(price_per_night="2500.00")

    reservation = create_reservation(db_engine, _booking(room_id), clock)

    assert reservation.status is ReservationStatus.CONFIRMED_PENDING_PAYMENT
    assert reservation.origin is Origin.STAFF_MANUAL
    assert reservation.payment_received is False
    assert reservation.total_price == Decimal("7500.00")
    assert reservation.number_of_nights == 3
    assert reservation.confirmation_time == clock.now()
    assert reservation.created_at == clock.now()


@pytest.mark.integration
def test_create_reservation_with_downpayment_is_accepted(
    db_engine: Engine, clock: FixedClock, seed_room: Callable[..., int]
) -> None:
    room_id = seed_room()

    reservation = create_reservation(
        db_engine, _booking(room_id, payment_received=True), clock
    )

    assert reservation.status is ReservationStatus.ACCEPTED
    assert reservation.payment_received is True


@pytest.mark.integration
def test_create_reservation_reuses_customer_by_phone(
    db_engine: Engine, clock: FixedClock, seed_room: Callable[..., int]
) -> None:
    room_id = seed_room()

    first = create_reservation(db_engine, _booking(room_id), clock)
    second = create_reservation(
        db_engine,
        _booking(room_id, check_in=date(2025, 5, 20), check_out=date(2025, 5, 21)),
        clock,
    )

    assert first.customer_id == second.customer_id


@pytest.mark.integration
def test_create_reservation_refuses_overlap(
    db_engine: Engine,
    clock: FixedClock,
    seed_room: Callable[..., int],
    seed_reservation: Callable[..., Reservation],
) -> None:
    room_id = seed_room()
    existing = seed_reservation(room_id, date(2025, 5, 12), date(2025, 5, 15))

    with pytest.raises(RoomUnavailable) as exc_info:
        create_reservation(db_engine, _booking(room_id), clock)

    assert [r.id for r in exc_info.value.conflicts] == [existing.id]


@pytest.mark.integration
def test_create_reservation_ignores_cancelled_stays(
    db_engine: Engine,
    clock: FixedClock,
    seed_room: Callable[..., int],
    seed_reservation: Callable[..., Reservation],
) -> None:
    room_id = seed_room()
    seed_reservation(
        room_id, date(2025, 5, 12), date(2025, 5, 15), status=ReservationStatus.CANCELLED
    )

    reservation = create_reservation(db_engine, _booking(room_id), clock)

    assert reservation.room_id == room_id


@pytest.mark.integration
def test_create_reservation_guards(
    db_engine: Engine, clock: FixedClock, seed_room: Callable[..., int]
) -> None:
    room_id = seed_room()
    closed_id = seed_room(name="Closed", is_active=False)

    with pytest.raises(RoomNotFound):
        create_reservation(db_engine, _booking(999), clock)
    with pytest.raises(BookingRejected):
        create_reservation(db_engine, _booking(closed_id), clock)
    with pytest.raises(BookingRejected):
        create_reservation(db_engine, _booking(room_id, adults=3), clock)


@pytest.mark.integration
def test_expire_pending_reservations(
    db_engine: Engine,
    clock: FixedClock,
    seed_room: Callable[..., int],
    seed_reservation: Callable[..., Reservation],
) -> None:
    room_id = seed_room()
    now = clock.now()
    due = seed_reservation(
        room_id,
        date(2025, 6, 1),
        date(2025, 6, 3),
        status=ReservationStatus.PENDING,
        origin=Origin.MOBILE,
        created_at=now - timedelta(hours=48),
        phone="09170000001",
    )
    fresh = seed_reservation(
        room_id,
        date(2025, 6, 5),
        date(2025, 6, 7),
        status=ReservationStatus.PENDING,
        origin=Origin.MOBILE,
        created_at=now - timedelta(hours=47),
        phone="09170000002",
    )
    confirmed = seed_reservation(
        room_id,
        date(2025, 6, 10),
        date(2025, 6, 12),
        status=ReservationStatus.CONFIRMED_PENDING_PAYMENT,
        origin=Origin.MOBILE,
        created_at=now - timedelta(days=5),
        phone="09170000003",
    )

    assert expire_pending_reservations(db_engine, clock, dry_run=True) == [due.id]
    assert expire_pending_reservations(db_engine, clock) == [due.id]
    assert expire_pending_reservations(db_engine, clock) == []

    with db_engine.connect() as conn:
        statuses = {
            r.id: get_reservation(conn, r.id).status  # type: ignore[union-attr]
            for r in (due, fresh, confirmed)
        }
    assert statuses == {
        due.id: ReservationStatus.EXPIRED,
        fresh.id: ReservationStatus.PENDING,
        confirmed.id: ReservationStatus.CONFIRMED_PENDING_PAYMENT,
    }
