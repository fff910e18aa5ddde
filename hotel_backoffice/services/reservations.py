"""Reservation lifecycle services: status changes, staff bookings and the expiry sweep."""

import uuid
from datetime import timedelta
from typing import Optional

import structlog
from sqlalchemy.engine import Engine

from hotel_backoffice.config import CAPACITY_ALLOWANCE, MAX_STAY_NIGHTS, PENDING_EXPIRY_HOURS
from hotel_backoffice.db.readers.reservations import get_reservation, list_reservations
from hotel_backoffice.db.readers.rooms import get_room
from hotel_backoffice.db.writers.customers import find_or_create_customer
from hotel_backoffice.db.writers.reservations import apply_status_change, insert_reservation
from hotel_backoffice.errors import (
    InvalidTransition,
    ReservationNotFound,
    RoomNotFound,
    StaleReservation,
)
from hotel_backoffice.lifecycle.availability import initial_status, validate_new_booking
from hotel_backoffice.lifecycle.statuses import ReservationStatus
from hotel_backoffice.lifecycle.transitions import find_expired, plan_status_change
from hotel_backoffice.metrics import reservations_created, reservations_expired, status_transitions
from hotel_backoffice.schemas.reservations import (
    Origin,
    Reservation,
    ReservationCreatePayload,
)
from hotel_backoffice.utils.datetime import Clock, to_utc_datetime

logger = structlog.get_logger(__name__)


def change_reservation_status(
    engine: Engine,
    reservation_id: str,
    proposed: ReservationStatus,
    clock: Clock,
    audited_by: Optional[str] = None,
) -> Reservation:
    """
    Validate and commit a staff status change.

    Args:
        engine: SQLAlchemy Engine
        reservation_id: Reservation to change
        proposed: Requested next status
        clock: Source of the change timestamp
        audited_by: Staff member making the change

    Returns:
        Reservation: The reservation after the change

    Raises:
        ReservationNotFound: If no reservation has this id
        InvalidTransition: If the move is not allowed
        StaleReservation: If the status changed since it was read
    """
    with engine.begin() as conn:
        reservation = get_reservation(conn, reservation_id)
        if reservation is None:
            raise ReservationNotFound(reservation_id)

        labels = {"from_status": reservation.status.value, "to_status": proposed.value}
        try:
            change = plan_status_change(reservation, proposed, clock.now(), audited_by)
        except InvalidTransition as e:
            status_transitions.labels(outcome="rejected", **labels).inc()
            logger.warning(
                "status_change_rejected",
                reservation_id=reservation_id,
                error=str(e),
                **labels,
            )
            raise

        try:
            updated = apply_status_change(conn, change)
        except StaleReservation:
            status_transitions.labels(outcome="stale", **labels).inc()
            logger.warning("status_change_stale", reservation_id=reservation_id, **labels)
            raise

    status_transitions.labels(outcome="applied", **labels).inc()
    logger.info(
        "status_changed",
        reservation_id=reservation_id,
        audited_by=change.audited_by,
        payment_received=change.payment_received,
        **labels,
    )
    return updated


def create_reservation(
    engine: Engine, payload: ReservationCreatePayload, clock: Clock
) -> Reservation:
    """
    Book a stay from the back office (origin staff_manual).

    The guest is matched to an existing customer by phone number, or created.
    The availability check and the insert run in the same transaction.

    Raises:
        RoomNotFound: If the room does not exist
        InvalidInterval: If check-out is not after check-in
        BookingRejected: If the booking guards fail
        RoomUnavailable: If the room is already held for these dates
    """
    now = clock.now()

    with engine.begin() as conn:
        room = get_room(conn, payload.room_id)
        if room is None:
            raise RoomNotFound(payload.room_id)

        nights = validate_new_booking(
            room=room,
            check_in=payload.check_in,
            check_out=payload.check_out,
            guests=payload.guests,
            notes=payload.notes,
            now=now,
            existing_reservations=list_reservations(conn, room_id=room.id),
            max_nights=MAX_STAY_NIGHTS,
            capacity_allowance=CAPACITY_ALLOWANCE,
        )

        customer_id = find_or_create_customer(conn, payload.name, payload.phone)
        status = initial_status(Origin.STAFF_MANUAL, payload.payment_received)

        reservation = Reservation(
            id=str(uuid.uuid4()),
            customer_id=customer_id,
            room_id=room.id,
            check_in=to_utc_datetime(payload.check_in),
            check_out=to_utc_datetime(payload.check_out),
            status=status,
            origin=Origin.STAFF_MANUAL,
            guests=payload.guests,
            payment_received=status is ReservationStatus.ACCEPTED,
            confirmation_time=now,
            audited_by=payload.audited_by,
            total_price=room.price_per_night * nights,
            notes=payload.notes or None,
            created_at=now,
        )
        stored = insert_reservation(
            conn, reservation, customer_name=payload.name, customer_phone=payload.phone
        )

    reservations_created.labels(origin=stored.origin.value, status=stored.status.value).inc()
    logger.info(
        "reservation_created",
        reservation_id=stored.id,
        room_id=stored.room_id,
        nights=nights,
        status=stored.status.value,
    )
    return stored


def expire_pending_reservations(
    engine: Engine, clock: Clock, dry_run: bool = False
) -> list[str]:
    """
    Expire unpaid Pending reservations whose payment window has lapsed.

    A reservation that changed status while the sweep ran is skipped.

    Args:
        engine: SQLAlchemy Engine
        clock: Source of the current instant
        dry_run: If True, report candidates without writing

    Returns:
        list[str]: Ids of the expired reservations (candidates on dry run)
    """
    now = clock.now()
    timeout = timedelta(hours=PENDING_EXPIRY_HOURS)

    with engine.connect() as conn:
        pending = list_reservations(conn, statuses=[ReservationStatus.PENDING])
    changes = find_expired(pending, now, timeout)

    if dry_run:
        logger.info("expiry_dry_run", candidates=len(changes))
        return [c.reservation_id for c in changes]

    expired = []
    for change in changes:
        try:
            with engine.begin() as conn:
                apply_status_change(conn, change)
        except (StaleReservation, ReservationNotFound) as e:
            logger.warning("expiry_skipped", reservation_id=change.reservation_id, error=str(e))
            continue
        reservations_expired.inc()
        expired.append(change.reservation_id)

    logger.info("expiry_completed", checked=len(pending), expired=len(expired))
    return expired
