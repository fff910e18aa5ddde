from typing import Optional

import structlog
from sqlalchemy import insert, select, update
from sqlalchemy.engine import Connection, Engine

from hotel_backoffice.db.readers.reservations import get_reservation
from hotel_backoffice.errors import ReservationNotFound, StaleReservation
from hotel_backoffice.lifecycle.statuses import migrate_legacy_status
from hotel_backoffice.lifecycle.transitions import StatusChange
from hotel_backoffice.models.reservations import Reservation as ReservationRow
from hotel_backoffice.schemas.reservations import Reservation, migrate_legacy_origin
from hotel_backoffice.utils.datetime import ensure_utc, utc_now

logger = structlog.get_logger(__name__)


def apply_status_change(conn: Connection, change: StatusChange) -> Reservation:
    """
    Commit a validated status change.

    The update only matches while the row still has change.from_status, so a
    status written by someone else in the meantime is reported instead of
    being overwritten.

    Args:
        conn: Active database connection (within transaction)
        change: Update intent from the transition policy

    Returns:
        Reservation: The reservation as stored after the update

    Raises:
        ReservationNotFound: If no reservation has this id
        StaleReservation: If the stored status no longer matches change.from_status
    """
    changed_at = ensure_utc(change.changed_at)
    confirmation_time = (
        ensure_utc(change.confirmation_time) if change.confirmation_time is not None else None
    )

    result = conn.execute(
        update(ReservationRow)
        .where(ReservationRow.id == change.reservation_id)
        .where(ReservationRow.status == change.from_status.value)
        .values(
            status=change.to_status.value,
            payment_received=change.payment_received,
            confirmation_time=confirmation_time,
            audited_by=change.audited_by,
            status_updated_at=changed_at,
            last_updated=changed_at,
        )
    )

    if result.rowcount == 0:
        exists = conn.execute(
            select(ReservationRow.id).where(ReservationRow.id == change.reservation_id)
        ).fetchone()
        if exists is None:
            raise ReservationNotFound(change.reservation_id)
        raise StaleReservation(change.reservation_id, change.from_status)

    stored = get_reservation(conn, change.reservation_id)
    if stored is None:
        raise ReservationNotFound(change.reservation_id)

    logger.debug(
        "reservation_status_written",
        reservation_id=change.reservation_id,
        from_status=change.from_status.value,
        to_status=change.to_status.value,
    )
    return stored


def insert_reservation(
    conn: Connection,
    reservation: Reservation,
    customer_name: Optional[str] = None,
    customer_phone: Optional[str] = None,
) -> Reservation:
    """
    Insert a new reservation row.

    Args:
        conn: Active database connection (within transaction)
        reservation: Fully built reservation record (id included)
        customer_name: Guest name as entered at booking time
        customer_phone: Guest phone as entered at booking time

    Returns:
        Reservation: The reservation as stored
    """
    created_at = reservation.created_at or utc_now()

    conn.execute(
        insert(ReservationRow).values(
            id=reservation.id,
            customer_id=reservation.customer_id,
            room_id=reservation.room_id,
            customer_name_at_booking=customer_name,
            customer_phone_at_booking=customer_phone,
            check_in=reservation.check_in,
            check_out=reservation.check_out,
            num_adults=reservation.guests.adults,
            num_children=reservation.guests.children,
            num_seniors=reservation.guests.seniors,
            status=reservation.status.value,
            source=reservation.origin.value,
            payment_received=reservation.payment_received,
            confirmation_time=reservation.confirmation_time,
            audited_by=reservation.audited_by,
            total_price=reservation.total_price,
            message=reservation.notes,
            timestamp=created_at,
            status_updated_at=created_at,
            last_updated=created_at,
        )
    )

    logger.info(
        "reservation_inserted",
        reservation_id=reservation.id,
        room_id=reservation.room_id,
        status=reservation.status.value,
        origin=reservation.origin.value,
    )

    stored = get_reservation(conn, reservation.id)
    if stored is None:
        raise ReservationNotFound(reservation.id)
    return stored


def normalize_legacy_rows(engine: Engine, dry_run: bool = False) -> int:
    """
    Rewrite non-canonical status and source values left by older clients.

    Unrecognised statuses become Pending and unrecognised sources become
    staff_manual (see migrate_legacy_status and migrate_legacy_origin).

    Args:
        engine: SQLAlchemy Engine
        dry_run: If True, log what would change without writing

    Returns:
        int: Number of rows rewritten (or that would be, on dry run)
    """
    with engine.begin() as conn:
        rows = conn.execute(
            select(ReservationRow.id, ReservationRow.status, ReservationRow.source)
        ).fetchall()

        changed = 0
        for row in rows:
            status = migrate_legacy_status(row.status or "").value
            source = migrate_legacy_origin(row.source).value
            if status == row.status and source == row.source:
                continue

            changed += 1
            logger.info(
                "legacy_reservation_normalized",
                reservation_id=row.id,
                old_status=row.status,
                new_status=status,
                old_source=row.source,
                new_source=source,
                dry_run=dry_run,
            )
            if not dry_run:
                conn.execute(
                    update(ReservationRow)
                    .where(ReservationRow.id == row.id)
                    .values(status=status, source=source, last_updated=utc_now())
                )

    logger.info("legacy_normalization_completed", checked=len(rows), changed=changed)
    return changed
