from typing import Any, Iterable, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from hotel_backoffice.lifecycle.statuses import ReservationStatus, parse_status
from hotel_backoffice.models.reservations import Reservation as ReservationRow
from hotel_backoffice.schemas.reservations import Guests, Origin, Reservation


def reservation_from_row(row: Mapping[str, Any]) -> Reservation:
    """
    Build the typed reservation record from a reservations table row.

    Args:
        row (Mapping[str, Any]): Row mapping with the reservations table columns.

    Returns:
        Reservation: Typed record with UTC-normalized timestamps.

    Raises:
        UnknownStatus: If the stored status is not canonical (see scripts/normalize_statuses.py).
    """
    return Reservation(
        id=row["id"],
        customer_id=row["customer_id"],
        room_id=row["room_id"],
        check_in=row["check_in"],
        check_out=row["check_out"],
        status=parse_status(row["status"]),
        origin=Origin(row["source"]),
        guests=Guests(
            adults=row["num_adults"],
            children=row["num_children"],
            seniors=row["num_seniors"],
        ),
        payment_received=bool(row["payment_received"]),
        confirmation_time=row["confirmation_time"],
        audited_by=row["audited_by"],
        total_price=row["total_price"],
        notes=row["message"],
        created_at=row["timestamp"],
    )


def get_reservation(conn: Connection, reservation_id: str) -> Optional[Reservation]:
    """
    Fetch a single reservation by id.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        reservation_id (str): Reservation id.

    Returns:
        Optional[Reservation]: The reservation, or None if it does not exist.
    """
    row = (
        conn.execute(select(ReservationRow.__table__).where(ReservationRow.id == reservation_id))
        .mappings()
        .fetchone()
    )
    return reservation_from_row(row) if row else None


def list_reservations(
    conn: Connection,
    room_id: Optional[int] = None,
    statuses: Optional[Iterable[ReservationStatus]] = None,
) -> list[Reservation]:
    """
    Fetch a reservation snapshot, optionally narrowed to one room and/or statuses.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        room_id (Optional[int]): Only reservations for this room.
        statuses (Optional[Iterable[ReservationStatus]]): Only reservations in these statuses.

    Returns:
        list[Reservation]: Reservations ordered by check-in.
    """
    stmt = select(ReservationRow.__table__)
    if room_id is not None:
        stmt = stmt.where(ReservationRow.room_id == room_id)
    if statuses is not None:
        stmt = stmt.where(ReservationRow.status.in_([s.value for s in statuses]))
    stmt = stmt.order_by(ReservationRow.check_in, ReservationRow.id)

    return [reservation_from_row(row) for row in conn.execute(stmt).mappings()]
