from typing import Any, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from hotel_backoffice.models.rooms import Room as RoomRow
from hotel_backoffice.schemas.rooms import Room


def room_from_row(row: Mapping[str, Any]) -> Room:
    return Room(
        id=row["id"],
        name=row["name"],
        capacity=row["capacity"],
        price_per_night=row["room_price"],
        is_active=bool(row["is_active"]),
        amenities=list(row["amenities"] or []),
    )


def get_room(conn: Connection, room_id: int) -> Optional[Room]:
    """
    Fetch a single room by id.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        room_id (int): Room id.

    Returns:
        Optional[Room]: The room, or None if it does not exist.
    """
    row = conn.execute(select(RoomRow.__table__).where(RoomRow.id == room_id)).mappings().fetchone()
    return room_from_row(row) if row else None


def list_rooms(conn: Connection, active_only: bool = False) -> list[Room]:
    """
    Fetch all rooms ordered by id.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        active_only (bool): Skip rooms that are not open for booking.

    Returns:
        list[Room]: Rooms ordered by id.
    """
    stmt = select(RoomRow.__table__)
    if active_only:
        stmt = stmt.where(RoomRow.is_active == True)  # noqa: E712
    stmt = stmt.order_by(RoomRow.id)
    return [room_from_row(row) for row in conn.execute(stmt).mappings()]
