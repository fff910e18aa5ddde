import json
from typing import Any

import structlog
from sqlalchemy import insert, update
from sqlalchemy.engine import Connection, Engine

from hotel_backoffice.config import DEBUG
from hotel_backoffice.models.rooms import Room

logger = structlog.get_logger(__name__)

# Payload field -> column name where they differ
_ROOM_COLUMNS = {"price_per_night": "room_price"}


def insert_rooms(engine: Engine, data: list[dict[str, Any]], dry_run: bool = False) -> list[int]:
    """
    Insert rooms into the database.

    Args:
        engine: SQLAlchemy Engine
        data: Room dicts with name, capacity, price_per_night and optional
            is_active/amenities (and id, when seeding fixed ids)
        dry_run: If True, skip DB writes and log only

    Returns:
        list[int]: Ids of the inserted rooms (empty on dry run)
    """
    rows = []
    for r in data:
        if not r.get("name") or r.get("capacity") is None or r.get("price_per_night") is None:
            logger.warning("room_skipped_missing_fields", room=r.get("name"))
            continue

        row = {
            "name": r["name"],
            "capacity": r["capacity"],
            "room_price": r["price_per_night"],
            "is_active": r.get("is_active", True),
            "amenities": list(r.get("amenities") or []),
        }
        if r.get("id") is not None:
            row["id"] = r["id"]
        rows.append(row)

    if dry_run:
        logger.info("rooms_dry_run", count=len(rows))
        return []

    if not rows:
        logger.info("rooms_nothing_to_insert")
        return []

    if DEBUG:
        logger.debug("room_sample", sample=json.dumps(rows[0], indent=2, default=str))

    ids = []
    with engine.begin() as conn:
        for row in rows:
            result = conn.execute(insert(Room).values(**row))
            ids.append(result.inserted_primary_key[0])

    logger.info("rooms_inserted", count=len(ids))
    return ids


def update_room(conn: Connection, room_id: int, data: dict[str, Any]) -> bool:
    """
    Update fields of an existing room.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        room_id (int): Room id.
        data (dict): Fields to update, keyed like RoomUpdatePayload (only
            non-None values)

    Returns:
        bool: False if no room has this id
    """
    values = {_ROOM_COLUMNS.get(k, k): v for k, v in data.items()}
    if "amenities" in values:
        values["amenities"] = list(values["amenities"])

    result = conn.execute(update(Room).where(Room.id == room_id).values(**values))
    if result.rowcount == 0:
        return False

    logger.info("room_updated", room_id=room_id, fields=sorted(values))
    return True
