from datetime import date
from decimal import Decimal
from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.engine import Engine

from hotel_backoffice.db.readers.customers import get_customer_lookup
from hotel_backoffice.db.readers.reservations import list_reservations
from hotel_backoffice.db.readers.rooms import get_room, list_rooms
from hotel_backoffice.db.writers.rooms import insert_rooms, update_room
from hotel_backoffice.dependencies import get_clock, get_db_engine
from hotel_backoffice.errors import InvalidInterval
from hotel_backoffice.lifecycle.availability import conflicting_reservations
from hotel_backoffice.lifecycle.filters import RoomFilter, RoomSort, filter_rooms
from hotel_backoffice.lifecycle.statistics import describe_rooms
from hotel_backoffice.metrics import availability_checks
from hotel_backoffice.routes._reservation_helpers import get_room_or_404, http_error_for
from hotel_backoffice.schemas.rooms import RoomCreatePayload, RoomStatus, RoomUpdatePayload
from hotel_backoffice.utils.datetime import Clock

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/rooms", status_code=status.HTTP_200_OK)
def list_rooms_endpoint(
    search: Optional[str] = Query(None),
    room_status: Optional[RoomStatus] = Query(None, alias="status"),
    is_active: Optional[bool] = Query(None),
    min_capacity: Optional[int] = Query(None),
    max_capacity: Optional[int] = Query(None),
    min_price: Optional[Decimal] = Query(None),
    max_price: Optional[Decimal] = Query(None),
    available_from: Optional[date] = Query(None, description="First night of the stay"),
    available_to: Optional[date] = Query(None, description="Last night of the stay"),
    sort_by: Optional[RoomSort] = Query(None),
    engine: Engine = Depends(get_db_engine),
    clock: Clock = Depends(get_clock),
) -> list[dict[str, Any]]:
    """
    List rooms with their derived Occupied/Vacant status and current occupant.
    """
    criteria = RoomFilter(
        search=search,
        status=room_status,
        is_active=is_active,
        min_capacity=min_capacity,
        max_capacity=max_capacity,
        min_price=min_price,
        max_price=max_price,
        available_from=available_from,
        available_to=available_to,
        sort_by=sort_by,
    )
    try:
        now = clock.now()
        with engine.connect() as conn:
            rooms = list_rooms(conn)
            reservations = list_reservations(conn)
            customers = get_customer_lookup(conn, {r.customer_id for r in reservations})

        matches = filter_rooms(rooms, criteria, reservations, now)
        summaries = describe_rooms(matches, reservations, now, customers)
        return [summary.model_dump(mode="json") for summary in summaries]

    except Exception as e:
        logger.exception("room_list_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/rooms", status_code=status.HTTP_201_CREATED)
def create_room(
    payload: RoomCreatePayload,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Register a room.

    Returns:
        dict: The stored room
    """
    try:
        ids = insert_rooms(engine=engine, data=[payload.model_dump()])
        with engine.connect() as conn:
            room = get_room_or_404(get_room(conn, ids[0]), ids[0])

        logger.info("room_created", room_id=room.id, name=room.name)
        return room.model_dump(mode="json")

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("room_creation_failed", name=payload.name, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.patch("/rooms/{room_id}", status_code=status.HTTP_200_OK)
def update_room_endpoint(
    room_id: int,
    payload: RoomUpdatePayload,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Edit a room. Only fields present in the payload change.

    Deactivating a room (is_active=false) keeps its reservations but refuses
    new bookings for it.

    Returns:
        dict: The room as stored after the update

    Raises:
        HTTPException: 404 if the room does not exist
    """
    try:
        update_data = {k: v for k, v in payload.model_dump().items() if v is not None}

        with engine.begin() as conn:
            room = get_room_or_404(get_room(conn, room_id), room_id)
            if update_data:
                update_room(conn, room_id, update_data)
                room = get_room_or_404(get_room(conn, room_id), room_id)

        return room.model_dump(mode="json")

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("room_update_failed", room_id=room_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/rooms/{room_id}/availability", status_code=status.HTTP_200_OK)
def check_availability(
    room_id: int,
    check_in: date = Query(..., description="Arrival date"),
    check_out: date = Query(..., description="Departure date"),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Check whether a room is free for [check_in, check_out).

    Returns:
        dict: available flag plus the ids of conflicting reservations

    Raises:
        HTTPException: 404 unknown room, 400 if check_out is not after check_in
    """
    try:
        with engine.connect() as conn:
            room = get_room_or_404(get_room(conn, room_id), room_id)
            reservations = list_reservations(conn, room_id=room_id)

        conflicts = conflicting_reservations(room, check_in, check_out, reservations)
        available = not conflicts
        availability_checks.labels(result="available" if available else "unavailable").inc()

        return {
            "room_id": room_id,
            "check_in": check_in.isoformat(),
            "check_out": check_out.isoformat(),
            "available": available,
            "conflicts": [r.id for r in conflicts],
        }

    except HTTPException:
        raise
    except InvalidInterval as e:
        raise http_error_for(e)
    except Exception as e:
        logger.exception("availability_check_failed", room_id=room_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
