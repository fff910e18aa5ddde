from datetime import date
from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.engine import Engine

from hotel_backoffice.db.readers.customers import get_customer_lookup
from hotel_backoffice.db.readers.reservations import get_reservation, list_reservations
from hotel_backoffice.db.readers.rooms import get_room, list_rooms
from hotel_backoffice.dependencies import get_clock, get_db_engine
from hotel_backoffice.lifecycle.filters import ReservationFilter, filter_reservations
from hotel_backoffice.lifecycle.statuses import (
    ReservationStatus,
    describe_status,
    is_settled,
    payment_label,
)
from hotel_backoffice.lifecycle.transitions import allowed_next_statuses
from hotel_backoffice.routes._reservation_helpers import (
    CLIENT_ERRORS,
    http_error_for,
    serialize_reservation,
    serialize_reservations,
)
from hotel_backoffice.schemas.reservations import (
    ReservationCreatePayload,
    ReservationType,
    StatusChangePayload,
)
from hotel_backoffice.services.reservations import (
    change_reservation_status,
    create_reservation,
    expire_pending_reservations,
)
from hotel_backoffice.utils.datetime import Clock

logger = structlog.get_logger(__name__)
router = APIRouter()


def _reservation_or_404(engine: Engine, reservation_id: str) -> dict[str, Any]:
    with engine.connect() as conn:
        reservation = get_reservation(conn, reservation_id)
        if reservation is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Reservation {reservation_id} not found",
            )
        customers = get_customer_lookup(conn, [reservation.customer_id])
        room = get_room(conn, reservation.room_id)
    return serialize_reservation(reservation, customers.get(reservation.customer_id), room)


@router.get("/reservations", status_code=status.HTTP_200_OK)
def list_reservations_endpoint(
    reservation_status: Optional[ReservationStatus] = Query(None, alias="status"),
    reservation_type: Optional[ReservationType] = Query(None, alias="type"),
    check_in_start: Optional[date] = Query(None),
    check_in_end: Optional[date] = Query(None),
    check_out_start: Optional[date] = Query(None),
    check_out_end: Optional[date] = Query(None),
    payment_status: Optional[str] = Query(None, description="Derived payment label"),
    min_guests: Optional[int] = Query(None),
    max_guests: Optional[int] = Query(None),
    room_id: Optional[int] = Query(None),
    search: Optional[str] = Query(None, description="Id, guest name, phone, room or status"),
    engine: Engine = Depends(get_db_engine),
) -> list[dict[str, Any]]:
    """
    List reservations matching the table filters, ordered by check-in.
    """
    criteria = ReservationFilter(
        status=reservation_status,
        reservation_type=reservation_type,
        check_in_start=check_in_start,
        check_in_end=check_in_end,
        check_out_start=check_out_start,
        check_out_end=check_out_end,
        payment_status=payment_status,
        min_guests=min_guests,
        max_guests=max_guests,
        room_id=room_id,
        search=search,
    )
    try:
        with engine.connect() as conn:
            reservations = list_reservations(conn)
            customers = get_customer_lookup(conn, {r.customer_id for r in reservations})
            rooms = {room.id: room for room in list_rooms(conn)}

        matches = filter_reservations(reservations, criteria, customers, rooms)
        return serialize_reservations(matches, customers, rooms)

    except Exception as e:
        logger.exception("reservation_list_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/reservations/statuses", status_code=status.HTTP_200_OK)
def list_statuses() -> list[dict[str, Any]]:
    """Canonical statuses with their descriptions and payment labels."""
    return [
        {
            "status": s.value,
            "description": describe_status(s),
            "payment_status": payment_label(s),
            "settled": is_settled(s),
        }
        for s in ReservationStatus
    ]


@router.post("/reservations/expire", status_code=status.HTTP_200_OK)
def expire_reservations(
    dry_run: bool = Query(False, description="Report candidates without writing"),
    engine: Engine = Depends(get_db_engine),
    clock: Clock = Depends(get_clock),
) -> dict[str, Any]:
    """
    Expire unpaid Pending reservations whose payment window has lapsed.
    """
    try:
        expired = expire_pending_reservations(engine, clock, dry_run=dry_run)
        return {"expired": expired, "count": len(expired), "dry_run": dry_run}

    except Exception as e:
        logger.exception("reservation_expiry_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/reservations", status_code=status.HTTP_201_CREATED)
def create_reservation_endpoint(
    payload: ReservationCreatePayload,
    engine: Engine = Depends(get_db_engine),
    clock: Clock = Depends(get_clock),
) -> dict[str, Any]:
    """
    Book a stay from the back office.

    Returns:
        dict: The stored reservation

    Raises:
        HTTPException: 404 unknown room, 400 bad dates, 422 booking guard
            failed, 409 room already held for the dates
    """
    try:
        reservation = create_reservation(engine, payload, clock)
        return _reservation_or_404(engine, reservation.id)

    except HTTPException:
        raise
    except CLIENT_ERRORS as e:
        logger.info("reservation_create_refused", room_id=payload.room_id, error=str(e))
        raise http_error_for(e)
    except Exception as e:
        logger.exception("reservation_create_failed", room_id=payload.room_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/reservations/{reservation_id}", status_code=status.HTTP_200_OK)
def get_reservation_endpoint(
    reservation_id: str,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    try:
        return _reservation_or_404(engine, reservation_id)

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("reservation_fetch_failed", reservation_id=reservation_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/reservations/{reservation_id}/transitions", status_code=status.HTTP_200_OK)
def get_allowed_transitions(
    reservation_id: str,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Statuses the reservation may move to next (empty once settled).
    """
    try:
        with engine.connect() as conn:
            reservation = get_reservation(conn, reservation_id)
        if reservation is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Reservation {reservation_id} not found",
            )

        allowed = allowed_next_statuses(reservation.status, reservation.origin)
        return {
            "reservation_id": reservation_id,
            "status": reservation.status.value,
            "origin": reservation.origin.value,
            "allowed": [s.value for s in ReservationStatus if s in allowed],
        }

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(
            "transition_lookup_failed", reservation_id=reservation_id, error=str(e)
        )
        raise HTTPException(status_code=500, detail="Internal server error")


@router.patch("/reservations/{reservation_id}/status", status_code=status.HTTP_200_OK)
def change_status(
    reservation_id: str,
    payload: StatusChangePayload,
    engine: Engine = Depends(get_db_engine),
    clock: Clock = Depends(get_clock),
) -> dict[str, Any]:
    """
    Move a reservation to a new status.

    Raises:
        HTTPException: 404 unknown reservation, 409 transition not allowed or
            reservation changed concurrently
    """
    try:
        change_reservation_status(
            engine, reservation_id, payload.status, clock, audited_by=payload.audited_by
        )
        return _reservation_or_404(engine, reservation_id)

    except HTTPException:
        raise
    except CLIENT_ERRORS as e:
        raise http_error_for(e)
    except Exception as e:
        logger.exception("status_change_failed", reservation_id=reservation_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
