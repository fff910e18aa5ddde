"""
Internal helper functions for reservation and room route handlers.

This module maps engine errors to HTTP responses and shapes the records
returned by the API, keeping the route handlers short.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from fastapi import HTTPException, status

from hotel_backoffice.errors import (
    BookingRejected,
    InvalidInterval,
    InvalidTransition,
    ReservationEngineError,
    ReservationNotFound,
    RoomNotFound,
    RoomUnavailable,
    StaleReservation,
)
from hotel_backoffice.lifecycle.statuses import describe_status, payment_label
from hotel_backoffice.schemas.customers import CustomerInfo
from hotel_backoffice.schemas.reservations import Reservation
from hotel_backoffice.schemas.rooms import Room

_STATUS_CODES: dict[type[ReservationEngineError], int] = {
    ReservationNotFound: status.HTTP_404_NOT_FOUND,
    RoomNotFound: status.HTTP_404_NOT_FOUND,
    InvalidTransition: status.HTTP_409_CONFLICT,
    StaleReservation: status.HTTP_409_CONFLICT,
    RoomUnavailable: status.HTTP_409_CONFLICT,
    BookingRejected: status.HTTP_422_UNPROCESSABLE_ENTITY,
    InvalidInterval: status.HTTP_400_BAD_REQUEST,
}

CLIENT_ERRORS = tuple(_STATUS_CODES)


def http_error_for(error: ReservationEngineError) -> HTTPException:
    """
    Translate a client-facing engine error into an HTTPException.

    Args:
        error: Error raised by a service or the lifecycle engine

    Returns:
        HTTPException: Exception to raise from the route handler. Errors
            without a mapping become a 500.
    """
    for error_type, status_code in _STATUS_CODES.items():
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=500, detail="Internal server error")


def get_room_or_404(room: Optional[Room], room_id: int) -> Room:
    """
    Return the room, raise 404 if the lookup came back empty.

    Raises:
        HTTPException: 404 if room is None
    """
    if room is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Room {room_id} not found",
        )
    return room


def serialize_reservation(
    reservation: Reservation,
    customer: Optional[CustomerInfo] = None,
    room: Optional[Room] = None,
) -> dict[str, Any]:
    """
    Reservation record plus the derived fields the back-office tables show.
    """
    data = reservation.model_dump(mode="json")
    data.update(
        {
            "number_of_nights": reservation.number_of_nights,
            "reservation_type": reservation.reservation_type.value,
            "total_guests": reservation.total_guests,
            "payment_status": payment_label(reservation.status),
            "status_description": describe_status(reservation.status),
            "customer_name": customer.name if customer else None,
            "room_name": room.name if room else None,
        }
    )
    return data


def serialize_reservations(
    reservations: list[Reservation],
    customer_lookup: Mapping[str, CustomerInfo],
    room_lookup: Mapping[int, Room],
) -> list[dict[str, Any]]:
    return [
        serialize_reservation(
            r, customer_lookup.get(r.customer_id), room_lookup.get(r.room_id)
        )
        for r in reservations
    ]
