"""
Reservation and room list filtering for the back-office tables.

Name lookups (customers, rooms) are passed in by the caller as read-only
mappings keyed by id.
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Mapping, Optional, Sequence

from pydantic import BaseModel, Field

from hotel_backoffice.lifecycle.availability import is_room_available, room_status
from hotel_backoffice.lifecycle.statuses import ReservationStatus, display_status, payment_label
from hotel_backoffice.schemas.customers import CustomerInfo
from hotel_backoffice.schemas.reservations import Reservation, ReservationType
from hotel_backoffice.schemas.rooms import Room, RoomStatus
from hotel_backoffice.utils.datetime import Instant, to_utc_date


class ReservationFilter(BaseModel):
    """Criteria for the reservations table. Unset fields do not filter."""

    status: Optional[ReservationStatus] = None
    reservation_type: Optional[ReservationType] = None
    check_in_start: Optional[date] = None
    check_in_end: Optional[date] = None
    check_out_start: Optional[date] = None
    check_out_end: Optional[date] = None
    payment_status: Optional[str] = Field(None, description="Derived payment label")
    min_guests: Optional[int] = None
    max_guests: Optional[int] = None
    room_id: Optional[int] = None
    search: Optional[str] = None


class RoomSort(str, Enum):
    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"
    ID_ASC = "id_asc"
    ID_DESC = "id_desc"


class RoomFilter(BaseModel):
    """Criteria for the rooms grid. Unset fields do not filter."""

    search: Optional[str] = None
    status: Optional[RoomStatus] = None
    is_active: Optional[bool] = None
    min_capacity: Optional[int] = None
    max_capacity: Optional[int] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    available_from: Optional[date] = Field(None, description="First night of the stay")
    available_to: Optional[date] = Field(None, description="Last night of the stay")
    sort_by: Optional[RoomSort] = None


def _in_day_range(value: Instant, start: Optional[date], end: Optional[date]) -> bool:
    day = to_utc_date(value)
    if start is not None and day < start:
        return False
    if end is not None and day > end:
        return False
    return True


def _matches_search(
    reservation: Reservation,
    term: str,
    customer_lookup: Mapping[str, CustomerInfo],
    room_lookup: Mapping[int, Room],
) -> bool:
    compact = "".join(term.split())
    customer = customer_lookup.get(reservation.customer_id)
    room = room_lookup.get(reservation.room_id)

    customer_name = customer.name.lower() if customer else ""
    customer_phone = "".join((customer.phone or "").split()) if customer else ""
    room_name = room.name.lower() if room else ""

    return (
        term in reservation.id.lower()
        or term in customer_name
        or (bool(compact) and compact in customer_phone)
        or term in room_name
        or term in reservation.customer_id.lower()
        or term in str(reservation.room_id)
        or term in display_status(reservation.status)
    )


def filter_reservations(
    reservations: Sequence[Reservation],
    criteria: ReservationFilter,
    customer_lookup: Mapping[str, CustomerInfo],
    room_lookup: Mapping[int, Room],
) -> list[Reservation]:
    """
    Apply table filters and free-text search to a reservation snapshot.

    Args:
        reservations: Reservations to filter (not modified)
        criteria: Filter criteria
        customer_lookup: Customer projection keyed by customer id
        room_lookup: Rooms keyed by room id

    Returns:
        list[Reservation]: Matching reservations in their original order
    """
    result = list(reservations)

    if criteria.reservation_type is not None:
        result = [r for r in result if r.reservation_type is criteria.reservation_type]

    if criteria.status is not None:
        result = [r for r in result if r.status is criteria.status]

    if criteria.check_in_start or criteria.check_in_end:
        result = [
            r
            for r in result
            if _in_day_range(r.check_in, criteria.check_in_start, criteria.check_in_end)
        ]

    if criteria.check_out_start or criteria.check_out_end:
        result = [
            r
            for r in result
            if _in_day_range(r.check_out, criteria.check_out_start, criteria.check_out_end)
        ]

    if criteria.payment_status:
        result = [r for r in result if payment_label(r.status) == criteria.payment_status]

    if criteria.min_guests and criteria.min_guests > 0:
        result = [r for r in result if r.guests.total >= criteria.min_guests]

    if criteria.max_guests and criteria.max_guests > 0:
        result = [r for r in result if r.guests.total <= criteria.max_guests]

    if criteria.room_id is not None:
        result = [r for r in result if r.room_id == criteria.room_id]

    term = (criteria.search or "").strip().lower()
    if term:
        result = [r for r in result if _matches_search(r, term, customer_lookup, room_lookup)]

    return result


def filter_rooms(
    rooms: Sequence[Room],
    criteria: RoomFilter,
    reservations: Sequence[Reservation],
    as_of: Instant,
) -> list[Room]:
    """
    Apply grid filters to rooms, using reservations for status and availability.

    Inactive rooms never match an Occupied/Vacant status filter or a date
    availability filter.
    """
    result = list(rooms)

    term = (criteria.search or "").strip().lower()
    if term:
        result = [r for r in result if term in r.name.lower() or term in str(r.id)]

    if criteria.status is not None:
        result = [
            r
            for r in result
            if r.is_active and room_status(r, as_of, reservations) is criteria.status
        ]

    if criteria.is_active is not None:
        result = [r for r in result if r.is_active is criteria.is_active]

    if criteria.min_capacity and criteria.min_capacity > 0:
        result = [r for r in result if r.capacity >= criteria.min_capacity]
    if criteria.max_capacity and criteria.max_capacity > 0:
        result = [r for r in result if r.capacity <= criteria.max_capacity]

    if criteria.min_price is not None and criteria.min_price >= 0:
        result = [r for r in result if r.price_per_night >= criteria.min_price]
    if criteria.max_price is not None and criteria.max_price >= 0:
        result = [r for r in result if r.price_per_night <= criteria.max_price]

    if criteria.available_from and criteria.available_to:
        start = criteria.available_from
        end = criteria.available_to + timedelta(days=1)
        if start < end:
            result = [
                r for r in result if r.is_active and is_room_available(r, start, end, reservations)
            ]

    if criteria.sort_by is RoomSort.NAME_ASC:
        result.sort(key=lambda r: r.name.lower())
    elif criteria.sort_by is RoomSort.NAME_DESC:
        result.sort(key=lambda r: r.name.lower(), reverse=True)
    elif criteria.sort_by is RoomSort.ID_ASC:
        result.sort(key=lambda r: r.id)
    elif criteria.sort_by is RoomSort.ID_DESC:
        result.sort(key=lambda r: r.id, reverse=True)

    return result
