"""
Occupancy and reservation statistics for the back-office dashboard.

Reporting windows are inclusive calendar-day ranges: a window from May 1 to
May 31 covers 31 days. Stays are clipped to the window before their nights
are counted, so a stay running across the window edge contributes only the
nights that fall inside it.

Statistics are display-only: a window that cannot be aggregated (no rooms,
or an end before its start) yields zeroes instead of an error.
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Mapping, Optional, Sequence

import structlog
from pydantic import BaseModel, ConfigDict

from hotel_backoffice.errors import DegenerateAggregationWindow
from hotel_backoffice.lifecycle.availability import current_occupancy
from hotel_backoffice.lifecycle.statuses import is_occupying
from hotel_backoffice.schemas.customers import CustomerInfo
from hotel_backoffice.schemas.reservations import Reservation
from hotel_backoffice.schemas.rooms import Room, RoomStatus
from hotel_backoffice.utils.datetime import Instant, to_utc_date

logger = structlog.get_logger(__name__)


class ReservationStatistics(BaseModel):
    """Aggregated figures for one reporting window."""

    model_config = ConfigDict(frozen=True)

    check_ins: int = 0
    check_outs: int = 0
    total_guests: int = 0
    occupancy_rate: int = 0

    def as_display(self) -> dict[str, str]:
        """Card values as rendered on the dashboard (e.g. occupancy "63%")."""
        return {
            "checkIns": str(self.check_ins),
            "checkOuts": str(self.check_outs),
            "totalGuests": str(self.total_guests),
            "occupancyRate": f"{self.occupancy_rate}%",
        }


class RoomStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_rooms: int
    occupied: int
    available: int


class RoomSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    capacity: int
    price_per_night: Decimal
    is_active: bool
    status: RoomStatus
    occupant_name: Optional[str] = None


def days_in_window(window_start: Instant, window_end: Instant) -> int:
    """Inclusive day count of a reporting window (zero or negative if inverted)."""
    return (to_utc_date(window_end) - to_utc_date(window_start)).days + 1


def _window_capacity(room_count: int, days: int) -> int:
    if room_count <= 0 or days <= 0:
        raise DegenerateAggregationWindow(room_count, days)
    return room_count * days


def _touches_window(reservation: Reservation, first: date, last: date) -> bool:
    # At least one night inside the window; a stay ending on `first` has none
    return to_utc_date(reservation.check_in) <= last and to_utc_date(reservation.check_out) > first


def booked_room_nights(reservation: Reservation, window_start: Instant, window_end: Instant) -> int:
    """
    Nights of a stay that fall inside the window.

    Example:
        A stay from April 25 to May 5 against May 1 - May 31 counts 4 nights
        (May 1, 2, 3 and 4).
    """
    first = to_utc_date(window_start)
    end_exclusive = to_utc_date(window_end) + timedelta(days=1)
    clip_start = max(to_utc_date(reservation.check_in), first)
    clip_end = min(to_utc_date(reservation.check_out), end_exclusive)
    return max((clip_end - clip_start).days, 0)


def _percent(numerator: int, denominator: int) -> int:
    # Round half up on exact integers
    return (numerator * 200 + denominator) // (2 * denominator)


def compute_statistics(
    reservations: Iterable[Reservation],
    room_count: int,
    window_start: Instant,
    window_end: Instant,
) -> ReservationStatistics:
    """
    Aggregate check-ins, check-outs, guests and occupancy over a window.

    Every reservation passed in counts toward check-ins, check-outs and guests;
    callers exclude reservations that no longer hold a room (Cancelled,
    Rejected) before calling. Booked room-nights only come from reservations
    that occupy the room (Confirmed_Pending_Payment, Accepted), so Pending
    requests and lapsed Expired bookings never show up as occupancy.

    Args:
        reservations: Reservation snapshot
        room_count: Number of rooms the occupancy rate is measured against
        window_start: First day of the window (inclusive)
        window_end: Last day of the window (inclusive)

    Returns:
        ReservationStatistics: Counts and occupancy rate in whole percent. The
            rate is not capped, so double bookings show up above 100.
    """
    first, last = to_utc_date(window_start), to_utc_date(window_end)
    days = days_in_window(first, last)

    try:
        capacity = _window_capacity(room_count, days)
    except DegenerateAggregationWindow as e:
        logger.warning(
            "statistics_window_degenerate",
            room_count=room_count,
            days_in_window=days,
            error=str(e),
        )
        return ReservationStatistics()

    windowed = [r for r in reservations if _touches_window(r, first, last)]

    check_ins = sum(1 for r in windowed if first <= to_utc_date(r.check_in) <= last)
    check_outs = sum(1 for r in windowed if to_utc_date(r.check_out) <= last)
    total_guests = sum(r.guests.total for r in windowed)
    booked = sum(booked_room_nights(r, first, last) for r in windowed if is_occupying(r.status))

    return ReservationStatistics(
        check_ins=check_ins,
        check_outs=check_outs,
        total_guests=total_guests,
        occupancy_rate=_percent(booked, capacity),
    )


def summarize_rooms(
    rooms: Sequence[Room], reservations: Sequence[Reservation], as_of: Instant
) -> RoomStats:
    """
    Count rooms by derived status. Inactive rooms count toward the total only.
    """
    occupied = 0
    available = 0
    for room in rooms:
        if not room.is_active:
            continue
        if current_occupancy(room, as_of, reservations) is not None:
            occupied += 1
        else:
            available += 1

    return RoomStats(total_rooms=len(rooms), occupied=occupied, available=available)


def describe_rooms(
    rooms: Sequence[Room],
    reservations: Sequence[Reservation],
    as_of: Instant,
    customer_lookup: Mapping[str, CustomerInfo],
) -> list[RoomSummary]:
    """Per-room derived status plus the name of the guest currently staying."""
    summaries = []
    for room in rooms:
        occupancy = current_occupancy(room, as_of, reservations)
        occupant = customer_lookup.get(occupancy.customer_id) if occupancy else None
        summaries.append(
            RoomSummary(
                id=room.id,
                name=room.name,
                capacity=room.capacity,
                price_per_night=room.price_per_night,
                is_active=room.is_active,
                status=RoomStatus.OCCUPIED if occupancy else RoomStatus.VACANT,
                occupant_name=occupant.name if occupant else None,
            )
        )
    return summaries
