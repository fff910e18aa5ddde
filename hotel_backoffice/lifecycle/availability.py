"""
Room availability checks.

A room is held by every reservation for it that is not Cancelled or Rejected.
Stays are half-open intervals [check_in, check_out): a guest checking out at
the instant the next one checks in does not conflict.
"""

from __future__ import annotations

from typing import Iterable, Optional

from hotel_backoffice.errors import BookingRejected, RoomUnavailable
from hotel_backoffice.lifecycle.statuses import ReservationStatus, is_blocking
from hotel_backoffice.schemas.reservations import Guests, Origin, Reservation
from hotel_backoffice.schemas.rooms import Room, RoomStatus
from hotel_backoffice.utils.datetime import (
    Instant,
    intervals_overlap,
    nights_between,
    require_positive_interval,
    to_utc_date,
    to_utc_datetime,
)


def holding_reservations(room: Room, reservations: Iterable[Reservation]) -> list[Reservation]:
    """Reservations for this room that still hold it."""
    return [r for r in reservations if r.room_id == room.id and is_blocking(r.status)]


def conflicting_reservations(
    room: Room,
    candidate_start: Instant,
    candidate_end: Instant,
    existing_reservations: Iterable[Reservation],
) -> list[Reservation]:
    """
    Room-holding reservations whose stay overlaps the candidate interval.

    Raises:
        InvalidInterval: If candidate_end <= candidate_start
    """
    start, end = require_positive_interval(candidate_start, candidate_end)
    return [
        r
        for r in holding_reservations(room, existing_reservations)
        if intervals_overlap(r.check_in, r.check_out, start, end)
    ]


def is_room_available(
    room: Room,
    candidate_start: Instant,
    candidate_end: Instant,
    existing_reservations: Iterable[Reservation],
) -> bool:
    """
    Decide whether a room is free for [candidate_start, candidate_end).

    Args:
        room: Room being booked
        candidate_start: Requested check-in
        candidate_end: Requested check-out
        existing_reservations: Snapshot of reservations (any room, any status)

    Returns:
        bool: True when no non-cancelled, non-rejected reservation overlaps

    Raises:
        InvalidInterval: If candidate_end <= candidate_start

    Example:
        >>> is_room_available(room, date(2025, 6, 4), date(2025, 6, 6), reservations)
        True
    """
    return not conflicting_reservations(room, candidate_start, candidate_end, existing_reservations)


def current_occupancy(
    room: Room, as_of: Instant, existing_reservations: Iterable[Reservation]
) -> Optional[Reservation]:
    """The room-holding reservation whose stay contains `as_of`, if any."""
    instant = to_utc_datetime(as_of)
    for reservation in holding_reservations(room, existing_reservations):
        if reservation.check_in <= instant < reservation.check_out:
            return reservation
    return None


def room_status(
    room: Room, as_of: Instant, existing_reservations: Iterable[Reservation]
) -> RoomStatus:
    if current_occupancy(room, as_of, existing_reservations) is not None:
        return RoomStatus.OCCUPIED
    return RoomStatus.VACANT


def initial_status(origin: Origin, payment_received: bool = False) -> ReservationStatus:
    """
    Status a new booking starts in.

    Mobile bookings wait for staff review; direct bookings made by staff are
    already approved, and accepted outright when the downpayment is in hand.
    """
    if origin is Origin.MOBILE:
        return ReservationStatus.PENDING
    if payment_received:
        return ReservationStatus.ACCEPTED
    return ReservationStatus.CONFIRMED_PENDING_PAYMENT


def validate_new_booking(
    room: Room,
    check_in: Instant,
    check_out: Instant,
    guests: Guests,
    notes: str,
    now: Instant,
    existing_reservations: Iterable[Reservation],
    max_nights: int,
    capacity_allowance: int,
) -> int:
    """
    Run the booking guards for a new stay in `room`.

    Args:
        room: Room selected for the booking
        check_in: Requested arrival
        check_out: Requested departure
        guests: Head count
        notes: Free-text notes (required when exceeding base capacity)
        now: Current instant from the caller's clock
        existing_reservations: Reservation snapshot used for the availability check
        max_nights: Longest stay allowed
        capacity_allowance: Extra guests tolerated above base capacity

    Returns:
        int: Number of nights booked

    Raises:
        InvalidInterval: If check_out <= check_in
        BookingRejected: If the room, dates or head count are not acceptable
        RoomUnavailable: If the stay overlaps room-holding reservations
    """
    require_positive_interval(check_in, check_out)

    if not room.is_active:
        raise BookingRejected(
            f'The selected room "{room.name}" is currently not active or available for booking.'
        )
    if room.capacity <= 0:
        raise BookingRejected(
            f'The selected room "{room.name}" does not have a valid guest capacity defined.'
        )

    if to_utc_date(check_in) < to_utc_date(now):
        raise BookingRejected("Check-in date cannot be in the past.")

    nights = nights_between(check_in, check_out)
    if nights <= 0:
        raise BookingRejected("Reservation must be for at least one night.")
    if nights > max_nights:
        raise BookingRejected(
            f"Reservation duration ({nights} nights) cannot exceed {max_nights} days."
        )

    max_guests = room.capacity + capacity_allowance
    if guests.total > max_guests:
        raise BookingRejected(
            f"Number of guests ({guests.total}) exceeds the maximum allowed ({max_guests}) "
            f'for room "{room.name}".'
        )
    if guests.total > room.capacity and not notes.strip():
        raise BookingRejected(
            f"Notes are required when exceeding base room capacity of {room.capacity} "
            f"to accommodate {guests.total} guests."
        )

    conflicts = conflicting_reservations(room, check_in, check_out, existing_reservations)
    if conflicts:
        raise RoomUnavailable(room.id, conflicts)

    return nights
