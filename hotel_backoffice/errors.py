"""
Error kinds raised by the reservation lifecycle engine and its persistence adapter.

Validation errors (InvalidTransition, InvalidInterval, BookingRejected,
RoomUnavailable) are raised to the immediate caller, which decides how to
present them. DegenerateAggregationWindow never leaves the statistics
aggregator: dashboards keep rendering with zero-valued statistics instead.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Sequence, Union

if TYPE_CHECKING:
    from hotel_backoffice.schemas.reservations import Origin, Reservation, ReservationStatus


class ReservationEngineError(Exception):
    """Base class for every error raised by this package."""


class InvalidTransition(ReservationEngineError, ValueError):
    """Proposed status is not in the allowed set for the current status and origin."""

    def __init__(
        self,
        current: "ReservationStatus",
        proposed: "ReservationStatus | None",
        origin: "Origin",
        reason: str | None = None,
    ) -> None:
        self.current = current
        self.proposed = proposed
        self.origin = origin
        if proposed is None:
            message = f"No transition rule for {origin.value} reservations in {current.value}"
        else:
            message = (
                f"Cannot move a {origin.value} reservation "
                f"from {current.value} to {proposed.value}"
            )
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class MissingTransitionRule(InvalidTransition):
    """No explicit transition rule exists for a (status, origin) pair."""

    def __init__(self, current: "ReservationStatus", origin: "Origin") -> None:
        super().__init__(current, None, origin)


class InvalidInterval(ReservationEngineError, ValueError):
    """An interval whose end is not strictly after its start."""

    def __init__(self, start: Union[date, datetime], end: Union[date, datetime]) -> None:
        self.start = start
        self.end = end
        super().__init__(f"Interval end ({end}) must be after its start ({start})")


class DegenerateAggregationWindow(ReservationEngineError):
    """Room count or reporting window length is zero or negative."""

    def __init__(self, room_count: int, days_in_window: int) -> None:
        self.room_count = room_count
        self.days_in_window = days_in_window
        super().__init__(
            f"Cannot aggregate over {room_count} room(s) and {days_in_window} day(s)"
        )


class UnknownStatus(ReservationEngineError, ValueError):
    """A status string that is not one of the canonical reservation statuses."""

    def __init__(self, raw: str) -> None:
        self.raw = raw
        super().__init__(f"Unknown reservation status: {raw!r}")


class BookingRejected(ReservationEngineError):
    """A new booking intent failed validation (room, dates or guest count)."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class RoomUnavailable(ReservationEngineError):
    """The requested stay overlaps existing room-holding reservations."""

    def __init__(self, room_id: int, conflicts: Sequence["Reservation"]) -> None:
        self.room_id = room_id
        self.conflicts = list(conflicts)
        super().__init__(
            f"Room {room_id} is unavailable for the selected dates "
            f"({len(self.conflicts)} conflicting reservation(s))"
        )


class ReservationNotFound(ReservationEngineError):
    def __init__(self, reservation_id: str) -> None:
        self.reservation_id = reservation_id
        super().__init__(f"Reservation {reservation_id} not found")


class RoomNotFound(ReservationEngineError):
    def __init__(self, room_id: int) -> None:
        self.room_id = room_id
        super().__init__(f"Room {room_id} not found")


class StaleReservation(ReservationEngineError):
    """The reservation changed status between read and commit."""

    def __init__(self, reservation_id: str, expected_status: "ReservationStatus") -> None:
        self.reservation_id = reservation_id
        self.expected_status = expected_status
        super().__init__(
            f"Reservation {reservation_id} is no longer {expected_status.value}; reload and retry"
        )
