"""Dashboard and reporting services."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Optional, Sequence

import structlog
from sqlalchemy.engine import Engine

from hotel_backoffice.config import DISPLAY_TIMEZONE, RECENT_ITEMS_LIMIT
from hotel_backoffice.db.readers.customers import get_customer_lookup
from hotel_backoffice.db.readers.reservations import list_reservations
from hotel_backoffice.db.readers.rooms import list_rooms
from hotel_backoffice.lifecycle.statistics import (
    ReservationStatistics,
    compute_statistics,
    describe_rooms,
    summarize_rooms,
)
from hotel_backoffice.lifecycle.statuses import is_blocking
from hotel_backoffice.metrics import occupancy_rate, statistics_duration
from hotel_backoffice.schemas.reservations import Reservation
from hotel_backoffice.schemas.rooms import Room
from hotel_backoffice.utils.datetime import Clock, format_display_date, month_window

logger = structlog.get_logger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _window_statistics(
    rooms: Sequence[Room],
    reservations: Sequence[Reservation],
    window_start: date,
    window_end: date,
) -> ReservationStatistics:
    """Aggregate an already-loaded snapshot, skipping Cancelled and Rejected reservations."""
    with statistics_duration.time():
        holding = [r for r in reservations if is_blocking(r.status)]
        stats = compute_statistics(holding, len(rooms), window_start, window_end)

    logger.debug(
        "statistics_computed",
        window_start=window_start.isoformat(),
        window_end=window_end.isoformat(),
        occupancy_rate=stats.occupancy_rate,
    )
    return stats


def statistics_for_window(
    engine: Engine, window_start: date, window_end: date
) -> ReservationStatistics:
    """
    Load the reservation snapshot and aggregate it over an inclusive window.

    Cancelled and Rejected reservations do not count toward any figure.
    """
    with engine.connect() as conn:
        rooms = list_rooms(conn)
        reservations = list_reservations(conn)

    return _window_statistics(rooms, reservations, window_start, window_end)


def build_dashboard(
    engine: Engine, clock: Clock, limit: Optional[int] = None
) -> dict[str, Any]:
    """
    Assemble the back-office dashboard payload.

    Args:
        engine: SQLAlchemy Engine
        clock: Source of "now" for room status and the current month
        limit: Number of recent rooms and reservations (defaults to RECENT_ITEMS_LIMIT)

    Returns:
        dict: room_stats, recent_rooms, statistics (current month, display
            strings) and recent_reservations
    """
    now = clock.now()
    limit = RECENT_ITEMS_LIMIT if limit is None else limit
    first, last = month_window(now)

    with engine.connect() as conn:
        rooms = list_rooms(conn)
        reservations = list_reservations(conn)
        customers = get_customer_lookup(conn, {r.customer_id for r in reservations})

    room_stats = summarize_rooms(rooms, reservations, now)
    newest_rooms = sorted(rooms, key=lambda r: r.id, reverse=True)[:limit]
    recent_rooms = describe_rooms(newest_rooms, reservations, now, customers)

    stats = _window_statistics(rooms, reservations, first, last)
    occupancy_rate.set(stats.occupancy_rate)

    room_names = {room.id: room.name for room in rooms}
    newest = sorted(reservations, key=lambda r: r.created_at or _EPOCH, reverse=True)[:limit]
    recent_reservations = []
    for r in newest:
        customer = customers.get(r.customer_id)
        recent_reservations.append(
            {
                "id": r.id,
                "customer_name": customer.name if customer else "N/A",
                "room_name": room_names.get(r.room_id, "N/A"),
                "status": r.status.value,
                "check_in": format_display_date(r.check_in, DISPLAY_TIMEZONE, with_time=False),
                "check_out": format_display_date(r.check_out, DISPLAY_TIMEZONE, with_time=False),
                "booked_at": format_display_date(r.created_at, DISPLAY_TIMEZONE),
            }
        )

    logger.info(
        "dashboard_built",
        total_rooms=room_stats.total_rooms,
        occupied=room_stats.occupied,
        occupancy_rate=stats.occupancy_rate,
    )

    return {
        "room_stats": room_stats.model_dump(),
        "recent_rooms": [summary.model_dump(mode="json") for summary in recent_rooms],
        "statistics": stats.as_display(),
        "statistics_window": {"start": first.isoformat(), "end": last.isoformat()},
        "recent_reservations": recent_reservations,
    }
