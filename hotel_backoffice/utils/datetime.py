"""UTC datetime, calendar-night and interval utilities."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Protocol, Union
from zoneinfo import ZoneInfo

from dateutil.relativedelta import relativedelta

from hotel_backoffice.errors import InvalidInterval

Instant = Union[date, datetime]


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-aware datetime.

    This function should be used instead of datetime.now() or datetime.utcnow()
    to ensure all timestamps are timezone-aware and stored in UTC.

    Returns:
        Timezone-aware datetime in UTC

    Example:
        >>> now = utc_now()
        >>> now.tzinfo
        datetime.timezone.utc
    """
    return datetime.now(timezone.utc)


class Clock(Protocol):
    """Source of the current instant, injected wherever "now" matters."""

    def now(self) -> datetime: ...


class SystemClock:
    """Clock backed by the real UTC wall time."""

    def now(self) -> datetime:
        return utc_now()


class FixedClock:
    """
    Clock frozen at a single instant.

    Example:
        >>> clock = FixedClock(datetime(2025, 5, 1, 9, 0, tzinfo=timezone.utc))
        >>> clock.now().day
        1
    """

    def __init__(self, instant: datetime) -> None:
        self.instant = ensure_utc(instant)

    def now(self) -> datetime:
        return self.instant


def ensure_utc(value: datetime) -> datetime:
    """
    Normalize a datetime to timezone-aware UTC.

    Naive datetimes are interpreted as already being in UTC (SQLite and some
    drivers hand them back without tzinfo).
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_utc_date(value: Instant) -> date:
    """Calendar date of an instant in UTC. Plain dates are returned unchanged."""
    if isinstance(value, datetime):
        return ensure_utc(value).date()
    return value


def start_of_day(value: date) -> datetime:
    """Midnight UTC at the start of the given calendar date."""
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def to_utc_datetime(value: Instant) -> datetime:
    """Aware UTC datetime for an instant; plain dates map to their UTC midnight."""
    if isinstance(value, datetime):
        return ensure_utc(value)
    return start_of_day(value)


def nights_between(check_in: Instant, check_out: Instant) -> int:
    """
    Count calendar nights between two instants.

    Both ends are reduced to their UTC calendar date first, so time-of-day and
    the local offset of the inputs never shift the count by one.

    Returns:
        int: Number of nights, or 0 when check_out is not after check_in.

    Example:
        >>> nights_between(date(2025, 5, 10), date(2025, 5, 15))
        5
    """
    nights = (to_utc_date(check_out) - to_utc_date(check_in)).days
    return max(nights, 0)


def require_positive_interval(start: Instant, end: Instant) -> tuple[datetime, datetime]:
    """
    Normalize an interval to aware UTC datetimes, rejecting empty or inverted ones.

    Raises:
        InvalidInterval: If end <= start.
    """
    start_dt, end_dt = to_utc_datetime(start), to_utc_datetime(end)
    if end_dt <= start_dt:
        raise InvalidInterval(start, end)
    return start_dt, end_dt


def intervals_overlap(a_start: Instant, a_end: Instant, b_start: Instant, b_end: Instant) -> bool:
    """
    Test whether two half-open intervals [a_start, a_end) and [b_start, b_end) overlap.

    An interval ending at the exact instant the other begins does not overlap.

    Raises:
        InvalidInterval: If either interval has end <= start.

    Example:
        >>> intervals_overlap(date(2025, 5, 10), date(2025, 5, 15), date(2025, 5, 15), date(2025, 5, 18))
        False
    """
    a_start_dt, a_end_dt = require_positive_interval(a_start, a_end)
    b_start_dt, b_end_dt = require_positive_interval(b_start, b_end)
    return a_start_dt < b_end_dt and b_start_dt < a_end_dt


def month_window(instant: Instant) -> tuple[date, date]:
    """
    First and last calendar day of the month containing the instant.

    Example:
        >>> month_window(date(2024, 2, 10))
        (datetime.date(2024, 2, 1), datetime.date(2024, 2, 29))
    """
    day = to_utc_date(instant)
    first = day.replace(day=1)
    last = first + relativedelta(months=1) - timedelta(days=1)
    return first, last


def format_display_date(value: datetime | None, tz_name: str, with_time: bool = True) -> str:
    """Render an instant for dashboard display in the given timezone."""
    if value is None:
        return "N/A"
    local = ensure_utc(value).astimezone(ZoneInfo(tz_name))
    if with_time:
        return local.strftime("%b %d, %Y, %I:%M %p")
    return local.strftime("%b %d, %Y")
