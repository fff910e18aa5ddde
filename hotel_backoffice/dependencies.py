"""
FastAPI dependency injection providers.

Dependencies can be overridden in tests using app.dependency_overrides, e.g.
an in-memory SQLite engine in place of the PostgreSQL one, or a FixedClock
so that expiry and room status are evaluated at a known instant.
"""

from __future__ import annotations

from typing import Generator

from sqlalchemy.engine import Engine

from hotel_backoffice.db.engine import engine
from hotel_backoffice.utils.datetime import Clock, SystemClock

_system_clock = SystemClock()


def get_db_engine() -> Generator[Engine, None, None]:
    """
    Provide database engine for dependency injection.

    Yields:
        Engine: SQLAlchemy database engine

    Testing Example:
        >>> app.dependency_overrides[get_db_engine] = lambda: sqlite_engine
    """
    yield engine


def get_clock() -> Clock:
    """
    Provide the clock used for "now" in lifecycle decisions.

    Testing Example:
        >>> app.dependency_overrides[get_clock] = lambda: FixedClock(instant)
    """
    return _system_clock
