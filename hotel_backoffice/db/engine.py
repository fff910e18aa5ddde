"""
SQLAlchemy engine singleton with connection pooling.

This module creates the single engine instance the API and scripts share.
Creating the engine does not open a connection; the first checkout does.
"""

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from hotel_backoffice.config import DATABASE_URL

if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL is not set.")

engine: Engine = create_engine(
    DATABASE_URL,
    future=True,
    pool_size=10,  # Connections kept open in the pool
    max_overflow=20,  # Extra connections when the pool is exhausted
    pool_pre_ping=True,  # Detect stale connections before use
    pool_recycle=3600,
    echo=False,
)


def check_engine_health(db_engine: Engine) -> bool:
    """
    Check if the database behind an engine is reachable.

    Used by the /ready endpoint before the service accepts traffic.

    Args:
        db_engine: Engine to probe

    Returns:
        bool: True if a trivial query succeeds, False otherwise
    """
    try:
        with db_engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
