from datetime import date
from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.engine import Engine

from hotel_backoffice.dependencies import get_clock, get_db_engine
from hotel_backoffice.services.dashboard import build_dashboard, statistics_for_window
from hotel_backoffice.utils.datetime import Clock

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/dashboard", status_code=status.HTTP_200_OK)
def get_dashboard(
    engine: Engine = Depends(get_db_engine),
    clock: Clock = Depends(get_clock),
) -> dict[str, Any]:
    """
    Room counts, newest rooms, current-month statistics and latest reservations.
    """
    try:
        return build_dashboard(engine, clock)

    except Exception as e:
        logger.exception("dashboard_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/statistics", status_code=status.HTTP_200_OK)
def get_statistics(
    start: date = Query(..., description="First day of the window (inclusive)"),
    end: date = Query(..., description="Last day of the window (inclusive)"),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Statistics for an inclusive window. An inverted window yields zeroes.

    Example:
        >>> GET /statistics?start=2025-05-01&end=2025-05-31
        {"check_ins": 4, "check_outs": 3, "total_guests": 9, "occupancy_rate": 63, ...}
    """
    try:
        stats = statistics_for_window(engine, start, end)
        return {**stats.model_dump(), "display": stats.as_display()}

    except Exception as e:
        logger.exception(
            "statistics_failed", start=start.isoformat(), end=end.isoformat(), error=str(e)
        )
        raise HTTPException(status_code=500, detail="Internal server error")
