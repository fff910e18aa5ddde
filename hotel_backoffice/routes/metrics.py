"""
Prometheus metrics endpoint.

Example:
    GET /metrics

    Response:
        # HELP hotel_status_transitions_total Reservation status change attempts
        # TYPE hotel_status_transitions_total counter
        hotel_status_transitions_total{from_status="Pending",outcome="applied",...} 3.0
        ...
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics", response_class=Response)
async def metrics() -> Any:
    """Return metrics in Prometheus text-based exposition format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
