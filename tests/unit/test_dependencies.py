"""
Unit tests for FastAPI dependency injection.
"""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from hotel_backoffice.dependencies import get_clock, get_db_engine
from hotel_backoffice.utils.datetime import Clock, FixedClock, SystemClock


@pytest.mark.unit
def test_get_db_engine_dependency() -> None:
    """Test that get_db_engine yields the engine instance."""
    engine = next(get_db_engine())

    assert isinstance(engine, Engine)


@pytest.mark.unit
def test_get_clock_returns_system_clock() -> None:
    clock = get_clock()

    assert isinstance(clock, SystemClock)
    assert clock.now().tzinfo == timezone.utc


@pytest.mark.unit
def test_dependencies_can_be_overridden() -> None:
    """Test that engine and clock can be swapped for tests."""
    app = FastAPI()

    @app.get("/test")
    def test_endpoint(
        engine: Engine = Depends(get_db_engine),
        clock: Clock = Depends(get_clock),
    ) -> dict[str, str]:
        return {"engine_name": engine.name, "now": clock.now().isoformat()}

    mock_engine = Mock(spec=Engine)
    mock_engine.name = "mock_engine"
    fixed = FixedClock(datetime(2025, 5, 8, 9, 0, tzinfo=timezone.utc))

    app.dependency_overrides[get_db_engine] = lambda: mock_engine
    app.dependency_overrides[get_clock] = lambda: fixed

    response = TestClient(app).get("/test")

    assert response.status_code == 200
    assert response.json() == {"engine_name": "mock_engine", "now": "2025-05-08T09:00:00+00:00"}
