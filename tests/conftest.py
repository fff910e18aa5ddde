"""
Shared fixtures.

Required settings are given defaults here, before any hotel_backoffice module
is imported. Database tests run against an in-memory SQLite engine built
from Base.metadata and injected into the app through dependency overrides.
"""

from __future__ import annotations

import os
import tempfile
from datetime import date, datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Generator, Optional

os.environ.setdefault(
    "DATABASE_URL", f"sqlite:///{Path(tempfile.gettempdir()) / 'hotel_backoffice_test.db'}"
)
os.environ.setdefault("ALLOWED_ORIGINS", "*")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.engine import Engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from hotel_backoffice.db.writers.customers import find_or_create_customer  # noqa: E402
from hotel_backoffice.db.writers.reservations import insert_reservation  # noqa: E402
from hotel_backoffice.db.writers.rooms import insert_rooms  # noqa: E402
from hotel_backoffice.lifecycle.statuses import ReservationStatus  # noqa: E402
from hotel_backoffice.models.base import Base  # noqa: E402
from hotel_backoffice.models.customers import Customer  # noqa: F401,E402
from hotel_backoffice.models.reservations import Reservation as ReservationRow  # noqa: F401,E402
from hotel_backoffice.models.rooms import Room as RoomRow  # noqa: F401,E402
from hotel_backoffice.schemas.reservations import Guests, Origin, Reservation  # noqa: E402
from hotel_backoffice.schemas.rooms import Room  # noqa: E402
from hotel_backoffice.utils.datetime import FixedClock  # noqa: E402

# Thursday morning, Manila time is 17:00
NOW = datetime(2025, 5, 8, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def room_factory() -> Callable[..., Room]:
    """Build Room records without touching the database."""

    def _make(
        room_id: int = 1,
        name: str = "Deluxe 101",
        capacity: int = 2,
        price: str = "2500.00",
        is_active: bool = True,
    ) -> Room:
        return Room(
            id=room_id,
            name=name,
            capacity=capacity,
            price_per_night=Decimal(price),
            is_active=is_active,
        )

    return _make


@pytest.fixture
def reservation_factory() -> Callable[..., Reservation]:
    """Build Reservation records without touching the database."""
    counter = {"n": 0}

    def _make(
        check_in: date | datetime,
        check_out: date | datetime,
        room_id: int = 1,
        status: ReservationStatus = ReservationStatus.ACCEPTED,
        origin: Origin = Origin.STAFF_MANUAL,
        adults: int = 1,
        children: int = 0,
        seniors: int = 0,
        customer_id: str = "cust-1",
        payment_received: bool = False,
        confirmation_time: Optional[datetime] = None,
        created_at: Optional[datetime] = None,
        reservation_id: Optional[str] = None,
    ) -> Reservation:
        counter["n"] += 1
        return Reservation(
            id=reservation_id or f"res-{counter['n']}",
            customer_id=customer_id,
            room_id=room_id,
            check_in=check_in,
            check_out=check_out,
            status=status,
            origin=origin,
            guests=Guests(adults=adults, children=children, seniors=seniors),
            payment_received=payment_received,
            confirmation_time=confirmation_time,
            created_at=created_at,
        )

    return _make


@pytest.fixture
def db_engine() -> Generator[Engine, None, None]:
    """In-memory SQLite database with the full schema, shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def seed_room(db_engine: Engine) -> Callable[..., int]:
    """Insert a room and return its id."""

    def _seed(
        name: str = "Deluxe 101",
        capacity: int = 2,
        price_per_night: str = "2500.00",
        is_active: bool = True,
        **extra: Any,
    ) -> int:
        ids = insert_rooms(
            engine=db_engine,
            data=[
                {
                    "name": name,
                    "capacity": capacity,
                    "price_per_night": Decimal(price_per_night),
                    "is_active": is_active,
                    **extra,
                }
            ],
        )
        return ids[0]

    return _seed


@pytest.fixture
def seed_reservation(
    db_engine: Engine, reservation_factory: Callable[..., Reservation]
) -> Callable[..., Reservation]:
    """Insert a reservation (and its customer) and return the stored record."""

    def _seed(
        room_id: int,
        check_in: date | datetime,
        check_out: date | datetime,
        name: str = "Juan Dela Cruz",
        phone: str = "09171234567",
        **kwargs: Any,
    ) -> Reservation:
        with db_engine.begin() as conn:
            customer_id = find_or_create_customer(conn, name, phone)
            reservation = reservation_factory(
                check_in, check_out, room_id=room_id, customer_id=customer_id, **kwargs
            )
            return insert_reservation(conn, reservation, customer_name=name, customer_phone=phone)

    return _seed


@pytest.fixture
def client(db_engine: Engine, clock: FixedClock) -> Generator[TestClient, None, None]:
    """API client wired to the SQLite engine and the fixed clock."""
    from hotel_backoffice.dependencies import get_clock, get_db_engine
    from hotel_backoffice.main import app

    app.dependency_overrides[get_db_engine] = lambda: db_engine
    app.dependency_overrides[get_clock] = lambda: clock
    yield TestClient(app)
    app.dependency_overrides.clear()
