# models/rooms.py

from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, Numeric, String
from sqlalchemy.sql import func

from hotel_backoffice.models.base import Base


class Room(Base):
    """
    ORM model for bookable rooms.

    Occupied/Vacant is never stored here: it is derived from reservations at
    read time.
    """

    __tablename__ = "rooms"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    capacity = Column(Integer, nullable=False)
    room_price = Column(Numeric(10, 2), nullable=False)  # Flat rate per night
    amenities = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    last_updated = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
