# models/reservations.py

import uuid

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.sql import func

from hotel_backoffice.models.base import Base


class Reservation(Base):
    """
    ORM model for room reservations.

    Rows are never deleted: cancelled, rejected and expired reservations stay
    as history. Status is stored as the canonical status text; source holds the
    origin channel (staff_manual or mobile).
    """

    __tablename__ = "reservations"
    __table_args__ = (
        CheckConstraint("check_out > check_in", name="ck_reservations_check_out_after_check_in"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    customer_id = Column(
        String(36), ForeignKey("customers.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    room_id = Column(
        Integer, ForeignKey("rooms.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    customer_name_at_booking = Column(String(200), nullable=True)
    customer_phone_at_booking = Column(String(20), nullable=True)
    check_in = Column(DateTime(timezone=True), nullable=False)
    check_out = Column(DateTime(timezone=True), nullable=False)
    num_adults = Column(Integer, nullable=False, default=1)
    num_children = Column(Integer, nullable=False, default=0)
    num_seniors = Column(Integer, nullable=False, default=0)
    status = Column(String(32), nullable=False, index=True)
    source = Column(String(32), nullable=False)
    payment_received = Column(Boolean, nullable=False, default=False)
    confirmation_time = Column(DateTime(timezone=True), nullable=True)
    audited_by = Column(String(36), nullable=True)  # Staff user id
    total_price = Column(Numeric(12, 2), nullable=True)
    message = Column(Text, nullable=True)  # Booking notes
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    status_updated_at = Column(DateTime(timezone=True), nullable=True)
    last_updated = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
