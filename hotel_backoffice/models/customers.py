# models/customers.py

import uuid

from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.sql import func

from hotel_backoffice.models.base import Base


class Customer(Base):
    """
    ORM model for guests who have booked at least once.

    Customers are matched by phone number when staff create direct bookings.
    """

    __tablename__ = "customers"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    full_name = Column(String(200), nullable=False)
    phone_number = Column(String(20), nullable=False, unique=True, index=True)
    is_email_confirmed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
