from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from hotel_backoffice.errors import InvalidInterval
from hotel_backoffice.lifecycle.statuses import ReservationStatus
from hotel_backoffice.utils.datetime import ensure_utc, nights_between, to_utc_datetime

# 09xxxxxxxxx or 9xxxxxxxxx
PH_MOBILE_PATTERN = re.compile(r"^(09\d{9}|9\d{9})$")

__all__ = [
    "Guests",
    "Origin",
    "Reservation",
    "ReservationCreatePayload",
    "ReservationStatus",
    "ReservationType",
    "StatusChangePayload",
    "migrate_legacy_origin",
]


class Origin(str, Enum):
    """Channel a reservation was created through."""

    STAFF_MANUAL = "staff_manual"
    MOBILE = "mobile"


_MOBILE_SOURCES = frozenset({"mobile", "mobile_app", "online"})


def migrate_legacy_origin(raw: Optional[str]) -> Origin:
    """
    Map historical booking source values onto an origin.

    App bookings were stored as "mobile", "mobile_app" or "online"; anything
    else was entered by staff.
    """
    if raw and raw.strip().lower() in _MOBILE_SOURCES:
        return Origin.MOBILE
    return Origin.STAFF_MANUAL


class ReservationType(str, Enum):
    ONLINE = "online"
    DIRECT = "direct"


def _coerce_instant(value: Any) -> Any:
    # Plain dates become UTC midnight; strings are left to pydantic
    if isinstance(value, date):
        return to_utc_datetime(value)
    return value


class Guests(BaseModel):
    """
    Head count for a reservation, split by guest category.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    adults: int = Field(1, ge=1, description="Adults (at least one)")
    children: int = Field(0, ge=0, description="Children")
    seniors: int = Field(0, ge=0, description="Senior citizens")

    @property
    def total(self) -> int:
        return self.adults + self.children + self.seniors


class Reservation(BaseModel):
    """
    A single stay booked against one room.

    check_in/check_out form the half-open interval [check_in, check_out) during
    which the room is held. All timestamps are normalized to aware UTC.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., description="Opaque reservation identifier")
    customer_id: str = Field(..., description="Customer registry reference")
    room_id: int = Field(..., description="Room registry reference")
    check_in: datetime
    check_out: datetime
    status: ReservationStatus
    origin: Origin
    guests: Guests = Field(default_factory=Guests)
    payment_received: bool = False
    confirmation_time: Optional[datetime] = None
    audited_by: Optional[str] = Field(None, description="Staff member who last changed status")
    total_price: Optional[Decimal] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = Field(None, description="When the booking was submitted")

    @field_validator("check_in", "check_out", "confirmation_time", "created_at", mode="before")
    @classmethod
    def _coerce_dates(cls, value: Any) -> Any:
        return _coerce_instant(value)

    @field_validator("check_in", "check_out", "confirmation_time", "created_at")
    @classmethod
    def _normalize_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value) if value is not None else None

    @model_validator(mode="after")
    def _check_out_after_check_in(self) -> "Reservation":
        if self.check_out <= self.check_in:
            raise InvalidInterval(self.check_in, self.check_out)
        return self

    @property
    def number_of_nights(self) -> int:
        return nights_between(self.check_in, self.check_out)

    @property
    def reservation_type(self) -> ReservationType:
        if self.origin is Origin.MOBILE:
            return ReservationType.ONLINE
        return ReservationType.DIRECT

    @property
    def total_guests(self) -> int:
        return self.guests.total


class StatusChangePayload(BaseModel):
    """
    Schema for a staff-initiated status change.
    """

    status: ReservationStatus = Field(..., description="Proposed next status")
    audited_by: Optional[str] = Field(None, description="Staff member making the change")


class ReservationCreatePayload(BaseModel):
    """
    Schema for a direct (staff_manual) booking made from the back office.
    """

    name: str = Field(..., min_length=1, description="Guest full name")
    phone: str = Field(..., description="11-digit PH mobile number")
    room_id: int = Field(..., description="Room to book")
    check_in: date = Field(..., description="Arrival date")
    check_out: date = Field(..., description="Departure date")
    adults: int = Field(1, ge=1)
    children: int = Field(0, ge=0)
    seniors: int = Field(0, ge=0)
    notes: str = Field("", description="Required when exceeding base room capacity")
    payment_received: bool = Field(False, description="Downpayment already verified")
    audited_by: Optional[str] = Field(None, description="Staff member creating the booking")

    @field_validator("name")
    @classmethod
    def _name_required(cls, value: str) -> str:
        name = value.strip()
        if not name:
            raise ValueError("Guest name is required.")
        return name

    @field_validator("notes")
    @classmethod
    def _strip_notes(cls, value: str) -> str:
        return value.strip()

    @field_validator("phone")
    @classmethod
    def _valid_phone(cls, value: str) -> str:
        phone = value.strip()
        if not PH_MOBILE_PATTERN.match(phone):
            raise ValueError(
                "Please enter a valid 11-digit PH mobile number (e.g., 09171234567 or 9171234567)."
            )
        return phone

    @property
    def guests(self) -> Guests:
        return Guests(adults=self.adults, children=self.children, seniors=self.seniors)
