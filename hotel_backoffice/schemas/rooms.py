from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RoomStatus(str, Enum):
    """Derived room state; computed against an instant, never stored."""

    OCCUPIED = "Occupied"
    VACANT = "Vacant"


class Room(BaseModel):
    """
    Bookable room as supplied by the room registry.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: int
    name: str
    capacity: int = Field(..., ge=0, description="Base guest capacity")
    price_per_night: Decimal = Field(..., ge=0, description="Flat nightly rate")
    is_active: bool = True
    amenities: list[str] = Field(default_factory=list)


class RoomCreatePayload(BaseModel):
    """
    Schema for registering a room. Mirrors the back-office room form fields.
    """

    name: str = Field(..., min_length=1)
    capacity: int = Field(..., gt=0)
    price_per_night: Decimal = Field(..., ge=0)
    is_active: bool = True
    amenities: list[str] = Field(default_factory=list)


class RoomUpdatePayload(BaseModel):
    """
    Schema for editing a room. All fields are optional; omitted fields keep
    their stored value. Setting is_active to False takes the room out of
    booking and the Occupied/Vacant counts.
    """

    name: Optional[str] = Field(None, min_length=1)
    capacity: Optional[int] = Field(None, gt=0)
    price_per_night: Optional[Decimal] = Field(None, ge=0)
    is_active: Optional[bool] = Field(None, description="Room open for booking")
    amenities: Optional[list[str]] = None
