from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class CustomerInfo(BaseModel):
    """Read-only customer projection used for display and search."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    phone: Optional[str] = None
