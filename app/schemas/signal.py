"""Signal schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from app.models.enums import SignalType


class SignalRead(BaseModel):
    """Schema for reading a signal (response)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    partner_id: int
    type: SignalType
    title: str
    source_url: str
    summary: str
    facets: dict[str, Any] | None = None
    published_at: datetime | None = None
    created_at: datetime
