"""Partner schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PartnerCreate(BaseModel):
    """Schema for registering a partner. A feed is detected from *domain* when rss_url is omitted."""

    name: str = Field(..., min_length=1, max_length=255)
    domain: str | None = Field(None, max_length=255)
    rss_url: str | None = Field(None, max_length=2048)
    notes: str | None = None


class PartnerUpdate(BaseModel):
    """Partial update; only fields present in the request are changed."""

    name: str | None = Field(None, min_length=1, max_length=255)
    domain: str | None = Field(None, max_length=255)
    rss_url: str | None = Field(None, max_length=2048)
    notes: str | None = None


class PartnerRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    domain: str | None
    rss_url: str | None
    notes: str | None
    created_at: datetime
    updated_at: datetime


class PartnerImportRow(BaseModel):
    """Result for a single CSV row."""

    row: int
    name: str
    status: str  # "created" or "error"
    detail: str | None = None
    partner_id: int | None = None
    rss_url: str | None = None


class PartnerImportResponse(BaseModel):
    total: int
    created: int
    errors: int
    rows: list[PartnerImportRow]


class DeeperPlayResponse(BaseModel):
    outreach_draft: str
    suggested_play: str
