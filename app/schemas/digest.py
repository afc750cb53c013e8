"""Digest schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class DigestItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    partner: str
    signal_title: str
    signal_url: str
    score: int
    why: str
    recommendation: str
    action: str
    outreach_draft: str
    insight_id: int


class DigestResponse(BaseModel):
    items: list[DigestItemRead]
