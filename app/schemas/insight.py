"""Insight schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import FeedbackType, InsightStatus
from app.schemas.signal import SignalRead


class InsightRead(BaseModel):
    """Schema for reading an insight (response)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    signal_id: int
    objective_id: int | None
    score: int
    score_breakdown: dict[str, Any] | None = None
    why: str
    recommendation: str
    actions: list[dict[str, Any]]
    outreach_draft: str
    feedback: FeedbackType | None = None
    status: InsightStatus
    created_at: datetime


class InsightWithSignal(InsightRead):
    """Insight plus its signal and partner name, for list views."""

    signal: SignalRead
    partner_name: str


class FeedbackRequest(BaseModel):
    type: FeedbackType


class StatusUpdateRequest(BaseModel):
    status: InsightStatus = InsightStatus.APPROVED


class BatchApproveRequest(BaseModel):
    insight_ids: list[int] = Field(..., min_length=1, max_length=50)
    status: InsightStatus = InsightStatus.APPROVED


class BatchApproveResponse(BaseModel):
    updated: int
    insights: list[InsightRead]
