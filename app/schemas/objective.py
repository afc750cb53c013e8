"""Objective schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import ObjectiveType


class ObjectiveCreate(BaseModel):
    type: ObjectiveType
    detail: str | None = Field(None, max_length=2000)
    priority: int = Field(..., ge=1, le=3, description="1 = highest")


class ObjectiveUpdate(BaseModel):
    type: ObjectiveType | None = None
    detail: str | None = Field(None, max_length=2000)
    priority: int | None = Field(None, ge=1, le=3)


class ObjectiveRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: ObjectiveType
    detail: str | None
    priority: int
    created_at: datetime
