"""Insight model."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.session import Base
from app.models.enums import InsightStatus
from app.models.types import JSONType

if TYPE_CHECKING:
    from app.models.objective import Objective
    from app.models.signal import Signal


class Insight(Base):
    """Scored, explained result of matching one signal to one objective."""

    __tablename__ = "insights"

    __table_args__ = (
        UniqueConstraint("signal_id", "objective_id", name="uq_insights_signal_objective"),
        CheckConstraint("score BETWEEN 0 AND 100", name="ck_insights_score_range"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    signal_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("signals.id", ondelete="CASCADE"), nullable=False, index=True
    )
    objective_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("objectives.id", ondelete="SET NULL"), nullable=True
    )
    score: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    score_breakdown: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    why: Mapped[str] = mapped_column(Text, nullable=False)
    recommendation: Mapped[str] = mapped_column(Text, nullable=False)
    actions: Mapped[list[dict]] = mapped_column(JSONType, nullable=False)
    outreach_draft: Mapped[str] = mapped_column(Text, nullable=False)
    feedback: Mapped[str | None] = mapped_column(String(16), nullable=True)
    status: Mapped[str] = mapped_column(
        String(16), default=InsightStatus.PENDING.value, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    signal: Mapped[Signal] = relationship("Signal", back_populates="insights")
    objective: Mapped[Objective | None] = relationship("Objective")
