"""Read-side queries over a user's insights."""

from __future__ import annotations

from sqlalchemy.orm import Session, joinedload

from app.models.insight import Insight
from app.models.partner import Partner
from app.models.signal import Signal

TOP_INSIGHTS_LIMIT = 50


def _owned_insights(db: Session, user_id: int):
    return (
        db.query(Insight)
        .join(Signal, Insight.signal_id == Signal.id)
        .join(Partner, Signal.partner_id == Partner.id)
        .filter(Partner.user_id == user_id)
        .options(joinedload(Insight.signal).joinedload(Signal.partner))
    )


def list_top_insights(db: Session, user_id: int, limit: int = TOP_INSIGHTS_LIMIT) -> list[Insight]:
    """Highest-scoring insights first; newest breaks ties."""
    return (
        _owned_insights(db, user_id)
        .order_by(Insight.score.desc(), Insight.created_at.desc(), Insight.id.desc())
        .limit(limit)
        .all()
    )


def list_partner_insights(
    db: Session, partner_id: int, user_id: int, limit: int = TOP_INSIGHTS_LIMIT
) -> list[Insight]:
    return (
        _owned_insights(db, user_id)
        .filter(Signal.partner_id == partner_id)
        .order_by(Insight.created_at.desc(), Insight.id.desc())
        .limit(limit)
        .all()
    )
