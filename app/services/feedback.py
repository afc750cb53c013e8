"""Feedback on insights and the preference-weight learning loop."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.enums import FeedbackType, WeightDimension
from app.models.insight import Insight
from app.models.partner import Partner
from app.models.signal import Signal
from app.services.preference_store import SqlWeightStore, WeightStore

logger = logging.getLogger(__name__)

FEEDBACK_DELTAS: dict[FeedbackType, float] = {
    FeedbackType.THUMBS_UP: 0.1,
    FeedbackType.THUMBS_DOWN: -0.1,
    FeedbackType.NA: -0.15,
}


class InsightNotFoundError(LookupError):
    """Insight does not exist or does not belong to the acting user."""


def get_owned_insight(db: Session, insight_id: int, user_id: int) -> Insight | None:
    """Return the insight if its signal's partner belongs to *user_id*."""
    return db.scalars(
        select(Insight)
        .join(Signal, Insight.signal_id == Signal.id)
        .join(Partner, Signal.partner_id == Partner.id)
        .where(Insight.id == insight_id, Partner.user_id == user_id)
    ).first()


def record_feedback(
    db: Session,
    insight_id: int,
    feedback: str | FeedbackType,
    user_id: int,
    store: WeightStore | None = None,
) -> Insight:
    """Record *feedback* on an insight and nudge the user's weights.

    The signal-type weight always moves; the objective-type weight moves only
    while the insight still references an objective.

    Raises:
        ValueError: If *feedback* is not a known tag.
        InsightNotFoundError: If the insight is missing or owned by someone else.
    """
    feedback_type = FeedbackType(feedback)

    insight = get_owned_insight(db, insight_id, user_id)
    if insight is None:
        raise InsightNotFoundError(f"Insight {insight_id} not found")

    insight.feedback = feedback_type.value
    db.commit()
    db.refresh(insight)

    store = store or SqlWeightStore(db)
    delta = FEEDBACK_DELTAS[feedback_type]

    signal_weight = store.apply_adjustment(
        user_id, WeightDimension.SIGNAL_TYPE, insight.signal.type, delta
    )
    objective_weight = None
    if insight.objective is not None:
        objective_weight = store.apply_adjustment(
            user_id, WeightDimension.OBJECTIVE_TYPE, insight.objective.type, delta
        )

    logger.info(
        "Feedback recorded: insight_id=%s user_id=%s feedback=%s signal_weight=%.2f objective_weight=%s",
        insight_id,
        user_id,
        feedback_type.value,
        signal_weight,
        f"{objective_weight:.2f}" if objective_weight is not None else "n/a",
    )
    return insight
