"""Outreach workflow status for insights.

Status only moves forward: pending -> ready_to_send -> approved -> sent.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy.orm import Session

from app.models.enums import InsightStatus
from app.models.insight import Insight
from app.models.partner import Partner
from app.models.signal import Signal
from app.services.feedback import InsightNotFoundError, get_owned_insight

logger = logging.getLogger(__name__)

_STATUS_ORDER: dict[InsightStatus, int] = {s: i for i, s in enumerate(InsightStatus)}

MAX_BATCH_SIZE = 50


class InvalidStatusTransitionError(ValueError):
    """Raised when a status change would move an insight backwards."""


def check_transition(current: str, target: InsightStatus) -> bool:
    """Return True if the status changes, False for a no-op.

    Raises:
        InvalidStatusTransitionError: If *target* precedes *current*.
    """
    current_status = InsightStatus(current)
    if _STATUS_ORDER[target] < _STATUS_ORDER[current_status]:
        raise InvalidStatusTransitionError(
            f"Cannot move insight from {current_status.value} to {target.value}"
        )
    return target is not current_status


def update_insight_status(
    db: Session,
    insight_id: int,
    user_id: int,
    status: InsightStatus | str = InsightStatus.APPROVED,
) -> Insight:
    """Advance one of the user's insights to *status*."""
    target = InsightStatus(status)
    insight = get_owned_insight(db, insight_id, user_id)
    if insight is None:
        raise InsightNotFoundError(f"Insight {insight_id} not found")

    if check_transition(insight.status, target):
        insight.status = target.value
        db.commit()
        db.refresh(insight)
        logger.info("Insight %s status -> %s", insight_id, target.value)
    return insight


def batch_update_status(
    db: Session,
    insight_ids: Sequence[int],
    user_id: int,
    status: InsightStatus | str = InsightStatus.APPROVED,
) -> list[Insight]:
    """Advance every owned insight among *insight_ids*; ids owned by others are ignored.

    All transitions are checked before any row changes.

    Raises:
        ValueError: If the batch is empty or larger than 50.
        InsightNotFoundError: If none of the ids belong to the user.
        InvalidStatusTransitionError: If any owned insight would move backwards.
    """
    if not insight_ids or len(insight_ids) > MAX_BATCH_SIZE:
        raise ValueError(f"Batch must contain between 1 and {MAX_BATCH_SIZE} insight ids")
    target = InsightStatus(status)

    insights = (
        db.query(Insight)
        .join(Signal, Insight.signal_id == Signal.id)
        .join(Partner, Signal.partner_id == Partner.id)
        .filter(Insight.id.in_(set(insight_ids)), Partner.user_id == user_id)
        .order_by(Insight.id)
        .all()
    )
    if not insights:
        raise InsightNotFoundError("No matching insights found")

    changed = [i for i in insights if check_transition(i.status, target)]
    for insight in changed:
        insight.status = target.value
    if changed:
        db.commit()
    logger.info(
        "Batch status update: user_id=%s requested=%d owned=%d changed=%d status=%s",
        user_id,
        len(insight_ids),
        len(insights),
        len(changed),
        target.value,
    )
    return insights
