"""Signal and insight persistence with deduplication."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.enums import SignalType
from app.models.insight import Insight
from app.models.signal import Signal
from app.services.dedupe import compute_dedupe_key
from app.services.insights import InsightResult

logger = logging.getLogger(__name__)


def signal_exists(db: Session, dedupe_hash: str) -> bool:
    return (
        db.scalar(select(Signal.id).where(Signal.dedupe_hash == dedupe_hash).limit(1))
        is not None
    )


def store_signal(
    db: Session,
    partner_id: int,
    signal_type: SignalType | str,
    title: str,
    source_url: str,
    summary: str,
    published_at: datetime | None = None,
    facets: dict | None = None,
    dedupe_hash: str | None = None,
) -> Signal | None:
    """Store a signal unless its dedupe key has been seen.

    Parameters
    ----------
    db : Session
        SQLAlchemy session. Commits on success, rolls back on a duplicate.
    dedupe_hash : str | None
        Precomputed key; derived from *source_url* and *title* when omitted.

    Returns
    -------
    Signal | None
        The new signal, or ``None`` if the key already exists (including a
        concurrent insert that won the race).
    """
    dedupe_hash = dedupe_hash or compute_dedupe_key(source_url, title)
    if signal_exists(db, dedupe_hash):
        logger.debug("Duplicate signal skipped: partner_id=%s hash=%s", partner_id, dedupe_hash)
        return None

    signal = Signal(
        partner_id=partner_id,
        type=SignalType(signal_type).value,
        title=title,
        source_url=source_url,
        summary=summary,
        facets=facets,
        published_at=published_at,
        dedupe_hash=dedupe_hash,
    )
    db.add(signal)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info("Signal insert lost dedupe race: partner_id=%s hash=%s", partner_id, dedupe_hash)
        return None
    db.refresh(signal)
    return signal


def insight_exists(db: Session, signal_id: int, objective_id: int | None) -> bool:
    return (
        db.scalar(
            select(Insight.id)
            .where(Insight.signal_id == signal_id, Insight.objective_id == objective_id)
            .limit(1)
        )
        is not None
    )


def store_insight(
    db: Session,
    signal_id: int,
    objective_id: int | None,
    result: InsightResult,
) -> Insight | None:
    """Persist a synthesized insight; ``None`` if the (signal, objective) pair exists."""
    if objective_id is not None and insight_exists(db, signal_id, objective_id):
        logger.debug(
            "Insight already exists: signal_id=%s objective_id=%s", signal_id, objective_id
        )
        return None

    insight = Insight(
        signal_id=signal_id,
        objective_id=objective_id,
        score=result.rounded_score,
        score_breakdown=result.breakdown.to_dict(),
        why=result.why,
        recommendation=result.recommendation,
        actions=result.actions_as_dicts(),
        outreach_draft=result.outreach_draft,
    )
    db.add(insight)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info(
            "Insight insert lost race: signal_id=%s objective_id=%s", signal_id, objective_id
        )
        return None
    db.refresh(insight)
    return insight
