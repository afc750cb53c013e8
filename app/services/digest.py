"""Top-insight digest for a user."""

from __future__ import annotations

from dataclasses import asdict, dataclass

from sqlalchemy.orm import Session

from app.models.insight import Insight
from app.models.partner import Partner
from app.models.signal import Signal

DEFAULT_DIGEST_ACTION = "Reach out"


@dataclass(frozen=True)
class DigestItem:
    partner: str
    signal_title: str
    signal_url: str
    score: int
    why: str
    recommendation: str
    action: str
    outreach_draft: str
    insight_id: int

    def to_dict(self) -> dict:
        return asdict(self)


def _first_action_label(actions: list | None) -> str:
    if actions and isinstance(actions[0], dict) and actions[0].get("label"):
        return actions[0]["label"]
    return DEFAULT_DIGEST_ACTION


def generate_digest(db: Session, user_id: int, limit: int | None = None) -> list[DigestItem]:
    """Return the user's highest-scoring insights, best first."""
    if limit is None:
        from app.config import get_settings

        limit = get_settings().digest_limit

    rows = (
        db.query(Insight, Signal, Partner)
        .join(Signal, Insight.signal_id == Signal.id)
        .join(Partner, Signal.partner_id == Partner.id)
        .filter(Partner.user_id == user_id)
        .order_by(Insight.score.desc(), Insight.created_at.desc(), Insight.id.desc())
        .limit(limit)
        .all()
    )
    return [
        DigestItem(
            partner=partner.name,
            signal_title=signal.title,
            signal_url=signal.source_url,
            score=insight.score,
            why=insight.why,
            recommendation=insight.recommendation,
            action=_first_action_label(insight.actions),
            outreach_draft=insight.outreach_draft,
            insight_id=insight.id,
        )
        for insight, signal, partner in rows
    ]
