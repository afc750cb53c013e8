"""Follow-up "deeper play" drafts built from a partner's recent insights."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sqlalchemy.orm import Session

from app.llm.router import ModelRole, get_llm_provider
from app.models.insight import Insight
from app.models.partner import Partner
from app.models.signal import Signal
from app.prompts.loader import load_prompt, render_prompt
from app.services.insights import format_outreach_draft
from app.services.partners import get_partner

if TYPE_CHECKING:
    from app.config import Settings
    from app.llm.provider import LLMProvider

logger = logging.getLogger(__name__)

RECENT_INSIGHTS_LIMIT = 5
DEFAULT_SUGGESTED_PLAY = "Explore deeper partnership opportunities"


@dataclass(frozen=True)
class DeeperPlay:
    outreach_draft: str
    suggested_play: str
    used_fallback: bool = False


def generate_default_deeper_play_draft(partner_name: str) -> str:
    return (
        "Hi there,\n\n"
        f"I've been following {partner_name}'s recent activities and I'm excited about "
        "the potential for a deeper partnership between our companies.\n\n"
        "Based on what I've seen, I think there's an opportunity to explore:\n"
        "- Joint product integrations\n"
        "- Co-marketing initiatives\n"
        "- Marketplace opportunities\n\n"
        "Would you be open to a conversation about how we can work together more closely?\n\n"
        "Best regards"
    )


def recent_partner_insights(
    db: Session, partner_id: int, limit: int = RECENT_INSIGHTS_LIMIT
) -> list[Insight]:
    return (
        db.query(Insight)
        .join(Signal, Insight.signal_id == Signal.id)
        .filter(Signal.partner_id == partner_id)
        .order_by(Insight.created_at.desc(), Insight.id.desc())
        .limit(limit)
        .all()
    )


def _partner_payload(partner: Partner) -> dict[str, Any]:
    return {"name": partner.name, "domain": partner.domain, "notes": partner.notes}


def _insights_payload(insights: list[Insight]) -> list[dict[str, Any]]:
    return [
        {
            "title": i.signal.title,
            "type": i.signal.type,
            "why": i.why,
            "recommendation": i.recommendation,
        }
        for i in insights
    ]


def _fallback(partner: Partner) -> DeeperPlay:
    return DeeperPlay(
        outreach_draft=generate_default_deeper_play_draft(partner.name),
        suggested_play=DEFAULT_SUGGESTED_PLAY,
        used_fallback=True,
    )


def _text_field(parsed: dict[str, Any], key: str) -> str:
    value = parsed.get(key)
    return value.strip() if isinstance(value, str) else ""


def generate_deeper_play(
    db: Session,
    partner_id: int,
    user_id: int,
    llm: LLMProvider | None = None,
    settings: Settings | None = None,
) -> DeeperPlay:
    """Draft a follow-up proposing a deeper partnership with one partner.

    Uses the partner's five most recent insights as context. A reply missing
    one field gets the default for that field only; an LLM error or non-JSON
    reply gives the full default.

    Raises:
        PartnerNotFoundError: If the partner does not belong to *user_id*.
    """
    partner = get_partner(db, partner_id, user_id)
    insights = recent_partner_insights(db, partner.id)

    if settings is None:
        from app.config import get_settings

        settings = get_settings()

    try:
        if llm is None:
            llm = get_llm_provider(role=ModelRole.REASONING, settings=settings)
        prompt = render_prompt(
            "deeper_play_v1",
            PARTNER_JSON=json.dumps(_partner_payload(partner)),
            INSIGHTS_JSON=json.dumps(_insights_payload(insights), default=str),
        )
        raw = llm.complete(
            prompt,
            system_prompt=load_prompt("deeper_play_system_v1"),
            response_format={"type": "json_object"},
            temperature=0.7,
        )
    except Exception:
        logger.exception("Deeper play LLM call failed for partner_id=%s", partner.id)
        return _fallback(partner)

    try:
        parsed = json.loads(raw or "")
    except json.JSONDecodeError:
        logger.warning("Deeper play reply is not JSON for partner_id=%s", partner.id)
        return _fallback(partner)
    if not isinstance(parsed, dict):
        logger.warning("Deeper play reply is not a JSON object for partner_id=%s", partner.id)
        return _fallback(partner)

    draft = format_outreach_draft(_text_field(parsed, "outreachDraft"))
    play = _text_field(parsed, "suggestedPlay")
    logger.info(
        "Deeper play generated: partner_id=%s user_id=%s insights=%d",
        partner.id,
        user_id,
        len(insights),
    )
    return DeeperPlay(
        outreach_draft=draft or generate_default_deeper_play_draft(partner.name),
        suggested_play=play or DEFAULT_SUGGESTED_PLAY,
        used_fallback=not (draft and play),
    )
