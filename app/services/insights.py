"""Insight synthesis: base score + bounded LLM adjustment + explanation and draft.

One reasoning-role LLM call per signal. The LLM's own 0-100 score is never used
directly; it moves the deterministic base score by at most
``INSIGHT_LLM_ADJUSTMENT_BOUND`` points. Any failure yields a fully
deterministic insight.
"""

from __future__ import annotations

import json
import logging
import math
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

from app.llm.router import ModelRole, get_llm_provider
from app.prompts.loader import load_prompt, render_prompt
from app.services.scoring import (
    BaseScore,
    ObjectiveLike,
    PreferenceWeights,
    ScoreBreakdown,
    calculate_base_score,
    clamp,
    final_score,
)

if TYPE_CHECKING:
    from app.config import Settings
    from app.llm.provider import LLMProvider

logger = logging.getLogger(__name__)

OBJECTIVE_TYPE_LABELS: dict[str, str] = {
    "integrations": "Integrations",
    "co_sell": "Co-Sell",
    "co_market": "Co-Marketing",
    "marketplace": "Marketplace",
    "geography": "Geography",
    "vertical": "Vertical",
}

PRIORITY_LABELS: dict[int, str] = {1: "highest", 2: "medium"}
DEFAULT_PRIORITY_LABEL = "low"

FALLBACK_RECOMMENDATION = "Consider reaching out to explore opportunities."
DEFAULT_ACTION_LABEL = "Reach out to partner"
DEFAULT_OWNER_HINT = "Partner Manager"
DEFAULT_DUE_IN_DAYS = 7


class SignalLike(Protocol):
    type: str
    title: str
    summary: str
    source_url: str
    facets: dict | None
    published_at: datetime | None


@dataclass(frozen=True)
class SuggestedAction:
    label: str
    owner_hint: str
    due_in_days: int

    def to_dict(self) -> dict[str, Any]:
        return {"label": self.label, "ownerHint": self.owner_hint, "dueInDays": self.due_in_days}


DEFAULT_ACTION = SuggestedAction(DEFAULT_ACTION_LABEL, DEFAULT_OWNER_HINT, DEFAULT_DUE_IN_DAYS)


@dataclass(frozen=True)
class InsightResult:
    """Synthesized insight for the primary objective, not yet persisted."""

    why: str
    score: float
    recommendation: str
    actions: list[SuggestedAction]
    outreach_draft: str
    breakdown: ScoreBreakdown
    objective: ObjectiveLike | None = field(default=None, compare=False)
    used_fallback: bool = False

    @property
    def rounded_score(self) -> int:
        """Integer score for storage (half rounds up)."""
        return int(math.floor(self.score + 0.5))

    def actions_as_dicts(self) -> list[dict[str, Any]]:
        return [a.to_dict() for a in self.actions]


class InsightParseError(ValueError):
    """LLM output was missing, malformed or incomplete."""


def format_objective_type(objective_type: str) -> str:
    return OBJECTIVE_TYPE_LABELS.get(objective_type, objective_type)


def _enum_value(value: Any) -> str:
    return str(getattr(value, "value", value))


def select_primary_objective(objectives: Sequence[ObjectiveLike]) -> ObjectiveLike:
    """Lowest priority number wins; ties keep caller order."""
    return sorted(objectives, key=lambda o: o.priority)[0]


def generate_default_outreach_draft(title: str) -> str:
    return (
        "Hi there,\n\n"
        f'I noticed "{title}" and thought it might be relevant to explore '
        "potential partnership opportunities.\n\n"
        "Would you be open to a quick conversation?\n\n"
        "Best regards"
    )


# ── Outreach draft reflow ──────────────────────────────────────────────

_INTRO = r"(I noticed|I saw|I came across|I read about)"
_DANGLING_TITLE_WITH_CONNECTOR_RE = re.compile(
    _INTRO + r"[ \t]*\n+[ \t]*([A-Za-z][^\n]+?)[ \t]*\n+[ \t]*(and thought|and|which)\b",
    re.IGNORECASE,
)
_DANGLING_TITLE_RE = re.compile(
    _INTRO + r"[ \t]*\n+[ \t]*([A-Za-z][^\n]+?)[ \t]*\n+",
    re.IGNORECASE,
)
_TERMINAL_PUNCTUATION_RE = re.compile(r"[.!?:]$")
_STARTS_CAPITALIZED_RE = re.compile(r"^[A-Z]")
_GREETING_OR_CLOSING_RE = re.compile(
    r"^(Hi|Hello|I|We|Would|Best|Thanks|Thank|Regards|Sincerely)", re.IGNORECASE
)
_MERGE_MAX_LINE_LENGTH = 100
_EXCESS_BLANK_LINES_RE = re.compile(r"\n{3,}")
_TRAILING_SPACE_RE = re.compile(r"[ \t]+$", re.MULTILINE)


def _quote(title: str) -> str:
    title = title.strip()
    if len(title) >= 2 and title[0] == title[-1] == '"':
        return title
    return f'"{title}"'


def format_outreach_draft(draft: str) -> str:
    """Reflow an outreach draft.

    Rejoins a signal title left on its own line after "I noticed" and similar
    openers, merges a short line lacking terminal punctuation with a following
    capitalized line that is not a greeting or closing, drops leading blank
    lines, keeps at most one blank line between paragraphs and strips trailing
    whitespace.
    """
    if not draft:
        return draft

    text = draft.replace("\r\n", "\n")
    text = _DANGLING_TITLE_WITH_CONNECTOR_RE.sub(
        lambda m: f"{m.group(1)} {_quote(m.group(2))} {m.group(3)}", text
    )
    text = _DANGLING_TITLE_RE.sub(lambda m: f"{m.group(1)} {_quote(m.group(2))} ", text)

    lines = text.split("\n")
    result: list[str] = []
    i = 0
    while i < len(lines):
        line = lines[i].strip()
        next_line = lines[i + 1].strip() if i + 1 < len(lines) else ""

        if not result and not line:
            i += 1
            continue

        if (
            line
            and next_line
            and not _TERMINAL_PUNCTUATION_RE.search(line)
            and _STARTS_CAPITALIZED_RE.match(next_line)
            and not _GREETING_OR_CLOSING_RE.match(next_line)
            and len(line) < _MERGE_MAX_LINE_LENGTH
        ):
            result.append(f"{line} {next_line}")
            i += 2
            continue

        result.append(line)
        i += 1

    joined = _EXCESS_BLANK_LINES_RE.sub("\n\n", "\n".join(result))
    return _TRAILING_SPACE_RE.sub("", joined).strip()


# ── LLM response parsing ───────────────────────────────────────────────


def _required_text(parsed: dict[str, Any], key: str) -> str:
    value = parsed.get(key)
    if not isinstance(value, str) or not value.strip():
        raise InsightParseError(f"missing or blank '{key}'")
    return value.strip()


def _parse_action(raw: Any) -> SuggestedAction | None:
    if not isinstance(raw, dict):
        return None
    label = raw.get("label")
    if not isinstance(label, str) or not label.strip():
        return None
    owner_hint = raw.get("ownerHint")
    if not isinstance(owner_hint, str) or not owner_hint.strip():
        owner_hint = DEFAULT_OWNER_HINT
    due = raw.get("dueInDays", DEFAULT_DUE_IN_DAYS)
    if isinstance(due, bool):
        return None
    try:
        due_days = int(float(due))
    except (TypeError, ValueError, OverflowError):
        return None
    return SuggestedAction(label.strip(), owner_hint.strip(), max(0, due_days))


def parse_insight_response(raw: str) -> tuple[float, str, str, list[SuggestedAction], str]:
    """Validate the LLM's JSON reply.

    Returns ``(llm_score, why, recommendation, actions, outreach_draft)``.
    Malformed actions are dropped; having none left is a failure.

    Raises:
        InsightParseError: On any missing or malformed required field.
    """
    try:
        parsed = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as exc:
        raise InsightParseError("response is not valid JSON") from exc
    if not isinstance(parsed, dict):
        raise InsightParseError("response is not a JSON object")

    score = parsed.get("score")
    if isinstance(score, bool) or not isinstance(score, (int, float)) or not math.isfinite(score):
        raise InsightParseError(f"non-numeric score: {score!r}")

    why = _required_text(parsed, "why")
    recommendation = _required_text(parsed, "recommendation")
    draft = _required_text(parsed, "outreachDraft")

    raw_actions = parsed.get("actions")
    if not isinstance(raw_actions, list):
        raise InsightParseError("'actions' is not a list")
    actions = [a for a in (_parse_action(r) for r in raw_actions) if a is not None]
    if not actions:
        raise InsightParseError("no valid actions")

    return float(score), why, recommendation, actions, draft


# ── Synthesis ──────────────────────────────────────────────────────────


def _objectives_payload(objectives: Sequence[ObjectiveLike]) -> list[dict[str, Any]]:
    return [
        {
            "type": format_objective_type(_enum_value(o.type)),
            "detail": getattr(o, "detail", None),
            "priority": PRIORITY_LABELS.get(o.priority, DEFAULT_PRIORITY_LABEL),
        }
        for o in objectives
    ]


def _signal_payload(signal: SignalLike) -> dict[str, Any]:
    return {
        "title": signal.title,
        "type": _enum_value(signal.type),
        "summary": signal.summary,
        "url": signal.source_url,
        "facets": signal.facets,
    }


def build_fallback_insight(
    signal: SignalLike, primary: ObjectiveLike, base: BaseScore
) -> InsightResult:
    """Deterministic insight used whenever the LLM path fails."""
    signal_type = _enum_value(signal.type)
    label = format_objective_type(_enum_value(primary.type))
    return InsightResult(
        why=f"This {signal_type} signal aligns with your {label} objective.",
        score=base.score,
        recommendation=FALLBACK_RECOMMENDATION,
        actions=[DEFAULT_ACTION],
        outreach_draft=format_outreach_draft(generate_default_outreach_draft(signal.title)),
        breakdown=base.breakdown,
        objective=primary,
        used_fallback=True,
    )


def generate_insight(
    signal: SignalLike,
    objectives: Sequence[ObjectiveLike],
    weights: PreferenceWeights | None = None,
    llm: LLMProvider | None = None,
    settings: Settings | None = None,
    now: datetime | None = None,
) -> InsightResult | None:
    """Synthesize an insight for *signal* against the user's objectives.

    Returns ``None`` only when *objectives* is empty. Never raises for LLM
    failures; those produce the deterministic fallback.
    """
    if not objectives:
        return None

    if settings is None:
        from app.config import get_settings

        settings = get_settings()

    primary = select_primary_objective(objectives)
    base = calculate_base_score(
        _enum_value(signal.type), signal.published_at, primary, weights, now=now
    )

    try:
        if llm is None:
            llm = get_llm_provider(role=ModelRole.REASONING, settings=settings)
        prompt = render_prompt(
            "insight_v1",
            OBJECTIVES_JSON=json.dumps(_objectives_payload(objectives), default=str),
            SIGNAL_JSON=json.dumps(_signal_payload(signal), default=str),
        )
        raw = llm.complete(
            prompt,
            system_prompt=load_prompt("insight_system_v1"),
            response_format={"type": "json_object"},
            temperature=0.7,
        )
        if not raw:
            raise InsightParseError("empty response")
        llm_score, why, recommendation, actions, draft = parse_insight_response(raw)
    except InsightParseError as exc:
        logger.warning("Insight LLM output rejected for %r: %s", signal.title, exc)
        return build_fallback_insight(signal, primary, base)
    except Exception:
        logger.exception("Insight LLM call failed for %r", signal.title)
        return build_fallback_insight(signal, primary, base)

    bound = abs(settings.insight_llm_adjustment_bound)
    adjustment = clamp(llm_score - base.score, -bound, bound)
    final = final_score(base.score, base.breakdown, adjustment)

    return InsightResult(
        why=why,
        score=final.score,
        recommendation=recommendation,
        actions=actions,
        outreach_draft=format_outreach_draft(draft),
        breakdown=final.breakdown,
        objective=primary,
    )
