"""Base scorer: deterministic relevance of a signal to one objective.

Pure functions only. No database, no LLM, no clock unless ``now`` is omitted.

    signal_strength = type_weight * user_signal_weight * recency
    objective_fit   = match_bonus * user_objective_weight * priority_multiplier
    score           = clamp(signal_strength + objective_fit, 0, 100)
"""

from __future__ import annotations

import dataclasses
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol

SCORE_MIN = 0.0
SCORE_MAX = 100.0

SIGNAL_TYPE_WEIGHTS: dict[str, int] = {
    "marketplace": 40,
    "launch": 35,
    "funding": 30,
    "changelog": 25,
    "blog": 15,
    "pr": 10,
    "hire": 5,
}
UNKNOWN_SIGNAL_TYPE_WEIGHT = 15

PRIORITY_MULTIPLIERS: dict[int, float] = {1: 1.5, 2: 1.2, 3: 1.0}

# (signal_type, objective_type) -> bonus
OBJECTIVE_MATCH_BONUSES: dict[tuple[str, str], int] = {
    ("marketplace", "marketplace"): 30,
    ("launch", "co_market"): 30,
    ("changelog", "integrations"): 30,
    ("launch", "co_sell"): 15,
    ("funding", "co_sell"): 15,
    ("changelog", "marketplace"): 15,
}

NO_DATE_RECENCY = 0.5

# (max whole days elapsed, multiplier); anything older gets STALE_RECENCY
_RECENCY_BANDS: tuple[tuple[int, float], ...] = (
    (0, 1.0),
    (3, 0.9),
    (7, 0.7),
    (14, 0.5),
)
STALE_RECENCY = 0.3

_SECONDS_PER_DAY = 86400


class ObjectiveLike(Protocol):
    type: str
    priority: int


@dataclass(frozen=True)
class PreferenceWeights:
    """Per-user learned multipliers. Missing or zero weights mean 1.0."""

    signal_type_weights: Mapping[str, float] = field(default_factory=dict)
    objective_type_weights: Mapping[str, float] = field(default_factory=dict)

    def for_signal_type(self, signal_type: str) -> float:
        return float(self.signal_type_weights.get(signal_type) or 1.0)

    def for_objective_type(self, objective_type: str) -> float:
        return float(self.objective_type_weights.get(objective_type) or 1.0)


@dataclass(frozen=True)
class ScoreBreakdown:
    """Components of an insight score. Immutable; see ``final_score``."""

    base_score: float
    recency_multiplier: float
    priority_multiplier: float
    objective_match_bonus: float
    llm_adjustment: float
    signal_strength: float
    objective_fit: float

    def to_dict(self) -> dict[str, Any]:
        """camelCase keys, as stored in ``insights.score_breakdown``."""
        return {
            "baseScore": self.base_score,
            "recencyMultiplier": self.recency_multiplier,
            "priorityMultiplier": self.priority_multiplier,
            "objectiveMatchBonus": self.objective_match_bonus,
            "llmAdjustment": self.llm_adjustment,
            "signalStrength": self.signal_strength,
            "objectiveFit": self.objective_fit,
        }


@dataclass(frozen=True)
class BaseScore:
    score: float
    breakdown: ScoreBreakdown


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; they are stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def recency_multiplier(published_at: datetime | None, now: datetime | None = None) -> float:
    """Decay by whole days elapsed since publication.

    A publication time in the future counts as same-day.
    """
    if published_at is None:
        return NO_DATE_RECENCY
    now = _as_utc(now) if now is not None else datetime.now(UTC)
    elapsed = (now - _as_utc(published_at)).total_seconds()
    days = max(0, math.floor(elapsed / _SECONDS_PER_DAY))
    for max_days, multiplier in _RECENCY_BANDS:
        if days <= max_days:
            return multiplier
    return STALE_RECENCY


def priority_multiplier(priority: int | None) -> float:
    return PRIORITY_MULTIPLIERS.get(priority, 1.0)


def objective_match_bonus(signal_type: str, objective_type: str) -> int:
    return OBJECTIVE_MATCH_BONUSES.get((signal_type, objective_type), 0)


def signal_type_weight(signal_type: str) -> int:
    return SIGNAL_TYPE_WEIGHTS.get(signal_type, UNKNOWN_SIGNAL_TYPE_WEIGHT)


def calculate_base_score(
    signal_type: str,
    published_at: datetime | None,
    objective: ObjectiveLike,
    weights: PreferenceWeights | None = None,
    now: datetime | None = None,
) -> BaseScore:
    """Score one signal against one objective.

    ``breakdown.base_score`` is the type weight after the user's signal-type
    multiplier; ``llm_adjustment`` is always 0 here.
    """
    weights = weights or PreferenceWeights()
    signal_type = str(getattr(signal_type, "value", signal_type))
    objective_type = str(getattr(objective.type, "value", objective.type))

    adjusted_base = signal_type_weight(signal_type) * weights.for_signal_type(signal_type)
    recency = recency_multiplier(published_at, now)
    priority = priority_multiplier(objective.priority)
    bonus = objective_match_bonus(signal_type, objective_type)

    signal_strength = adjusted_base * recency
    objective_fit = bonus * weights.for_objective_type(objective_type) * priority

    breakdown = ScoreBreakdown(
        base_score=adjusted_base,
        recency_multiplier=recency,
        priority_multiplier=priority,
        objective_match_bonus=bonus,
        llm_adjustment=0.0,
        signal_strength=signal_strength,
        objective_fit=objective_fit,
    )
    return BaseScore(
        score=clamp(signal_strength + objective_fit, SCORE_MIN, SCORE_MAX),
        breakdown=breakdown,
    )


def final_score(
    base_score: float, breakdown: ScoreBreakdown, llm_adjustment: float
) -> BaseScore:
    """Apply an already-bounded LLM adjustment; returns a new breakdown."""
    return BaseScore(
        score=clamp(base_score + llm_adjustment, SCORE_MIN, SCORE_MAX),
        breakdown=dataclasses.replace(breakdown, llm_adjustment=llm_adjustment),
    )
