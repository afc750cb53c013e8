"""Raw item -> classified, summarized signal view -> insight."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from app.models.enums import SignalType
from app.services.classify import classify_type
from app.services.insights import InsightResult, generate_insight
from app.services.scoring import ObjectiveLike, PreferenceWeights
from app.services.summarize import summarize

if TYPE_CHECKING:
    from app.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignalRaw:
    """An unprocessed item as it arrives from a feed."""

    title: str
    url: str
    content: str = ""
    published_at: datetime | None = None
    facets: dict[str, Any] | None = None


@dataclass(frozen=True)
class SignalView:
    """Unsaved signal with the fields the scorer and synthesizer read."""

    type: SignalType
    title: str
    summary: str
    source_url: str
    facets: dict[str, Any] | None
    published_at: datetime | None


def prepare_signal(raw: SignalRaw, settings: Settings | None = None) -> SignalView:
    """Summarize then classify a raw item. Both steps fall back instead of raising."""
    summary = summarize(raw.content, settings=settings)
    signal_type = classify_type(raw.title, raw.content, settings=settings)
    logger.debug("Prepared signal %r as %s", raw.title, signal_type.value)
    return SignalView(
        type=signal_type,
        title=raw.title,
        summary=summary,
        source_url=raw.url,
        facets=raw.facets,
        published_at=raw.published_at,
    )


def classify_and_summarize_and_score(
    signal_raw: SignalRaw,
    objectives: Sequence[ObjectiveLike],
    weights: PreferenceWeights | None = None,
    settings: Settings | None = None,
) -> InsightResult | None:
    """Run the whole scoring pipeline on one raw item without touching the DB.

    Returns None only when *objectives* is empty.
    """
    view = prepare_signal(signal_raw, settings=settings)
    return generate_insight(view, objectives, weights, settings=settings)
