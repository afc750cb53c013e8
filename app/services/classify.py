"""Signal type classification via the cheap LLM role."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from app.llm.router import ModelRole, get_llm_provider
from app.models.enums import SignalType
from app.prompts.loader import load_prompt, render_prompt

if TYPE_CHECKING:
    from app.config import Settings
    from app.llm.provider import LLMProvider

logger = logging.getLogger(__name__)

DEFAULT_SIGNAL_TYPE = SignalType.BLOG

# Characters trimmed from the model reply before matching, e.g. '"Launch."'
_STRIP_CHARS = " \t\r\n\"'`.,;:!*"


def _normalize_label(raw: str) -> str:
    label = raw.strip().lower().strip(_STRIP_CHARS)
    # "type: funding" or "funding - new round" still name a single type
    label = label.split(":")[-1].strip(_STRIP_CHARS)
    return label.split()[0].strip(_STRIP_CHARS) if label else ""


def classify_type(
    title: str,
    content: str,
    llm: LLMProvider | None = None,
    settings: Settings | None = None,
) -> SignalType:
    """Classify an item into one of the seven signal types.

    Any failure (provider construction, transport, empty or unknown reply)
    yields ``SignalType.BLOG``. Never raises.
    """
    if settings is None:
        from app.config import get_settings

        settings = get_settings()

    try:
        if llm is None:
            llm = get_llm_provider(role=ModelRole.CHEAP, settings=settings)
        prompt = render_prompt(
            "classify_signal_v1",
            TITLE=title or "",
            CONTENT=(content or "")[: settings.classify_max_chars],
        )
        raw = llm.complete(
            prompt,
            system_prompt=load_prompt("classify_signal_system_v1"),
            temperature=0.3,
            max_tokens=10,
        )
    except Exception:
        logger.exception("Signal classification failed for title=%r", title[:80] if title else "")
        return DEFAULT_SIGNAL_TYPE

    label = _normalize_label(raw or "")
    try:
        return SignalType(label)
    except ValueError:
        logger.warning("Unrecognized signal type %r from LLM; defaulting to blog", raw)
        return DEFAULT_SIGNAL_TYPE
