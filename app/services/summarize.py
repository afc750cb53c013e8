"""Analyst-style bullet summaries of feed items."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from app.llm.router import ModelRole, get_llm_provider
from app.prompts.loader import load_prompt, render_prompt

if TYPE_CHECKING:
    from app.config import Settings
    from app.llm.provider import LLMProvider

logger = logging.getLogger(__name__)


def summarize(
    text: str,
    llm: LLMProvider | None = None,
    settings: Settings | None = None,
) -> str:
    """Summarize *text* in 4-6 bullets for a partner manager.

    Input is bounded to ``SUMMARIZE_MAX_CHARS``. On failure or an empty reply
    the first ``SUMMARY_FALLBACK_CHARS`` characters of *text* are returned.
    """
    if settings is None:
        from app.config import get_settings

        settings = get_settings()

    text = text or ""
    fallback = text[: settings.summary_fallback_chars]

    try:
        if llm is None:
            llm = get_llm_provider(role=ModelRole.CHEAP, settings=settings)
        prompt = render_prompt("summarize_signal_v1", TEXT=text[: settings.summarize_max_chars])
        raw = llm.complete(
            prompt,
            system_prompt=load_prompt("summarize_signal_system_v1"),
            temperature=0.5,
            max_tokens=300,
        )
    except Exception:
        logger.exception("Summarization failed; using truncated text")
        return fallback

    summary = (raw or "").strip()
    if not summary:
        logger.warning("Summarizer returned empty text; using truncated text")
        return fallback
    return summary
