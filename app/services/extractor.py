"""Feed-item HTML to plain text (BeautifulSoup4)."""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

# Dropped entirely before extraction
_STRIP_TAGS = ["script", "style", "iframe", "noscript", "figure"]

MAX_TEXT_LENGTH = 8000


def extract_text(html: str | None, max_length: int = MAX_TEXT_LENGTH) -> str:
    """Strip markup from an RSS item body.

    Embedded media and scripts are removed, whitespace collapsed to single
    spaces and the result capped at *max_length* characters. Returns "" for
    empty input.
    """
    if not html:
        return ""

    soup = BeautifulSoup(html, "html.parser")
    for tag in soup.find_all(_STRIP_TAGS):
        tag.decompose()

    text = soup.get_text(separator=" ", strip=True)
    text = re.sub(r"\s+", " ", text).strip()
    return text[:max_length]
