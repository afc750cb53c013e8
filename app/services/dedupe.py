"""Deduplication key for feed items."""

import hashlib


def compute_dedupe_key(url: str, title: str) -> str:
    """Return the SHA-1 hex digest of ``"{url}|{title}"``.

    The key is global: the same URL and title seen under two partners map to
    one signal.
    """
    return hashlib.sha1(f"{url}|{title}".encode("utf-8")).hexdigest()
