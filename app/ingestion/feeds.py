"""RSS/Atom feed fetching, parsing and discovery."""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from urllib.parse import urljoin, urlparse

import feedparser  # type: ignore
from bs4 import BeautifulSoup

from app.services.extractor import extract_text
from app.services.fetcher import fetch_url

logger = logging.getLogger(__name__)

COMMON_FEED_PATHS = (
    "/feed",
    "/rss",
    "/rss.xml",
    "/feed.xml",
    "/blog/feed",
    "/blog/rss",
    "/news/feed",
    "/company-news/rss.xml",
)

_FEED_LINK_TYPES = ("application/rss+xml", "application/atom+xml")


@dataclass(frozen=True)
class FeedItem:
    """One entry of a partner feed, with the body already reduced to text."""

    title: str
    link: str
    content: str = ""
    published_at: datetime | None = None
    author: str | None = None
    tags: tuple[str, ...] = field(default_factory=tuple)

    @property
    def facets(self) -> dict[str, Any] | None:
        facets: dict[str, Any] = {}
        if self.author:
            facets["author"] = self.author
        if self.tags:
            facets["tags"] = list(self.tags)
        return facets or None


@dataclass(frozen=True)
class ParsedFeed:
    title: str
    items: list[FeedItem]


def _entry_datetime(entry: dict) -> datetime | None:
    """feedparser normalizes dates to UTC struct_time."""
    parsed = entry.get("published_parsed") or entry.get("updated_parsed")
    if not parsed:
        return None
    try:
        return datetime.fromtimestamp(calendar.timegm(parsed), tz=UTC)
    except (OverflowError, ValueError, TypeError):
        return None


def _entry_content(entry: dict) -> str:
    contents = entry.get("content") or []
    if contents and isinstance(contents, list):
        html = contents[0].get("value", "")
    else:
        html = entry.get("summary", "") or entry.get("description", "")
    return extract_text(html)


def _entry_tags(entry: dict) -> tuple[str, ...]:
    terms = (t.get("term") for t in entry.get("tags") or [])
    return tuple(term.strip() for term in terms if term and term.strip())


def parse_feed(raw: str | bytes) -> ParsedFeed | None:
    """Parse feed XML. Returns None when nothing feed-like was found."""
    parsed = feedparser.parse(raw)
    entries = parsed.get("entries", [])
    if parsed.get("bozo") and not entries:
        logger.warning("Unparseable feed: %s", parsed.get("bozo_exception"))
        return None

    items: list[FeedItem] = []
    for entry in entries:
        title = (entry.get("title") or "").strip()
        link = (entry.get("link") or "").strip()
        if not title and not link:
            continue
        author = (entry.get("author") or "").strip() or None
        items.append(
            FeedItem(
                title=title,
                link=link,
                content=_entry_content(entry),
                published_at=_entry_datetime(entry),
                author=author,
                tags=_entry_tags(entry),
            )
        )
    return ParsedFeed(title=parsed.get("feed", {}).get("title", "") or "", items=items)


async def fetch_feed(url: str) -> ParsedFeed | None:
    """Fetch and parse a feed; None when the URL is unreachable or not a feed."""
    body = await fetch_url(url)
    if body is None:
        return None
    return parse_feed(body)


async def validate_feed_url(url: str) -> bool:
    """True when *url* serves a feed with at least one item."""
    feed = await fetch_feed(url)
    return feed is not None and len(feed.items) > 0


def _feed_links_in_html(html: str, base_url: str) -> list[str]:
    soup = BeautifulSoup(html, "html.parser")
    links: list[str] = []
    for tag in soup.find_all("link"):
        if (tag.get("type") or "").lower() in _FEED_LINK_TYPES and tag.get("href"):
            links.append(urljoin(base_url, tag["href"]))
    return links


async def detect_rss_url(domain: str) -> str | None:
    """Find a working feed URL for a partner domain or URL.

    Tries the value itself when it is a URL, then common feed paths on the
    origin, then ``<link rel="alternate">`` feed tags on the homepage.
    """
    domain = (domain or "").strip()
    if not domain:
        return None

    if domain.startswith("http") and await validate_feed_url(domain):
        return domain

    base = domain if domain.startswith("http") else f"https://{domain}"
    parts = urlparse(base)
    if not parts.netloc:
        return None
    origin = f"{parts.scheme}://{parts.netloc}"

    for path in COMMON_FEED_PATHS:
        candidate = f"{origin}{path}"
        if await validate_feed_url(candidate):
            return candidate

    html = await fetch_url(base)
    if html:
        for candidate in _feed_links_in_html(html, origin):
            if await validate_feed_url(candidate):
                return candidate

    logger.info("No feed found for %s", domain)
    return None
