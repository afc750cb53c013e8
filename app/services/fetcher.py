"""HTTP fetcher for partner feeds and homepages (httpx async client)."""

from __future__ import annotations

import logging

import httpx

logger = logging.getLogger(__name__)

USER_AGENT = "PartnerPulse/0.1 (partner-feed-monitor)"
ACCEPT = "application/rss+xml, application/atom+xml, application/xml;q=0.9, text/html;q=0.8, */*;q=0.5"
TIMEOUT = 15.0
MAX_REDIRECTS = 3


async def fetch_url(url: str) -> str | None:
    """Fetch *url* and return the response body, or None on failure.

    15-second timeout, one retry on timeout or connection error, up to 3
    redirects. Logs errors but never raises.
    """
    for attempt in range(2):
        try:
            async with httpx.AsyncClient(
                timeout=TIMEOUT,
                follow_redirects=True,
                max_redirects=MAX_REDIRECTS,
                headers={"User-Agent": USER_AGENT, "Accept": ACCEPT},
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
                return response.text
        except (httpx.TimeoutException, httpx.ConnectError) as exc:
            if attempt == 0:
                logger.warning("Fetch attempt 1 failed for %s: %s, retrying", url, exc)
                continue
            logger.error("Fetch failed after retry for %s: %s", url, exc)
            return None
        except httpx.HTTPStatusError as exc:
            logger.error("HTTP %s for %s", exc.response.status_code, url)
            return None
        except httpx.HTTPError as exc:
            logger.error("HTTP error fetching %s: %s", url, exc)
            return None
    return None
