"""Feed ingestion jobs: partner feed -> signals -> insights.

Partners are processed one at a time; one partner failing does not stop the
run. Each returns a result dict:

    {partner_id, status: success|no_feed|error, new_signals, new_insights, error}
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from datetime import UTC, datetime, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.ingestion.feeds import FeedItem, ParsedFeed, fetch_feed
from app.models.objective import Objective
from app.models.partner import Partner
from app.models.signal import Signal
from app.services.dedupe import compute_dedupe_key
from app.services.insight_pipeline import SignalRaw, prepare_signal
from app.services.insights import generate_insight
from app.services.preference_store import SqlWeightStore
from app.services.scoring import PreferenceWeights
from app.services.signal_storage import insight_exists, signal_exists, store_insight, store_signal

logger = logging.getLogger(__name__)

FeedFetcher = Callable[[str], Awaitable[ParsedFeed | None]]


def _user_objectives(db: Session, user_id: int) -> list[Objective]:
    return list(
        db.scalars(
            select(Objective)
            .where(Objective.user_id == user_id)
            .order_by(Objective.priority, Objective.id)
        )
    )


def process_feed_item(
    db: Session,
    partner: Partner,
    item: FeedItem,
    objectives: Sequence[Objective] | None = None,
    weights: PreferenceWeights | None = None,
) -> tuple[Signal | None, int]:
    """Turn one feed item into a stored signal and its insights.

    Returns ``(signal, insights_created)``; signal is None when the item was
    already known (including losing a concurrent insert).
    """
    dedupe_hash = compute_dedupe_key(item.link, item.title)
    if signal_exists(db, dedupe_hash):
        return None, 0

    view = prepare_signal(
        SignalRaw(
            title=item.title,
            url=item.link,
            content=item.content,
            published_at=item.published_at,
            facets=item.facets,
        )
    )
    signal = store_signal(
        db,
        partner_id=partner.id,
        signal_type=view.type,
        title=view.title,
        source_url=view.source_url,
        summary=view.summary,
        published_at=view.published_at,
        facets=view.facets,
        dedupe_hash=dedupe_hash,
    )
    if signal is None:
        return None, 0

    if objectives is None:
        objectives = _user_objectives(db, partner.user_id)
    if weights is None:
        weights = SqlWeightStore(db).get_weights(partner.user_id)

    created = 0
    for objective in objectives:
        if insight_exists(db, signal.id, objective.id):
            continue
        result = generate_insight(signal, [objective], weights)
        if result is None:
            continue
        if store_insight(db, signal.id, objective.id, result) is not None:
            created += 1

    logger.info(
        "Stored signal id=%s partner_id=%s type=%s insights=%d",
        signal.id,
        partner.id,
        signal.type,
        created,
    )
    return signal, created


async def _ingest_partner(
    db: Session,
    partner: Partner,
    fetcher: FeedFetcher,
    cutoff: datetime | None = None,
) -> dict:
    result: dict = {
        "partner_id": partner.id,
        "status": "success",
        "new_signals": 0,
        "new_insights": 0,
        "error": None,
    }
    try:
        feed = await fetcher(partner.rss_url)
        if feed is None:
            result["status"] = "no_feed"
            return result

        objectives = _user_objectives(db, partner.user_id)
        weights = SqlWeightStore(db).get_weights(partner.user_id)

        for item in feed.items:
            if cutoff is not None and item.published_at is not None and item.published_at < cutoff:
                continue
            signal, created = process_feed_item(db, partner, item, objectives, weights)
            if signal is not None:
                result["new_signals"] += 1
                result["new_insights"] += created
    except Exception as exc:
        db.rollback()
        logger.exception("Ingest failed for partner %s", partner.id)
        result["status"] = "error"
        result["error"] = str(exc)
    return result


async def run_partner_ingest(
    db: Session,
    max_partners: int | None = None,
    fetcher: FeedFetcher | None = None,
) -> list[dict]:
    """Ingest feeds for every partner with an RSS URL, capped per run."""
    if max_partners is None:
        from app.config import get_settings

        max_partners = get_settings().ingest_max_partners
    fetcher = fetcher or fetch_feed

    partners = list(
        db.scalars(
            select(Partner)
            .where(Partner.rss_url.is_not(None), Partner.rss_url != "")
            .order_by(Partner.id)
            .limit(max_partners)
        )
    )
    logger.info("Partner ingest: %d partners (max %d)", len(partners), max_partners)

    results = [await _ingest_partner(db, partner, fetcher) for partner in partners]
    logger.info(
        "Partner ingest complete: new_signals=%d errors=%d",
        sum(r["new_signals"] for r in results),
        sum(1 for r in results if r["status"] == "error"),
    )
    return results


async def run_backfill(
    db: Session,
    user_id: int,
    days: int = 7,
    fetcher: FeedFetcher | None = None,
) -> list[dict]:
    """Ingest one user's partner feeds, skipping items older than *days* days.

    Items without a publication date are kept.
    """
    fetcher = fetcher or fetch_feed
    cutoff = datetime.now(UTC) - timedelta(days=days)

    partners = list(
        db.scalars(
            select(Partner)
            .where(
                Partner.user_id == user_id,
                Partner.rss_url.is_not(None),
                Partner.rss_url != "",
            )
            .order_by(Partner.id)
        )
    )
    logger.info("Backfill: user_id=%s partners=%d days=%d", user_id, len(partners), days)
    return [await _ingest_partner(db, partner, fetcher, cutoff=cutoff) for partner in partners]
