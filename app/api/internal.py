"""Internal job endpoints for cron/scripts.

Secured with a static token (X-Internal-Token header), not cookie auth.
Meant for automated triggers only.
"""

from __future__ import annotations

import logging
import secrets

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from sqlalchemy.orm import Session

from app.config import get_settings
from app.db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/internal", include_in_schema=False)


def _require_internal_token(x_internal_token: str = Header(...)) -> None:
    """Validate the internal job token with a constant-time comparison; 403 on mismatch."""
    expected = get_settings().internal_job_token
    if not expected or not secrets.compare_digest(x_internal_token, expected):
        logger.warning("Internal endpoint auth failed: invalid or missing token")
        raise HTTPException(status_code=403, detail="Invalid internal token")


def _summarize_results(results: list[dict]) -> dict:
    return {
        "partners_processed": len(results),
        "new_signals": sum(r.get("new_signals", 0) for r in results),
        "new_insights": sum(r.get("new_insights", 0) for r in results),
        "errors": sum(1 for r in results if r.get("status") == "error"),
        "results": results,
    }


@router.post("/run_ingest")
async def run_ingest_endpoint(
    db: Session = Depends(get_db),
    _token: None = Depends(_require_internal_token),
    max_partners: int | None = Query(None, ge=1, le=500),
):
    """Ingest partner feeds into signals and insights."""
    from app.ingestion.ingest import run_partner_ingest

    try:
        results = await run_partner_ingest(db, max_partners=max_partners)
        return {"status": "completed", **_summarize_results(results)}
    except Exception as exc:
        logger.exception("Internal ingest failed")
        return {"status": "failed", "error": str(exc)}


@router.post("/run_backfill")
async def run_backfill_endpoint(
    user_id: int = Query(..., ge=1),
    days: int = Query(7, ge=1, le=90),
    db: Session = Depends(get_db),
    _token: None = Depends(_require_internal_token),
):
    """Backfill one user's partner feeds for the last *days* days."""
    from app.ingestion.ingest import run_backfill

    try:
        results = await run_backfill(db, user_id=user_id, days=days)
        return {"status": "completed", **_summarize_results(results)}
    except Exception as exc:
        logger.exception("Internal backfill failed")
        return {"status": "failed", "error": str(exc)}
