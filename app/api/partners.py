"""Partner API routes."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_auth
from app.api.insights import to_insight_with_signal
from app.ingestion.feeds import detect_rss_url
from app.models.user import User
from app.schemas.insight import InsightWithSignal
from app.schemas.partner import (
    DeeperPlayResponse,
    PartnerCreate,
    PartnerImportResponse,
    PartnerRead,
    PartnerUpdate,
)
from app.schemas.signal import SignalRead
from app.services.deeper_play import generate_deeper_play
from app.services.insight_queries import list_partner_insights
from app.services.partner_import import PartnerImportError, decode_upload, import_partners
from app.services.partners import (
    PartnerNotFoundError,
    create_partner,
    delete_partner,
    get_partner,
    list_partner_signals,
    list_partners,
    update_partner,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Partner not found")


@router.get("", response_model=list[PartnerRead])
def get_partners(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_auth),
) -> list[PartnerRead]:
    return [PartnerRead.model_validate(p) for p in list_partners(db, current_user.id)]


@router.post("", response_model=PartnerRead, status_code=status.HTTP_201_CREATED)
async def post_partner(
    body: PartnerCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_auth),
) -> PartnerRead:
    """Register a partner. Without an rss_url, a feed is looked up from the domain."""
    rss_url = body.rss_url
    if not rss_url and body.domain:
        rss_url = await detect_rss_url(body.domain)
        logger.info("Feed detection for %s: %s", body.domain, rss_url or "none")
    partner = create_partner(db, current_user.id, body, rss_url=rss_url)
    return PartnerRead.model_validate(partner)


@router.post("/import", response_model=PartnerImportResponse)
async def import_partners_csv(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_auth),
) -> PartnerImportResponse:
    """Bulk import partners from a CSV upload in a multipart field named ``file``.

    Columns: name (required), domain, rss_url, notes. Rows without an rss_url
    get a feed detected from their domain. Failed rows are reported per row.
    """
    content_type = request.headers.get("content-type", "")
    if "multipart/form-data" not in content_type:
        raise HTTPException(status_code=415, detail="Upload the CSV as multipart/form-data.")

    form = await request.form()
    file = form.get("file")
    if file is None or isinstance(file, str):
        raise HTTPException(status_code=422, detail="No file field in upload.")
    try:
        raw = await file.read()
    finally:
        await file.close()

    try:
        return await import_partners(
            db, current_user.id, decode_upload(raw), detect_feed=detect_rss_url
        )
    except PartnerImportError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from None


@router.get("/{partner_id}", response_model=PartnerRead)
def get_partner_detail(
    partner_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_auth),
) -> PartnerRead:
    try:
        return PartnerRead.model_validate(get_partner(db, partner_id, current_user.id))
    except PartnerNotFoundError:
        raise _not_found() from None


@router.patch("/{partner_id}", response_model=PartnerRead)
def patch_partner(
    partner_id: int,
    body: PartnerUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_auth),
) -> PartnerRead:
    try:
        return PartnerRead.model_validate(update_partner(db, partner_id, current_user.id, body))
    except PartnerNotFoundError:
        raise _not_found() from None


@router.delete("/{partner_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_partner(
    partner_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_auth),
) -> None:
    try:
        delete_partner(db, partner_id, current_user.id)
    except PartnerNotFoundError:
        raise _not_found() from None


@router.get("/{partner_id}/signals", response_model=list[SignalRead])
def get_partner_signals(
    partner_id: int,
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_auth),
) -> list[SignalRead]:
    try:
        signals = list_partner_signals(db, partner_id, current_user.id, limit=limit)
    except PartnerNotFoundError:
        raise _not_found() from None
    return [SignalRead.model_validate(s) for s in signals]


@router.get("/{partner_id}/insights", response_model=list[InsightWithSignal])
def get_partner_insights(
    partner_id: int,
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_auth),
) -> list[InsightWithSignal]:
    try:
        get_partner(db, partner_id, current_user.id)
    except PartnerNotFoundError:
        raise _not_found() from None
    insights = list_partner_insights(db, partner_id, current_user.id, limit=limit)
    return [to_insight_with_signal(i) for i in insights]


@router.post("/{partner_id}/deeper-play", response_model=DeeperPlayResponse)
def post_deeper_play(
    partner_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_auth),
) -> DeeperPlayResponse:
    """Draft a follow-up proposing a deeper partnership, from recent insights."""
    try:
        play = generate_deeper_play(db, partner_id, current_user.id)
    except PartnerNotFoundError:
        raise _not_found() from None
    return DeeperPlayResponse(
        outreach_draft=play.outreach_draft, suggested_play=play.suggested_play
    )
