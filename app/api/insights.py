"""Insight API routes: ranking, feedback and outreach approval."""

from __future__ import annotations

import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_auth
from app.models.enums import FEEDBACK_TYPES
from app.models.insight import Insight
from app.models.user import User
from app.schemas.insight import (
    BatchApproveRequest,
    BatchApproveResponse,
    FeedbackRequest,
    InsightRead,
    InsightWithSignal,
    StatusUpdateRequest,
)
from app.schemas.signal import SignalRead
from app.services.feedback import InsightNotFoundError, record_feedback
from app.services.insight_queries import TOP_INSIGHTS_LIMIT, list_top_insights
from app.services.insight_status import (
    InvalidStatusTransitionError,
    batch_update_status,
    update_insight_status,
)

logger = logging.getLogger(__name__)

router = APIRouter()

FEEDBACK_REDIRECT_PATH = "/dashboard"
LOGIN_PATH = "/login"


def to_insight_with_signal(insight: Insight) -> InsightWithSignal:
    return InsightWithSignal(
        **InsightRead.model_validate(insight).model_dump(),
        signal=SignalRead.model_validate(insight.signal),
        partner_name=insight.signal.partner.name,
    )


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Insight not found")


@router.get("", response_model=list[InsightWithSignal])
def get_insights(
    limit: int = Query(TOP_INSIGHTS_LIMIT, ge=1, le=TOP_INSIGHTS_LIMIT),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_auth),
) -> list[InsightWithSignal]:
    """Top insights by score."""
    return [to_insight_with_signal(i) for i in list_top_insights(db, current_user.id, limit)]


@router.post("/batch-approve", response_model=BatchApproveResponse)
def batch_approve(
    body: BatchApproveRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_auth),
) -> BatchApproveResponse:
    """Advance the caller's insights among ``insight_ids``; foreign ids are ignored."""
    try:
        insights = batch_update_status(db, body.insight_ids, current_user.id, body.status)
    except InsightNotFoundError:
        raise HTTPException(status_code=404, detail="No valid insights found") from None
    except InvalidStatusTransitionError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from None
    return BatchApproveResponse(
        updated=len(insights),
        insights=[InsightRead.model_validate(i) for i in insights],
    )


@router.post("/{insight_id}/feedback", response_model=InsightRead)
def post_feedback(
    insight_id: int,
    body: FeedbackRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_auth),
) -> InsightRead:
    try:
        insight = record_feedback(db, insight_id, body.type, current_user.id)
    except InsightNotFoundError:
        raise _not_found() from None
    return InsightRead.model_validate(insight)


@router.get("/{insight_id}/feedback", include_in_schema=False)
def feedback_link(
    insight_id: int,
    request: Request,
    type: str | None = Query(None),
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_current_user),
) -> RedirectResponse:
    """One-click feedback from digest emails; always answers with a redirect."""
    if type not in FEEDBACK_TYPES:
        return RedirectResponse(
            f"{FEEDBACK_REDIRECT_PATH}?error=invalid_feedback", status_code=303
        )
    if current_user is None:
        query = urlencode({"next": str(request.url)})
        return RedirectResponse(f"{LOGIN_PATH}?{query}", status_code=303)

    try:
        record_feedback(db, insight_id, type, current_user.id)
    except InsightNotFoundError:
        return RedirectResponse(
            f"{FEEDBACK_REDIRECT_PATH}?error=feedback_failed", status_code=303
        )
    query = urlencode({"feedback": "success", "type": type})
    return RedirectResponse(f"{FEEDBACK_REDIRECT_PATH}?{query}", status_code=303)


@router.post("/{insight_id}/approve", response_model=InsightRead)
def approve_insight(
    insight_id: int,
    body: StatusUpdateRequest | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_auth),
) -> InsightRead:
    """Advance one insight's outreach status (default: approved)."""
    target = body.status if body is not None else StatusUpdateRequest().status
    try:
        insight = update_insight_status(db, insight_id, current_user.id, target)
    except InsightNotFoundError:
        raise _not_found() from None
    except InvalidStatusTransitionError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from None
    return InsightRead.model_validate(insight)
