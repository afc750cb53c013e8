"""Digest API route."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_auth
from app.models.user import User
from app.schemas.digest import DigestItemRead, DigestResponse
from app.services.digest import generate_digest

router = APIRouter()


@router.get("", response_model=DigestResponse)
def get_digest(
    limit: int | None = Query(None, ge=1, le=50),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_auth),
) -> DigestResponse:
    """The user's top insights, shaped for an email or Slack digest."""
    items = generate_digest(db, current_user.id, limit=limit)
    return DigestResponse(items=[DigestItemRead.model_validate(item) for item in items])
