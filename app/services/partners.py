"""Partner CRUD scoped to the owning user."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from app.models.partner import Partner
from app.models.signal import Signal
from app.schemas.partner import PartnerCreate, PartnerUpdate

logger = logging.getLogger(__name__)


class PartnerNotFoundError(LookupError):
    """Partner does not exist or belongs to another user."""


def list_partners(db: Session, user_id: int) -> list[Partner]:
    return (
        db.query(Partner)
        .filter(Partner.user_id == user_id)
        .order_by(Partner.created_at, Partner.id)
        .all()
    )


def get_partner(db: Session, partner_id: int, user_id: int) -> Partner:
    partner = (
        db.query(Partner)
        .filter(Partner.id == partner_id, Partner.user_id == user_id)
        .first()
    )
    if partner is None:
        raise PartnerNotFoundError(f"Partner {partner_id} not found")
    return partner


def create_partner(
    db: Session, user_id: int, data: PartnerCreate, rss_url: str | None = None
) -> Partner:
    """Create a partner. *rss_url* overrides ``data.rss_url`` (e.g. a detected feed)."""
    partner = Partner(
        user_id=user_id,
        name=data.name.strip(),
        domain=data.domain or None,
        rss_url=rss_url or data.rss_url or None,
        notes=data.notes or None,
    )
    db.add(partner)
    db.commit()
    db.refresh(partner)
    logger.info("Partner created: id=%s user_id=%s rss=%s", partner.id, user_id, bool(partner.rss_url))
    return partner


def update_partner(db: Session, partner_id: int, user_id: int, data: PartnerUpdate) -> Partner:
    partner = get_partner(db, partner_id, user_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        if field == "name" and not value:
            continue
        setattr(partner, field, value)
    db.commit()
    db.refresh(partner)
    return partner


def delete_partner(db: Session, partner_id: int, user_id: int) -> None:
    """Delete a partner and, by cascade, its signals and their insights."""
    partner = get_partner(db, partner_id, user_id)
    db.delete(partner)
    db.commit()


def list_partner_signals(db: Session, partner_id: int, user_id: int, limit: int = 50) -> list[Signal]:
    get_partner(db, partner_id, user_id)
    return (
        db.query(Signal)
        .filter(Signal.partner_id == partner_id)
        .order_by(Signal.published_at.desc().nulls_last(), Signal.created_at.desc())
        .limit(limit)
        .all()
    )
