"""Bulk partner import from CSV."""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Awaitable, Callable

from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.schemas.partner import PartnerCreate, PartnerImportResponse, PartnerImportRow
from app.services.partners import create_partner

logger = logging.getLogger(__name__)

IMPORT_COLUMNS = ("name", "domain", "rss_url", "notes")

FeedDetector = Callable[[str], Awaitable[str | None]]


class PartnerImportError(ValueError):
    """The upload as a whole cannot be imported (bad encoding, no name column)."""


def parse_partner_csv(content: str) -> list[tuple[int, dict[str, str]]]:
    """Read CSV text into ``(row_number, {column: value})`` pairs.

    Headers are matched case-insensitively; unknown columns are ignored and
    values are stripped. Row numbers count data rows from 1.

    Raises:
        PartnerImportError: If there is no ``name`` column.
    """
    reader = csv.reader(io.StringIO(content))
    header = next(reader, None)
    columns = [h.strip().lower() for h in header or []]
    if "name" not in columns:
        raise PartnerImportError('CSV must have a "name" column')

    rows: list[tuple[int, dict[str, str]]] = []
    for idx, values in enumerate((v for v in reader if any(cell.strip() for cell in v)), start=1):
        row = {
            column: values[pos].strip()
            for pos, column in enumerate(columns)
            if column in IMPORT_COLUMNS and pos < len(values)
        }
        rows.append((idx, row))
    return rows


def decode_upload(raw: bytes) -> str:
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise PartnerImportError("CSV must be UTF-8 encoded") from exc


async def import_partners(
    db: Session,
    user_id: int,
    content: str,
    detect_feed: FeedDetector | None = None,
) -> PartnerImportResponse:
    """Create a partner per CSV row, detecting a feed from the domain when no rss_url is given.

    A bad row is reported and skipped; it does not stop the import.

    Raises:
        PartnerImportError: If the CSV has no ``name`` column.
    """
    if detect_feed is None:
        from app.ingestion.feeds import detect_rss_url

        detect_feed = detect_rss_url

    parsed = parse_partner_csv(content)
    rows: list[PartnerImportRow] = []
    created = 0
    errors = 0

    for idx, row in parsed:
        name = row.get("name", "")
        if not name:
            rows.append(PartnerImportRow(row=idx, name="(empty)", status="error", detail="Missing name"))
            errors += 1
            continue

        try:
            data = PartnerCreate(
                name=name,
                domain=row.get("domain") or None,
                rss_url=row.get("rss_url") or None,
                notes=row.get("notes") or None,
            )
            rss_url = data.rss_url
            if not rss_url and data.domain:
                rss_url = await detect_feed(data.domain)
            partner = create_partner(db, user_id, data, rss_url=rss_url)
        except ValidationError as exc:
            rows.append(
                PartnerImportRow(
                    row=idx,
                    name=name,
                    status="error",
                    detail="; ".join(e["msg"] for e in exc.errors()),
                )
            )
            errors += 1
            continue
        except Exception as exc:
            db.rollback()
            logger.exception("Partner import row %d failed for user_id=%s", idx, user_id)
            rows.append(PartnerImportRow(row=idx, name=name, status="error", detail=str(exc)))
            errors += 1
            continue

        rows.append(
            PartnerImportRow(
                row=idx,
                name=name,
                status="created",
                partner_id=partner.id,
                rss_url=partner.rss_url,
            )
        )
        created += 1

    logger.info(
        "Partner import: user_id=%s rows=%d created=%d errors=%d",
        user_id,
        len(parsed),
        created,
        errors,
    )
    return PartnerImportResponse(total=len(parsed), created=created, errors=errors, rows=rows)
