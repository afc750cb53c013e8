"""Partner feed ingestion: RSS/Atom feeds into signals and insights."""

from app.ingestion.ingest import run_backfill, run_partner_ingest

__all__ = ["run_backfill", "run_partner_ingest"]
