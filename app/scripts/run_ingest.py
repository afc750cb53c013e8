"""Run partner feed ingestion once (cron entry point).

Usage:
    python -m app.scripts.run_ingest [--max-partners N]
    python -m app.scripts.run_ingest --backfill-user 3 --days 14

Exits 0 when every partner succeeded, 1 if any partner errored.
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from app.db.session import SessionLocal
from app.ingestion.ingest import run_backfill, run_partner_ingest


async def _run(args: argparse.Namespace) -> list[dict]:
    db = SessionLocal()
    try:
        if args.backfill_user is not None:
            return await run_backfill(db, user_id=args.backfill_user, days=args.days)
        return await run_partner_ingest(db, max_partners=args.max_partners)
    finally:
        db.close()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Ingest partner feeds into signals and insights")
    parser.add_argument("--max-partners", type=int, default=None, help="Partners per run")
    parser.add_argument("--backfill-user", type=int, default=None, help="Backfill one user's partners")
    parser.add_argument("--days", type=int, default=7, help="Backfill window in days")
    args = parser.parse_args(argv)

    try:
        results = asyncio.run(_run(args))
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    for r in results:
        line = (
            f"partner_id={r['partner_id']} status={r['status']} "
            f"new_signals={r['new_signals']} new_insights={r['new_insights']}"
        )
        if r.get("error"):
            line += f" error={r['error']}"
        print(line)
    return 1 if any(r["status"] == "error" for r in results) else 0


if __name__ == "__main__":
    sys.exit(main())
