"""Sync entrypoint - push a sheet export into the ledger without the HTTP API.

Usage:
    python -m savings.sync_entrypoint payments.csv      # CSV export of the sheet
    python -m savings.sync_entrypoint payments.json     # saved sync payload

Uses SYNC_PASSWORD from the environment, so the same credential check and
upsert rules apply as for POST /api/sync-payments. Exit codes: 0 full
success, 1 failure, 2 partial success (some rows skipped).
"""

import sys

from savings.core.config import settings
from savings.core.db import SessionLocal
from savings.core.errors import SavingsError
from savings.core.logging import get_logger
from savings.ingestion import source_for
from savings.services.sync_service import SyncReport, SyncService

logger = get_logger("sync_entrypoint")


def run_sync_job(file_path: str) -> SyncReport:
    """Read a file and sync its rows in a single batch."""
    source = source_for(file_path)
    records = source.fetch()
    logger.info(f"Starting sync from {source.name} file {file_path} ({len(records)} rows)")

    with SessionLocal() as db:
        return SyncService(db, settings.SYNC_PASSWORD).sync(settings.SYNC_PASSWORD, records)


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 1:
        logger.error("Usage: python -m savings.sync_entrypoint <file.csv|file.json>")
        return 1

    try:
        report = run_sync_job(argv[0])
    except SavingsError as exc:
        logger.error(f"Sync failed: {exc.message}")
        return 1

    logger.info(report.message)
    for error in report.errors:
        logger.warning(error)
    return 2 if report.is_partial else 0


if __name__ == "__main__":
    sys.exit(main())
