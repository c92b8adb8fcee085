"""Sync service - batch upsert of spreadsheet rows into the ledger.

A sync call is all-or-nothing at the storage level but tolerant at the row
level:

- a bad credential or a malformed batch fails the call before any row is read
- a row that fails validation is reported in ``SyncReport.errors`` and skipped
- any database error rolls back every row written by the call
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from sqlalchemy import func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from savings.core.errors import BadRequestError, StorageError, UnauthorizedError
from savings.core.logging import get_logger
from savings.models.transaction import NATURAL_KEY, SavingsTransaction
from savings.schemas.api import SyncRecord
from savings.services.data_service import DataService

log = get_logger("sync_service")

DEFAULT_STATUS = "not paid"

# Columns refreshed when a row with the same natural key is synced again
MUTABLE_COLUMNS = ("thb_price", "usd_cumulative", "reason", "status", "usdthb_rate")

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


@dataclass
class SyncReport:
    inserted: int = 0
    updated: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def synced(self) -> int:
        return self.inserted + self.updated

    @property
    def is_partial(self) -> bool:
        return bool(self.errors)

    @property
    def message(self) -> str:
        if self.errors:
            return f"Synced {self.synced} payments with {len(self.errors)} errors"
        return f"Synced {self.synced} payments successfully"


class SyncService:
    """Validates and upserts one batch of raw transaction records."""

    def __init__(self, db: Session, sync_password: Optional[str]):
        self.db = db
        self.sync_password = sync_password

    def sync(self, credential: Any, records: Any) -> SyncReport:
        self._authorize(credential)

        if not isinstance(records, list) or not records:
            raise BadRequestError("Invalid payments data", details="records must be a non-empty list")

        started = datetime.now(timezone.utc)
        log.info(f"Sync started | rows={len(records)}")

        report = SyncReport()
        try:
            asset_ids = {asset.asset_name: asset.id for asset in DataService(self.db).get_assets()}

            for index, raw in enumerate(records, start=1):
                row = self._validate_row(index, raw, asset_ids, report)
                if row is None:
                    continue

                if self._upsert_row(row):
                    report.inserted += 1
                else:
                    report.updated += 1

            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            log.error(f"Sync rolled back after storage failure: {exc}")
            raise StorageError("Failed to sync payments", details=str(exc)) from exc

        elapsed = (datetime.now(timezone.utc) - started).total_seconds()
        log.info(
            f"Sync finished | inserted={report.inserted} updated={report.updated} "
            f"errors={len(report.errors)} elapsed={elapsed:.2f}s"
        )
        return report

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------
    def _authorize(self, credential: Any) -> None:
        if not self.sync_password or not isinstance(credential, str) or not credential:
            log.warning("Sync rejected: missing or non-string credential, or sync password not configured")
            raise UnauthorizedError("Invalid password")
        if not secrets.compare_digest(credential.encode(), self.sync_password.encode()):
            log.warning("Sync rejected: invalid credential")
            raise UnauthorizedError("Invalid password")

    def _validate_row(
        self,
        index: int,
        raw: Any,
        asset_ids: Dict[str, int],
        report: SyncReport,
    ) -> Optional[Dict[str, Any]]:
        """Return upsert values for a row, or record why it was skipped."""
        if not isinstance(raw, dict):
            return self._skip(report, f"Row {index}: Missing required fields")

        try:
            record = SyncRecord.model_validate(raw)
        except ValidationError as exc:
            if any(err["type"] == "missing" for err in exc.errors()):
                return self._skip(report, f"Row {index}: Missing required fields")
            fields = sorted({str(err["loc"][0]) for err in exc.errors() if err["loc"]})
            return self._skip(report, f"Row {index}: Invalid value for {', '.join(fields)}")

        if not record.is_complete:
            return self._skip(report, f"Row {index}: Missing required fields")

        asset_id = asset_ids.get(record.asset_symbol)
        if asset_id is None:
            return self._skip(report, f"Row {index}: Asset '{raw.get('asset') or raw.get('asset_symbol')}' not found in database")

        return {
            "transaction_date": record.transaction_date,
            "amount": record.amount,
            "asset_id": asset_id,
            "thb_price": record.thb_price or None,
            "usd_value_at_tx": record.usd_value,
            "usd_cumulative": record.usd_cumulative,
            "reason": record.reason,
            "status": record.status or DEFAULT_STATUS,
            "usdthb_rate": record.usdthb_rate,
        }

    @staticmethod
    def _skip(report: SyncReport, message: str) -> None:
        log.warning(f"Skipping sync row - {message}")
        report.errors.append(message)
        return None

    # -------------------------------------------------------------------------
    # Upsert
    # -------------------------------------------------------------------------
    def _upsert_row(self, values: Dict[str, Any]) -> bool:
        """Upsert on the natural key. Returns True for an insert, False for an update.

        ``updated_at`` is only ever set by the conflict branch, so a NULL
        coming back means the row is new.
        """
        insert = self._dialect_insert()
        stmt = insert(SavingsTransaction).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=list(NATURAL_KEY),
            set_={
                **{column: getattr(stmt.excluded, column) for column in MUTABLE_COLUMNS},
                "updated_at": func.now(),
            },
        ).returning(SavingsTransaction.updated_at)

        updated_at = self.db.execute(stmt).scalar_one()
        return updated_at is None

    def _dialect_insert(self):
        dialect = self.db.get_bind().dialect.name
        try:
            return _DIALECT_INSERTS[dialect]
        except KeyError:
            raise StorageError(f"Upsert is not supported on the '{dialect}' backend") from None
