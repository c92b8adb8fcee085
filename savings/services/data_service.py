"""Data Service - read-only queries over the ledger and asset catalog."""

from __future__ import annotations

from typing import List

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from savings.core.logging import get_logger
from savings.models.asset import Asset
from savings.models.transaction import SavingsTransaction
from savings.services.aggregation import AssetInfo, LedgerEntry

log = get_logger("data_service")


class DataService:
    """Handles all data query operations - reads from DB only, no writes."""

    def __init__(self, db: Session):
        self.db = db

    # -------------------------------------------------------------------------
    # Assets
    # -------------------------------------------------------------------------
    def get_assets(self) -> List[Asset]:
        stmt = select(Asset).order_by(Asset.asset_name)
        return list(self.db.execute(stmt).scalars().all())

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------
    def get_transactions(self, newest_first: bool = True) -> List[SavingsTransaction]:
        """All ledger entries with their asset eagerly loaded."""
        order = SavingsTransaction.transaction_date.desc() if newest_first else SavingsTransaction.transaction_date.asc()
        stmt = select(SavingsTransaction).order_by(order, SavingsTransaction.id)
        return list(self.db.execute(stmt).unique().scalars().all())

    def get_transaction_count(self) -> int:
        stmt = select(func.count()).select_from(SavingsTransaction)
        return self.db.execute(stmt).scalar() or 0

    # -------------------------------------------------------------------------
    # Aggregation inputs
    # -------------------------------------------------------------------------
    def get_ledger(self) -> List[LedgerEntry]:
        entries = [
            LedgerEntry(
                transaction_date=tx.transaction_date,
                amount=float(tx.amount),
                asset_name=tx.asset.asset_name,
                usd_value_at_tx=float(tx.usd_value_at_tx),
                usd_cumulative=float(tx.usd_cumulative),
            )
            for tx in self.get_transactions(newest_first=False)
        ]
        log.debug(f"Loaded ledger | transactions={len(entries)}")
        return entries

    def get_asset_catalog(self) -> List[AssetInfo]:
        return [
            AssetInfo(
                asset_name=asset.asset_name,
                display_name=asset.display_name,
                cagr_percent=float(asset.cagr_percent or 0.0),
            )
            for asset in self.get_assets()
        ]
