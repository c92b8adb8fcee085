"""Portfolio service - wires the ledger and live quotes into the aggregation."""

from __future__ import annotations

from typing import List, Tuple

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from savings.core.logging import get_logger
from savings.services.aggregation import AssetInfo, LedgerEntry, PortfolioSnapshot, Quote, build_portfolio
from savings.services.data_service import DataService
from savings.services.quote_service import QuoteGateway

log = get_logger("portfolio_service")


class PortfolioService:
    """Read-only: loads the ledger, fetches a quote, computes every view.

    Ledger read failures propagate (the caller shows a blocking error); quote
    failures have already been absorbed by the gateway.
    """

    def __init__(self, db: Session, quote_gateway: QuoteGateway):
        self.data = DataService(db)
        self.quote_gateway = quote_gateway

    def load_ledger(self) -> Tuple[List[LedgerEntry], List[AssetInfo]]:
        return self.data.get_ledger(), self.data.get_asset_catalog()

    async def current_quote(self, ledger: List[LedgerEntry], assets: List[AssetInfo]) -> Quote:
        symbols = {tx.asset_name for tx in ledger} | {asset.asset_name for asset in assets}
        quote = await self.quote_gateway.get_quote(symbols)
        if quote.degraded:
            log.warning(f"Portfolio valued with fallback exchange rate {quote.usdthb_rate}")
        return quote

    async def snapshot(self, years: int) -> PortfolioSnapshot:
        # Session queries are blocking; keep them off the event loop
        ledger, assets = await run_in_threadpool(self.load_ledger)
        quote = await self.current_quote(ledger, assets)
        snapshot = build_portfolio(ledger, assets, quote, years)
        log.debug(
            f"Portfolio computed | transactions={len(ledger)} holdings={len(snapshot.holdings)} "
            f"total_value_usd={snapshot.summary.total_value_usd:.2f}"
        )
        return snapshot
