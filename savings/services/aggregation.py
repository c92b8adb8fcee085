"""Portfolio aggregation - pure computations over the ledger and a live quote.

Nothing in here touches the database or the network. Callers load the
ledger and asset catalog (see ``DataService``), fetch a ``Quote`` (see
``QuoteGateway``) and pass plain values in; every result is a fresh value
owned by the caller.

All derived values carry both USD and THB figures computed from the quote's
rate at call time. Nothing is cached, so switching the display currency is
always a read-time multiplication.
"""

from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence


@dataclass(frozen=True)
class LedgerEntry:
    transaction_date: date
    amount: float
    asset_name: str
    usd_value_at_tx: float
    usd_cumulative: float


@dataclass(frozen=True)
class AssetInfo:
    asset_name: str
    display_name: str
    cagr_percent: float = 0.0


@dataclass(frozen=True)
class Quote:
    """Unpersisted market reading. ``prices`` are USD per native unit."""

    usdthb_rate: float
    prices: Dict[str, float] = field(default_factory=dict)
    degraded: bool = False

    def price_of(self, asset_name: str) -> float:
        # Missing quotes value the position at zero instead of failing
        return self.prices.get(asset_name, 0.0)


@dataclass(frozen=True)
class Holding:
    asset_name: str
    display_name: str
    total_amount: float
    current_value_usd: float
    current_value_thb: float
    cagr_percent: float


@dataclass(frozen=True)
class PortfolioSummary:
    total_value_usd: float
    total_value_thb: float
    total_cost_usd: float
    profit_usd: float
    profit_percent: float
    apy_percent: float


@dataclass(frozen=True)
class ChartPoint:
    date: date
    value_usd: float
    value_thb: float


@dataclass(frozen=True)
class Projection:
    asset_name: str
    display_name: str
    current_value_usd: float
    future_value_usd: float
    years: int


@dataclass(frozen=True)
class PortfolioSnapshot:
    quote: Quote
    holdings: List[Holding]
    summary: PortfolioSummary
    chart: List[ChartPoint]
    projections: List[Projection]


def _group_amounts(transactions: Iterable[LedgerEntry]) -> Dict[str, float]:
    totals: Dict[str, float] = defaultdict(float)
    for tx in transactions:
        totals[tx.asset_name] += tx.amount
    return dict(totals)


def _catalog(assets: Iterable[AssetInfo]) -> Dict[str, AssetInfo]:
    return {asset.asset_name: asset for asset in assets}


def compute_holdings(
    transactions: Sequence[LedgerEntry],
    assets: Sequence[AssetInfo],
    quote: Quote,
) -> List[Holding]:
    """Current position per asset symbol, largest USD value first.

    Symbols missing from the catalog still produce a holding, named by the
    raw symbol with a zero CAGR.
    """
    catalog = _catalog(assets)
    holdings: List[Holding] = []

    for asset_name, total_amount in _group_amounts(transactions).items():
        asset = catalog.get(asset_name)
        value_usd = total_amount * quote.price_of(asset_name)
        holdings.append(
            Holding(
                asset_name=asset_name,
                display_name=asset.display_name if asset else asset_name,
                total_amount=total_amount,
                current_value_usd=value_usd,
                current_value_thb=value_usd * quote.usdthb_rate,
                cagr_percent=asset.cagr_percent if asset else 0.0,
            )
        )

    holdings.sort(key=lambda h: h.current_value_usd, reverse=True)
    return holdings


def total_cost(transactions: Sequence[LedgerEntry]) -> float:
    """Capital contributed to date.

    Taken as the largest running total reported by the source sheet rather
    than re-summed from ``usd_value_at_tx``.
    """
    return max((tx.usd_cumulative for tx in transactions), default=0.0)


def compute_apy(
    transactions: Sequence[LedgerEntry],
    total_value_usd: float,
    total_cost_usd: float,
    today: Optional[date] = None,
) -> float:
    """Annualised return since the first transaction, as a percentage.

    Treats all capital as if it was contributed on the first day (a single
    cohort), so later contributions drag the figure down. Returns 0 whenever
    the result would be undefined.
    """
    if not transactions or total_cost_usd <= 0:
        return 0.0

    first_date = min(tx.transaction_date for tx in transactions)
    days = ((today or date.today()) - first_date).days
    if days <= 0:
        return 0.0

    years = days / 365.0
    total_return = total_value_usd / total_cost_usd
    try:
        apy = (total_return ** (1.0 / years) - 1) * 100
    except (OverflowError, ZeroDivisionError):
        return 0.0

    # A negative base to a fractional power yields a complex number
    if isinstance(apy, complex) or not math.isfinite(apy):
        return 0.0
    return apy


def compute_portfolio_summary(
    transactions: Sequence[LedgerEntry],
    holdings: Sequence[Holding],
    quote: Quote,
    today: Optional[date] = None,
) -> PortfolioSummary:
    total_value_usd = sum(h.current_value_usd for h in holdings)
    total_cost_usd = total_cost(transactions)
    profit_usd = total_value_usd - total_cost_usd
    profit_percent = profit_usd / total_cost_usd * 100 if total_cost_usd > 0 else 0.0

    return PortfolioSummary(
        total_value_usd=total_value_usd,
        total_value_thb=total_value_usd * quote.usdthb_rate,
        total_cost_usd=total_cost_usd,
        profit_usd=profit_usd,
        profit_percent=profit_percent,
        apy_percent=compute_apy(transactions, total_value_usd, total_cost_usd, today),
    )


def compute_chart_series(transactions: Sequence[LedgerEntry], usdthb_rate: float) -> List[ChartPoint]:
    """One point per transaction in date order; same-day entries are kept apart."""
    ordered = sorted(transactions, key=lambda tx: tx.transaction_date)
    return [
        ChartPoint(
            date=tx.transaction_date,
            value_usd=tx.usd_cumulative,
            value_thb=tx.usd_cumulative * usdthb_rate,
        )
        for tx in ordered
    ]


def compute_projections(
    transactions: Sequence[LedgerEntry],
    assets: Sequence[AssetInfo],
    quote: Quote,
    years: int,
) -> List[Projection]:
    """Compound each holding forward by its asset's CAGR.

    ``years`` is not range-checked here; the API layer enforces its bounds.
    """
    catalog = _catalog(assets)
    projections: List[Projection] = []

    for asset_name, total_amount in _group_amounts(transactions).items():
        asset = catalog.get(asset_name)
        current_value_usd = total_amount * quote.price_of(asset_name)
        cagr = (asset.cagr_percent if asset else 0.0) / 100.0
        projections.append(
            Projection(
                asset_name=asset_name,
                display_name=asset.display_name if asset else asset_name,
                current_value_usd=current_value_usd,
                future_value_usd=current_value_usd * (1 + cagr) ** years,
                years=years,
            )
        )

    projections.sort(key=lambda p: p.current_value_usd, reverse=True)
    return projections


def build_portfolio(
    transactions: Sequence[LedgerEntry],
    assets: Sequence[AssetInfo],
    quote: Quote,
    years: int,
    today: Optional[date] = None,
) -> PortfolioSnapshot:
    holdings = compute_holdings(transactions, assets, quote)
    return PortfolioSnapshot(
        quote=quote,
        holdings=holdings,
        summary=compute_portfolio_summary(transactions, holdings, quote, today),
        chart=compute_chart_series(transactions, quote.usdthb_rate),
        projections=compute_projections(transactions, assets, quote, years),
    )
