"""Portfolio routes - holdings, summary, chart series and projections."""

import time
import uuid

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from savings.api.deps import get_db, get_quote_gateway, read_rate_limit
from savings.core.config import settings
from savings.core.logging import get_logger
from savings.schemas.api import (
    ChartPointOut,
    HoldingOut,
    PortfolioResponse,
    PortfolioSummaryOut,
    ProjectionOut,
    QuoteOut,
)
from savings.services.portfolio_service import PortfolioService
from savings.services.quote_service import QuoteGateway

router = APIRouter(prefix="/api/portfolio", tags=["portfolio"], dependencies=[Depends(read_rate_limit)])
log = get_logger("portfolio_routes")

YearsQuery = Query(
    settings.DEFAULT_PROJECTION_YEARS,
    ge=settings.MIN_PROJECTION_YEARS,
    le=settings.MAX_PROJECTION_YEARS,
    description="Projection horizon in years",
)


async def _snapshot(db: Session, quote_gateway: QuoteGateway, years: int):
    return await PortfolioService(db, quote_gateway).snapshot(years)


def _ledger_unavailable(exc: Exception) -> JSONResponse:
    log.error(f"Error computing portfolio: {exc}")
    return JSONResponse(status_code=500, content={"error": "Failed to fetch portfolio"})


@router.get("", response_model=PortfolioResponse)
async def get_portfolio(
    years: int = YearsQuery,
    db: Session = Depends(get_db),
    quote_gateway: QuoteGateway = Depends(get_quote_gateway),
):
    """
    Every portfolio view in one call.

    Values are computed on request from the ledger and live quotes. When a
    quote provider is down the response is still 200 with ``quote.degraded``
    set and fallback values applied.
    """
    start = time.perf_counter()
    request_id = str(uuid.uuid4())

    try:
        snapshot = await _snapshot(db, quote_gateway, years)
    except SQLAlchemyError as exc:
        return _ledger_unavailable(exc)

    latency_ms = int((time.perf_counter() - start) * 1000)

    return PortfolioResponse(
        request_id=request_id,
        api_latency_ms=latency_ms,
        quote=QuoteOut.model_validate(snapshot.quote),
        holdings=[HoldingOut.model_validate(h) for h in snapshot.holdings],
        summary=PortfolioSummaryOut.model_validate(snapshot.summary),
        chart=[ChartPointOut.model_validate(p) for p in snapshot.chart],
        projections=[ProjectionOut.model_validate(p) for p in snapshot.projections],
    )


@router.get("/holdings", response_model=list[HoldingOut])
async def get_holdings(
    db: Session = Depends(get_db),
    quote_gateway: QuoteGateway = Depends(get_quote_gateway),
):
    """Current position per asset, largest first."""
    try:
        snapshot = await _snapshot(db, quote_gateway, settings.DEFAULT_PROJECTION_YEARS)
    except SQLAlchemyError as exc:
        return _ledger_unavailable(exc)
    return [HoldingOut.model_validate(h) for h in snapshot.holdings]


@router.get("/summary", response_model=PortfolioSummaryOut)
async def get_summary(
    db: Session = Depends(get_db),
    quote_gateway: QuoteGateway = Depends(get_quote_gateway),
):
    """Total value, cost, profit and annualised return."""
    try:
        snapshot = await _snapshot(db, quote_gateway, settings.DEFAULT_PROJECTION_YEARS)
    except SQLAlchemyError as exc:
        return _ledger_unavailable(exc)
    return PortfolioSummaryOut.model_validate(snapshot.summary)


@router.get("/chart", response_model=list[ChartPointOut])
async def get_chart(
    db: Session = Depends(get_db),
    quote_gateway: QuoteGateway = Depends(get_quote_gateway),
):
    """Cumulative contributions over time, one point per transaction."""
    try:
        snapshot = await _snapshot(db, quote_gateway, settings.DEFAULT_PROJECTION_YEARS)
    except SQLAlchemyError as exc:
        return _ledger_unavailable(exc)
    return [ChartPointOut.model_validate(p) for p in snapshot.chart]


@router.get("/projections", response_model=list[ProjectionOut])
async def get_projections(
    years: int = YearsQuery,
    db: Session = Depends(get_db),
    quote_gateway: QuoteGateway = Depends(get_quote_gateway),
):
    """Each holding compounded forward by its asset's CAGR for ``years`` years."""
    try:
        snapshot = await _snapshot(db, quote_gateway, years)
    except SQLAlchemyError as exc:
        return _ledger_unavailable(exc)
    return [ProjectionOut.model_validate(p) for p in snapshot.projections]
