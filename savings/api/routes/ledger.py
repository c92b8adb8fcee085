"""Ledger routes - asset catalog, transactions and the current exchange rate."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from savings.api.deps import get_db, get_quote_gateway, read_rate_limit
from savings.core.logging import get_logger
from savings.schemas.api import AssetOut, ExchangeRateOut, TransactionOut
from savings.services.data_service import DataService
from savings.services.quote_service import QuoteGateway

router = APIRouter(prefix="/api", tags=["ledger"], dependencies=[Depends(read_rate_limit)])
log = get_logger("ledger_routes")


@router.get("/assets", response_model=list[AssetOut])
def get_assets(db: Session = Depends(get_db)):
    """All assets with their CAGR values, ordered by symbol."""
    try:
        assets = DataService(db).get_assets()
    except SQLAlchemyError as exc:
        log.error(f"Error fetching assets: {exc}")
        return JSONResponse(status_code=500, content={"error": "Failed to fetch assets"})

    return [AssetOut.model_validate(asset) for asset in assets]


@router.get("/payments", response_model=list[TransactionOut])
def get_payments(db: Session = Depends(get_db)):
    """All transactions, newest first, with their asset's symbol and display name."""
    try:
        transactions = DataService(db).get_transactions()
    except SQLAlchemyError as exc:
        log.error(f"Error fetching payments: {exc}")
        return JSONResponse(status_code=500, content={"error": "Failed to fetch payments"})

    return [
        TransactionOut(
            id=tx.id,
            transaction_date=tx.transaction_date,
            amount=tx.amount,
            asset_name=tx.asset.asset_name,
            asset_display_name=tx.asset.display_name,
            thb_price=tx.thb_price,
            usd_value_at_tx=tx.usd_value_at_tx,
            usd_cumulative=tx.usd_cumulative,
            reason=tx.reason,
            status=tx.status,
            usdthb_rate=tx.usdthb_rate,
            synced_at=tx.synced_at,
            updated_at=tx.updated_at,
        )
        for tx in transactions
    ]


@router.get("/current-exchange-rate", response_model=ExchangeRateOut, response_model_exclude_none=True)
async def get_current_exchange_rate(quote_gateway: QuoteGateway = Depends(get_quote_gateway)):
    """
    Current USD/THB rate.

    Never fails: when the provider is down the fallback rate is returned with
    a ``note`` explaining why.
    """
    rate = await quote_gateway.get_current_rate()
    return ExchangeRateOut(rate=rate.rate, timestamp=rate.timestamp, note=rate.note)
