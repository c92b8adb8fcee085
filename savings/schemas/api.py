import datetime as dt
from datetime import datetime
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


class AssetOut(BaseModel):
    """Asset catalog entry with its assumed CAGR."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    asset_name: str
    display_name: str
    cagr_percent: float
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TransactionOut(BaseModel):
    """Ledger entry enriched with its asset's symbol and display name."""

    id: int
    transaction_date: dt.date
    amount: float
    asset_name: str
    asset_display_name: str
    thb_price: Optional[float] = None
    usd_value_at_tx: float
    usd_cumulative: float
    reason: Optional[str] = None
    status: Optional[str] = None
    usdthb_rate: float
    synced_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ExchangeRateOut(BaseModel):
    rate: float
    timestamp: datetime
    note: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime


# -----------------------------------------------------------------------------
# Sync
# -----------------------------------------------------------------------------


class SyncRequest(BaseModel):
    """Sync envelope.

    Both fields stay untyped so that a wrongly typed credential is reported as
    unauthorized and a malformed batch as a bad request, in that order. Rows
    are validated one by one with ``SyncRecord`` inside the sync service.
    """

    credential: Any = Field(default=None, validation_alias=AliasChoices("credential", "password"))
    records: Any = Field(default=None, validation_alias=AliasChoices("records", "payments"))


class SyncRecord(BaseModel):
    """One spreadsheet row. Accepts both the sheet's column names and the long names.

    Blank cells (``None`` or empty strings) are dropped before validation so
    they surface as missing fields rather than type errors.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    transaction_date: dt.date = Field(validation_alias=AliasChoices("date", "transaction_date"))
    amount: float
    asset_symbol: str = Field(validation_alias=AliasChoices("asset_symbol", "asset"))
    thb_price: Optional[float] = None
    usd_value: float = Field(validation_alias=AliasChoices("usd_value", "usd_value_at_tx"))
    usd_cumulative: float = Field(validation_alias=AliasChoices("usd_cumulative", "usd_cum"))
    reason: Optional[str] = None
    status: Optional[str] = None
    usdthb_rate: float

    @model_validator(mode="before")
    @classmethod
    def _drop_blank_cells(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {
                key: value
                for key, value in data.items()
                if value is not None and not (isinstance(value, str) and not value.strip())
            }
        return data

    @field_validator("transaction_date", mode="before")
    @classmethod
    def _date_part_only(cls, value: Any) -> Any:
        # Sheets exports dates as full ISO timestamps; only the day matters
        if isinstance(value, str) and len(value) > 10 and value[4] == "-" and value[10] in "T ":
            return value[:10]
        return value

    @field_validator("asset_symbol")
    @classmethod
    def _upper_symbol(cls, value: str) -> str:
        return value.upper()

    @property
    def is_complete(self) -> bool:
        """Zero amount or zero rate counts as a blank cell."""
        return bool(self.amount) and bool(self.usdthb_rate) and bool(self.asset_symbol)


class SyncResponse(BaseModel):
    message: str
    inserted: int
    updated: int
    errors: Optional[list[str]] = None


# -----------------------------------------------------------------------------
# Portfolio
# -----------------------------------------------------------------------------


class HoldingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    asset_name: str
    display_name: str
    total_amount: float
    current_value_usd: float
    current_value_thb: float
    cagr_percent: float


class PortfolioSummaryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_value_usd: float
    total_value_thb: float
    total_cost_usd: float
    profit_usd: float
    profit_percent: float
    apy_percent: float


class ChartPointOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: dt.date
    value_usd: float
    value_thb: float


class ProjectionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    asset_name: str
    display_name: str
    current_value_usd: float
    future_value_usd: float
    years: int


class QuoteOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    usdthb_rate: float
    prices: dict[str, float]
    degraded: bool


class PortfolioResponse(BaseModel):
    request_id: str
    api_latency_ms: int
    quote: QuoteOut
    holdings: list[HoldingOut]
    summary: PortfolioSummaryOut
    chart: list[ChartPointOut]
    projections: list[ProjectionOut]
