"""Ledger entries synced from the savings spreadsheet."""

import datetime as dt

from sqlalchemy import Date, DateTime, ForeignKey, Integer, Numeric, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from savings.models.asset import Asset
from savings.models.base import Base

# Natural key: a re-synced row matching these columns is an update, not a new row.
# Two genuinely distinct entries sharing all four values collapse into one.
NATURAL_KEY = ("transaction_date", "amount", "asset_id", "usd_value_at_tx")


class SavingsTransaction(Base):
    __tablename__ = "savings_transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    transaction_date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)

    # Signed quantity in the asset's native unit
    amount: Mapped[float] = mapped_column(Numeric(asdecimal=False), nullable=False)

    asset_id: Mapped[int] = mapped_column(ForeignKey("assets.id"), nullable=False, index=True)

    thb_price: Mapped[float | None] = mapped_column(Numeric(asdecimal=False), nullable=True)

    usd_value_at_tx: Mapped[float] = mapped_column(Numeric(asdecimal=False), nullable=False)

    # Running USD total after this entry, as computed by the source sheet
    usd_cumulative: Mapped[float] = mapped_column(Numeric(asdecimal=False), nullable=False)

    reason: Mapped[str | None] = mapped_column(String(500), nullable=True)

    status: Mapped[str | None] = mapped_column(String(50), nullable=True, default="not paid")

    usdthb_rate: Mapped[float] = mapped_column(Numeric(asdecimal=False), nullable=False)

    synced_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    # NULL until an upsert hits an existing row; the sync pipeline relies on this
    updated_at: Mapped[DateTime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    asset: Mapped[Asset] = relationship(Asset, lazy="joined")

    __table_args__ = (UniqueConstraint(*NATURAL_KEY, name="uq_savings_transactions_natural_key"),)
