"""Asset catalog - reference data maintained out of band (migrations / manual SQL)."""

from sqlalchemy import DateTime, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from savings.models.base import Base


class Asset(Base):
    """A tracked asset, identified by its canonical upper-case symbol.

    ``cagr_percent`` is an assumed long-run growth rate, used only for
    forward projections.
    """

    __tablename__ = "assets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    asset_name: Mapped[str] = mapped_column(String(20), nullable=False, unique=True, index=True, comment="Canonical symbol (e.g., 'BTC', 'GOLD', 'USD')")

    display_name: Mapped[str] = mapped_column(String(100), nullable=False)

    cagr_percent: Mapped[float] = mapped_column(Numeric(asdecimal=False), nullable=False, default=0.0)

    created_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    updated_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )


# Catalog rows seeded by the 0002 migration
DEFAULT_ASSETS = [
    {"asset_name": "USD", "display_name": "US Dollar", "cagr_percent": 0.0},
    {"asset_name": "GOLD", "display_name": "Gold", "cagr_percent": 8.0},
    {"asset_name": "BTC", "display_name": "Bitcoin", "cagr_percent": 25.0},
]
