"""seed default asset catalog

Revision ID: 0002_seed_assets
Revises: 0001_initial
Create Date: 2026-01-10 09:05:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0002_seed_assets"
down_revision = "0001_initial"
branch_labels = None
depends_on = None

# Frozen copy: later edits to savings.models.asset.DEFAULT_ASSETS must not change history
SEED_ASSETS = [
    {"asset_name": "USD", "display_name": "US Dollar", "cagr_percent": 0.0},
    {"asset_name": "GOLD", "display_name": "Gold", "cagr_percent": 8.0},
    {"asset_name": "BTC", "display_name": "Bitcoin", "cagr_percent": 25.0},
]


def upgrade() -> None:
    assets = sa.table(
        "assets",
        sa.column("asset_name", sa.String),
        sa.column("display_name", sa.String),
        sa.column("cagr_percent", sa.Numeric),
    )
    op.bulk_insert(assets, SEED_ASSETS)


def downgrade() -> None:
    op.execute(
        sa.text("DELETE FROM assets WHERE asset_name IN ('USD', 'GOLD', 'BTC')")
    )
