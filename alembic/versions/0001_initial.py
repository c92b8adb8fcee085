"""create assets and savings_transactions

Revision ID: 0001_initial
Revises:
Create Date: 2026-01-10 09:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "assets",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("asset_name", sa.String(20), nullable=False, comment="Canonical symbol (e.g., 'BTC', 'GOLD', 'USD')"),
        sa.Column("display_name", sa.String(100), nullable=False),
        sa.Column("cagr_percent", sa.Numeric(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_assets_asset_name", "assets", ["asset_name"], unique=True)

    op.create_table(
        "savings_transactions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("transaction_date", sa.Date(), nullable=False),
        sa.Column("amount", sa.Numeric(), nullable=False),
        sa.Column("asset_id", sa.Integer(), sa.ForeignKey("assets.id"), nullable=False),
        sa.Column("thb_price", sa.Numeric(), nullable=True),
        sa.Column("usd_value_at_tx", sa.Numeric(), nullable=False),
        sa.Column("usd_cumulative", sa.Numeric(), nullable=False),
        sa.Column("reason", sa.String(500), nullable=True),
        sa.Column("status", sa.String(50), nullable=True),
        sa.Column("usdthb_rate", sa.Numeric(), nullable=False),
        sa.Column("synced_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "transaction_date",
            "amount",
            "asset_id",
            "usd_value_at_tx",
            name="uq_savings_transactions_natural_key",
        ),
    )
    op.create_index("ix_savings_transactions_transaction_date", "savings_transactions", ["transaction_date"])
    op.create_index("ix_savings_transactions_asset_id", "savings_transactions", ["asset_id"])


def downgrade() -> None:
    op.drop_index("ix_savings_transactions_asset_id", "savings_transactions")
    op.drop_index("ix_savings_transactions_transaction_date", "savings_transactions")
    op.drop_table("savings_transactions")
    op.drop_index("ix_assets_asset_name", "assets")
    op.drop_table("assets")
