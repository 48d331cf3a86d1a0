"""create ledger tables

Revision ID: 3a9c1e5d7b20
Revises:
Create Date: 2026-10-17

Items are keyed by the external name_id; trades and inventory reference
that id directly rather than an internal item pk.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "3a9c1e5d7b20"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("market_hash_name", sa.String(length=512), nullable=False),
        sa.Column("en_name", sa.String(length=512), nullable=False),
        sa.Column("cn_name", sa.String(length=512), nullable=False),
        sa.Column("name_id", sa.BigInteger(), nullable=False),
    )
    op.create_index("ix_items_id", "items", ["id"], unique=False)
    op.create_index("ix_items_market_hash_name", "items", ["market_hash_name"], unique=True)
    op.create_index("ix_items_name_id", "items", ["name_id"], unique=True)

    op.create_table(
        "trades",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name_id", sa.BigInteger(), sa.ForeignKey("items.name_id"), nullable=False),
        sa.Column("type", sa.Enum("BUY", "SELL", name="tradetype", native_enum=False, length=8), nullable=False),
        sa.Column("unit_price", sa.Numeric(19, 4), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("total_amount", sa.Numeric(19, 4), nullable=False),
        sa.Column("platform", sa.String(length=128), nullable=True),
        sa.Column("counterparty", sa.String(length=128), nullable=True),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_trades_id", "trades", ["id"], unique=False)
    op.create_index("ix_trades_name_id", "trades", ["name_id"], unique=False)
    op.create_index("ix_trades_occurred_at", "trades", ["occurred_at"], unique=False)
    op.create_index("ix_trades_type", "trades", ["type"], unique=False)

    op.create_table(
        "inventory",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name_id", sa.BigInteger(), nullable=False),
        sa.Column("current_quantity", sa.Integer(), nullable=False),
        sa.Column("weighted_average_cost", sa.Numeric(19, 4), nullable=False),
        sa.Column("total_investment_cost", sa.Numeric(19, 4), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_inventory_id", "inventory", ["id"], unique=False)
    op.create_index("ix_inventory_name_id", "inventory", ["name_id"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_inventory_name_id", table_name="inventory")
    op.drop_index("ix_inventory_id", table_name="inventory")
    op.drop_table("inventory")

    op.drop_index("ix_trades_type", table_name="trades")
    op.drop_index("ix_trades_occurred_at", table_name="trades")
    op.drop_index("ix_trades_name_id", table_name="trades")
    op.drop_index("ix_trades_id", table_name="trades")
    op.drop_table("trades")

    op.drop_index("ix_items_name_id", table_name="items")
    op.drop_index("ix_items_market_hash_name", table_name="items")
    op.drop_index("ix_items_id", table_name="items")
    op.drop_table("items")
