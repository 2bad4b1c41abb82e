"""Initial schema — accounts, merch_items (seeded), inventory_items, coin_transfers.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from merch_store.core.catalog_seed import MERCH_CATALOG

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer, autoincrement=True),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("balance", sa.Integer, nullable=False, server_default="1000"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_accounts"),
        sa.UniqueConstraint("username", name="uq_accounts_username"),
        sa.CheckConstraint("balance >= 0", name="ck_accounts_balance_non_negative"),
    )

    merch_items = op.create_table(
        "merch_items",
        sa.Column("id", sa.Integer, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("price", sa.Integer, nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_merch_items"),
        sa.UniqueConstraint("name", name="uq_merch_items_name"),
        sa.CheckConstraint("price > 0", name="ck_merch_items_price_positive"),
    )
    op.bulk_insert(
        merch_items,
        [{"name": name, "price": price} for name, price in MERCH_CATALOG.items()],
    )

    op.create_table(
        "inventory_items",
        sa.Column("account_id", sa.Integer, nullable=False),
        sa.Column("item_name", sa.String(100), nullable=False),
        sa.Column("quantity", sa.Integer, nullable=False, server_default="1"),
        sa.PrimaryKeyConstraint("account_id", "item_name", name="pk_inventory_items"),
        sa.ForeignKeyConstraint(
            ["account_id"], ["accounts.id"],
            name="fk_inventory_items_account_id_accounts",
        ),
        sa.CheckConstraint("quantity > 0", name="ck_inventory_items_quantity_positive"),
    )

    op.create_table(
        "coin_transfers",
        sa.Column("id", sa.Integer, autoincrement=True),
        sa.Column("sender_id", sa.Integer, nullable=False),
        sa.Column("recipient_id", sa.Integer, nullable=False),
        sa.Column("amount", sa.Integer, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_coin_transfers"),
        sa.ForeignKeyConstraint(
            ["sender_id"], ["accounts.id"],
            name="fk_coin_transfers_sender_id_accounts",
        ),
        sa.ForeignKeyConstraint(
            ["recipient_id"], ["accounts.id"],
            name="fk_coin_transfers_recipient_id_accounts",
        ),
        sa.CheckConstraint("amount > 0", name="ck_coin_transfers_amount_positive"),
    )
    op.create_index("ix_coin_transfers_sender_id", "coin_transfers", ["sender_id"])
    op.create_index("ix_coin_transfers_recipient_id", "coin_transfers", ["recipient_id"])


def downgrade() -> None:
    op.drop_index("ix_coin_transfers_recipient_id", table_name="coin_transfers")
    op.drop_index("ix_coin_transfers_sender_id", table_name="coin_transfers")
    op.drop_table("coin_transfers")
    op.drop_table("inventory_items")
    op.drop_table("merch_items")
    op.drop_table("accounts")
