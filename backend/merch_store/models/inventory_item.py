"""InventoryItem ORM — how many of each item an account owns.

Invariants:
    - (account_id, item_name) is the primary key: one row per account and item
    - quantity counts successful purchases and is always >= 1

Design Decisions:
    - item_name stored by value (not FK to merch_items.id): mirrors the catalog key
      used by the purchase API and survives catalog reseeding
"""

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from merch_store.db.base import Base


class InventoryItem(Base):
    __tablename__ = "inventory_items"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_inventory_items_quantity_positive"),
    )

    account_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("accounts.id"), primary_key=True,
    )
    item_name: Mapped[str] = mapped_column(String(100), primary_key=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
