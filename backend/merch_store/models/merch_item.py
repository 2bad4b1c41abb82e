"""MerchItem ORM — catalog of purchasable items, seeded by the initial migration.

Invariants:
    - name is unique; price > 0
    - Read-only at runtime
"""

from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from merch_store.db.base import Base


class MerchItem(Base):
    __tablename__ = "merch_items"
    __table_args__ = (
        CheckConstraint("price > 0", name="ck_merch_items_price_positive"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    price: Mapped[int] = mapped_column(Integer, nullable=False)
