"""ORM Models — SQLAlchemy declarative models for all persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Account is the owner of inventory rows and both sides of coin transfers

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from merch_store.models.account import Account  # noqa: F401
from merch_store.models.merch_item import MerchItem  # noqa: F401
from merch_store.models.inventory_item import InventoryItem  # noqa: F401
from merch_store.models.coin_transfer import CoinTransfer  # noqa: F401
