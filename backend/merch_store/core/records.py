"""Domain Records — immutable values passed between the store adapters and services.

Invariants:
    - Records are frozen: once read from a store they are never mutated in place
    - TransferRecord.amount > 0; InventoryEntry.quantity >= 1
    - AccountSummary history lists keep ledger insertion order (no sort guarantee)

Design Decisions:
    - Plain dataclasses over ORM instances: core and services never see SQLAlchemy
      objects, so the in-memory adapter can return the same shapes
"""

from dataclasses import dataclass, field
from datetime import datetime

from merch_store.core.domain_types import AccountId


@dataclass(frozen=True)
class AccountRecord:
    id: AccountId
    username: str
    password_hash: str
    balance: int


@dataclass(frozen=True)
class CatalogItem:
    name: str
    price: int


@dataclass(frozen=True)
class InventoryEntry:
    account_id: AccountId
    item_name: str
    quantity: int


@dataclass(frozen=True)
class TransferRecord:
    sender_id: AccountId
    recipient_id: AccountId
    amount: int
    created_at: datetime
    id: int | None = None


@dataclass(frozen=True)
class HistoryEntry:
    """One side of a transfer as seen from the summarized account."""
    counterparty_id: AccountId
    counterparty: str
    amount: int
    created_at: datetime


@dataclass(frozen=True)
class AccountSummary:
    account_id: AccountId
    balance: int
    inventory: list[InventoryEntry] = field(default_factory=list)
    received: list[HistoryEntry] = field(default_factory=list)
    sent: list[HistoryEntry] = field(default_factory=list)
