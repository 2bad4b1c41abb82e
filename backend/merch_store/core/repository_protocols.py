"""Boundary Protocols — contracts between the coordinator/services and persistence.

Invariants:
    - Services NEVER import SQLAlchemy — all IO goes through these Protocol types
    - Write methods (lock_balances, set_balance, append_transfer, grant_item) are only
      called on a scope obtained from UnitOfWork.begin()
    - UnitOfWork.begin() commits on normal exit and rolls back on ANY exception
    - UnitOfWork.read() never takes write locks; all reads in one read() scope see the
      same committed state (no transfer half-visible across two statements)

Design Decisions:
    - Protocol over ABC: structural subtyping, SQL and in-memory adapters share no base class
    - Async in Protocol: implementations do IO; the rules they feed stay pure in core/
    - set_balance is compare-and-write (expected_balance): a stale read can never
      overwrite a concurrently committed balance, even on engines without row locks
"""

from contextlib import AbstractAsyncContextManager
from typing import Protocol, Sequence

from merch_store.core.domain_types import AccountId
from merch_store.core.records import (
    AccountRecord, CatalogItem, InventoryEntry, TransferRecord,
)


class AccountStore(Protocol):
    """Accounts keyed by id, each holding an integer coin balance."""
    async def get_balance(self, account_id: AccountId) -> int: ...
    async def lock_balances(
        self, account_ids: Sequence[AccountId],
    ) -> dict[AccountId, int]: ...
    async def set_balance(
        self, account_id: AccountId, new_balance: int, expected_balance: int,
    ) -> None: ...
    async def find_by_username(self, username: str) -> AccountRecord | None: ...
    async def create_account(
        self, username: str, password_hash: str, balance: int,
    ) -> AccountRecord: ...
    async def usernames(
        self, account_ids: Sequence[AccountId],
    ) -> dict[AccountId, str]: ...


class Ledger(Protocol):
    """Append-only transfer history plus per-account inventory grants."""
    async def append_transfer(
        self, sender_id: AccountId, recipient_id: AccountId, amount: int,
    ) -> TransferRecord: ...
    async def transfers_of(self, account_id: AccountId) -> list[TransferRecord]: ...
    async def grant_item(
        self, account_id: AccountId, item_name: str,
    ) -> InventoryEntry: ...
    async def inventory_of(self, account_id: AccountId) -> list[InventoryEntry]: ...


class Catalog(Protocol):
    """Static item -> price mapping, read-only at runtime."""
    async def get_price(self, item_name: str) -> int: ...
    async def list_items(self) -> list[CatalogItem]: ...


class StoreScope(Protocol):
    """Repositories bound to one atomic scope."""
    accounts: AccountStore
    ledger: Ledger


class UnitOfWork(Protocol):
    """Opens atomic write scopes and lock-free read scopes."""
    def begin(self) -> AbstractAsyncContextManager[StoreScope]: ...
    def read(self) -> AbstractAsyncContextManager[StoreScope]: ...
