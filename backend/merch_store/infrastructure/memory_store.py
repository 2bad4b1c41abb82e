"""In-memory implementations of the store protocols.

Test doubles that let the coordinator and summary tests run without a database.
Write scopes are serialized by one asyncio.Lock and applied copy-on-write: the
working copy replaces the committed state only when the scope exits normally.
"""

import asyncio
import itertools
from contextlib import asynccontextmanager
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import AsyncGenerator, Sequence

from merch_store.core.catalog_seed import MERCH_CATALOG
from merch_store.core.domain_types import AccountId
from merch_store.core.errors import (
    AccountExistsError, AccountNotFoundError, BalanceConflictError,
    InvalidArgumentError, ItemNotFoundError,
)
from merch_store.core.records import (
    AccountRecord, CatalogItem, InventoryEntry, TransferRecord,
)


@dataclass
class _State:
    accounts: dict[AccountId, AccountRecord] = field(default_factory=dict)
    transfers: list[TransferRecord] = field(default_factory=list)
    inventory: dict[tuple[AccountId, str], int] = field(default_factory=dict)

    def copy(self) -> "_State":
        return _State(
            accounts=dict(self.accounts),
            transfers=list(self.transfers),
            inventory=dict(self.inventory),
        )


class InMemoryAccountStore:
    def __init__(self, state: _State, ids: itertools.count):
        self._state = state
        self._ids = ids

    def _get(self, account_id: AccountId) -> AccountRecord:
        account = self._state.accounts.get(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account

    async def get_balance(self, account_id: AccountId) -> int:
        return self._get(account_id).balance

    async def lock_balances(
        self, account_ids: Sequence[AccountId],
    ) -> dict[AccountId, int]:
        return {aid: self._get(aid).balance for aid in account_ids}

    async def set_balance(
        self, account_id: AccountId, new_balance: int, expected_balance: int,
    ) -> None:
        if new_balance < 0:
            raise InvalidArgumentError(
                f"balance of account {account_id} cannot go negative", "balance",
            )
        account = self._get(account_id)
        if account.balance != expected_balance:
            raise BalanceConflictError(account_id)
        self._state.accounts[account_id] = replace(account, balance=new_balance)

    async def find_by_username(self, username: str) -> AccountRecord | None:
        for account in self._state.accounts.values():
            if account.username == username:
                return account
        return None

    async def create_account(
        self, username: str, password_hash: str, balance: int,
    ) -> AccountRecord:
        if await self.find_by_username(username) is not None:
            raise AccountExistsError(username)
        account = AccountRecord(
            id=AccountId(next(self._ids)),
            username=username,
            password_hash=password_hash,
            balance=balance,
        )
        self._state.accounts[account.id] = account
        return account

    async def usernames(
        self, account_ids: Sequence[AccountId],
    ) -> dict[AccountId, str]:
        return {
            aid: self._state.accounts[aid].username
            for aid in account_ids if aid in self._state.accounts
        }


class InMemoryLedger:
    def __init__(self, state: _State, ids: itertools.count):
        self._state = state
        self._ids = ids

    async def append_transfer(
        self, sender_id: AccountId, recipient_id: AccountId, amount: int,
    ) -> TransferRecord:
        record = TransferRecord(
            id=next(self._ids),
            sender_id=sender_id,
            recipient_id=recipient_id,
            amount=amount,
            created_at=datetime.now(timezone.utc),
        )
        self._state.transfers.append(record)
        return record

    async def transfers_of(self, account_id: AccountId) -> list[TransferRecord]:
        return [
            t for t in self._state.transfers
            if account_id in (t.sender_id, t.recipient_id)
        ]

    async def grant_item(
        self, account_id: AccountId, item_name: str,
    ) -> InventoryEntry:
        key = (account_id, item_name)
        self._state.inventory[key] = self._state.inventory.get(key, 0) + 1
        return InventoryEntry(account_id, item_name, self._state.inventory[key])

    async def inventory_of(self, account_id: AccountId) -> list[InventoryEntry]:
        return [
            InventoryEntry(aid, name, qty)
            for (aid, name), qty in sorted(self._state.inventory.items())
            if aid == account_id
        ]


class InMemoryScope:
    def __init__(
        self, state: _State, account_ids: itertools.count,
        transfer_ids: itertools.count,
    ):
        self.accounts = InMemoryAccountStore(state, account_ids)
        self.ledger = InMemoryLedger(state, transfer_ids)


class InMemoryUnitOfWork:
    """Committed state plus a lock that serializes write scopes."""

    def __init__(self) -> None:
        self._state = _State()
        self._lock = asyncio.Lock()
        self._account_ids = itertools.count(1)
        self._transfer_ids = itertools.count(1)

    @asynccontextmanager
    async def begin(self) -> AsyncGenerator[InMemoryScope, None]:
        async with self._lock:
            working = self._state.copy()
            yield InMemoryScope(working, self._account_ids, self._transfer_ids)
            self._state = working

    @asynccontextmanager
    async def read(self) -> AsyncGenerator[InMemoryScope, None]:
        yield InMemoryScope(
            self._state.copy(), self._account_ids, self._transfer_ids,
        )

    def snapshot(self) -> tuple[dict[AccountId, int], int, dict]:
        """Test-only helper: balances, ledger length, inventory."""
        return (
            {aid: a.balance for aid, a in self._state.accounts.items()},
            len(self._state.transfers),
            dict(self._state.inventory),
        )


class StaticCatalog:
    """Catalog over a fixed mapping (defaults to the deployment seed)."""

    def __init__(self, prices: dict[str, int] | None = None):
        self._prices = dict(MERCH_CATALOG if prices is None else prices)

    async def get_price(self, item_name: str) -> int:
        if item_name not in self._prices:
            raise ItemNotFoundError(item_name)
        return self._prices[item_name]

    async def list_items(self) -> list[CatalogItem]:
        return [
            CatalogItem(name=name, price=price)
            for name, price in sorted(
                self._prices.items(), key=lambda kv: (kv[1], kv[0]),
            )
        ]
