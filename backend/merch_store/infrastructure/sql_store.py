"""SQL Adapters — AccountStore, Ledger, Catalog and UnitOfWork over SQLAlchemy async.

Invariants:
    - Repositories are bound to one AsyncSession; the session's transaction IS the scope
    - read() scopes run on one snapshot (DatabaseSessionManager.snapshot), so a summary
      never mixes pre- and post-transfer state
    - lock_balances locks rows in ascending id order (SELECT ... FOR UPDATE on PostgreSQL)
    - set_balance is a single conditional UPDATE: rowcount 0 means a concurrent writer won
    - Balances are written with explicit UPDATE statements, never through ORM attribute
      assignment, so no stale identity-map value can be flushed

Design Decisions:
    - Inventory upsert uses the dialect's INSERT ... ON CONFLICT DO UPDATE (PostgreSQL and
      SQLite both support it); any other dialect is refused with PersistenceError
    - SqlCatalog opens its own short read session: price lookup happens before the
      coordinator opens the write scope
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator, Sequence

from sqlalchemy import or_, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from merch_store.core.domain_types import AccountId
from merch_store.core.errors import (
    AccountExistsError, AccountNotFoundError, BalanceConflictError,
    InvalidArgumentError, ItemNotFoundError, PersistenceError,
)
from merch_store.core.records import (
    AccountRecord, CatalogItem, InventoryEntry, TransferRecord,
)
from merch_store.infrastructure.database import DatabaseSessionManager
from merch_store.models.account import Account
from merch_store.models.coin_transfer import CoinTransfer
from merch_store.models.inventory_item import InventoryItem
from merch_store.models.merch_item import MerchItem

logger = logging.getLogger(__name__)

# Dialects with INSERT ... ON CONFLICT DO UPDATE.
_UPSERT_INSERTS = {"postgresql": postgresql.insert, "sqlite": sqlite.insert}


class SqlAccountStore:
    """AccountStore bound to one session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_balance(self, account_id: AccountId) -> int:
        result = await self.db.execute(
            select(Account.balance).where(Account.id == account_id),
        )
        balance = result.scalar_one_or_none()
        if balance is None:
            raise AccountNotFoundError(account_id)
        return balance

    async def lock_balances(
        self, account_ids: Sequence[AccountId],
    ) -> dict[AccountId, int]:
        wanted = sorted(set(account_ids))
        result = await self.db.execute(
            select(Account.id, Account.balance)
            .where(Account.id.in_(wanted))
            .order_by(Account.id)
            .with_for_update(),
        )
        balances = {AccountId(row.id): row.balance for row in result}
        for account_id in account_ids:
            if account_id not in balances:
                raise AccountNotFoundError(account_id)
        return balances

    async def set_balance(
        self, account_id: AccountId, new_balance: int, expected_balance: int,
    ) -> None:
        if new_balance < 0:
            raise InvalidArgumentError(
                f"balance of account {account_id} cannot go negative", "balance",
            )
        result = await self.db.execute(
            update(Account)
            .where(Account.id == account_id)
            .where(Account.balance == expected_balance)
            .values(balance=new_balance)
            .execution_options(synchronize_session=False),
        )
        if result.rowcount != 1:
            logger.info(
                "Balance compare-and-write missed",
                extra={"account_id": account_id},
            )
            raise BalanceConflictError(account_id)

    async def find_by_username(self, username: str) -> AccountRecord | None:
        result = await self.db.execute(
            select(Account).where(Account.username == username),
        )
        account = result.scalar_one_or_none()
        if account is None:
            return None
        return _to_account_record(account)

    async def create_account(
        self, username: str, password_hash: str, balance: int,
    ) -> AccountRecord:
        account = Account(
            username=username, password_hash=password_hash, balance=balance,
        )
        self.db.add(account)
        try:
            await self.db.flush()
        except IntegrityError:
            raise AccountExistsError(username)
        return _to_account_record(account)

    async def usernames(
        self, account_ids: Sequence[AccountId],
    ) -> dict[AccountId, str]:
        if not account_ids:
            return {}
        result = await self.db.execute(
            select(Account.id, Account.username)
            .where(Account.id.in_(set(account_ids))),
        )
        return {AccountId(row.id): row.username for row in result}


class SqlLedger:
    """Ledger bound to one session: coin_transfers + inventory_items."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def append_transfer(
        self, sender_id: AccountId, recipient_id: AccountId, amount: int,
    ) -> TransferRecord:
        row = CoinTransfer(
            sender_id=sender_id, recipient_id=recipient_id, amount=amount,
            created_at=datetime.now(timezone.utc),
        )
        self.db.add(row)
        await self.db.flush()
        return _to_transfer_record(row)

    async def transfers_of(self, account_id: AccountId) -> list[TransferRecord]:
        result = await self.db.execute(
            select(CoinTransfer)
            .where(or_(
                CoinTransfer.sender_id == account_id,
                CoinTransfer.recipient_id == account_id,
            ))
            .order_by(CoinTransfer.id),
        )
        return [_to_transfer_record(t) for t in result.scalars().all()]

    async def grant_item(
        self, account_id: AccountId, item_name: str,
    ) -> InventoryEntry:
        dialect = self.db.get_bind().dialect.name
        dialect_insert = _UPSERT_INSERTS.get(dialect)
        if dialect_insert is None:
            raise PersistenceError(
                f"inventory upsert not supported on '{dialect}'", "grant_item",
            )
        stmt = dialect_insert(InventoryItem).values(
            account_id=account_id, item_name=item_name, quantity=1,
        )
        await self.db.execute(
            stmt.on_conflict_do_update(
                index_elements=[InventoryItem.account_id, InventoryItem.item_name],
                set_={"quantity": InventoryItem.quantity + 1},
            ),
        )
        result = await self.db.execute(
            select(InventoryItem.quantity)
            .where(InventoryItem.account_id == account_id)
            .where(InventoryItem.item_name == item_name),
        )
        return InventoryEntry(
            account_id=account_id, item_name=item_name,
            quantity=result.scalar_one(),
        )

    async def inventory_of(self, account_id: AccountId) -> list[InventoryEntry]:
        result = await self.db.execute(
            select(InventoryItem)
            .where(InventoryItem.account_id == account_id)
            .order_by(InventoryItem.item_name),
        )
        return [
            InventoryEntry(
                account_id=AccountId(i.account_id),
                item_name=i.item_name,
                quantity=i.quantity,
            )
            for i in result.scalars().all()
        ]


class SqlStoreScope:
    """Repositories sharing one session (and therefore one transaction)."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.accounts = SqlAccountStore(db)
        self.ledger = SqlLedger(db)


class SqlUnitOfWork:
    """UnitOfWork backed by DatabaseSessionManager."""

    def __init__(self, manager: DatabaseSessionManager):
        self._manager = manager

    @asynccontextmanager
    async def begin(self) -> AsyncGenerator[SqlStoreScope, None]:
        async with self._manager.transaction() as db:
            yield SqlStoreScope(db)

    @asynccontextmanager
    async def read(self) -> AsyncGenerator[SqlStoreScope, None]:
        async with self._manager.snapshot() as db:
            yield SqlStoreScope(db)


class SqlCatalog:
    """Catalog backed by the merch_items table."""

    def __init__(self, manager: DatabaseSessionManager):
        self._manager = manager

    async def get_price(self, item_name: str) -> int:
        async with self._manager.session() as db:
            result = await db.execute(
                select(MerchItem.price).where(MerchItem.name == item_name),
            )
            price = result.scalar_one_or_none()
        if price is None:
            raise ItemNotFoundError(item_name)
        return price

    async def list_items(self) -> list[CatalogItem]:
        async with self._manager.session() as db:
            result = await db.execute(
                select(MerchItem).order_by(MerchItem.price, MerchItem.name),
            )
            return [
                CatalogItem(name=m.name, price=m.price)
                for m in result.scalars().all()
            ]


def _to_account_record(account: Account) -> AccountRecord:
    return AccountRecord(
        id=AccountId(account.id),
        username=account.username,
        password_hash=account.password_hash,
        balance=account.balance,
    )


def _to_transfer_record(row: CoinTransfer) -> TransferRecord:
    return TransferRecord(
        id=row.id,
        sender_id=AccountId(row.sender_id),
        recipient_id=AccountId(row.recipient_id),
        amount=row.amount,
        created_at=row.created_at,
    )
