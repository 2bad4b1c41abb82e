"""Shared test helpers — SQLite schema setup and account seeding."""

from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncEngine

from merch_store.core.catalog_seed import MERCH_CATALOG
from merch_store.core.domain_types import AccountId
from merch_store.core.repository_protocols import UnitOfWork
from merch_store.db.base import Base
from merch_store.models.merch_item import MerchItem
import merch_store.models  # noqa: F401


async def create_schema(engine: AsyncEngine) -> None:
    """Create all tables and seed the catalog."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await conn.execute(
            insert(MerchItem),
            [{"name": n, "price": p} for n, p in MERCH_CATALOG.items()],
        )


async def drop_schema(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def seed_account(
    uow: UnitOfWork, username: str, balance: int = 1000,
) -> AccountId:
    async with uow.begin() as scope:
        account = await scope.accounts.create_account(
            username, "not-a-real-hash", balance,
        )
    return account.id


async def balances_of(uow: UnitOfWork, *account_ids: AccountId) -> list[int]:
    async with uow.read() as scope:
        return [await scope.accounts.get_balance(a) for a in account_ids]
