"""SQL adapters — compare-and-write, row locking, inventory upsert and catalog reads."""

from types import SimpleNamespace

import pytest
from sqlalchemy import text

from merch_store.core.errors import (
    AccountExistsError, AccountNotFoundError, BalanceConflictError,
    InvalidArgumentError, ItemNotFoundError, PersistenceError,
)
from merch_store.infrastructure.sql_store import SqlCatalog, SqlLedger
from tests.helpers import balances_of, seed_account


async def test_set_balance_applies_when_expected_matches(sql_uow):
    a = await seed_account(sql_uow, "alice")
    async with sql_uow.begin() as scope:
        await scope.accounts.set_balance(a, 900, 1000)
    assert await balances_of(sql_uow, a) == [900]


async def test_set_balance_stale_expected_raises_conflict(sql_uow):
    a = await seed_account(sql_uow, "alice")
    with pytest.raises(BalanceConflictError):
        async with sql_uow.begin() as scope:
            await scope.accounts.set_balance(a, 900, 999)
    assert await balances_of(sql_uow, a) == [1000]


async def test_set_balance_refuses_negative(sql_uow):
    a = await seed_account(sql_uow, "alice")
    with pytest.raises(InvalidArgumentError):
        async with sql_uow.begin() as scope:
            await scope.accounts.set_balance(a, -1, 1000)


async def test_lock_balances_reports_missing_account(sql_uow):
    a = await seed_account(sql_uow, "alice")
    with pytest.raises(AccountNotFoundError):
        async with sql_uow.begin() as scope:
            await scope.accounts.lock_balances([a, 777])


async def test_lock_balances_returns_all_requested(sql_uow):
    a = await seed_account(sql_uow, "alice", balance=5)
    b = await seed_account(sql_uow, "bob", balance=7)
    async with sql_uow.begin() as scope:
        assert await scope.accounts.lock_balances([b, a]) == {a: 5, b: 7}


async def test_duplicate_username_raises_account_exists(sql_uow):
    await seed_account(sql_uow, "alice")
    with pytest.raises(AccountExistsError):
        await seed_account(sql_uow, "alice")


async def test_grant_item_upserts_quantity(sql_uow):
    a = await seed_account(sql_uow, "alice")
    async with sql_uow.begin() as scope:
        first = await scope.ledger.grant_item(a, "pen")
        second = await scope.ledger.grant_item(a, "pen")
        await scope.ledger.grant_item(a, "cup")
    assert (first.quantity, second.quantity) == (1, 2)
    async with sql_uow.read() as scope:
        inventory = await scope.ledger.inventory_of(a)
    assert [(i.item_name, i.quantity) for i in inventory] == [("cup", 1), ("pen", 2)]


async def test_rolled_back_scope_leaves_no_ledger_rows(sql_uow):
    a = await seed_account(sql_uow, "alice")
    b = await seed_account(sql_uow, "bob")
    with pytest.raises(RuntimeError):
        async with sql_uow.begin() as scope:
            await scope.ledger.append_transfer(a, b, 10)
            raise RuntimeError("abort")
    async with sql_uow.read() as scope:
        assert await scope.ledger.transfers_of(a) == []


async def test_usernames_resolves_known_ids(sql_uow):
    a = await seed_account(sql_uow, "alice")
    b = await seed_account(sql_uow, "bob")
    async with sql_uow.read() as scope:
        assert await scope.accounts.usernames([a, b, 999]) == {a: "alice", b: "bob"}
        assert await scope.accounts.usernames([]) == {}


async def test_catalog_prices_and_listing(test_manager):
    catalog = SqlCatalog(test_manager)
    assert await catalog.get_price("powerbank") == 200
    with pytest.raises(ItemNotFoundError):
        await catalog.get_price("yacht")
    items = await catalog.list_items()
    assert [(i.name, i.price) for i in items[:2]] == [("pen", 10), ("socks", 10)]


async def test_engine_errors_surface_as_persistence_error(test_manager):
    with pytest.raises(PersistenceError) as exc_info:
        async with test_manager.session() as db:
            await db.execute(text("SELECT * FROM no_such_table"))
    assert exc_info.value.retryable
    assert exc_info.value.http_status == 503


async def test_health_check_reports_reachable_database(test_manager):
    assert await test_manager.health_check() is True


async def test_grant_item_refuses_dialect_without_upsert():
    mysql_session = SimpleNamespace(
        get_bind=lambda: SimpleNamespace(dialect=SimpleNamespace(name="mysql")),
    )
    with pytest.raises(PersistenceError, match="not supported on 'mysql'"):
        await SqlLedger(mysql_session).grant_item(1, "pen")


async def test_read_scope_holds_one_transaction(sql_uow):
    a = await seed_account(sql_uow, "alice")
    async with sql_uow.read() as scope:
        assert scope.db.in_transaction()
        assert await scope.accounts.get_balance(a) == 1000
