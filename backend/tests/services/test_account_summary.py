"""Account Summary Builder — balance, inventory and directional coin history."""

import asyncio
from contextlib import asynccontextmanager
from types import SimpleNamespace

import pytest

from merch_store.core.errors import AccountNotFoundError, InvalidArgumentError
from merch_store.infrastructure.sql_store import SqlCatalog, SqlUnitOfWork
from merch_store.services.account_summary import AccountSummaryBuilder
from merch_store.services.transaction_coordinator import TransactionCoordinator
from tests.helpers import seed_account


@pytest.fixture(params=["memory", "sql"])
def backend(request):
    if request.param == "memory":
        return (
            request.getfixturevalue("memory_uow"),
            request.getfixturevalue("memory_coordinator"),
        )
    return (
        request.getfixturevalue("sql_uow"),
        request.getfixturevalue("sql_coordinator"),
    )


async def test_fresh_account_has_empty_history(backend):
    uow, _ = backend
    a = await seed_account(uow, "alice")

    summary = await AccountSummaryBuilder(uow).get_summary(a)

    assert summary.balance == 1000
    assert summary.inventory == []
    assert summary.received == []
    assert summary.sent == []


async def test_summary_after_transfers_and_purchases(backend):
    uow, coordinator = backend
    a = await seed_account(uow, "alice")
    b = await seed_account(uow, "bob")
    c = await seed_account(uow, "carol")

    await coordinator.transfer_coins(a, b, 200)
    await coordinator.transfer_coins(c, a, 30)
    await coordinator.transfer_coins(a, c, 5)
    await coordinator.buy_item(a, "cup")
    await coordinator.buy_item(a, "cup")
    await coordinator.buy_item(a, "socks")

    summary = await AccountSummaryBuilder(uow).get_summary(a)

    assert summary.balance == 1000 - 200 + 30 - 5 - 20 - 20 - 10
    assert [(i.item_name, i.quantity) for i in summary.inventory] == [
        ("cup", 2), ("socks", 1),
    ]
    assert [(h.counterparty, h.amount) for h in summary.sent] == [
        ("bob", 200), ("carol", 5),
    ]
    assert [(h.counterparty, h.amount) for h in summary.received] == [
        ("carol", 30),
    ]


async def test_recipient_sees_transfer_as_received(backend):
    uow, coordinator = backend
    a = await seed_account(uow, "alice")
    b = await seed_account(uow, "bob")
    await coordinator.transfer_coins(a, b, 200)

    summary = await AccountSummaryBuilder(uow).get_summary(b)

    assert summary.balance == 1200
    assert summary.sent == []
    [entry] = summary.received
    assert (entry.counterparty_id, entry.counterparty, entry.amount) == (a, "alice", 200)


async def test_summary_read_is_idempotent(backend):
    uow, coordinator = backend
    a = await seed_account(uow, "alice")
    b = await seed_account(uow, "bob")
    await coordinator.transfer_coins(a, b, 10)
    builder = AccountSummaryBuilder(uow)

    assert await builder.get_summary(a) == await builder.get_summary(a)


async def test_unknown_account_raises_not_found(backend):
    uow, _ = backend
    with pytest.raises(AccountNotFoundError):
        await AccountSummaryBuilder(uow).get_summary(12345)


async def test_invalid_account_id_rejected(memory_uow):
    with pytest.raises(InvalidArgumentError):
        await AccountSummaryBuilder(memory_uow).get_summary(0)


# ─── snapshot reads ──────────────────────────────────────────────

@pytest.fixture(params=["memory", "sqlite_file"])
def shared_backend(request):
    """(uow, coordinator) where reads and writes use separate connections."""
    if request.param == "memory":
        return (
            request.getfixturevalue("memory_uow"),
            request.getfixturevalue("memory_coordinator"),
        )
    manager = request.getfixturevalue("file_manager")
    uow = SqlUnitOfWork(manager)
    return uow, TransactionCoordinator(uow, SqlCatalog(manager), base_delay_ms=1)


class _HookAfterBalanceRead:
    """Read scopes run `hook` once, right after the first balance read returns."""

    def __init__(self, inner, hook):
        self._inner = inner
        self._hook = hook

    def begin(self):
        return self._inner.begin()

    @asynccontextmanager
    async def read(self):
        async with self._inner.read() as scope:
            yield SimpleNamespace(
                accounts=_HookedAccounts(scope.accounts, self),
                ledger=scope.ledger,
            )

    async def fire(self):
        hook, self._hook = self._hook, None
        if hook is not None:
            await hook()


class _HookedAccounts:
    def __init__(self, inner, owner: _HookAfterBalanceRead):
        self._inner = inner
        self._owner = owner

    def __getattr__(self, name):
        return getattr(self._inner, name)

    async def get_balance(self, account_id):
        balance = await self._inner.get_balance(account_id)
        await self._owner.fire()
        return balance


async def test_transfer_committing_mid_summary_is_all_or_nothing(shared_backend):
    uow, coordinator = shared_backend
    a = await seed_account(uow, "alice")
    b = await seed_account(uow, "bob")
    pending: list[asyncio.Task] = []

    async def transfer_meanwhile():
        pending.append(asyncio.create_task(coordinator.transfer_coins(a, b, 200)))
        await asyncio.sleep(0.2)

    summary = await AccountSummaryBuilder(
        _HookAfterBalanceRead(uow, transfer_meanwhile),
    ).get_summary(a)
    await asyncio.gather(*pending)

    sent = [(h.counterparty, h.amount) for h in summary.sent]
    assert (summary.balance, sent) in [(1000, []), (800, [("bob", 200)])]

    after = await AccountSummaryBuilder(uow).get_summary(a)
    assert (after.balance, [(h.counterparty, h.amount) for h in after.sent]) == (
        800, [("bob", 200)],
    )
