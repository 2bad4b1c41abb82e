"""Service test fixtures — in-memory and SQLite-backed units of work, FastAPI test client.

Invariants:
    - Every test gets a fresh database (in-memory or tmp-file SQLite) or a fresh
      InMemoryUnitOfWork
    - get_db_manager dependency overridden to use the test engine
    - db_manager module global patched for the readiness check

Design Decisions:
    - SQLite in-memory with StaticPool: one shared connection, fast, no external dependency
    - Coordinator retry delays set to 1ms: contention tests stay fast
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import StaticPool
from httpx import ASGITransport, AsyncClient

from merch_store.config import Settings, get_settings
from merch_store.db.session import create_session_factory
from merch_store.infrastructure.database import (
    DatabaseSessionManager, get_db_manager,
)
from merch_store.infrastructure.memory_store import (
    InMemoryUnitOfWork, StaticCatalog,
)
from merch_store.infrastructure.sql_store import SqlCatalog, SqlUnitOfWork
from merch_store.services.transaction_coordinator import TransactionCoordinator
import merch_store.infrastructure.database as db_module
from merch_store.main import app
from tests.helpers import create_schema, drop_schema


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    await create_schema(engine)
    yield engine
    await drop_schema(engine)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
def test_manager(test_session_factory):
    return DatabaseSessionManager.from_factory(test_session_factory)


@pytest.fixture
def sql_uow(test_manager):
    return SqlUnitOfWork(test_manager)


@pytest.fixture
def sql_coordinator(sql_uow, test_manager):
    return TransactionCoordinator(
        sql_uow, SqlCatalog(test_manager), base_delay_ms=1,
    )


@pytest.fixture
async def file_manager(tmp_path):
    """File-backed SQLite, one connection per session: real cross-session races."""
    factory = create_session_factory(
        f"sqlite+aiosqlite:///{tmp_path}/store.db", sqlite_timeout=30,
    )
    manager = DatabaseSessionManager.from_factory(factory)
    await create_schema(manager.engine)
    yield manager
    await manager.dispose()


@pytest.fixture
def memory_uow():
    return InMemoryUnitOfWork()


@pytest.fixture
def memory_coordinator(memory_uow):
    return TransactionCoordinator(
        memory_uow, StaticCatalog(), base_delay_ms=1,
    )


@pytest.fixture
def test_settings():
    return Settings(
        jwt_secret="test-secret",
        password_hash_iterations=1000,
        transfer_retry_base_delay_ms=1,
    )


@pytest.fixture
async def client(test_manager, test_settings):
    """FastAPI test client with DB and settings dependencies overridden."""
    app.dependency_overrides[get_db_manager] = lambda: test_manager
    app.dependency_overrides[get_settings] = lambda: test_settings

    original_manager = db_module.db_manager
    db_module.db_manager = test_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
