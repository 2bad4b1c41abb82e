"""Database Session Manager — async engine, scoped sessions and transactions.

Invariants:
    - session() rolls back and closes on every exit path; it never commits
    - transaction() commits on normal exit and rolls back on ANY exception, cancellation included
    - snapshot() is read-only and repeatable: a commit landing between two of its
      statements is invisible to both
    - SQLAlchemy exceptions leave this module only as PersistenceError (core/errors.py);
      domain errors raised inside a scope pass through untouched
    - Pool sizing applies to server databases only; SQLite uses SQLAlchemy's defaults

Design Decisions:
    - Singleton db_manager initialized in the FastAPI lifespan, exposed through the
      get_db_manager dependency so tests can override one provider
    - expire_on_commit=False: records are built from ORM rows after commit
    - transaction() nests session.begin() inside session(): begin() owns commit/rollback,
      session() owns error mapping and close
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

from merch_store.core.errors import ErrorContext, PersistenceError

logger = logging.getLogger(__name__)

# Most specific first: IntegrityError/OperationalError are DBAPIError subclasses.
_ERROR_MAP: tuple[tuple[type[SQLAlchemyError], str, str], ...] = (
    (IntegrityError, "constraint violated", "commit"),
    (OperationalError, "database unavailable or busy", "execute"),
    (DBAPIError, "driver error", "query"),
    (SQLAlchemyError, "operation failed", "unknown"),
)
OPERATIONAL_RETRY_AFTER_MS = 1000


class DatabaseSessionManager:
    """Owns the engine and hands out sessions/transactions with error mapping."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        engine_kwargs: dict = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False,
        )

    @classmethod
    def from_factory(
        cls, session_factory: async_sessionmaker[AsyncSession],
    ) -> "DatabaseSessionManager":
        """Wrap an existing session factory (tests, scripts)."""
        manager = cls.__new__(cls)
        manager.engine = session_factory.kw["bind"]
        manager._session_factory = session_factory
        return manager

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Session scope: rollback on error, SQLAlchemy errors mapped."""
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            raise _to_persistence_error(e) from e
        finally:
            await session.close()

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[AsyncSession, None]:
        """Atomic scope: commit on success, rollback on every other exit path."""
        async with self.session() as session:
            async with session.begin():
                yield session

    @asynccontextmanager
    async def snapshot(self) -> AsyncGenerator[AsyncSession, None]:
        """Read scope: every statement sees the same committed state."""
        async with self.session() as session:
            async with session.begin():
                await _pin_snapshot(session)
                yield session

    async def health_check(self) -> bool:
        """SELECT 1 through a fresh session (readiness check)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except (PersistenceError, OSError) as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


def _to_persistence_error(error: SQLAlchemyError) -> PersistenceError:
    for exc_type, message, operation in _ERROR_MAP:
        if isinstance(error, exc_type):
            break
    context = ErrorContext(
        debug_info={"driver_error": type(error).__name__},
        retry_after_ms=(
            OPERATIONAL_RETRY_AFTER_MS
            if isinstance(error, OperationalError) else None
        ),
    )
    logger.error(
        f"DB {operation} error ({type(error).__name__}): {error}",
        extra={"error_code": "PERSISTENCE_FAILURE"},
    )
    return PersistenceError(message, operation, context)


async def _pin_snapshot(session: AsyncSession) -> None:
    """Make the session's transaction hold one read snapshot for its whole life.

    PostgreSQL's default READ COMMITTED re-snapshots per statement, so the
    transaction is raised to REPEATABLE READ. pysqlite never emits BEGIN before a
    SELECT, so each read would run in its own autocommit transaction; an explicit
    BEGIN keeps the read lock (or WAL snapshot) until the scope ends.
    """
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        await session.connection(
            execution_options={"isolation_level": "REPEATABLE READ"},
        )
        return
    connection = await session.connection()
    if dialect == "sqlite":
        await connection.exec_driver_sql("BEGIN")


# Singleton (initialized on startup)
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


def get_db_manager() -> DatabaseSessionManager:
    """FastAPI dependency for the process-wide session manager."""
    if not db_manager:
        raise RuntimeError("Database not initialized")
    return db_manager
