"""Async Session Factory — provides async DB sessions outside FastAPI.

Invariants:
    - Meant for scripts, migrations, and test fixtures

Design Decisions:
    - Separate from infrastructure/database.py: alembic and test fixtures need a raw
      session factory without the app's singleton manager
    - sqlite_timeout: file-backed SQLite serializes writers by waiting on its lock;
      concurrent-transfer tests need a generous wait
"""

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool


def create_session_factory(
    database_url: str, sqlite_timeout: float | None = None,
) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory for the given database URL."""
    kwargs: dict = {"echo": False}
    if sqlite_timeout is not None:
        kwargs["connect_args"] = {"timeout": sqlite_timeout}
        kwargs["poolclass"] = NullPool
    engine = create_async_engine(database_url, **kwargs)
    return async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False,
    )
