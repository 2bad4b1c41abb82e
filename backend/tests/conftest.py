"""Root conftest — shared test configuration."""

import os

# Ensure tests never reach a real database or use a production secret
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("PASSWORD_HASH_ITERATIONS", "1000")
