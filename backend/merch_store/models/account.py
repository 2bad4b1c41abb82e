"""Account ORM — an employee identity with a coin balance.

Invariants:
    - id is an autoincrement integer primary key, immutable
    - username is unique and non-null
    - balance >= 0 enforced by a CHECK constraint (last line of defence under the
      coordinator's compare-and-write)
    - password_hash holds salted PBKDF2 material, never plaintext

Design Decisions:
    - No ORM relationships: balances are written with explicit UPDATE statements so
      the identity map never holds a stale balance
"""

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from merch_store.core.domain_types import STARTING_BALANCE
from merch_store.db.base import Base


class Account(Base):
    """Account row — one per employee."""
    __tablename__ = "accounts"
    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_accounts_balance_non_negative"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    username: Mapped[str] = mapped_column(
        String(100), nullable=False, unique=True,
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    balance: Mapped[int] = mapped_column(
        Integer, nullable=False, default=STARTING_BALANCE,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
