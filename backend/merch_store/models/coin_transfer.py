"""CoinTransfer ORM — append-only ledger of completed transfers.

Invariants:
    - Rows are inserted inside the same atomic scope as both balance updates
    - Never updated or deleted
    - amount > 0
"""

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Index
from sqlalchemy.orm import Mapped, mapped_column

from merch_store.db.base import Base


class CoinTransfer(Base):
    __tablename__ = "coin_transfers"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_coin_transfers_amount_positive"),
        Index("ix_coin_transfers_sender_id", "sender_id"),
        Index("ix_coin_transfers_recipient_id", "recipient_id"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    sender_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("accounts.id"), nullable=False,
    )
    recipient_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("accounts.id"), nullable=False,
    )
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
