"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - AccountId wraps the integer primary key — never pass usernames where an id is expected
    - Coin amounts are plain ints; balances never go below zero
    - Operation lifecycle states encoded as an Enum — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and log extras without custom encoders
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

AccountId = NewType("AccountId", int)


# ─── Constants ───────────────────────────────────────────────────

STARTING_BALANCE: int = 1000


# ─── Enums ───────────────────────────────────────────────────────

class OperationState(str, Enum):
    """Lifecycle of one transfer or purchase. Only COMMITTED/ABORTED are terminal."""
    STARTED = "started"
    BALANCE_CHECKED = "balance_checked"
    BALANCE_UPDATED = "balance_updated"
    LEDGER_APPENDED = "ledger_appended"
    COMMITTED = "committed"
    ABORTED = "aborted"


class OperationKind(str, Enum):
    """The two write operations the coordinator runs inside an atomic scope."""
    TRANSFER = "transfer"
    PURCHASE = "purchase"
