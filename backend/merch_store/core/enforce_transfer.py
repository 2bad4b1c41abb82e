"""Transfer & Purchase Rules — argument validation and sufficiency checks.

Invariants:
    - Validation runs BEFORE any persistence access
    - Amounts are ints (bool rejected) and strictly positive
    - Self-transfers are rejected: they would append a ledger record that moves nothing
    - check_sufficient_funds is the single place the balance >= required rule lives

Design Decisions:
    - Raise typed errors instead of returning error dicts: the coordinator's atomic
      scope relies on exceptions to trigger rollback
"""

from merch_store.core.domain_types import AccountId
from merch_store.core.errors import InsufficientFundsError, InvalidArgumentError

MAX_ITEM_NAME_LENGTH: int = 100


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_account_id(account_id: object, field: str = "account_id") -> None:
    """Ids are positive ints assigned by the store."""
    if not _is_int(account_id) or account_id <= 0:
        raise InvalidArgumentError(
            f"{field} must be a positive integer, got {account_id!r}", field,
        )


def validate_transfer_args(
    sender_id: AccountId, recipient_id: AccountId, amount: int,
) -> None:
    """Reject malformed transfers before opening a scope."""
    validate_account_id(sender_id, "sender_id")
    validate_account_id(recipient_id, "recipient_id")
    if not _is_int(amount) or amount <= 0:
        raise InvalidArgumentError(
            f"amount must be a positive integer, got {amount!r}", "amount",
        )
    if sender_id == recipient_id:
        raise InvalidArgumentError(
            "cannot transfer coins to yourself", "recipient_id",
        )


def validate_item_name(item_name: object) -> None:
    if not isinstance(item_name, str) or not item_name.strip():
        raise InvalidArgumentError("item name must be a non-empty string", "item")
    if len(item_name) > MAX_ITEM_NAME_LENGTH:
        raise InvalidArgumentError(
            f"item name longer than {MAX_ITEM_NAME_LENGTH} characters", "item",
        )


def check_sufficient_funds(
    account_id: AccountId, balance: int, required: int,
) -> int:
    """Return the balance left after paying `required`, or raise InsufficientFunds."""
    if balance < required:
        raise InsufficientFundsError(account_id, balance, required)
    return balance - required
