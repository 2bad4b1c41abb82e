"""Error Hierarchy — typed, categorized exceptions for all merch store failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are business outcomes; persistence errors (503) are transient
    - to_response() produces the REST envelope used by every error handler
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with MerchStoreError base: FastAPI global handler catches all
    - ErrorContext as dataclass: observability fields without coupling to logging
    - BalanceConflictError subclasses PersistenceError: callers classify contention
      the same way as any other transient storage failure
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    AUTHENTICATION = "authentication"
    DATABASE = "database"
    CONFLICT = "conflict"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Context attached to an error for the response envelope and logs."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    account_id: int | None = None
    item: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class MerchStoreError(Exception):
    """Base exception for all merch store errors."""

    retryable: bool = False

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "account_id": self.context.account_id,
                    "item": self.context.item,
                    "retryable": self.retryable,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class InvalidArgumentError(MerchStoreError):
    """Operation arguments rejected before any persistence access."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_ARGUMENT", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class InsufficientFundsError(MerchStoreError):
    """Balance below the required amount or price at commit time."""
    def __init__(
        self, account_id: int, balance: int, required: int,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.account_id = account_id
        super().__init__(
            f"Insufficient coins: balance {balance}, required {required}",
            "INSUFFICIENT_FUNDS", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, ctx, 400,
        )
        self.account_id = account_id
        self.balance = balance
        self.required = required


class AccountNotFoundError(MerchStoreError):
    """Sender, recipient or queried account does not exist."""
    def __init__(self, account_ref: int | str, context: ErrorContext | None = None):
        super().__init__(
            f"Account '{account_ref}' not found",
            "ACCOUNT_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.account_ref = account_ref


class ItemNotFoundError(MerchStoreError):
    """Catalog lookup miss."""
    def __init__(self, item_name: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.item = item_name
        super().__init__(
            f"Item '{item_name}' not found",
            "ITEM_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )
        self.item_name = item_name


class CredentialMismatchError(MerchStoreError):
    """Returning username presented a password that does not match."""
    def __init__(self, username: str, context: ErrorContext | None = None):
        super().__init__(
            "Invalid credentials",
            "CREDENTIAL_MISMATCH", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )
        self.username = username


class AuthenticationError(MerchStoreError):
    """Bearer token missing, malformed, expired, or naming an unknown account."""
    def __init__(self, reason: str, context: ErrorContext | None = None):
        super().__init__(
            f"Not authenticated: {reason}",
            "UNAUTHENTICATED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )
        self.reason = reason


class AccountExistsError(MerchStoreError):
    """Username already taken (lost a concurrent provisioning race)."""
    def __init__(self, username: str, context: ErrorContext | None = None):
        super().__init__(
            f"Account '{username}' already exists",
            "ACCOUNT_EXISTS", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )
        self.username = username


# ─── Infrastructure Errors (500-level) ──────────────────────────

class PersistenceError(MerchStoreError):
    """Atomic scope could not be opened or committed. Safe to retry the operation."""

    retryable = True

    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "PERSISTENCE_FAILURE", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class BalanceConflictError(PersistenceError):
    """Compare-and-write on a balance saw a concurrently committed value."""
    def __init__(self, account_id: int, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.account_id = account_id
        super().__init__(
            f"balance of account {account_id} changed concurrently",
            "set_balance", ctx,
        )
        self.code = "BALANCE_CONFLICT"
        self.category = ErrorCategory.CONFLICT
        self.severity = ErrorSeverity.ERROR
        self.http_status = 409
        self.account_id = account_id
