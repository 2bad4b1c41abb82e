"""Transaction Coordinator — coin transfers and merch purchases as single atomic units.

Invariants:
    - Arguments validated before any persistence access
    - Every write happens inside one UnitOfWork.begin() scope: sender debit, recipient
      credit and ledger append (or debit and inventory grant) commit together or not at all
    - Balances are read under a write lock and written with compare-and-write, so two
      concurrent debits can never both pass a sufficiency check that allows overdraft
    - A compare-and-write miss rolls back the scope and retries the WHOLE operation,
      re-reading balances; InsufficientFunds and not-found errors are never retried
    - Coins are conserved: a transfer moves exactly `amount`, a purchase removes exactly `price`

Design Decisions:
    - Scoped acquisition (async with) instead of a manual rollback flag: commit-on-success
      and rollback-on-any-exit live in the UnitOfWork, not in every code path here
    - Exponential backoff with jitter between retries: prevents contending writers from
      re-colliding in lockstep
    - OperationState tracked only for logging: the aborted state is reported with the
      last state reached, so logs show how far an operation got before rollback
"""

import asyncio
import logging
import random
from typing import Awaitable, Callable, TypeVar

from merch_store.core.domain_types import AccountId, OperationKind, OperationState
from merch_store.core.enforce_transfer import (
    check_sufficient_funds, validate_account_id, validate_item_name,
    validate_transfer_args,
)
from merch_store.core.errors import BalanceConflictError, MerchStoreError
from merch_store.core.records import InventoryEntry, TransferRecord
from merch_store.core.repository_protocols import Catalog, UnitOfWork

T = TypeVar("T")


class TransactionCoordinator:
    """Runs transfer and purchase operations against the account store and ledger."""

    def __init__(
        self,
        uow: UnitOfWork,
        catalog: Catalog,
        max_attempts: int = 5,
        base_delay_ms: int = 5,
        max_delay_ms: int = 200,
        logger: logging.Logger | None = None,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._uow = uow
        self._catalog = catalog
        self._max_attempts = max_attempts
        self._base_delay_ms = base_delay_ms
        self._max_delay_ms = max_delay_ms
        self._logger = logger or logging.getLogger(__name__)

    async def transfer_coins(
        self, sender_id: AccountId, recipient_id: AccountId, amount: int,
    ) -> TransferRecord:
        """Move `amount` coins from sender to recipient and record the transfer."""
        validate_transfer_args(sender_id, recipient_id, amount)
        extra = {
            "account_id": sender_id, "recipient_id": recipient_id,
            "amount": amount,
        }
        self._logger.info("Transfer requested", extra=extra)
        record = await self._with_retry(
            OperationKind.TRANSFER,
            lambda: self._transfer_once(sender_id, recipient_id, amount),
            extra,
        )
        self._logger.info(
            "Transfer committed",
            extra={**extra, "state": OperationState.COMMITTED.value},
        )
        return record

    async def buy_item(
        self, account_id: AccountId, item_name: str,
    ) -> InventoryEntry:
        """Debit the item's price and add one unit to the account's inventory."""
        validate_account_id(account_id)
        validate_item_name(item_name)
        price = await self._catalog.get_price(item_name)
        extra = {"account_id": account_id, "item": item_name, "price": price}
        self._logger.info("Purchase requested", extra=extra)
        entry = await self._with_retry(
            OperationKind.PURCHASE,
            lambda: self._buy_once(account_id, item_name, price),
            extra,
        )
        self._logger.info(
            "Purchase committed",
            extra={**extra, "state": OperationState.COMMITTED.value},
        )
        return entry

    # ─── single attempts ─────────────────────────────────────────

    async def _transfer_once(
        self, sender_id: AccountId, recipient_id: AccountId, amount: int,
    ) -> TransferRecord:
        state = OperationState.STARTED
        try:
            async with self._uow.begin() as scope:
                balances = await scope.accounts.lock_balances(
                    [sender_id, recipient_id],
                )
                sender_before = balances[sender_id]
                recipient_before = balances[recipient_id]
                sender_after = check_sufficient_funds(
                    sender_id, sender_before, amount,
                )
                state = OperationState.BALANCE_CHECKED

                await scope.accounts.set_balance(
                    sender_id, sender_after, sender_before,
                )
                await scope.accounts.set_balance(
                    recipient_id, recipient_before + amount, recipient_before,
                )
                state = OperationState.BALANCE_UPDATED

                record = await scope.ledger.append_transfer(
                    sender_id, recipient_id, amount,
                )
                state = OperationState.LEDGER_APPENDED
        except MerchStoreError as e:
            self._log_abort(OperationKind.TRANSFER, state, e, sender_id)
            raise
        return record

    async def _buy_once(
        self, account_id: AccountId, item_name: str, price: int,
    ) -> InventoryEntry:
        state = OperationState.STARTED
        try:
            async with self._uow.begin() as scope:
                balances = await scope.accounts.lock_balances([account_id])
                before = balances[account_id]
                after = check_sufficient_funds(account_id, before, price)
                state = OperationState.BALANCE_CHECKED

                await scope.accounts.set_balance(account_id, after, before)
                state = OperationState.BALANCE_UPDATED

                entry = await scope.ledger.grant_item(account_id, item_name)
                state = OperationState.LEDGER_APPENDED
        except MerchStoreError as e:
            self._log_abort(OperationKind.PURCHASE, state, e, account_id)
            raise
        return entry

    # ─── retry policy ────────────────────────────────────────────

    async def _with_retry(
        self,
        kind: OperationKind,
        attempt_fn: Callable[[], Awaitable[T]],
        extra: dict,
    ) -> T:
        for attempt in range(1, self._max_attempts + 1):
            try:
                return await attempt_fn()
            except BalanceConflictError:
                if attempt >= self._max_attempts:
                    self._logger.error(
                        f"{kind.value} gave up after {attempt} attempts",
                        extra={**extra, "attempt": attempt},
                    )
                    raise
                delay = self._backoff(attempt)
                self._logger.warning(
                    f"{kind.value} lost a balance race, retry after {delay}ms",
                    extra={**extra, "attempt": attempt},
                )
                await asyncio.sleep(delay / 1000)
        raise AssertionError("unreachable")

    def _backoff(self, attempt: int) -> int:
        """Exponential backoff with ±25% jitter."""
        delay = min(self._max_delay_ms, (2 ** (attempt - 1)) * self._base_delay_ms)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311

    def _log_abort(
        self,
        kind: OperationKind,
        state: OperationState,
        error: MerchStoreError,
        account_id: AccountId,
    ) -> None:
        self._logger.warning(
            f"{kind.value} aborted after {state.value}: {error.message}",
            extra={
                "account_id": account_id,
                "error_code": error.code,
                "state": OperationState.ABORTED.value,
            },
        )
