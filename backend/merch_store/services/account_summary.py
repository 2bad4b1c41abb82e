"""Account Summary Builder — balance, inventory and coin history for one account.

Invariants:
    - Read-only: runs in UnitOfWork.read(), never takes a write lock
    - AccountNotFound raised for unknown accounts before any ledger read
    - History keeps ledger insertion order
"""

import logging

from merch_store.core.compose_summary import compose_summary, counterparty_ids
from merch_store.core.domain_types import AccountId
from merch_store.core.enforce_transfer import validate_account_id
from merch_store.core.records import AccountSummary
from merch_store.core.repository_protocols import UnitOfWork


class AccountSummaryBuilder:
    def __init__(self, uow: UnitOfWork, logger: logging.Logger | None = None):
        self._uow = uow
        self._logger = logger or logging.getLogger(__name__)

    async def get_summary(self, account_id: AccountId) -> AccountSummary:
        validate_account_id(account_id)
        async with self._uow.read() as scope:
            balance = await scope.accounts.get_balance(account_id)
            inventory = await scope.ledger.inventory_of(account_id)
            transfers = await scope.ledger.transfers_of(account_id)
            names = await scope.accounts.usernames(
                counterparty_ids(account_id, transfers),
            )
        self._logger.debug(
            "Summary built",
            extra={"account_id": account_id, "amount": balance},
        )
        return compose_summary(account_id, balance, inventory, transfers, names)
