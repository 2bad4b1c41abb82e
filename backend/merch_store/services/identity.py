"""Identity Service — resolves a username/password to an account, provisioning on first login.

Invariants:
    - First-time usernames get an account with the starting balance (1000 coins)
    - Returning usernames must match the stored salted hash or CredentialMismatch is raised
    - Plaintext passwords never reach the store
    - A lost provisioning race (AccountExists) re-reads the winner's row and verifies
      the password against it

Design Decisions:
    - Provisioning opens its own write scope; it shares the account store with the
      coordinator but not the coordinator's scope
"""

import logging

from merch_store.core.domain_types import STARTING_BALANCE, AccountId
from merch_store.core.errors import (
    AccountExistsError, AccountNotFoundError, CredentialMismatchError,
    InvalidArgumentError,
)
from merch_store.core.passwords import (
    DEFAULT_ITERATIONS, hash_password, verify_password,
)
from merch_store.core.records import AccountRecord
from merch_store.core.repository_protocols import UnitOfWork

MAX_USERNAME_LENGTH = 100
MAX_PASSWORD_LENGTH = 100


class IdentityService:
    def __init__(
        self,
        uow: UnitOfWork,
        starting_balance: int = STARTING_BALANCE,
        hash_iterations: int = DEFAULT_ITERATIONS,
        logger: logging.Logger | None = None,
    ):
        self._uow = uow
        self._starting_balance = starting_balance
        self._hash_iterations = hash_iterations
        self._logger = logger or logging.getLogger(__name__)

    async def resolve_or_create_account(
        self, username: str, password: str,
    ) -> AccountId:
        _validate_credentials(username, password)
        async with self._uow.read() as scope:
            existing = await scope.accounts.find_by_username(username)
        if existing is not None:
            return self._verify(existing, password)

        password_hash = hash_password(password, self._hash_iterations)
        try:
            async with self._uow.begin() as scope:
                account = await scope.accounts.create_account(
                    username, password_hash, self._starting_balance,
                )
        except AccountExistsError:
            self._logger.info(
                f"Concurrent provisioning for '{username}', verifying against winner",
            )
            async with self._uow.read() as scope:
                existing = await scope.accounts.find_by_username(username)
            if existing is None:
                raise
            return self._verify(existing, password)

        self._logger.info(
            f"Provisioned account for '{username}'",
            extra={"account_id": account.id, "amount": account.balance},
        )
        return account.id

    async def account_id_for(self, username: str) -> AccountId:
        """Resolve a username to its account id (request layer helper)."""
        async with self._uow.read() as scope:
            account = await scope.accounts.find_by_username(username)
        if account is None:
            raise AccountNotFoundError(username)
        return account.id

    def _verify(self, account: AccountRecord, password: str) -> AccountId:
        if not verify_password(password, account.password_hash):
            self._logger.warning(
                f"Invalid credentials for '{account.username}'",
                extra={"account_id": account.id},
            )
            raise CredentialMismatchError(account.username)
        return account.id


def _validate_credentials(username: str, password: str) -> None:
    if not isinstance(username, str) or not username.strip():
        raise InvalidArgumentError("username must be a non-empty string", "username")
    if len(username) > MAX_USERNAME_LENGTH:
        raise InvalidArgumentError(
            f"username longer than {MAX_USERNAME_LENGTH} characters", "username",
        )
    if not isinstance(password, str) or not password:
        raise InvalidArgumentError("password must be a non-empty string", "password")
    if len(password) > MAX_PASSWORD_LENGTH:
        raise InvalidArgumentError(
            f"password longer than {MAX_PASSWORD_LENGTH} characters", "password",
        )
