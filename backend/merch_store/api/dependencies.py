"""Request Dependencies — wires services to the SQL adapters and resolves the caller.

Invariants:
    - Services are constructed per request around the process-wide DatabaseSessionManager
    - get_current_account raises AuthenticationError (401) for a missing/invalid token
      or a token naming a username with no account

Design Decisions:
    - Every collaborator is a FastAPI dependency: tests override get_db_manager once
      and the whole graph follows
"""

from dataclasses import dataclass

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from merch_store.config import Settings, get_settings
from merch_store.core.domain_types import AccountId
from merch_store.core.errors import AccountNotFoundError, AuthenticationError
from merch_store.infrastructure.database import (
    DatabaseSessionManager, get_db_manager,
)
from merch_store.infrastructure.sql_store import SqlCatalog, SqlUnitOfWork
from merch_store.infrastructure.tokens import decode_token
from merch_store.services.account_summary import AccountSummaryBuilder
from merch_store.services.identity import IdentityService
from merch_store.services.transaction_coordinator import TransactionCoordinator

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentAccount:
    id: AccountId
    username: str


def get_unit_of_work(
    manager: DatabaseSessionManager = Depends(get_db_manager),
) -> SqlUnitOfWork:
    return SqlUnitOfWork(manager)


def get_catalog(
    manager: DatabaseSessionManager = Depends(get_db_manager),
) -> SqlCatalog:
    return SqlCatalog(manager)


def get_coordinator(
    uow: SqlUnitOfWork = Depends(get_unit_of_work),
    catalog: SqlCatalog = Depends(get_catalog),
    settings: Settings = Depends(get_settings),
) -> TransactionCoordinator:
    return TransactionCoordinator(
        uow, catalog,
        max_attempts=settings.transfer_max_attempts,
        base_delay_ms=settings.transfer_retry_base_delay_ms,
        max_delay_ms=settings.transfer_retry_max_delay_ms,
    )


def get_summary_builder(
    uow: SqlUnitOfWork = Depends(get_unit_of_work),
) -> AccountSummaryBuilder:
    return AccountSummaryBuilder(uow)


def get_identity_service(
    uow: SqlUnitOfWork = Depends(get_unit_of_work),
    settings: Settings = Depends(get_settings),
) -> IdentityService:
    return IdentityService(
        uow,
        starting_balance=settings.starting_balance,
        hash_iterations=settings.password_hash_iterations,
    )


async def get_current_account(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    identity: IdentityService = Depends(get_identity_service),
    settings: Settings = Depends(get_settings),
) -> CurrentAccount:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError("missing bearer token")
    username = decode_token(
        credentials.credentials, settings.jwt_secret, settings.jwt_algorithm,
    )
    try:
        account_id = await identity.account_id_for(username)
    except AccountNotFoundError:
        raise AuthenticationError("unknown account")
    return CurrentAccount(id=account_id, username=username)
