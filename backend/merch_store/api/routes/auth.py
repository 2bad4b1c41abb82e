"""Auth Route — exchanges username/password for a bearer token.

Invariants:
    - First login for a username provisions the account (starting balance)
    - Wrong password for an existing username -> 401 CREDENTIAL_MISMATCH
"""

import logging

from fastapi import APIRouter, Depends

from merch_store.api.dependencies import get_identity_service
from merch_store.config import Settings, get_settings
from merch_store.infrastructure.tokens import issue_token
from merch_store.schemas.auth import AuthRequest, AuthResponse
from merch_store.services.identity import IdentityService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/auth", response_model=AuthResponse)
async def authenticate(
    body: AuthRequest,
    identity: IdentityService = Depends(get_identity_service),
    settings: Settings = Depends(get_settings),
):
    """Authenticate (or register on first use) and return a JWT."""
    account_id = await identity.resolve_or_create_account(
        body.username, body.password,
    )
    token = issue_token(
        body.username, settings.jwt_secret, settings.jwt_ttl_minutes,
        settings.jwt_algorithm,
    )
    logger.info("Authenticated", extra={"account_id": account_id})
    return AuthResponse(token=token)
