"""Store Routes — account info, coin transfers, purchases and the merch catalog.

Invariants:
    - Every route except /merch requires a bearer token
    - Routes translate wire shapes only; the coordinator and summary builder own the rules
    - Recipient usernames resolved to ids before the transfer scope opens
"""

import logging

from fastapi import APIRouter, Depends

from merch_store.api.dependencies import (
    CurrentAccount, get_catalog, get_coordinator, get_current_account,
    get_identity_service, get_summary_builder,
)
from merch_store.infrastructure.sql_store import SqlCatalog
from merch_store.schemas.store import (
    InfoResponse, MerchListResponse, PurchaseResponse, SendCoinRequest,
    StatusResponse,
)
from merch_store.services.account_summary import AccountSummaryBuilder
from merch_store.services.identity import IdentityService
from merch_store.services.transaction_coordinator import TransactionCoordinator

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["store"])


@router.get("/info", response_model=InfoResponse)
async def get_info(
    current: CurrentAccount = Depends(get_current_account),
    summaries: AccountSummaryBuilder = Depends(get_summary_builder),
):
    """Balance, inventory and coin history of the caller."""
    summary = await summaries.get_summary(current.id)
    return InfoResponse.from_summary(summary)


@router.post("/sendCoin", response_model=StatusResponse)
async def send_coin(
    body: SendCoinRequest,
    current: CurrentAccount = Depends(get_current_account),
    identity: IdentityService = Depends(get_identity_service),
    coordinator: TransactionCoordinator = Depends(get_coordinator),
):
    """Transfer coins from the caller to another employee."""
    recipient_id = await identity.account_id_for(body.to_user)
    await coordinator.transfer_coins(current.id, recipient_id, body.amount)
    return StatusResponse()


@router.get("/buy/{item}", response_model=PurchaseResponse)
async def buy_item(
    item: str,
    current: CurrentAccount = Depends(get_current_account),
    coordinator: TransactionCoordinator = Depends(get_coordinator),
):
    """Buy one unit of `item` for the caller."""
    entry = await coordinator.buy_item(current.id, item)
    return PurchaseResponse.from_entry(entry)


@router.get("/merch", response_model=MerchListResponse)
async def list_merch(catalog: SqlCatalog = Depends(get_catalog)):
    """Public price list."""
    return MerchListResponse.from_items(await catalog.list_items())
