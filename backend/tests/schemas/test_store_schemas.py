"""Store schemas — camelCase wire names and boundary validation.

Invariants:
    - SendCoinRequest accepts toUser (wire) and to_user (Python name)
    - amount must be a positive integer
    - InfoResponse dumps by alias: coins, inventory[type, quantity], coinHistory
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from merch_store.core.records import (
    AccountSummary, CatalogItem, HistoryEntry, InventoryEntry,
)
from merch_store.schemas.auth import AuthRequest
from merch_store.schemas.store import (
    InfoResponse, MerchListResponse, PurchaseResponse, SendCoinRequest,
)

NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


# --- SendCoinRequest ----------------------------------------------------------

def test_send_coin_accepts_wire_alias():
    req = SendCoinRequest.model_validate({"toUser": "bob", "amount": 5})
    assert (req.to_user, req.amount) == ("bob", 5)


def test_send_coin_accepts_python_name():
    assert SendCoinRequest(to_user="bob", amount=5).to_user == "bob"


@pytest.mark.parametrize("amount", [0, -1, "ten", 1.5])
def test_send_coin_rejects_bad_amount(amount):
    with pytest.raises(ValidationError):
        SendCoinRequest.model_validate({"toUser": "bob", "amount": amount})


def test_send_coin_rejects_empty_recipient():
    with pytest.raises(ValidationError):
        SendCoinRequest.model_validate({"toUser": "", "amount": 1})


# --- AuthRequest --------------------------------------------------------------

def test_auth_request_strips_username():
    assert AuthRequest(username="  alice ", password="pw").username == "alice"


def test_auth_request_rejects_long_password():
    with pytest.raises(ValidationError):
        AuthRequest(username="alice", password="x" * 101)


# --- responses ----------------------------------------------------------------

def test_info_response_from_summary_uses_wire_names():
    summary = AccountSummary(
        account_id=1,
        balance=780,
        inventory=[InventoryEntry(1, "cup", 2)],
        received=[HistoryEntry(3, "carol", 30, NOW)],
        sent=[HistoryEntry(2, "bob", 250, NOW)],
    )

    body = InfoResponse.from_summary(summary).model_dump(by_alias=True)

    assert body == {
        "coins": 780,
        "inventory": [{"type": "cup", "quantity": 2}],
        "coinHistory": {
            "received": [{"fromUser": "carol", "amount": 30}],
            "sent": [{"toUser": "bob", "amount": 250}],
        },
    }


def test_purchase_response_from_entry():
    body = PurchaseResponse.from_entry(InventoryEntry(1, "pen", 3)).model_dump()
    assert body == {"status": "ok", "item": "pen", "quantity": 3}


def test_merch_list_keeps_catalog_order():
    items = [CatalogItem("pen", 10), CatalogItem("cup", 20)]
    body = MerchListResponse.from_items(items).model_dump()
    assert [i["name"] for i in body["items"]] == ["pen", "cup"]
