"""Store Schemas — coin transfer request, account info and purchase responses.

Invariants:
    - SendCoinRequest.amount > 0 (the coordinator re-checks before touching the store)
    - InfoResponse mirrors AccountSummary: coins, inventory, coinHistory{received, sent}

Design Decisions:
    - Aliases carry the camelCase wire names; populate_by_name lets tests and
      services build responses with Python names
"""

from pydantic import BaseModel, ConfigDict, Field

from merch_store.core.records import AccountSummary, CatalogItem, InventoryEntry


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SendCoinRequest(_WireModel):
    to_user: str = Field(alias="toUser", min_length=1, max_length=100)
    amount: int = Field(gt=0)


class InventoryItemOut(_WireModel):
    type: str
    quantity: int


class ReceivedOut(_WireModel):
    from_user: str = Field(alias="fromUser")
    amount: int


class SentOut(_WireModel):
    to_user: str = Field(alias="toUser")
    amount: int


class CoinHistoryOut(_WireModel):
    received: list[ReceivedOut]
    sent: list[SentOut]


class InfoResponse(_WireModel):
    coins: int
    inventory: list[InventoryItemOut]
    coin_history: CoinHistoryOut = Field(alias="coinHistory")

    @classmethod
    def from_summary(cls, summary: AccountSummary) -> "InfoResponse":
        return cls(
            coins=summary.balance,
            inventory=[
                InventoryItemOut(type=i.item_name, quantity=i.quantity)
                for i in summary.inventory
            ],
            coin_history=CoinHistoryOut(
                received=[
                    ReceivedOut(from_user=h.counterparty, amount=h.amount)
                    for h in summary.received
                ],
                sent=[
                    SentOut(to_user=h.counterparty, amount=h.amount)
                    for h in summary.sent
                ],
            ),
        )


class StatusResponse(_WireModel):
    status: str = "ok"


class PurchaseResponse(StatusResponse):
    item: str
    quantity: int

    @classmethod
    def from_entry(cls, entry: InventoryEntry) -> "PurchaseResponse":
        return cls(item=entry.item_name, quantity=entry.quantity)


class MerchItemOut(_WireModel):
    name: str
    price: int


class MerchListResponse(_WireModel):
    items: list[MerchItemOut]

    @classmethod
    def from_items(cls, items: list[CatalogItem]) -> "MerchListResponse":
        return cls(items=[MerchItemOut(name=i.name, price=i.price) for i in items])
