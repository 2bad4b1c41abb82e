"""Summary Composition — pure assembly of an AccountSummary from ledger rows.

Invariants:
    - Pure: same inputs, same output; no IO
    - A transfer lands in `sent` when the account is sender, in `received` when recipient
    - Input order is preserved within each list

Design Decisions:
    - Counterparty names resolved by the caller and passed in as a mapping: keeps this
      function independent of how usernames are stored
"""

from merch_store.core.domain_types import AccountId
from merch_store.core.records import (
    AccountSummary, HistoryEntry, InventoryEntry, TransferRecord,
)


def counterparty_ids(
    account_id: AccountId, transfers: list[TransferRecord],
) -> list[AccountId]:
    """Distinct ids on the other side of the account's transfers, first-seen order."""
    seen: dict[AccountId, None] = {}
    for t in transfers:
        other = t.recipient_id if t.sender_id == account_id else t.sender_id
        seen.setdefault(other, None)
    return list(seen)


def compose_summary(
    account_id: AccountId,
    balance: int,
    inventory: list[InventoryEntry],
    transfers: list[TransferRecord],
    names: dict[AccountId, str],
) -> AccountSummary:
    received: list[HistoryEntry] = []
    sent: list[HistoryEntry] = []
    for t in transfers:
        if t.sender_id == account_id:
            sent.append(HistoryEntry(
                counterparty_id=t.recipient_id,
                counterparty=names.get(t.recipient_id, ""),
                amount=t.amount,
                created_at=t.created_at,
            ))
        if t.recipient_id == account_id:
            received.append(HistoryEntry(
                counterparty_id=t.sender_id,
                counterparty=names.get(t.sender_id, ""),
                amount=t.amount,
                created_at=t.created_at,
            ))
    return AccountSummary(
        account_id=account_id,
        balance=balance,
        inventory=list(inventory),
        received=received,
        sent=sent,
    )
