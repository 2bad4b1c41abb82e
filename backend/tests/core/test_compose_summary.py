"""Summary Composition — tests for the pure sent/received split.

Tests cover:
    - Transfers split by direction with counterparty names
    - Insertion order preserved
    - counterparty_ids deduplicates in first-seen order
"""

from datetime import datetime, timezone

from merch_store.core.compose_summary import compose_summary, counterparty_ids
from merch_store.core.records import InventoryEntry, TransferRecord

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _t(sender, recipient, amount):
    return TransferRecord(sender, recipient, amount, NOW)


def test_transfers_split_into_sent_and_received():
    transfers = [_t(1, 2, 200), _t(3, 1, 50)]
    names = {2: "bob", 3: "carol"}

    summary = compose_summary(1, 850, [], transfers, names)

    assert summary.balance == 850
    assert [(h.counterparty, h.amount) for h in summary.sent] == [("bob", 200)]
    assert [(h.counterparty, h.amount) for h in summary.received] == [("carol", 50)]


def test_history_keeps_insertion_order():
    transfers = [_t(1, 2, 5), _t(1, 3, 7), _t(1, 2, 9)]
    summary = compose_summary(1, 0, [], transfers, {2: "b", 3: "c"})
    assert [h.amount for h in summary.sent] == [5, 7, 9]


def test_inventory_passed_through():
    inventory = [InventoryEntry(1, "cup", 2)]
    summary = compose_summary(1, 960, inventory, [], {})
    assert summary.inventory == inventory
    assert summary.received == []
    assert summary.sent == []


def test_counterparty_ids_deduplicated_first_seen():
    transfers = [_t(1, 3, 5), _t(2, 1, 5), _t(1, 3, 5)]
    assert counterparty_ids(1, transfers) == [3, 2]


def test_unknown_counterparty_name_is_empty():
    summary = compose_summary(1, 0, [], [_t(1, 9, 1)], {})
    assert summary.sent[0].counterparty == ""
    assert summary.sent[0].counterparty_id == 9
