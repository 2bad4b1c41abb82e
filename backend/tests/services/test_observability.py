"""JSON log formatter — base fields always present, domain extras only when set."""

import json
import logging

from merch_store.infrastructure.observability import JSONFormatter, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "merch_store.test", logging.INFO, __file__, 1, "Transfer committed",
        None, None,
    )
    record.__dict__.update(extra)
    return record


def test_base_fields_present():
    log = json.loads(JSONFormatter().format(_record()))
    assert log["level"] == "INFO"
    assert log["logger"] == "merch_store.test"
    assert log["message"] == "Transfer committed"
    assert "timestamp" in log
    assert "account_id" not in log


def test_domain_extras_surfaced():
    log = json.loads(JSONFormatter().format(
        _record(account_id=7, recipient_id=9, amount=200, unrelated="x"),
    ))
    assert (log["account_id"], log["recipient_id"], log["amount"]) == (7, 9, 200)
    assert "unrelated" not in log


def test_setup_logging_is_idempotent():
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    try:
        setup_logging("DEBUG", "json")
        setup_logging("WARNING", "text")
        ours = [h for h in root.handlers if h not in before]
        assert len(ours) == 1
        assert not isinstance(ours[0].formatter, JSONFormatter)
        assert root.level == logging.WARNING
    finally:
        for h in root.handlers[:]:
            if h not in before:
                root.removeHandler(h)
        root.setLevel(level)
