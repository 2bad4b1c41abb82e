"""Structured Logging — JSON log lines with the store's domain fields.

Invariants:
    - Every line has timestamp (from the record, UTC), level, logger and message
    - Domain extras (account_id, recipient_id, amount, item, ...) appear only when set
    - setup_logging is idempotent: calling it again replaces its own handler

Design Decisions:
    - stdlib logging + a small formatter instead of a logging library
    - Services receive their logger through the constructor; this module only
      configures handlers on the root logger
"""

import json
import logging
from datetime import datetime, timezone

EXTRA_FIELDS = (
    "account_id", "recipient_id", "amount", "item", "price",
    "error_code", "attempt", "state", "path",
)
TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"

_HANDLER_NAME = "merch_store"


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        line = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc,
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        line.update({
            key: record.__dict__[key]
            for key in EXTRA_FIELDS
            if record.__dict__.get(key) is not None
        })
        if record.exc_info:
            line["exception"] = self.formatException(record.exc_info)
        return json.dumps(line, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Install one stream handler on the root logger ("json" or plain text)."""
    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        JSONFormatter() if fmt == "json" else logging.Formatter(TEXT_FORMAT),
    )
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
