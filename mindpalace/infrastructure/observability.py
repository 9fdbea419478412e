"""Structured Logging - JSON log lines for sync, durable and snapshot events.

Invariants:
    - Every line carries timestamp (record creation, UTC), level, logger and message
    - Shelf context passed via extra= (collection, partition, error_code, ...) is
      surfaced as top-level keys when set
    - setup_logging() owns at most one root handler; calling it again replaces it

Design Decisions:
    - logging.Formatter subclass, no logging library: the stdlib covers it
    - setup_logging called once on startup via lifespan
"""

import json
import logging
from datetime import datetime, timezone

_EXTRA_KEYS = (
    "collection", "partition", "shelf_id", "item_id",
    "error_code", "shelf_count", "pending", "path",
)
_HANDLER_NAME = "mindpalace"


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (key, record.__dict__[key])
            for key in _EXTRA_KEYS
            if record.__dict__.get(key) is not None
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json", sql_echo: bool = False) -> None:
    """Install the root handler; fmt "json" for deployments, anything else for text."""
    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    # engine statements only when database_echo is on
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if sql_echo else logging.WARNING,
    )
