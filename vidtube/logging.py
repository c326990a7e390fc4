"""Logging configuration for VidTube.

Modules log through ``logging.getLogger(__name__)``. Structured context goes in
``extra=`` (for example ``event="media_orphaned"``); the JSON formatter used in
prod lifts those keys to the top level of each line.
"""

import json
import logging
import sys
from datetime import datetime, timezone

from vidtube.config import get_settings

# Attributes every LogRecord carries; anything else arrived through `extra=`
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime", "taskName"}

# Chatty third-party loggers kept at WARNING
_QUIET_LOGGERS = ("aiosqlite", "sqlalchemy.engine", "google.auth", "urllib3")


class JsonFormatter(logging.Formatter):
    """One JSON object per line, with ``extra=`` fields inlined."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS and not key.startswith("_"):
                entry[key] = value
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging() -> None:
    """Install a stdout handler: JSON lines in prod, plain text in dev."""
    settings = get_settings()
    handler = logging.StreamHandler(sys.stdout)

    if settings.env == "prod":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)-7s [%(name)s] %(message)s")
        )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(settings.log_level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
