"""Process Logging — stdlib logging setup shared by the library and the structured logger's console.

Invariants:
    - All JSON lines include timestamp, level, logger name, and message
    - Extra fields (category, title, attempt, status_code, error_code, url) surfaced when present
    - setup_logging() installs exactly one handler, however often it is called

Design Decisions:
    - JSONFormatter over third-party libs: the structured logger already owns remote delivery
"""

import json
import logging
from datetime import datetime, timezone

EXTRA_FIELDS = (
    "category", "title", "attempt", "status_code",
    "error_code", "business_code", "url", "method",
)

_HANDLER_NAME = "bridgex"


class JSONFormatter(logging.Formatter):
    """Format log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Configure root logging for the process. Returns the installed handler."""
    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s - %(message)s",
        ))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
