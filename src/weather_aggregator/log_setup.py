"""Logging setup for the weather aggregator."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

from .redaction import sanitize_text

# Record attributes passed via ``extra=`` that are copied into the JSON event.
CONTEXT_FIELDS = ("operation", "provider", "feed")


class JsonConsoleFormatter(logging.Formatter):
    """JSON formatter for structured console logs.

    Fallback and feed logs attach ``operation``/``provider``/``feed`` through
    ``extra=``; those are emitted as top-level keys when present.
    """

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": sanitize_text(record.getMessage()),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                event[field] = sanitize_text(str(value))
        if record.exc_info:
            event["exception"] = sanitize_text(self.formatException(record.exc_info))
        return json.dumps(event, default=str)


def setup_logger(
    name: str = "weather_aggregator", level: int | str = logging.INFO
) -> logging.Logger:
    """Create the process-wide logger, or re-level it if it already exists."""
    logger = logging.getLogger(name)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    logger.propagate = False
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(JsonConsoleFormatter())
    logger.addHandler(handler)
    return logger
