"""
Structured Logging — JSON Lines for the Service, Text for the CLI

Everything logs under the "liquidlens" namespace. The core modules use
logging.getLogger(__name__); the API and the CLI use get_logger().

Context travels in `extra` and only whitelisted keys reach the JSON line:
    logger.warning("Catalog regex failed to compile; skipped",
                   extra={"pattern_name": "ifStatement", "catalog_section": "patterns"})

Environment:
    LIQUIDLENS_LOG_LEVEL   DEBUG | INFO | WARNING ... (default INFO)
    LIQUIDLENS_LOG_FORMAT  json | text (default json)
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import IO, Optional


LOG_LEVEL = os.getenv("LIQUIDLENS_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.getenv("LIQUIDLENS_LOG_FORMAT", "json")

NAMESPACE = "liquidlens"

_CONTEXT_FIELDS = (
    # catalog
    "pattern_name", "catalog_section", "catalog_version",
    # humanize pass
    "fragment_type", "display_mode", "fragments_count", "duration_ms",
    # requests
    "method", "path", "status_code", "key_id",
    # failures
    "error", "error_type",
)


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
            (key, getattr(record, key))
            for key in _CONTEXT_FIELDS
            if getattr(record, key, None) is not None
        )
        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Single-line human-readable records."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)-8s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )


_FORMATTERS = {"json": JSONFormatter, "text": TextFormatter}


def setup_logging(
    log_format: Optional[str] = None,
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """
    (Re)configure the liquidlens logger with a single handler.

    The service logs JSON to stdout. The CLI passes log_format="text" and
    stream=sys.stderr so its own stdout stays machine-readable.
    """
    logger = logging.getLogger(NAMESPACE)
    logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stdout)
    formatter_cls = _FORMATTERS.get(log_format or LOG_FORMAT, JSONFormatter)
    handler.setFormatter(formatter_cls())
    logger.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"{NAMESPACE}.{name}")
