"""Logging setup for the CLI.

Two formats:
- `text`: rich console handler, human-readable
- `json`: one JSON object per line, including `extra=` context fields
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMATS = ("text", "json")

# Context fields monitors attach through `extra=`.
CONTEXT_FIELDS = (
    "monitor",
    "stage",
    "operation",
    "block_number",
    "tx_hash",
    "address",
    "topics",
    "rule",
    "priority",
    "error",
)


class JSONFormatter(logging.Formatter):
    """Structured JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in CONTEXT_FIELDS:
            if hasattr(record, key):
                entry[key] = getattr(record, key)
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class ContextFormatter(logging.Formatter):
    """Append `key=value` context fields to the message for the text format."""

    def format(self, record: logging.LogRecord) -> str:
        msg = super().format(record)
        ctx = " ".join(f"{k}={getattr(record, k)}" for k in CONTEXT_FIELDS if hasattr(record, k))
        return f"{msg} {ctx}" if ctx else msg


def setup_logging(level: str = "INFO", fmt: str = "text") -> None:
    """Configure the root logger once for the whole process."""
    if fmt not in LOG_FORMATS:
        raise ValueError(f"unknown log format {fmt!r}, expected one of {LOG_FORMATS}")

    handler: logging.Handler
    if fmt == "json":
        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
    else:
        handler = RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)
        handler.setFormatter(ContextFormatter("%(name)s: %(message)s"))

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(handler)
    root.setLevel(level.upper())
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
