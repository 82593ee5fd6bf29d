"""JSON log lines on stderr, kept apart from command output on stdout."""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import TextIO

# ``extra`` keys copied into each log line
LOG_FIELDS = (
    "event",
    "model",
    "url",
    "cache_file",
    "status_code",
    "error_code",
    "count",
)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        """Render one record as compact JSON stamped with its creation time."""
        created = datetime.fromtimestamp(record.created, UTC)
        payload: dict[str, object] = {
            "timestamp": created.isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (field, getattr(record, field))
            for field in LOG_FIELDS
            if hasattr(record, field)
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, separators=(",", ":"), default=str)


def configure_logging(
    verbose: bool = False, stream: TextIO | None = None
) -> None:
    """Log warnings, or everything from INFO up when ``verbose``.

    An existing host configuration keeps its handlers; only the level of
    this package's loggers is adjusted.
    """
    level = logging.INFO if verbose else logging.WARNING
    logging.getLogger("orpricing").setLevel(level)

    root_logger = logging.getLogger()
    if root_logger.handlers:
        return

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)
