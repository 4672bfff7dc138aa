"""UTC timestamps and the JSONL formatter used by system.jsonl."""

from __future__ import annotations

__all__ = [
    "ISO8601Formatter",
    "iso_timestamp",
]

import json
import logging
from datetime import datetime, timezone


def iso_timestamp(created: float | None = None) -> str:
    """Return an ISO 8601 UTC timestamp with milliseconds.

    Format: YYYY-MM-DDTHH:MM:SS.sssZ

    Args:
        created: POSIX timestamp; defaults to now.
    """
    moment = datetime.now(timezone.utc) if created is None else datetime.fromtimestamp(created, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ISO8601Formatter(logging.Formatter):
    """One JSON object per record: time, level, then the event dict.

    Example: {"time": "2025-12-04T10:48:37.123Z", "level": "WARNING", "event": "ipv4_missing", ...}
    """

    def format(self, record: logging.LogRecord) -> str:
        fields = record.msg if isinstance(record.msg, dict) else {"message": str(record.msg)}
        return json.dumps({"time": iso_timestamp(record.created), "level": record.levelname, **fields}, default=str)
