"""Log formatters that carry the planning context.

Records are expected to have passed PlanContextFilter, which sets
``file_path`` and ``stream_index``. Records that did not are formatted
without context.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import PurePath
from typing import Any

# Attributes of a bare LogRecord, plus the ones added by filters and formatters
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", logging.NOTSET, "", 0, "", None, None))
) | {"message", "asctime", "file_path", "stream_index", "plan_tag"}


def context_tag(record: logging.LogRecord) -> str:
    """Return a tag such as ``[clip.mp4 #1] `` for the record's planning context."""
    parts = []
    file_path = getattr(record, "file_path", None)
    if file_path:
        parts.append(PurePath(file_path).name)
    stream_index = getattr(record, "stream_index", None)
    if stream_index is not None:
        parts.append(f"#{stream_index}")
    return f"[{' '.join(parts)}] " if parts else ""


class PlanTextFormatter(logging.Formatter):
    """Single-line text records tagged with the file and stream being planned."""

    def __init__(self) -> None:
        super().__init__(
            "%(asctime)s %(levelname)s %(name)s: %(plan_tag)s%(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )

    def formatMessage(self, record: logging.LogRecord) -> str:
        record.plan_tag = context_tag(record)
        return super().formatMessage(record)


class JSONFormatter(logging.Formatter):
    """Format log records as one JSON object per line.

    The planning context is written as top-level ``file`` and ``stream`` keys
    so a log can be filtered per media file. Any other ``extra`` attributes
    are collected under ``extra``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        file_path = getattr(record, "file_path", None)
        if file_path is not None:
            entry["file"] = file_path
        stream_index = getattr(record, "stream_index", None)
        if stream_index is not None:
            entry["stream"] = stream_index

        extra = {
            key: value
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        }
        if extra:
            entry["extra"] = extra
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)
