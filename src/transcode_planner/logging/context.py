"""Planning context for structured logging.

Uses contextvars so that every record logged while a file or stream is being
planned carries the file path and stream index, without passing them through
each resolver.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_file_path: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "file_path", default=None
)
_stream_index: contextvars.ContextVar[int | None] = contextvars.ContextVar(
    "stream_index", default=None
)


def get_plan_context() -> tuple[str | None, int | None]:
    """Get current planning context.

    Returns:
        Tuple of (file_path, stream_index), either may be None.
    """
    return _file_path.get(), _stream_index.get()


@contextmanager
def plan_context(file_path: Path | str | None) -> Generator[None, None, None]:
    """Context manager for planning a single file.

    Example:
        with plan_context("/media/clip.mp4"):
            logger.info("Planning")  # Record carries file_path
    """
    token = _file_path.set(str(file_path) if file_path is not None else None)
    try:
        yield
    finally:
        _file_path.reset(token)


@contextmanager
def stream_context(stream_index: int) -> Generator[None, None, None]:
    """Context manager for resolving a single stream within a file."""
    token = _stream_index.set(stream_index)
    try:
        yield
    finally:
        _stream_index.reset(token)


class PlanContextFilter(logging.Filter):
    """Logging filter that copies the planning context onto log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        file_path, stream_index = get_plan_context()
        record.file_path = file_path
        record.stream_index = stream_index
        return True
