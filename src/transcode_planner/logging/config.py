"""Root logger setup for the tplan CLI."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

from transcode_planner.logging.context import PlanContextFilter
from transcode_planner.logging.handlers import JSONFormatter, PlanTextFormatter

if TYPE_CHECKING:
    from transcode_planner.config.models import LoggingConfig


def _open_log_file(config: LoggingConfig) -> logging.Handler | None:
    """Open the rotating log file, or return None if it cannot be created."""
    path = Path(config.file).expanduser()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return RotatingFileHandler(
            path,
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
    except OSError as e:
        # Logging is not set up yet, so report straight to stderr
        sys.stderr.write(f"Warning: cannot open log file {path}: {e}\n")
        return None


def configure_logging(config: LoggingConfig) -> None:
    """Replace the root logger's handlers according to ``config``.

    Records go to the log file when one is configured and can be opened.
    They also go to stderr when ``include_stderr`` is set or no file is
    in use. Every handler tags records with the current planning context.
    """
    handlers: list[logging.Handler] = []
    if config.file:
        file_handler = _open_log_file(config)
        if file_handler is not None:
            handlers.append(file_handler)
    if config.include_stderr or not handlers:
        handlers.append(logging.StreamHandler(sys.stderr))

    formatter = (
        JSONFormatter() if config.format.casefold() == "json" else PlanTextFormatter()
    )
    context_filter = PlanContextFilter()
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, config.level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)
