"""Structured logging for the planner.

Provides configurable logging with JSON format support and file rotation,
plus per-file and per-stream planning context.
"""

from transcode_planner.logging.config import configure_logging
from transcode_planner.logging.context import (
    PlanContextFilter,
    get_plan_context,
    plan_context,
    stream_context,
)
from transcode_planner.logging.handlers import (
    JSONFormatter,
    PlanTextFormatter,
    context_tag,
)

__all__ = [
    "JSONFormatter",
    "PlanContextFilter",
    "PlanTextFormatter",
    "configure_logging",
    "context_tag",
    "get_plan_context",
    "plan_context",
    "stream_context",
]
