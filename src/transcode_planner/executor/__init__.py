"""Execution boundary for transcode plans.

- interface: EncoderExecutor protocol and result records
- runner: propose, execute and finalize a plan in two phases
"""

from transcode_planner.executor.interface import (
    EncoderExecutor,
    ExecutionCancelledError,
    ExecutionReport,
    StreamExecutionError,
    StreamOutcome,
)
from transcode_planner.executor.runner import (
    abort_plan,
    execute_plan,
    finalize_plan,
    propose_comparisons,
)

__all__ = [
    "EncoderExecutor",
    "ExecutionCancelledError",
    "ExecutionReport",
    "StreamExecutionError",
    "StreamOutcome",
    "abort_plan",
    "execute_plan",
    "finalize_plan",
    "propose_comparisons",
]
