"""Encoder executor protocol and result types.

An executor receives a resolved TranscodePlan, runs the encoder, and reports
per-stream outcomes. For streams planned as REENCODE_THEN_COMPARE it must
report the encoded byte size before anything is committed.
"""

from dataclasses import dataclass
from typing import Protocol

from transcode_planner.policy.types.enums import StreamAction
from transcode_planner.policy.types.plan import TranscodePlan


class ExecutionCancelledError(Exception):
    """Raised by an executor when execution was cancelled before completion."""

    pass


class StreamExecutionError(Exception):
    """Raised when the executor reports a failure for a stream.

    The executor's own error text is carried as ``cause``; it is not
    interpreted or retried.
    """

    def __init__(
        self, stream_index: int, action: StreamAction, cause: str | None
    ) -> None:
        self.stream_index = stream_index
        self.action = action
        self.cause = cause
        super().__init__(
            f"stream #{stream_index} ({action.value}) failed: "
            f"{cause or 'unknown error'}"
        )


@dataclass(frozen=True)
class StreamOutcome:
    """Executor result for a single stream."""

    stream_index: int
    success: bool
    encoded_size: int | None = None
    """Byte size of the encoded stream, required for compared streams."""

    error: str | None = None


@dataclass(frozen=True)
class ExecutionReport:
    """Executor result for a whole plan."""

    outcomes: tuple[StreamOutcome, ...] = ()
    cancelled: bool = False

    def outcome(self, stream_index: int) -> StreamOutcome | None:
        for outcome in self.outcomes:
            if outcome.stream_index == stream_index:
                return outcome
        return None


class EncoderExecutor(Protocol):
    """Protocol for encoder executors."""

    def execute(self, plan: TranscodePlan) -> ExecutionReport:
        """Execute the plan.

        Args:
            plan: The resolved plan. Removed streams are not mapped, passthrough
                streams are copied, and encoded streams use their resolved target.

        Returns:
            ExecutionReport with one outcome per encoded stream.

        Raises:
            ExecutionCancelledError: If execution was cancelled.
        """
        ...
