"""Re-encode policy resolution.

Decides per stream whether it is re-encoded, passed through, or encoded
provisionally and kept only if the result is smaller. The keep-if-smaller
rule cannot be settled from options alone, so it is modelled as an explicit
two-phase comparison: the plan proposes it, the executor produces an encoded
size, and the comparison is finalized afterwards.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from transcode_planner.policy.exceptions import (
    ComparisonStateError,
    SizeComparisonError,
)
from transcode_planner.policy.types.enums import ReencodeBehavior, StreamAction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StreamChanges:
    """Which properties of a stream must change to satisfy the options.

    ``container`` is set when the output container cannot carry the source
    codec, which forces a re-encode under every behavior. ``hdr``, ``sar``
    and ``interlaced`` are only set when the options ask for SDR, square
    pixels or progressive frames.
    """

    geometry: bool = False
    codec: bool = False
    fps: bool = False
    profile: bool = False
    channels: bool = False
    sample_rate: bool = False
    hdr: bool = False
    sar: bool = False
    interlaced: bool = False
    container: bool = False

    @property
    def needs_change(self) -> bool:
        return any(getattr(self, f.name) for f in dataclasses.fields(self))

    @property
    def reasons(self) -> tuple[str, ...]:
        """Names of the changed properties, in field order."""
        return tuple(f.name for f in dataclasses.fields(self) if getattr(self, f.name))


def resolve_reencode_action(
    behavior: ReencodeBehavior, changes: StreamChanges
) -> StreamAction:
    """Resolve the action for a stream from its behavior and required changes.

    Args:
        behavior: Configured re-encode behavior for the stream kind.
        changes: Properties that must change for the output to be valid.

    Returns:
        ALWAYS: REENCODE.
        IF_NEEDED: REENCODE if anything must change, else PASSTHROUGH.
        IF_SMALLER: REENCODE if anything must change, else
        REENCODE_THEN_COMPARE so the smaller version can be kept.
    """
    if behavior is ReencodeBehavior.ALWAYS:
        return StreamAction.REENCODE
    if changes.needs_change:
        return StreamAction.REENCODE
    if behavior is ReencodeBehavior.IF_SMALLER:
        return StreamAction.REENCODE_THEN_COMPARE
    return StreamAction.PASSTHROUGH


class KeptStream(Enum):
    """Which version of a compared stream ends up in the output."""

    ORIGINAL = "original"
    REENCODED = "reencoded"


def choose_smaller(original_size: int, reencoded_size: int) -> KeptStream:
    """Pick the smaller of the two versions, preferring the original on a tie."""
    if original_size <= reencoded_size:
        return KeptStream.ORIGINAL
    return KeptStream.REENCODED


class ComparisonState(Enum):
    """Lifecycle of a keep-if-smaller comparison."""

    PROPOSED = "proposed"
    EXECUTING = "executing"
    FINALIZED = "finalized"
    ABORTED = "aborted"  # Cancelled; no output produced
    FAILED = "failed"  # Executor reported an error


_ALLOWED_TRANSITIONS: dict[ComparisonState, frozenset[ComparisonState]] = {
    ComparisonState.PROPOSED: frozenset(
        {ComparisonState.EXECUTING, ComparisonState.ABORTED}
    ),
    ComparisonState.EXECUTING: frozenset(
        {ComparisonState.FINALIZED, ComparisonState.ABORTED, ComparisonState.FAILED}
    ),
    ComparisonState.FINALIZED: frozenset(),
    ComparisonState.ABORTED: frozenset(),
    ComparisonState.FAILED: frozenset(),
}


@dataclass(frozen=True)
class DeferredComparison:
    """Keep-if-smaller decision for one stream.

    Moves PROPOSED -> EXECUTING -> FINALIZED, or ends in ABORTED or FAILED.
    Each transition returns a new instance; terminal states never change.
    """

    stream_index: int
    original_size: int | None
    state: ComparisonState = ComparisonState.PROPOSED
    encoded_size: int | None = None
    kept: KeptStream | None = None
    error: str | None = None

    @property
    def is_terminal(self) -> bool:
        return not _ALLOWED_TRANSITIONS[self.state]

    def _advance(self, target: ComparisonState, **changes: Any) -> DeferredComparison:
        if target not in _ALLOWED_TRANSITIONS[self.state]:
            raise ComparisonStateError(
                self.stream_index, self.state.value, target.value
            )
        return dataclasses.replace(self, state=target, **changes)

    def start(self) -> DeferredComparison:
        return self._advance(ComparisonState.EXECUTING)

    def abort(self) -> DeferredComparison:
        return self._advance(ComparisonState.ABORTED)

    def fail(self, error: str) -> DeferredComparison:
        return self._advance(ComparisonState.FAILED, error=error)

    def finalize(self, encoded_size: int | None) -> DeferredComparison:
        """Record the encoded size and keep the smaller version.

        Raises:
            ComparisonStateError: If the comparison is not executing.
            SizeComparisonError: If either size is unknown.
        """
        if self.state is not ComparisonState.EXECUTING:
            raise ComparisonStateError(
                self.stream_index, self.state.value, ComparisonState.FINALIZED.value
            )
        if self.original_size is None:
            raise SizeComparisonError(self.stream_index, "original")
        if encoded_size is None:
            raise SizeComparisonError(self.stream_index, "encoded")

        kept = choose_smaller(self.original_size, encoded_size)
        logger.debug(
            "Stream #%d: original %d bytes, re-encoded %d bytes, keeping %s",
            self.stream_index,
            self.original_size,
            encoded_size,
            kept.value,
        )
        return self._advance(
            ComparisonState.FINALIZED, encoded_size=encoded_size, kept=kept
        )
