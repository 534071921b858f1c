"""Thumbnail stream, timestamp and candidate resolution.

Choosing a thumbnail happens in three steps:
1. Rank the video streams and pick the one to extract from.
2. Resolve the timestamp to seek to, plus the fallback seeks.
3. Consume the extractor's lazy candidate sequence and pick a frame.

Running out of acceptable candidates raises ThumbnailSelectingError, which
is terminal. Seek fallbacks only apply when the extractor itself fails.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from transcode_planner.domain.enums import StreamKind
from transcode_planner.domain.models import (
    ProbeResult,
    StreamDescriptor,
    ThumbnailCandidate,
)
from transcode_planner.introspector.interface import (
    FrameExtractionError,
    FrameExtractor,
    SeekPosition,
)
from transcode_planner.policy.exceptions import ThumbnailSelectingError
from transcode_planner.policy.types.enums import ThumbnailStrategy
from transcode_planner.policy.types.options import ThumbnailOptions

logger = logging.getLogger(__name__)

CandidatePredicate = Callable[[ThumbnailCandidate], bool]


def _stream_rank(stream: StreamDescriptor, include_thumbnail_streams: bool) -> int:
    """Lower ranks are preferred; default streams win within a tier."""
    if stream.is_thumbnail_stream:
        if not include_thumbnail_streams:
            return 7
        return 0 if stream.is_default else 1
    if stream.is_still_image:
        return 2 if stream.is_default else 3
    if stream.is_bad_thumbnail_candidate or stream.pixel_area == 0:
        return 6
    return 4 if stream.is_default else 5


def select_thumbnail_stream(
    streams: Iterable[StreamDescriptor], include_thumbnail_streams: bool = True
) -> StreamDescriptor:
    """Pick the video stream a thumbnail should be taken from.

    Embedded cover art and timed thumbnails come first when included, then
    still images, then regular video. Streams flagged as dubs, commentary and
    the like, or with unknown dimensions, are used only when nothing better
    exists.

    Raises:
        ThumbnailSelectingError: If there is no video stream at all.
    """
    video = [s for s in streams if s.kind is StreamKind.VIDEO]
    if not video:
        raise ThumbnailSelectingError(
            "No suitable video stream found to extract thumbnail from."
        )
    # min() is stable, so ties keep stream order
    return min(video, key=lambda s: _stream_rank(s, include_thumbnail_streams))


@dataclass(frozen=True)
class ThumbnailTimestamp:
    """Resolved seek target for a thumbnail."""

    seconds: float
    from_fraction: bool  # The fractional position won over the absolute one
    duration: float


def resolve_thumbnail_timestamp(
    options: ThumbnailOptions,
    stream: StreamDescriptor,
    container_duration: float | None = None,
) -> ThumbnailTimestamp | None:
    """Resolve the timestamp a thumbnail is taken at.

    The earlier of the absolute timestamp and the fraction of the duration
    is used. Still images, cover art and streams of unknown duration have
    no timestamp.

    Raises:
        ThumbnailSelectingError: If neither timestamp option is set, or the
            timestamp lies beyond the end of the video.
    """
    duration = stream.duration_seconds or container_duration
    if duration is None or stream.is_thumbnail_stream or stream.is_still_image:
        return None

    absolute = options.image_timestamp
    fractional = (
        options.image_timestamp_fraction * duration
        if options.image_timestamp_fraction is not None
        else None
    )

    if absolute is not None and fractional is not None:
        seconds, from_fraction = min(absolute, fractional), fractional < absolute
    elif absolute is not None:
        seconds, from_fraction = absolute, False
    elif fractional is not None:
        seconds, from_fraction = fractional, True
    else:
        raise ThumbnailSelectingError("No timestamp specified to extract thumbnail at.")

    if seconds > duration:
        raise ThumbnailSelectingError(
            "Specified thumbnail timestamp is beyond the end of the video."
        )
    return ThumbnailTimestamp(
        seconds=seconds, from_fraction=from_fraction, duration=duration
    )


def seek_attempts(
    options: ThumbnailOptions, timestamp: ThumbnailTimestamp | None
) -> list[SeekPosition | None]:
    """Return the seek positions to try, in order.

    Durations from probes are approximate, so a failed seek is retried at
    the same point measured from the end, then at the first or last frame,
    whichever the requested position is closer to.
    """
    if timestamp is None:
        return [None]

    if timestamp.from_fraction:
        from_end = (options.image_timestamp_fraction or 0.0) > 0.5
    else:
        from_end = (options.image_timestamp or 0.0) > 0.5 * timestamp.duration

    return [
        SeekPosition(timestamp.seconds),
        SeekPosition(timestamp.seconds - timestamp.duration, from_end=True),
        SeekPosition(0.0, from_end=from_end),
    ]


class ThumbnailSelector:
    """Chooses a thumbnail frame from a lazy candidate sequence.

    The sequence is iterated once and closed as soon as a decision is made,
    so the extractor can release per-candidate resources.
    """

    def __init__(
        self,
        options: ThumbnailOptions | None = None,
        predicate: CandidatePredicate | None = None,
    ) -> None:
        self.options = options or ThumbnailOptions()
        self.predicate = predicate

    def is_acceptable(self, candidate: ThumbnailCandidate) -> bool:
        """Check a candidate against the suitability flag, score and predicate."""
        if candidate.unsuitable:
            return False
        min_score = self.options.min_score
        if min_score is not None and (
            candidate.score is None or candidate.score < min_score
        ):
            return False
        return self.predicate is None or self.predicate(candidate)

    def select(self, candidates: Iterable[ThumbnailCandidate]) -> ThumbnailCandidate:
        """Return the chosen candidate.

        Raises:
            ThumbnailSelectingError: If no acceptable candidate is found.
        """
        iterator = iter(candidates)
        try:
            if self.options.strategy is ThumbnailStrategy.BEST_SCORE:
                chosen = self._best_score(iterator)
            else:
                chosen = self._first_acceptable(iterator)
        finally:
            close = getattr(iterator, "close", None)
            if close is not None:
                close()

        if chosen is None:
            raise ThumbnailSelectingError()
        return chosen

    def _first_acceptable(
        self, iterator: Iterator[ThumbnailCandidate]
    ) -> ThumbnailCandidate | None:
        for candidate in iterator:
            if self.is_acceptable(candidate):
                return candidate
        return None

    def _best_score(
        self, iterator: Iterator[ThumbnailCandidate]
    ) -> ThumbnailCandidate | None:
        best: ThumbnailCandidate | None = None
        limit = self.options.max_candidates
        for examined, candidate in enumerate(iterator, start=1):
            if self.is_acceptable(candidate) and (
                best is None or _score(candidate) > _score(best)
            ):
                best = candidate
            if limit is not None and examined >= limit:
                break
        return best


def _score(candidate: ThumbnailCandidate) -> float:
    return candidate.score if candidate.score is not None else float("-inf")


@dataclass(frozen=True)
class ThumbnailSelection:
    """A chosen thumbnail and where it came from."""

    stream: StreamDescriptor
    timestamp: ThumbnailTimestamp | None
    seek: SeekPosition | None
    candidate: ThumbnailCandidate


def extract_thumbnail(
    probe: ProbeResult,
    extractor: FrameExtractor,
    options: ThumbnailOptions | None = None,
    predicate: CandidatePredicate | None = None,
) -> ThumbnailSelection:
    """Select a thumbnail for a probed file using a frame extractor.

    Extraction failures move on to the next fallback seek; if every seek
    fails, the first failure is re-raised. Selection failures are not
    retried.

    Raises:
        ThumbnailSelectingError: If no stream or acceptable frame exists.
        FrameExtractionError: If extraction fails at every seek position.
    """
    options = options or ThumbnailOptions()
    stream = select_thumbnail_stream(probe.streams, options.include_thumbnail_streams)
    timestamp = resolve_thumbnail_timestamp(options, stream, probe.duration_seconds)
    selector = ThumbnailSelector(options, predicate)
    path = Path(probe.path)

    errors: list[FrameExtractionError] = []
    for seek in seek_attempts(options, timestamp):
        try:
            candidate = selector.select(extractor.candidates(path, stream.index, seek))
        except FrameExtractionError as e:
            logger.warning("Thumbnail extraction failed at %s: %s", seek, e)
            errors.append(e)
            continue
        return ThumbnailSelection(
            stream=stream, timestamp=timestamp, seek=seek, candidate=candidate
        )

    raise errors[0] if errors else ThumbnailSelectingError()
