"""Protocols for the media probe and frame extractor collaborators."""

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from transcode_planner.domain.models import ProbeResult, ThumbnailCandidate


class MediaProbeError(Exception):
    """Raised when a media file cannot be probed."""

    pass


class FrameExtractionError(Exception):
    """Raised when frames cannot be extracted at a seek position."""

    pass


@dataclass(frozen=True)
class SeekPosition:
    """Where frame extraction starts.

    ``offset`` is in seconds from the start, or from the end when
    ``from_end`` is set (ffmpeg ``-sseof`` semantics, so it is then <= 0).
    """

    offset: float
    from_end: bool = False


class MediaProbe(Protocol):
    """Protocol for media file probes."""

    def probe(self, path: Path) -> ProbeResult:
        """Describe the streams of a media file.

        Raises:
            MediaProbeError: If the file cannot be probed.
        """
        ...


class FrameExtractor(Protocol):
    """Protocol for thumbnail frame extractors."""

    def candidates(
        self, path: Path, stream_index: int, seek: SeekPosition | None
    ) -> Iterator[ThumbnailCandidate]:
        """Lazily yield candidate frames from a stream.

        The consumer may stop early and close the iterator; any per-candidate
        resources must be released on close.

        Raises:
            FrameExtractionError: If extraction at this position fails.
        """
        ...
