"""Stub probe and frame extractor for development and testing."""

from collections.abc import Iterator, Mapping, Sequence
from pathlib import Path

from transcode_planner.domain.models import ProbeResult, ThumbnailCandidate
from transcode_planner.introspector.interface import (
    FrameExtractionError,
    MediaProbeError,
    SeekPosition,
)
from transcode_planner.introspector.parsers import parse_ffprobe_output


class StubMediaProbe:
    """MediaProbe backed by canned ffprobe documents keyed by path."""

    def __init__(self, documents: Mapping[Path, dict]) -> None:
        self._documents = {Path(path): data for path, data in documents.items()}

    def probe(self, path: Path) -> ProbeResult:
        """Parse the canned document for a path.

        Raises:
            MediaProbeError: If no document is registered for the path.
        """
        data = self._documents.get(Path(path))
        if data is None:
            raise MediaProbeError(f"File not found: {path}")
        return parse_ffprobe_output(Path(path), data)


class StubFrameExtractor:
    """FrameExtractor that yields a fixed list of candidates.

    Seek positions listed in ``failing_seeks`` raise FrameExtractionError.
    Every call is recorded in ``calls`` and the number of candidates
    actually produced in ``produced``, so tests can check that iteration
    stopped early.
    """

    def __init__(
        self,
        candidates: Sequence[ThumbnailCandidate],
        failing_seeks: Sequence[SeekPosition | None] = (),
    ) -> None:
        self._candidates = list(candidates)
        self._failing_seeks = list(failing_seeks)
        self.calls: list[tuple[Path, int, SeekPosition | None]] = []
        self.produced = 0
        self.closed = 0

    def candidates(
        self, path: Path, stream_index: int, seek: SeekPosition | None
    ) -> Iterator[ThumbnailCandidate]:
        self.calls.append((path, stream_index, seek))
        if seek in self._failing_seeks:
            raise FrameExtractionError(f"Cannot seek to {seek} in {path}")
        return self._generate()

    def _generate(self) -> Iterator[ThumbnailCandidate]:
        try:
            for candidate in self._candidates:
                self.produced += 1
                yield candidate
        finally:
            self.closed += 1
