"""Domain models for probed media.

These records are produced by a media probe and treated as read-only by the
planner. Any field the probe could not determine is None.
"""

from dataclasses import dataclass, field
from fractions import Fraction
from pathlib import Path
from typing import Any

from transcode_planner.domain.enums import StreamKind


@dataclass(frozen=True)
class StreamDescriptor:
    """Represents a single stream within a media file (domain model)."""

    index: int
    kind: StreamKind
    codec_name: str | None = None
    profile: str | None = None  # e.g. "High", "Main 10", "LC"
    codec_tag: str | None = None  # e.g. "hvc1", "avc1"
    is_default: bool = False
    # Video-specific fields
    width: int | None = None
    height: int | None = None
    frame_rate: Fraction | None = None
    pixel_format: str | None = None
    bit_depth: int | None = None
    chroma_subsampling: int | None = None  # e.g. 420 or 444
    is_attached_pic: bool = False  # Embedded cover art
    is_timed_thumbnails: bool = False
    is_still_image: bool = False  # Image codec or single-frame stream
    is_bad_thumbnail_candidate: bool = False  # Dub, commentary, forced and similar
    is_hdr: bool = False  # Colour metadata outside the known SDR profiles
    sample_aspect_ratio: Fraction | None = None
    is_interlaced: bool = False
    # Audio-specific fields
    channels: int | None = None
    sample_rate: int | None = None
    # Size and timing
    byte_size: int | None = None
    duration_seconds: float | None = None

    @property
    def is_thumbnail_stream(self) -> bool:
        """Return True for embedded cover art and timed thumbnail streams."""
        return self.is_attached_pic or self.is_timed_thumbnails

    @property
    def pixel_area(self) -> int:
        """Return width x height, or 0 when either is unknown."""
        if not self.width or not self.height:
            return 0
        return self.width * self.height

    @property
    def has_square_pixels(self) -> bool:
        """Return True unless the sample aspect ratio is known and not 1:1."""
        return self.sample_aspect_ratio is None or self.sample_aspect_ratio == 1


@dataclass(frozen=True)
class ProbeResult:
    """Result of probing a media file."""

    path: Path
    container_format: str | None
    streams: tuple[StreamDescriptor, ...]
    duration_seconds: float | None = None
    warnings: tuple[str, ...] = ()

    @property
    def video_streams(self) -> tuple[StreamDescriptor, ...]:
        return tuple(s for s in self.streams if s.kind is StreamKind.VIDEO)

    @property
    def audio_streams(self) -> tuple[StreamDescriptor, ...]:
        return tuple(s for s in self.streams if s.kind is StreamKind.AUDIO)


@dataclass(frozen=True)
class ThumbnailCandidate:
    """A decoded frame offered by a frame extractor.

    ``frame`` is an opaque handle owned by the extractor (a path, bytes, an
    image object). The planner only reads the scoring fields.
    """

    frame: Any
    timestamp_seconds: float | None = None
    score: float | None = None
    unsuitable: bool = False  # e.g. a blank or black frame
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)
