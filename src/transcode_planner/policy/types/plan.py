"""Plan artifact types.

These records are produced by the resolvers and the plan assembler, and are
the only artifacts handed to an encoder executor. All of them are immutable.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from fractions import Fraction
from pathlib import Path
from typing import TYPE_CHECKING, Any

from transcode_planner.core.codecs import AudioCodec, ContainerFormat, VideoCodec
from transcode_planner.domain.models import StreamDescriptor
from transcode_planner.policy.types.enums import StreamAction, StripMetadataMode
from transcode_planner.policy.types.options import BackgroundColor

if TYPE_CHECKING:
    from transcode_planner.policy.reencode import DeferredComparison


@dataclass(frozen=True)
class Padding:
    """Border added around a scaled picture."""

    left: int
    top: int
    right: int
    bottom: int
    color: BackgroundColor

    @property
    def is_empty(self) -> bool:
        return not (self.left or self.top or self.right or self.bottom)


@dataclass(frozen=True)
class Crop:
    """Window cut out of a scaled picture."""

    x: int
    y: int
    width: int
    height: int


@dataclass(frozen=True)
class GeometryResult:
    """Resolved output geometry for a video stream.

    ``scaled_width``/``scaled_height`` is the size the picture is scaled to;
    ``width``/``height`` is the final frame after padding or cropping.
    """

    width: int
    height: int
    scaled_width: int
    scaled_height: int
    padding: Padding | None = None
    crop: Crop | None = None
    changed: bool = True


@dataclass(frozen=True)
class ResolvedVideoTarget:
    """Concrete encoder settings for a video stream."""

    codec: VideoCodec
    encoder_profile: str  # e.g. "high", "high10", "main10"
    bit_depth: int
    chroma_subsampling: int
    pixel_format: str
    crf: int
    preset: str
    tune: str | None = None
    codec_tag: str | None = None
    tone_map: bool = False  # HDR source mapped to SDR
    deinterlace: bool = False
    square_pixels: bool = False  # Rescale an anamorphic source to 1:1 pixels

    @property
    def conversions(self) -> tuple[str, ...]:
        """Names of the picture conversions the encoder must apply."""
        names = {
            "tone_map": self.tone_map,
            "deinterlace": self.deinterlace,
            "square_pixels": self.square_pixels,
        }
        return tuple(name for name, wanted in names.items() if wanted)

    def to_dict(self) -> dict[str, Any]:
        return {
            "codec": self.codec.codec_name,
            "profile": self.encoder_profile,
            "bit_depth": self.bit_depth,
            "chroma_subsampling": self.chroma_subsampling,
            "pixel_format": self.pixel_format,
            "crf": self.crf,
            "preset": self.preset,
            "tune": self.tune,
            "codec_tag": self.codec_tag,
            "conversions": list(self.conversions),
        }


@dataclass(frozen=True)
class ResolvedAudioTarget:
    """Concrete encoder settings for an audio stream."""

    codec: AudioCodec
    profile: str | None
    channels: int | None
    sample_rate: int | None
    bitrate: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "codec": self.codec.codec_name,
            "profile": self.profile,
            "channels": self.channels,
            "sample_rate": self.sample_rate,
            "bitrate": self.bitrate,
        }


@dataclass(frozen=True)
class ResolvedStreamPlan:
    """Final decision for one source stream."""

    stream: StreamDescriptor
    action: StreamAction
    video_target: ResolvedVideoTarget | None = None
    audio_target: ResolvedAudioTarget | None = None
    geometry: GeometryResult | None = None
    frame_rate: Fraction | None = None
    original_size: int | None = None  # Only for REENCODE_THEN_COMPARE
    strip_metadata: bool = False
    reasons: tuple[str, ...] = ()

    @property
    def index(self) -> int:
        return self.stream.index

    @property
    def requires_encoding(self) -> bool:
        return self.action in (
            StreamAction.REENCODE,
            StreamAction.REENCODE_THEN_COMPARE,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "index": self.stream.index,
            "kind": self.stream.kind.value,
            "codec": self.stream.codec_name,
            "action": self.action.value,
            "strip_metadata": self.strip_metadata,
            "reasons": list(self.reasons),
        }
        if self.video_target is not None:
            data["video_target"] = self.video_target.to_dict()
        if self.audio_target is not None:
            data["audio_target"] = self.audio_target.to_dict()
        if self.geometry is not None:
            data["geometry"] = {
                "width": self.geometry.width,
                "height": self.geometry.height,
                "scaled_width": self.geometry.scaled_width,
                "scaled_height": self.geometry.scaled_height,
                "padding": dataclasses.asdict(self.geometry.padding)
                if self.geometry.padding
                else None,
                "crop": dataclasses.asdict(self.geometry.crop)
                if self.geometry.crop
                else None,
            }
            if data["geometry"]["padding"]:
                padding = data["geometry"]["padding"]
                padding["color"] = self.geometry.padding.color.to_hex()
        if self.frame_rate is not None:
            data["frame_rate"] = str(self.frame_rate)
        if self.original_size is not None:
            data["original_size"] = self.original_size
        return data


@dataclass(frozen=True)
class TranscodePlan:
    """Resolved per-stream plan for a single source file."""

    source_path: Path
    container: ContainerFormat
    streams: tuple[ResolvedStreamPlan, ...]
    strip_metadata: StripMetadataMode = StripMetadataMode.NONE

    @property
    def kept_streams(self) -> tuple[ResolvedStreamPlan, ...]:
        return tuple(s for s in self.streams if s.action is not StreamAction.REMOVE)

    @property
    def deferred_streams(self) -> tuple[ResolvedStreamPlan, ...]:
        return tuple(
            s for s in self.streams if s.action is StreamAction.REENCODE_THEN_COMPARE
        )

    @property
    def requires_encoding(self) -> bool:
        return any(s.requires_encoding for s in self.streams)

    def stream(self, index: int) -> ResolvedStreamPlan:
        """Return the plan for the source stream with the given index."""
        for plan in self.streams:
            if plan.index == index:
                return plan
        raise KeyError(index)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": str(self.source_path),
            "container": self.container.value,
            "strip_metadata": self.strip_metadata.value,
            "requires_encoding": self.requires_encoding,
            "streams": [s.to_dict() for s in self.streams],
        }


@dataclass(frozen=True)
class FinalizedPlan:
    """Outcome of executing a plan and settling every deferred comparison."""

    plan: TranscodePlan
    comparisons: tuple[DeferredComparison, ...] = ()
    aborted: bool = False

    def comparison(self, index: int) -> DeferredComparison:
        for comparison in self.comparisons:
            if comparison.stream_index == index:
                return comparison
        raise KeyError(index)

    @property
    def output_streams(self) -> tuple[int, ...]:
        """Indices of source streams present in the output, empty when aborted."""
        if self.aborted:
            return ()
        return tuple(s.index for s in self.plan.kept_streams)

    def to_dict(self) -> dict[str, Any]:
        return {
            "aborted": self.aborted,
            "output_streams": list(self.output_streams),
            "comparisons": [
                {
                    "index": c.stream_index,
                    "state": c.state.value,
                    "original_size": c.original_size,
                    "encoded_size": c.encoded_size,
                    "kept": c.kept.value if c.kept else None,
                }
                for c in self.comparisons
            ],
        }
