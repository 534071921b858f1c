"""Pydantic models for policy file parsing.

These models validate the raw YAML structure. The loader converts a
validated PolicyModel into immutable TranscodeOptions.
"""

import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from transcode_planner.core.codecs import (
    ContainerFormat,
    parse_audio_codec,
    parse_video_codec,
)
from transcode_planner.policy.types.enums import (
    AudioChannels,
    AudioQuality,
    AudioSampleRate,
    BitsPerChannel,
    ChromaSubsampling,
    CompressionLevel,
    FpsLimitMode,
    H264Profile,
    H265Profile,
    ReencodeBehavior,
    ResizeMode,
    StreamSelection,
    StripMetadataMode,
    ThumbnailStrategy,
    VideoQuality,
    VideoTune,
)

HEX_COLOR_PATTERN = re.compile(r"^#?[0-9a-fA-F]{6}$")


def _normalize_enum_value(value: Any) -> Any:
    """Accept YAML integers ("bits_per_channel: 10") and any letter case."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return value.strip().casefold()
    return value


class ResizeModel(BaseModel):
    """Pydantic model for the resize box."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    width: int = Field(gt=0)
    height: int = Field(gt=0)
    mode: ResizeMode = ResizeMode.FIT_DOWN
    pad_color: str = "#000000"
    pad_to_box: bool = True

    @field_validator("mode", mode="before")
    @classmethod
    def normalize_mode(cls, v: Any) -> Any:
        return _normalize_enum_value(v)

    @field_validator("pad_color")
    @classmethod
    def validate_pad_color(cls, v: str) -> str:
        """Validate the pad colour as a hex triplet."""
        if not HEX_COLOR_PATTERN.match(v):
            raise ValueError(
                f"Invalid pad_color '{v}'. Must be a hex colour like '#000000'."
            )
        return v if v.startswith("#") else f"#{v}"


class FpsModel(BaseModel):
    """Pydantic model for the frame-rate limit."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    target: int = Field(gt=0)
    mode: FpsLimitMode = FpsLimitMode.EXACT

    @field_validator("mode", mode="before")
    @classmethod
    def normalize_mode(cls, v: Any) -> Any:
        return _normalize_enum_value(v)


class VideoValidationModel(BaseModel):
    """Pydantic model for video source limits."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    min_width: int | None = Field(default=None, gt=0)
    max_width: int | None = Field(default=None, gt=0)
    min_height: int | None = Field(default=None, gt=0)
    max_height: int | None = Field(default=None, gt=0)
    min_pixels: int | None = Field(default=None, gt=0)
    max_pixels: int | None = Field(default=None, gt=0)
    min_duration: float | None = Field(default=None, gt=0)
    max_duration: float | None = Field(default=None, gt=0)
    min_streams: int | None = Field(default=None, gt=0)
    max_streams: int | None = Field(default=None, gt=0)


class AudioValidationModel(BaseModel):
    """Pydantic model for audio source limits."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    min_duration: float | None = Field(default=None, gt=0)
    max_duration: float | None = Field(default=None, gt=0)
    min_streams: int | None = Field(default=None, gt=0)
    max_streams: int | None = Field(default=None, gt=0)


class VideoPolicyModel(BaseModel):
    """Pydantic model for video stream settings."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    codecs: list[str] = Field(default_factory=lambda: ["h264"], min_length=1)
    reencode: ReencodeBehavior = ReencodeBehavior.IF_NEEDED
    quality: VideoQuality = VideoQuality.MEDIUM
    compression: CompressionLevel = CompressionLevel.MEDIUM
    tune: VideoTune = VideoTune.DEFAULT
    h264_profile: H264Profile | None = None
    h265_profile: H265Profile | None = None
    bits_per_channel: BitsPerChannel = BitsPerChannel.PRESERVE
    chroma_subsampling: ChromaSubsampling = ChromaSubsampling.PRESERVE
    resize: ResizeModel | None = None
    fps: FpsModel | None = None
    selection: StreamSelection = StreamSelection.KEEP_ALL
    strip_metadata: bool = False
    remap_hdr_to_sdr: bool = False
    force_square_pixels: bool = False
    force_progressive_frames: bool = False
    validation: VideoValidationModel = Field(default_factory=VideoValidationModel)

    @field_validator(
        "reencode",
        "quality",
        "compression",
        "tune",
        "h264_profile",
        "h265_profile",
        "bits_per_channel",
        "chroma_subsampling",
        "selection",
        mode="before",
    )
    @classmethod
    def normalize_enums(cls, v: Any) -> Any:
        return _normalize_enum_value(v)

    @field_validator("codecs")
    @classmethod
    def validate_codecs(cls, v: list[str]) -> list[str]:
        """Validate codec names and reject duplicates."""
        codecs = [parse_video_codec(name) for name in v]
        if len(set(codecs)) != len(codecs):
            raise ValueError("codecs must not contain duplicates")
        return [codec.name.casefold() for codec in codecs]


class AudioPolicyModel(BaseModel):
    """Pydantic model for audio stream settings."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    codecs: list[str] = Field(default_factory=lambda: ["aac"], min_length=1)
    reencode: ReencodeBehavior = ReencodeBehavior.IF_NEEDED
    quality: AudioQuality = AudioQuality.MEDIUM
    max_channels: AudioChannels = AudioChannels.PRESERVE
    sample_rate: AudioSampleRate = AudioSampleRate.PRESERVE
    selection: StreamSelection = StreamSelection.KEEP_ALL
    strip_metadata: bool = False
    validation: AudioValidationModel = Field(default_factory=AudioValidationModel)

    @field_validator(
        "reencode", "quality", "max_channels", "sample_rate", "selection", mode="before"
    )
    @classmethod
    def normalize_enums(cls, v: Any) -> Any:
        return _normalize_enum_value(v)

    @field_validator("codecs")
    @classmethod
    def validate_codecs(cls, v: list[str]) -> list[str]:
        """Validate codec names and reject duplicates."""
        codecs = [parse_audio_codec(name) for name in v]
        if len(set(codecs)) != len(codecs):
            raise ValueError("codecs must not contain duplicates")
        return [codec.name.casefold() for codec in codecs]


class ThumbnailPolicyModel(BaseModel):
    """Pydantic model for thumbnail selection settings."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    image_timestamp: float | None = Field(default=5.0, ge=0)
    image_timestamp_fraction: float | None = Field(default=0.3, ge=0, le=1)
    include_thumbnail_streams: bool = True
    strategy: ThumbnailStrategy = ThumbnailStrategy.FIRST_ACCEPTABLE
    min_score: float | None = None
    max_candidates: int | None = Field(default=None, gt=0)

    @field_validator("strategy", mode="before")
    @classmethod
    def normalize_strategy(cls, v: Any) -> Any:
        return _normalize_enum_value(v)


class PolicyModel(BaseModel):
    """Pydantic model for a complete policy file."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_version: Literal[1]
    preset: str | None = None
    container: ContainerFormat = ContainerFormat.MP4
    strip_metadata: StripMetadataMode = StripMetadataMode.NONE
    strict_resize: bool = False
    preserve_other_streams: bool = True
    video: VideoPolicyModel = Field(default_factory=VideoPolicyModel)
    audio: AudioPolicyModel = Field(default_factory=AudioPolicyModel)
    thumbnail: ThumbnailPolicyModel = Field(default_factory=ThumbnailPolicyModel)

    @field_validator("container", "strip_metadata", mode="before")
    @classmethod
    def normalize_enums(cls, v: Any) -> Any:
        return _normalize_enum_value(v)
