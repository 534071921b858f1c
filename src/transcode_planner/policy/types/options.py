"""Transcode option records.

Every record is immutable and validated entirely at construction, so an
invalid value surfaces as a ``ValueError`` before any resolver runs.
"""

from dataclasses import dataclass, field

from transcode_planner.core.codecs import (
    ALL_SOURCE_AUDIO_CODECS,
    ALL_SOURCE_VIDEO_CODECS,
    AudioCodec,
    ContainerFormat,
    VideoCodec,
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


def _check_enum(value: object, enum_type: type, field_name: str) -> None:
    if not isinstance(value, enum_type):
        raise ValueError(
            f"{field_name} must be a {enum_type.__name__}, got {value!r}"
        )


def _check_codec_list(codecs: tuple, codec_type: type, field_name: str) -> None:
    if not codecs:
        raise ValueError(f"{field_name} must contain at least one codec")
    for codec in codecs:
        _check_enum(codec, codec_type, field_name)
    if len(set(codecs)) != len(codecs):
        raise ValueError(f"{field_name} must not contain duplicates")


@dataclass(frozen=True)
class BackgroundColor:
    """Pad colour with red, green and blue components in [0, 1]."""

    r: float = 0.0
    g: float = 0.0
    b: float = 0.0

    def __post_init__(self) -> None:
        for name in ("r", "g", "b"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                raise ValueError(f"color component {name} must be a number")
            if not 0.0 <= value <= 1.0:
                raise ValueError(
                    f"color component {name} must be between 0 and 1, got {value}"
                )

    def to_hex(self) -> str:
        """Return the colour as ``#rrggbb``."""
        return "#" + "".join(
            f"{round(component * 255):02x}" for component in (self.r, self.g, self.b)
        )


BLACK = BackgroundColor(0.0, 0.0, 0.0)


@dataclass(frozen=True)
class ResizeOptions:
    """Bounding box a picture must be reduced into."""

    width: int
    height: int
    mode: ResizeMode = ResizeMode.FIT_DOWN
    pad_color: BackgroundColor = BLACK
    pad_to_box: bool = True  # FIT_DOWN only: pad the frame out to the box

    def __post_init__(self) -> None:
        """Validate the resize box."""
        for name in ("width", "height"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ValueError(
                    f"resize {name} must be a positive integer, got {value!r}"
                )
        _check_enum(self.mode, ResizeMode, "resize mode")
        if not isinstance(self.pad_color, BackgroundColor):
            raise ValueError("pad_color must be a BackgroundColor")


@dataclass(frozen=True)
class FpsOptions:
    """Frame-rate limit."""

    target_fps: int
    mode: FpsLimitMode = FpsLimitMode.EXACT

    def __post_init__(self) -> None:
        """Validate the target frame rate."""
        if (
            not isinstance(self.target_fps, int)
            or isinstance(self.target_fps, bool)
            or self.target_fps <= 0
        ):
            raise ValueError(
                f"target_fps must be a positive integer, got {self.target_fps!r}"
            )
        _check_enum(self.mode, FpsLimitMode, "fps mode")


def _check_limit(value: object, field_name: str, *, integer: bool) -> None:
    if value is None:
        return
    kind = int if integer else (int, float)
    if not isinstance(value, kind) or isinstance(value, bool) or value <= 0:
        noun = "a positive integer" if integer else "a positive number"
        raise ValueError(f"{field_name} must be {noun}, got {value!r}")


def _check_range(low: object, high: object, low_name: str, high_name: str) -> None:
    if low is not None and high is not None and low > high:
        raise ValueError(f"{low_name} ({low}) must not exceed {high_name} ({high})")


@dataclass(frozen=True)
class VideoSourceValidation:
    """Limits a source's video streams must meet before anything is planned.

    Every limit is optional. Cover art and timed thumbnail streams are not
    checked or counted.
    """

    min_width: int | None = None
    max_width: int | None = None
    min_height: int | None = None
    max_height: int | None = None
    min_pixels: int | None = None
    max_pixels: int | None = None
    min_duration: float | None = None  # Seconds
    max_duration: float | None = None
    min_streams: int | None = None
    max_streams: int | None = None

    def __post_init__(self) -> None:
        """Validate the limits."""
        for name in ("width", "height", "pixels", "streams"):
            low, high = f"min_{name}", f"max_{name}"
            _check_limit(getattr(self, low), f"video {low}", integer=True)
            _check_limit(getattr(self, high), f"video {high}", integer=True)
            _check_range(getattr(self, low), getattr(self, high), low, high)
        _check_limit(self.min_duration, "video min_duration", integer=False)
        _check_limit(self.max_duration, "video max_duration", integer=False)
        _check_range(
            self.min_duration, self.max_duration, "min_duration", "max_duration"
        )


@dataclass(frozen=True)
class AudioSourceValidation:
    """Limits a source's audio streams must meet before anything is planned."""

    min_duration: float | None = None
    max_duration: float | None = None
    min_streams: int | None = None
    max_streams: int | None = None

    def __post_init__(self) -> None:
        """Validate the limits."""
        _check_limit(self.min_duration, "audio min_duration", integer=False)
        _check_limit(self.max_duration, "audio max_duration", integer=False)
        _check_range(
            self.min_duration, self.max_duration, "min_duration", "max_duration"
        )
        _check_limit(self.min_streams, "audio min_streams", integer=True)
        _check_limit(self.max_streams, "audio max_streams", integer=True)
        _check_range(self.min_streams, self.max_streams, "min_streams", "max_streams")


@dataclass(frozen=True)
class VideoStreamOptions:
    """Desired properties of output video streams.

    ``result_codecs`` lists the codecs a stream may end up in. The first entry
    is the encode target; the others are only accepted for passthrough.
    Bit depth and chroma subsampling are maximums, not exact values.
    The three ``force``/``remap`` flags make an HDR, anamorphic or interlaced
    source count as a required change.
    """

    result_codecs: tuple[VideoCodec, ...] = (VideoCodec.H264,)
    reencode: ReencodeBehavior = ReencodeBehavior.IF_NEEDED
    quality: VideoQuality = VideoQuality.MEDIUM
    compression: CompressionLevel = CompressionLevel.MEDIUM
    tune: VideoTune = VideoTune.DEFAULT
    h264_profile: H264Profile | None = None  # None selects automatically
    h265_profile: H265Profile | None = None
    bits_per_channel: BitsPerChannel = BitsPerChannel.PRESERVE
    chroma_subsampling: ChromaSubsampling = ChromaSubsampling.PRESERVE
    resize: ResizeOptions | None = None
    fps: FpsOptions | None = None
    selection: StreamSelection = StreamSelection.KEEP_ALL
    strip_metadata: bool = False  # Drop per-stream metadata tags
    remap_hdr_to_sdr: bool = False
    force_square_pixels: bool = False
    force_progressive_frames: bool = False
    validation: VideoSourceValidation = field(default_factory=VideoSourceValidation)

    def __post_init__(self) -> None:
        """Validate the video options."""
        _check_codec_list(self.result_codecs, VideoCodec, "video result_codecs")
        _check_enum(self.reencode, ReencodeBehavior, "video reencode")
        _check_enum(self.quality, VideoQuality, "video quality")
        _check_enum(self.compression, CompressionLevel, "compression")
        _check_enum(self.tune, VideoTune, "tune")
        _check_enum(self.bits_per_channel, BitsPerChannel, "bits_per_channel")
        _check_enum(self.chroma_subsampling, ChromaSubsampling, "chroma_subsampling")
        _check_enum(self.selection, StreamSelection, "video selection")
        if self.h264_profile is not None:
            _check_enum(self.h264_profile, H264Profile, "h264_profile")
        if self.h265_profile is not None:
            _check_enum(self.h265_profile, H265Profile, "h265_profile")
        if self.resize is not None and not isinstance(self.resize, ResizeOptions):
            raise ValueError("resize must be a ResizeOptions")
        if self.fps is not None and not isinstance(self.fps, FpsOptions):
            raise ValueError("fps must be an FpsOptions")
        if not isinstance(self.validation, VideoSourceValidation):
            raise ValueError("video validation must be a VideoSourceValidation")

    @property
    def target_codec(self) -> VideoCodec:
        return self.result_codecs[0]


@dataclass(frozen=True)
class AudioStreamOptions:
    """Desired properties of output audio streams."""

    result_codecs: tuple[AudioCodec, ...] = (AudioCodec.AAC,)
    reencode: ReencodeBehavior = ReencodeBehavior.IF_NEEDED
    quality: AudioQuality = AudioQuality.MEDIUM
    max_channels: AudioChannels = AudioChannels.PRESERVE
    sample_rate: AudioSampleRate = AudioSampleRate.PRESERVE
    selection: StreamSelection = StreamSelection.KEEP_ALL
    strip_metadata: bool = False
    validation: AudioSourceValidation = field(default_factory=AudioSourceValidation)

    def __post_init__(self) -> None:
        """Validate the audio options."""
        _check_codec_list(self.result_codecs, AudioCodec, "audio result_codecs")
        _check_enum(self.reencode, ReencodeBehavior, "audio reencode")
        _check_enum(self.quality, AudioQuality, "audio quality")
        _check_enum(self.max_channels, AudioChannels, "max_channels")
        _check_enum(self.sample_rate, AudioSampleRate, "sample_rate")
        _check_enum(self.selection, StreamSelection, "audio selection")
        if not isinstance(self.validation, AudioSourceValidation):
            raise ValueError("audio validation must be an AudioSourceValidation")

    @property
    def target_codec(self) -> AudioCodec:
        return self.result_codecs[0]


@dataclass(frozen=True)
class ThumbnailOptions:
    """How a thumbnail frame is located and chosen."""

    image_timestamp: float | None = 5.0  # Seconds from the start
    image_timestamp_fraction: float | None = 0.3  # Fraction of the duration
    include_thumbnail_streams: bool = True  # Prefer embedded cover art
    strategy: ThumbnailStrategy = ThumbnailStrategy.FIRST_ACCEPTABLE
    min_score: float | None = None
    max_candidates: int | None = None  # BEST_SCORE window, None means all

    def __post_init__(self) -> None:
        """Validate the thumbnail options."""
        if self.image_timestamp is not None and self.image_timestamp < 0:
            raise ValueError(
                f"image_timestamp must be non-negative, got {self.image_timestamp}"
            )
        fraction = self.image_timestamp_fraction
        if fraction is not None and not 0.0 <= fraction <= 1.0:
            raise ValueError(
                f"image_timestamp_fraction must be between 0 and 1, got {fraction}"
            )
        _check_enum(self.strategy, ThumbnailStrategy, "thumbnail strategy")
        if self.max_candidates is not None and self.max_candidates <= 0:
            raise ValueError(
                f"max_candidates must be positive, got {self.max_candidates}"
            )


@dataclass(frozen=True)
class TranscodeOptions:
    """Complete set of desired output properties."""

    container: ContainerFormat = ContainerFormat.MP4
    video: VideoStreamOptions = field(default_factory=VideoStreamOptions)
    audio: AudioStreamOptions = field(default_factory=AudioStreamOptions)
    thumbnail: ThumbnailOptions = field(default_factory=ThumbnailOptions)
    strip_metadata: StripMetadataMode = StripMetadataMode.NONE
    preserve_other_streams: bool = True  # Subtitles, data and attachments
    strict_resize: bool = False  # Raise when a resize request is a no-op

    def __post_init__(self) -> None:
        """Validate the top-level options."""
        _check_enum(self.container, ContainerFormat, "container")
        _check_enum(self.strip_metadata, StripMetadataMode, "strip_metadata")
        if not isinstance(self.video, VideoStreamOptions):
            raise ValueError("video must be a VideoStreamOptions")
        if not isinstance(self.audio, AudioStreamOptions):
            raise ValueError("audio must be an AudioStreamOptions")
        if not isinstance(self.thumbnail, ThumbnailOptions):
            raise ValueError("thumbnail must be a ThumbnailOptions")


PRESERVE_VIDEO = VideoStreamOptions(
    result_codecs=ALL_SOURCE_VIDEO_CODECS,
    reencode=ReencodeBehavior.IF_NEEDED,
)
PRESERVE_AUDIO = AudioStreamOptions(
    result_codecs=ALL_SOURCE_AUDIO_CODECS,
    reencode=ReencodeBehavior.IF_NEEDED,
)
