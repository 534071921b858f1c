"""Core enums and constants for transcode options.

This module contains the closed option vocabulary used by policies and
resolvers, plus the lookup tables that translate option values into
encoder settings. These have no dependencies on other policy types.
"""

from enum import Enum


class ResizeMode(Enum):
    """How a picture is reduced into a bounding box."""

    FIT_DOWN = "fit_down"  # Fit inside the box, pad the rest
    CROP_DOWN = "crop_down"  # Cover the box, crop the excess
    STRETCH_DOWN = "stretch_down"  # Each axis clamped independently


class FpsLimitMode(Enum):
    """How a frame rate above the limit is reduced."""

    EXACT = "exact"  # Output exactly min(source, target)
    DIVIDE_BY_INTEGER = "divide_by_integer"  # Drop every Nth frame


class ReencodeBehavior(Enum):
    """When a stream is re-encoded rather than passed through."""

    ALWAYS = "always"
    IF_NEEDED = "if_needed"
    IF_SMALLER = "if_smaller"


class StreamAction(Enum):
    """Final decision for a single stream."""

    PASSTHROUGH = "passthrough"
    REENCODE = "reencode"
    REENCODE_THEN_COMPARE = "reencode_then_compare"
    REMOVE = "remove"


class VideoQuality(Enum):
    """Encoder quality level for video."""

    WORST = "worst"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    BEST = "best"


class AudioQuality(Enum):
    """Encoder quality level for audio."""

    LOWEST = "lowest"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    HIGHEST = "highest"


class CompressionLevel(Enum):
    """Trade-off between encode speed and output size."""

    LOWEST = "lowest"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    HIGHEST = "highest"


class VideoTune(Enum):
    """Encoder tuning hint."""

    DEFAULT = "default"
    FILM = "film"
    ANIMATION = "animation"
    GRAIN = "grain"
    STILL_IMAGE = "still_image"
    FAST_DECODE = "fast_decode"
    ZERO_LATENCY = "zero_latency"


class BitsPerChannel(Enum):
    """Maximum bit depth per colour channel."""

    PRESERVE = "preserve"
    BITS_8 = "8"
    BITS_10 = "10"
    BITS_12 = "12"

    @property
    def bits(self) -> int | None:
        """Numeric bit depth, or None for PRESERVE."""
        if self is BitsPerChannel.PRESERVE:
            return None
        return int(self.value)


class ChromaSubsampling(Enum):
    """Maximum chroma resolution."""

    PRESERVE = "preserve"
    SUBSAMPLING_420 = "420"
    SUBSAMPLING_422 = "422"
    SUBSAMPLING_444 = "444"

    @property
    def code(self) -> int | None:
        """Numeric code (420, 422, 444), or None for PRESERVE."""
        if self is ChromaSubsampling.PRESERVE:
            return None
        return int(self.value)


class H264Profile(Enum):
    """H.264 encoder profiles."""

    BASELINE = "baseline"
    MAIN = "main"
    HIGH = "high"
    HIGH10 = "high10"
    HIGH422 = "high422"
    HIGH444 = "high444"


class H265Profile(Enum):
    """H.265 encoder profiles, named as x265 names them."""

    MAIN = "main"
    MAIN_INTRA = "main-intra"
    MAIN10 = "main10"
    MAIN10_INTRA = "main10-intra"
    MAIN12 = "main12"
    MAIN12_INTRA = "main12-intra"
    MAIN422_10 = "main422-10"
    MAIN422_10_INTRA = "main422-10-intra"
    MAIN422_12 = "main422-12"
    MAIN422_12_INTRA = "main422-12-intra"
    MAIN444_8 = "main444-8"
    MAIN444_8_INTRA = "main444-intra"
    MAIN444_10 = "main444-10"
    MAIN444_10_INTRA = "main444-10-intra"
    MAIN444_12 = "main444-12"
    MAIN444_12_INTRA = "main444-12-intra"

    @property
    def is_intra(self) -> bool:
        return self.value.endswith("-intra")


class StripMetadataMode(Enum):
    """Which metadata is removed from the output."""

    NONE = "none"
    THUMBNAIL_ONLY = "thumbnail_only"  # Drop embedded cover art streams
    ALL = "all"


class StreamSelection(Enum):
    """Which streams of a kind survive into the output."""

    KEEP_ALL = "keep_all"
    KEEP_FIRST = "keep_first"
    KEEP_BEST = "keep_best"
    REMOVE_ALL = "remove_all"


class AudioChannels(Enum):
    """Maximum number of audio channels."""

    PRESERVE = "preserve"
    MONO = "mono"
    STEREO = "stereo"

    @property
    def count(self) -> int | None:
        if self is AudioChannels.PRESERVE:
            return None
        return 1 if self is AudioChannels.MONO else 2


class AudioSampleRate(Enum):
    """Maximum audio sample rate."""

    PRESERVE = "preserve"
    HZ_44100 = "44100"
    HZ_48000 = "48000"
    HZ_96000 = "96000"
    HZ_192000 = "192000"

    @property
    def hertz(self) -> int | None:
        if self is AudioSampleRate.PRESERVE:
            return None
        return int(self.value)


class ThumbnailStrategy(Enum):
    """How a thumbnail candidate is chosen from the extractor's sequence."""

    FIRST_ACCEPTABLE = "first_acceptable"
    BEST_SCORE = "best_score"


# Constant rate factor per quality level, by encoder
H264_CRF_VALUES: dict[VideoQuality, int] = {
    VideoQuality.WORST: 29,
    VideoQuality.LOW: 26,
    VideoQuality.MEDIUM: 23,
    VideoQuality.HIGH: 20,
    VideoQuality.BEST: 17,
}

H265_CRF_VALUES: dict[VideoQuality, int] = {
    VideoQuality.WORST: 34,
    VideoQuality.LOW: 31,
    VideoQuality.MEDIUM: 28,
    VideoQuality.HIGH: 23,
    VideoQuality.BEST: 19,
}

# x264/x265 presets; higher compression means a slower preset
COMPRESSION_PRESETS: dict[CompressionLevel, str] = {
    CompressionLevel.LOWEST: "superfast",
    CompressionLevel.LOW: "faster",
    CompressionLevel.MEDIUM: "medium",
    CompressionLevel.HIGH: "slow",
    CompressionLevel.HIGHEST: "slower",
}

# AAC bitrate per channel in bits per second
AAC_BITRATE_PER_CHANNEL: dict[AudioQuality, int] = {
    AudioQuality.LOWEST: 64_000,
    AudioQuality.LOW: 80_000,
    AudioQuality.MEDIUM: 128_000,
    AudioQuality.HIGH: 160_000,
    AudioQuality.HIGHEST: 192_000,
}

# x264 tune names; x265 has no still image or fast decode equivalents
X264_TUNES: dict[VideoTune, str] = {
    VideoTune.FILM: "film",
    VideoTune.ANIMATION: "animation",
    VideoTune.GRAIN: "grain",
    VideoTune.STILL_IMAGE: "stillimage",
    VideoTune.FAST_DECODE: "fastdecode",
    VideoTune.ZERO_LATENCY: "zerolatency",
}

X265_TUNES: dict[VideoTune, str] = {
    VideoTune.ANIMATION: "animation",
    VideoTune.GRAIN: "grain",
    VideoTune.FAST_DECODE: "fastdecode",
    VideoTune.ZERO_LATENCY: "zerolatency",
}
