"""Codec, profile and bit-depth compatibility resolution.

Given a probed stream, the requested stream options and the output container,
this module determines the concrete encoder target or reports why the
request cannot be satisfied. Nothing is silently coerced except the
documented fallbacks: a bit depth or chroma subsampling above what the chosen
profile can carry is reduced to the profile's maximum, one below the
profile's minimum is raised to it, and H.264 sources deeper than 10-bit are
reduced to 10-bit unless a depth was requested. All of them are logged.
"""

import logging
from dataclasses import dataclass

from transcode_planner.core.codecs import ContainerFormat, VideoCodec
from transcode_planner.domain.models import StreamDescriptor
from transcode_planner.policy.exceptions import IncompatibleCodecError
from transcode_planner.policy.types.enums import (
    AAC_BITRATE_PER_CHANNEL,
    COMPRESSION_PRESETS,
    H264_CRF_VALUES,
    H265_CRF_VALUES,
    X264_TUNES,
    X265_TUNES,
    H264Profile,
    H265Profile,
)
from transcode_planner.policy.types.options import (
    AudioStreamOptions,
    VideoStreamOptions,
)
from transcode_planner.policy.types.plan import ResolvedAudioTarget, ResolvedVideoTarget

logger = logging.getLogger(__name__)

# Assumed when the probe did not report a value
DEFAULT_BIT_DEPTH = 8
DEFAULT_CHROMA = 420
ENCODABLE_CHROMA = frozenset({420, 422, 444})


@dataclass(frozen=True)
class ProfileLimits:
    """Bit depths and chroma subsamplings an encoder profile can carry."""

    bit_depths: frozenset[int]
    chroma: frozenset[int]

    def fit_bits(self, bits: int) -> int:
        """Largest allowed depth not above ``bits``, else the smallest allowed."""
        below = [b for b in self.bit_depths if b <= bits]
        return max(below) if below else min(self.bit_depths)

    def fit_chroma(self, chroma: int) -> int:
        below = [c for c in self.chroma if c <= chroma]
        return max(below) if below else min(self.chroma)


_420 = frozenset({420})

H264_PROFILE_LIMITS: dict[H264Profile, ProfileLimits] = {
    H264Profile.BASELINE: ProfileLimits(frozenset({8}), _420),
    H264Profile.MAIN: ProfileLimits(frozenset({8}), _420),
    H264Profile.HIGH: ProfileLimits(frozenset({8}), _420),
    H264Profile.HIGH10: ProfileLimits(frozenset({10}), _420),
    H264Profile.HIGH422: ProfileLimits(frozenset({10}), frozenset({422})),
    H264Profile.HIGH444: ProfileLimits(frozenset({10, 12}), frozenset({444})),
}

# x264 builds encode 8 and 10 bit only; applied when no depth was requested
H264_MAX_BIT_DEPTH = 10

H265_PROFILE_LIMITS: dict[H265Profile, ProfileLimits] = {
    H265Profile.MAIN: ProfileLimits(frozenset({8}), _420),
    H265Profile.MAIN_INTRA: ProfileLimits(frozenset({8}), _420),
    H265Profile.MAIN10: ProfileLimits(frozenset({10}), _420),
    H265Profile.MAIN10_INTRA: ProfileLimits(frozenset({10}), _420),
    H265Profile.MAIN12: ProfileLimits(frozenset({12}), _420),
    H265Profile.MAIN12_INTRA: ProfileLimits(frozenset({12}), _420),
    H265Profile.MAIN422_10: ProfileLimits(frozenset({10}), frozenset({422})),
    H265Profile.MAIN422_10_INTRA: ProfileLimits(frozenset({10}), frozenset({422})),
    H265Profile.MAIN422_12: ProfileLimits(frozenset({12}), frozenset({422})),
    H265Profile.MAIN422_12_INTRA: ProfileLimits(frozenset({12}), frozenset({422})),
    H265Profile.MAIN444_8: ProfileLimits(frozenset({8}), frozenset({444})),
    H265Profile.MAIN444_8_INTRA: ProfileLimits(frozenset({8}), frozenset({444})),
    H265Profile.MAIN444_10: ProfileLimits(frozenset({10}), frozenset({444})),
    H265Profile.MAIN444_10_INTRA: ProfileLimits(frozenset({10}), frozenset({444})),
    H265Profile.MAIN444_12: ProfileLimits(frozenset({12}), frozenset({444})),
    H265Profile.MAIN444_12_INTRA: ProfileLimits(frozenset({12}), frozenset({444})),
}

# ffprobe profile strings normalized to encoder profile names
_SOURCE_PROFILE_NAMES: dict[str, str] = {
    "baseline": "baseline",
    "constrainedbaseline": "baseline",
    "main": "main",
    "high": "high",
    "high10": "high10",
    "high10intra": "high10",
    "high4:2:2": "high422",
    "high4:2:2intra": "high422",
    "high4:4:4predictive": "high444",
    "high4:4:4intra": "high444",
    "main10": "main10",
    "main12": "main12",
}


def pixel_format_for(bit_depth: int, chroma: int) -> str:
    """Return the ffmpeg planar YUV pixel format for a bit depth and chroma."""
    suffix = "" if bit_depth == 8 else f"{bit_depth}le"
    return f"yuv{chroma}p{suffix}"


def normalize_source_profile(profile: str | None) -> str | None:
    """Normalize an ffprobe profile string such as ``High 4:2:2``."""
    if not profile:
        return None
    key = profile.casefold().replace(" ", "")
    return _SOURCE_PROFILE_NAMES.get(key, key)


def _is_h265(codec: VideoCodec) -> bool:
    return codec in (VideoCodec.H265, VideoCodec.H265_ANY_TAG)


def _requested_profile(
    codec: VideoCodec, options: VideoStreamOptions
) -> tuple[str, ProfileLimits] | None:
    if codec is VideoCodec.H264 and options.h264_profile is not None:
        return options.h264_profile.value, H264_PROFILE_LIMITS[options.h264_profile]
    if _is_h265(codec) and options.h265_profile is not None:
        return options.h265_profile.value, H265_PROFILE_LIMITS[options.h265_profile]
    return None


def _check_profile_request(
    stream: StreamDescriptor,
    codec: VideoCodec,
    profile_name: str,
    limits: ProfileLimits,
    options: VideoStreamOptions,
) -> None:
    requested_bits = options.bits_per_channel.bits
    if requested_bits is not None and requested_bits not in limits.bit_depths:
        raise IncompatibleCodecError(
            codec.codec_name,
            f"profile {profile_name} cannot carry {requested_bits}-bit video",
            stream_index=stream.index,
        )
    requested_chroma = options.chroma_subsampling.code
    if requested_chroma is not None and requested_chroma not in limits.chroma:
        raise IncompatibleCodecError(
            codec.codec_name,
            f"profile {profile_name} cannot carry {requested_chroma} "
            "chroma subsampling",
            stream_index=stream.index,
        )


def _capped(source: int | None, default: int, requested: int | None) -> int:
    value = source if source is not None else default
    if requested is not None:
        value = min(value, requested)
    return value


def _auto_h264_profile(bits: int, chroma: int) -> H264Profile:
    if chroma == 444:
        return H264Profile.HIGH444
    if chroma == 422:
        return H264Profile.HIGH422
    return H264Profile.HIGH10 if bits > 8 else H264Profile.HIGH


def _auto_h265_profile(bits: int, chroma: int) -> H265Profile:
    candidates = sorted(
        (
            profile
            for profile, limits in H265_PROFILE_LIMITS.items()
            if not profile.is_intra and chroma in limits.chroma
        ),
        key=lambda profile: min(H265_PROFILE_LIMITS[profile].bit_depths),
    )
    for profile in candidates:
        if min(H265_PROFILE_LIMITS[profile].bit_depths) >= bits:
            return profile
    return candidates[-1]


def _fit_to_profile(
    stream: StreamDescriptor,
    profile_name: str,
    limits: ProfileLimits,
    bits: int,
    chroma: int,
) -> tuple[int, int]:
    fitted_bits = limits.fit_bits(bits)
    fitted_chroma = limits.fit_chroma(chroma)
    if (fitted_bits, fitted_chroma) != (bits, chroma):
        logger.info(
            "Stream #%d: profile %s carries %d-bit %d, adjusted from %d-bit %d",
            stream.index,
            profile_name,
            fitted_bits,
            fitted_chroma,
            bits,
            chroma,
        )
    return fitted_bits, fitted_chroma


def resolve_video_target(
    stream: StreamDescriptor,
    options: VideoStreamOptions,
    container: ContainerFormat,
) -> ResolvedVideoTarget:
    """Resolve the concrete encoder settings for a video stream.

    Only called for streams that will be encoded. The encode target is the
    first codec in ``options.result_codecs``.

    Args:
        stream: Source stream descriptor.
        options: Requested video options.
        container: Output container.

    Returns:
        ResolvedVideoTarget with profile, bit depth, chroma, CRF and preset.

    Raises:
        IncompatibleCodecError: If the target codec cannot encode, the
            container cannot carry it, or the requested profile cannot carry
            the requested bit depth or chroma subsampling.
    """
    codec = options.target_codec
    if not codec.supports_encoding:
        raise IncompatibleCodecError(
            codec.codec_name,
            "codec is decode-only and can only be passed through",
            stream_index=stream.index,
        )
    if not container.accepts_video(codec):
        raise IncompatibleCodecError(
            codec.codec_name,
            f"{container.value} container cannot carry this codec",
            stream_index=stream.index,
            container=container.value,
        )

    bits = _capped(stream.bit_depth, DEFAULT_BIT_DEPTH, options.bits_per_channel.bits)
    chroma = _capped(
        stream.chroma_subsampling, DEFAULT_CHROMA, options.chroma_subsampling.code
    )
    if chroma not in ENCODABLE_CHROMA:
        # 4:4:0 has no encoder profile
        chroma = 444

    if (
        codec is VideoCodec.H264
        and options.bits_per_channel.bits is None
        and bits > H264_MAX_BIT_DEPTH
    ):
        logger.info(
            "Stream #%d: H.264 cannot encode %d-bit video, reducing to %d-bit",
            stream.index,
            bits,
            H264_MAX_BIT_DEPTH,
        )
        bits = H264_MAX_BIT_DEPTH

    requested = _requested_profile(codec, options)
    if requested is not None:
        profile_name, limits = requested
        _check_profile_request(stream, codec, profile_name, limits, options)
    elif codec is VideoCodec.H264:
        profile = _auto_h264_profile(bits, chroma)
        profile_name, limits = profile.value, H264_PROFILE_LIMITS[profile]
    else:
        h265_profile = _auto_h265_profile(bits, chroma)
        profile_name, limits = h265_profile.value, H265_PROFILE_LIMITS[h265_profile]
    bits, chroma = _fit_to_profile(stream, profile_name, limits, bits, chroma)

    if codec is VideoCodec.H264:
        crf = H264_CRF_VALUES[options.quality]
        tune = X264_TUNES.get(options.tune)
    else:
        crf = H265_CRF_VALUES[options.quality]
        tune = X265_TUNES.get(options.tune)

    target = ResolvedVideoTarget(
        codec=codec,
        encoder_profile=profile_name,
        bit_depth=bits,
        chroma_subsampling=chroma,
        pixel_format=pixel_format_for(bits, chroma),
        crf=crf,
        preset=COMPRESSION_PRESETS[options.compression],
        tune=tune,
        codec_tag=codec.tag_name,
        # Encoded output is always SDR and progressive
        tone_map=stream.is_hdr,
        deinterlace=stream.is_interlaced,
        square_pixels=options.force_square_pixels and not stream.has_square_pixels,
    )
    logger.debug(
        "Stream #%d: video target %s profile=%s %s crf=%d",
        stream.index,
        codec.codec_name,
        profile_name,
        target.pixel_format,
        crf,
    )
    return target


def resolve_audio_target(
    stream: StreamDescriptor,
    options: AudioStreamOptions,
    container: ContainerFormat,
) -> ResolvedAudioTarget:
    """Resolve the concrete encoder settings for an audio stream.

    Raises:
        IncompatibleCodecError: If the target codec is decode-only or the
            container cannot carry it.
    """
    codec = options.target_codec
    if not codec.supports_encoding:
        raise IncompatibleCodecError(
            codec.codec_name,
            "codec is decode-only and can only be passed through",
            stream_index=stream.index,
        )
    if not container.accepts_audio(codec):
        raise IncompatibleCodecError(
            codec.codec_name,
            f"{container.value} container cannot carry this codec",
            stream_index=stream.index,
            container=container.value,
        )

    channels = stream.channels
    max_channels = options.max_channels.count
    if max_channels is not None:
        channels = min(channels, max_channels) if channels else max_channels

    sample_rate = stream.sample_rate
    max_rate = options.sample_rate.hertz
    if max_rate is not None:
        sample_rate = min(sample_rate, max_rate) if sample_rate else max_rate

    # Unknown channel counts are budgeted as stereo
    bitrate = AAC_BITRATE_PER_CHANNEL[options.quality] * (channels or 2)
    return ResolvedAudioTarget(
        codec=codec,
        profile=codec.profile,
        channels=channels,
        sample_rate=sample_rate,
        bitrate=bitrate,
    )


def video_exceeds_limits(stream: StreamDescriptor, options: VideoStreamOptions) -> bool:
    """Return True if passing the stream through would break a requested limit.

    Checks bit depth and chroma subsampling maximums, and an explicitly
    requested profile for a stream already in the target codec.
    """
    max_bits = options.bits_per_channel.bits
    if (
        max_bits is not None
        and stream.bit_depth is not None
        and stream.bit_depth > max_bits
    ):
        return True
    max_chroma = options.chroma_subsampling.code
    if (
        max_chroma is not None
        and stream.chroma_subsampling is not None
        and stream.chroma_subsampling > max_chroma
    ):
        return True
    return video_profile_differs(stream, options)


def video_profile_differs(
    stream: StreamDescriptor, options: VideoStreamOptions
) -> bool:
    """Return True if the stream's profile differs from an explicit request."""
    codec = options.target_codec
    requested = _requested_profile(codec, options)
    if requested is None or not codec.matches(stream):
        return False
    source_profile = normalize_source_profile(stream.profile)
    if source_profile is None:
        return False
    return source_profile != requested[0].removesuffix("-intra")


def channels_exceed_limit(
    stream: StreamDescriptor, options: AudioStreamOptions
) -> bool:
    """Return True if the stream has more channels than allowed."""
    max_channels = options.max_channels.count
    if max_channels is None or not stream.channels:
        return False
    return stream.channels > max_channels


def sample_rate_exceeds_limit(
    stream: StreamDescriptor, options: AudioStreamOptions
) -> bool:
    """Return True if the stream's sample rate is above the allowed maximum."""
    max_rate = options.sample_rate.hertz
    if max_rate is None or not stream.sample_rate:
        return False
    return stream.sample_rate > max_rate

