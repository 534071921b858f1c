"""Centralized codec registry and utilities.

This module is the single source of truth for codec knowledge in the planner:
- Codec alias groups for matching ffprobe names
- Closed codec and container enums with their capability tables
- Matching helpers that map a probed stream onto a codec member

Every codec is either encodable by the planner (H.264, H.265, AAC) or a
decode-only source format that can only be passed through.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from transcode_planner.domain.models import StreamDescriptor

# =============================================================================
# Codec Alias Groups
# =============================================================================
# Groups of equivalent codec identifiers, keyed by the canonical ffprobe name.

VIDEO_CODEC_ALIASES: dict[str, frozenset[str]] = {
    "hevc": frozenset({"hevc", "h265", "h.265", "x265", "hvc1", "hev1"}),
    "h264": frozenset({"h264", "h.264", "avc", "avc1", "x264"}),
    "mpeg2video": frozenset({"mpeg2video", "mpeg2", "h262", "h.262"}),
    "mpeg1video": frozenset({"mpeg1video", "mpeg1"}),
    "h263": frozenset({"h263", "h.263"}),
    "vvc": frozenset({"vvc", "h266", "h.266", "vvc1"}),
    "vp8": frozenset({"vp8"}),
    "vp9": frozenset({"vp9", "vp09"}),
    "av1": frozenset({"av1", "av01", "libaom-av1"}),
    "mpeg4": frozenset({"mpeg4", "mp4v"}),
}

AUDIO_CODEC_ALIASES: dict[str, frozenset[str]] = {
    "aac": frozenset({"aac", "aac_latm", "mp4a"}),
    "mp2": frozenset({"mp2", "mp2float"}),
    "mp3": frozenset({"mp3", "mp3float"}),
    "vorbis": frozenset({"vorbis"}),
    "opus": frozenset({"opus"}),
}


def canonical_codec_name(name: str | None, aliases: dict[str, frozenset[str]]) -> str:
    """Normalize a codec identifier to its canonical ffprobe name.

    Args:
        name: Codec name as reported by a probe or written in a policy.
        aliases: Alias table to resolve against.

    Returns:
        Canonical lowercase name, or the casefolded input if it is unknown.
    """
    if not name:
        return ""
    folded = name.casefold()
    for canonical, group in aliases.items():
        if folded in group:
            return canonical
    return folded


@dataclass(frozen=True)
class VideoCodecInfo:
    """Capabilities of a video codec."""

    codec_name: str
    supports_encoding: bool
    supports_mp4_muxing: bool
    tag_name: str | None = None  # Required codec tag, None means any


@dataclass(frozen=True)
class AudioCodecInfo:
    """Capabilities of an audio codec."""

    codec_name: str
    supports_encoding: bool
    supports_mp4_muxing: bool
    profile: str | None = None  # Required profile, None means any


class VideoCodec(Enum):
    """Known video codecs."""

    # Encodable codecs come first so that tuple(VideoCodec) encodes to H.264
    H264 = VideoCodecInfo("h264", True, True)
    H265 = VideoCodecInfo("hevc", True, True, tag_name="hvc1")
    H265_ANY_TAG = VideoCodecInfo("hevc", True, True, tag_name="*")
    H262 = VideoCodecInfo("mpeg2video", False, True)
    H263 = VideoCodecInfo("h263", False, False)
    H266 = VideoCodecInfo("vvc", False, True)
    MPEG1 = VideoCodecInfo("mpeg1video", False, True)
    MPEG4 = VideoCodecInfo("mpeg4", False, True)
    VP8 = VideoCodecInfo("vp8", False, False)
    VP9 = VideoCodecInfo("vp9", False, True)
    AV1 = VideoCodecInfo("av1", False, True)

    @property
    def codec_name(self) -> str:
        return self.value.codec_name

    @property
    def tag_name(self) -> str | None:
        """Codec tag written on encode, None when the tag is not constrained."""
        tag = self.value.tag_name
        return None if tag == "*" else tag

    @property
    def supports_encoding(self) -> bool:
        return self.value.supports_encoding

    @property
    def supports_mp4_muxing(self) -> bool:
        return self.value.supports_mp4_muxing

    def matches(self, stream: StreamDescriptor) -> bool:
        """Check whether a probed stream is already in this codec."""
        name = canonical_codec_name(stream.codec_name, VIDEO_CODEC_ALIASES)
        if name != self.codec_name:
            return False
        required_tag = self.value.tag_name
        if required_tag is None or required_tag == "*":
            return True
        return (stream.codec_tag or "").casefold() == required_tag


class AudioCodec(Enum):
    """Known audio codecs."""

    AAC = AudioCodecInfo("aac", True, True, profile="LC")
    HE_AAC = AudioCodecInfo("aac", True, True, profile="HE-AAC")
    MP2 = AudioCodecInfo("mp2", False, True)
    MP3 = AudioCodecInfo("mp3", False, True)
    VORBIS = AudioCodecInfo("vorbis", False, True)
    OPUS = AudioCodecInfo("opus", False, True)

    @property
    def codec_name(self) -> str:
        return self.value.codec_name

    @property
    def profile(self) -> str | None:
        return self.value.profile

    @property
    def supports_encoding(self) -> bool:
        return self.value.supports_encoding

    @property
    def supports_mp4_muxing(self) -> bool:
        return self.value.supports_mp4_muxing

    def matches(self, stream: StreamDescriptor) -> bool:
        """Check whether a probed stream is already in this codec."""
        name = canonical_codec_name(stream.codec_name, AUDIO_CODEC_ALIASES)
        if name != self.codec_name:
            return False
        return self.profile is None or stream.profile == self.profile


ALL_SOURCE_VIDEO_CODECS: tuple[VideoCodec, ...] = tuple(VideoCodec)
ALL_SOURCE_AUDIO_CODECS: tuple[AudioCodec, ...] = tuple(AudioCodec)

# Lookup by policy name, e.g. "h264" or "he_aac"
VIDEO_CODECS_BY_NAME: dict[str, VideoCodec] = {c.name.casefold(): c for c in VideoCodec}
AUDIO_CODECS_BY_NAME: dict[str, AudioCodec] = {c.name.casefold(): c for c in AudioCodec}

WEBM_VIDEO_CODECS: frozenset[VideoCodec] = frozenset(
    {VideoCodec.VP8, VideoCodec.VP9, VideoCodec.AV1}
)
WEBM_AUDIO_CODECS: frozenset[AudioCodec] = frozenset(
    {AudioCodec.VORBIS, AudioCodec.OPUS}
)


class ContainerFormat(Enum):
    """Output container formats."""

    MP4 = "mp4"
    MOV = "mov"
    MKV = "mkv"
    WEBM = "webm"

    def accepts_video(self, codec: VideoCodec) -> bool:
        """Check whether this container can carry the given video codec."""
        if self in (ContainerFormat.MP4, ContainerFormat.MOV):
            return codec.supports_mp4_muxing
        if self is ContainerFormat.WEBM:
            return codec in WEBM_VIDEO_CODECS
        return True

    def accepts_audio(self, codec: AudioCodec) -> bool:
        """Check whether this container can carry the given audio codec."""
        if self in (ContainerFormat.MP4, ContainerFormat.MOV):
            return codec.supports_mp4_muxing
        if self is ContainerFormat.WEBM:
            return codec in WEBM_AUDIO_CODECS
        return True


def match_video_codec(
    codecs: Iterable[VideoCodec], stream: StreamDescriptor
) -> VideoCodec | None:
    """Return the first codec in ``codecs`` that the stream already uses."""
    for codec in codecs:
        if codec.matches(stream):
            return codec
    return None


def match_audio_codec(
    codecs: Iterable[AudioCodec], stream: StreamDescriptor
) -> AudioCodec | None:
    """Return the first codec in ``codecs`` that the stream already uses."""
    for codec in codecs:
        if codec.matches(stream):
            return codec
    return None


def identify_video_codec(stream: StreamDescriptor) -> VideoCodec | None:
    """Identify the source codec of a video stream, if it is a known one."""
    return match_video_codec(ALL_SOURCE_VIDEO_CODECS, stream)


def identify_audio_codec(stream: StreamDescriptor) -> AudioCodec | None:
    """Identify the source codec of an audio stream, if it is a known one."""
    return match_audio_codec(ALL_SOURCE_AUDIO_CODECS, stream)


def parse_video_codec(name: str) -> VideoCodec:
    """Look up a video codec by its policy name.

    Raises:
        ValueError: If the name is unknown.
    """
    try:
        return VIDEO_CODECS_BY_NAME[name.casefold()]
    except KeyError:
        valid = ", ".join(sorted(VIDEO_CODECS_BY_NAME))
        raise ValueError(
            f"Unknown video codec '{name}'. Must be one of: {valid}"
        ) from None


def parse_audio_codec(name: str) -> AudioCodec:
    """Look up an audio codec by its policy name.

    Raises:
        ValueError: If the name is unknown.
    """
    try:
        return AUDIO_CODECS_BY_NAME[name.casefold()]
    except KeyError:
        valid = ", ".join(sorted(AUDIO_CODECS_BY_NAME))
        raise ValueError(
            f"Unknown audio codec '{name}'. Must be one of: {valid}"
        ) from None
