"""Codec and container capability tables."""

from transcode_planner.core.codecs import (
    ALL_SOURCE_AUDIO_CODECS,
    ALL_SOURCE_VIDEO_CODECS,
    AudioCodec,
    ContainerFormat,
    VideoCodec,
    parse_audio_codec,
    parse_video_codec,
)

__all__ = [
    "ALL_SOURCE_AUDIO_CODECS",
    "ALL_SOURCE_VIDEO_CODECS",
    "AudioCodec",
    "ContainerFormat",
    "VideoCodec",
    "parse_audio_codec",
    "parse_video_codec",
]
