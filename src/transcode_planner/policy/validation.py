"""Source validation.

Checks a probed file against the video and audio validation limits before
any stream is planned. The first violation raises SourceValidationError.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from transcode_planner.domain.models import ProbeResult, StreamDescriptor
from transcode_planner.policy.exceptions import SourceValidationError
from transcode_planner.policy.types.options import (
    AudioSourceValidation,
    TranscodeOptions,
    VideoSourceValidation,
)

logger = logging.getLogger(__name__)


def _format(value: float) -> str:
    return f"{value:g}" if isinstance(value, float) else str(value)


def _check_bounds(
    stream: StreamDescriptor,
    name: str,
    value: float | None,
    low: float | None,
    high: float | None,
) -> None:
    if low is None and high is None:
        return
    if value is None:
        raise SourceValidationError(f"{name} is unknown, cannot validate", stream.index)
    if high is not None and value > high:
        raise SourceValidationError(
            f"{name} {_format(value)} exceeds maximum {_format(high)}", stream.index
        )
    if low is not None and value < low:
        raise SourceValidationError(
            f"{name} {_format(value)} is below minimum {_format(low)}", stream.index
        )


def _check_count(kind: str, count: int, low: int | None, high: int | None) -> None:
    if high is not None and count > high:
        raise SourceValidationError(f"{count} {kind} streams exceed maximum {high}")
    if low is not None and count < low:
        raise SourceValidationError(f"{count} {kind} streams is below minimum {low}")


def validate_video_streams(
    streams: Sequence[StreamDescriptor],
    limits: VideoSourceValidation,
    container_duration: float | None = None,
) -> None:
    """Check non-thumbnail video streams against the video limits.

    Raises:
        SourceValidationError: On the first stream or count out of bounds.
    """
    for stream in streams:
        duration = stream.duration_seconds
        if duration is None:
            duration = container_duration
        _check_bounds(
            stream, "duration", duration, limits.min_duration, limits.max_duration
        )
        _check_bounds(stream, "width", stream.width, limits.min_width, limits.max_width)
        _check_bounds(
            stream, "height", stream.height, limits.min_height, limits.max_height
        )
        _check_bounds(
            stream,
            "pixel count",
            stream.pixel_area or None,
            limits.min_pixels,
            limits.max_pixels,
        )
    _check_count("video", len(streams), limits.min_streams, limits.max_streams)


def validate_audio_streams(
    streams: Sequence[StreamDescriptor],
    limits: AudioSourceValidation,
    container_duration: float | None = None,
) -> None:
    """Check audio streams against the audio limits.

    Raises:
        SourceValidationError: On the first stream or count out of bounds.
    """
    for stream in streams:
        duration = stream.duration_seconds
        if duration is None:
            duration = container_duration
        _check_bounds(
            stream, "duration", duration, limits.min_duration, limits.max_duration
        )
    _check_count("audio", len(streams), limits.min_streams, limits.max_streams)


def validate_source(probe: ProbeResult, options: TranscodeOptions) -> None:
    """Check a probed file against every configured validation limit.

    Raises:
        SourceValidationError: If the file or one of its streams is out of
            bounds, or a limited property is unknown.
    """
    video = [s for s in probe.video_streams if not s.is_thumbnail_stream]
    validate_video_streams(video, options.video.validation, probe.duration_seconds)
    validate_audio_streams(
        probe.audio_streams, options.audio.validation, probe.duration_seconds
    )
    logger.debug(
        "Source passed validation: %d video, %d audio streams",
        len(video),
        len(probe.audio_streams),
    )
