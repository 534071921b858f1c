"""Target frame-rate resolution.

Frame rates are handled as exact fractions throughout, since ffprobe reports
them as ratios such as ``30000/1001``. The resolved rate is never rounded.
"""

import logging
import math
from fractions import Fraction

from transcode_planner.policy.types.enums import FpsLimitMode
from transcode_planner.policy.types.options import FpsOptions

logger = logging.getLogger(__name__)


def parse_frame_rate(frame_rate_str: str | None) -> Fraction | None:
    """Parse FFprobe frame rate string (e.g., '24000/1001') to a Fraction.

    Args:
        frame_rate_str: Frame rate string from ffprobe.

    Returns:
        Frame rate as a reduced Fraction, or None if unparseable or not
        positive.
    """
    if not frame_rate_str or frame_rate_str == "0/0":
        return None

    try:
        if "/" in frame_rate_str:
            num, denom = frame_rate_str.split("/")
            if int(denom) == 0:
                return None
            rate = Fraction(int(num), int(denom))
        else:
            rate = Fraction(frame_rate_str)
    except (ValueError, ZeroDivisionError):
        return None

    return rate if rate > 0 else None


def frame_rate_divisor(source_fps: Fraction, target_fps: int) -> int:
    """Return the smallest integer divisor that brings the source to the target.

    Returns 1 when the source does not exceed the target.
    """
    if source_fps <= target_fps:
        return 1
    return math.ceil(source_fps / target_fps)


def resolve_frame_rate(source_fps: Fraction | None, request: FpsOptions) -> Fraction:
    """Compute the output frame rate for a video stream.

    Args:
        source_fps: Source frame rate, or None when the probe could not
            determine one.
        request: Frame-rate limit and mode.

    Returns:
        EXACT: ``min(source, target)``.
        DIVIDE_BY_INTEGER: the source when it fits, otherwise ``source / d``
        for the smallest integer ``d`` with ``source / d <= target``.
        An unknown or non-positive source resolves to the target itself.
    """
    target = Fraction(request.target_fps)

    if source_fps is None or source_fps <= 0:
        logger.debug("Unknown source frame rate, using target %s fps", target)
        return target

    if source_fps <= target:
        return Fraction(source_fps)

    if request.mode is FpsLimitMode.EXACT:
        return target

    divisor = frame_rate_divisor(source_fps, request.target_fps)
    result = Fraction(source_fps) / divisor
    logger.debug(
        "Frame rate %s exceeds %s, dividing by %d to %s",
        source_fps,
        target,
        divisor,
        result,
    )
    return result


def frame_rate_changed(source_fps: Fraction | None, resolved: Fraction) -> bool:
    """Return True when the resolved rate differs from a known source rate.

    An unknown source rate is not a change on its own; the target only
    applies if the stream is re-encoded for another reason.
    """
    if source_fps is None or source_fps <= 0:
        return False
    return Fraction(source_fps) != resolved
