"""Target geometry resolution.

This module computes the output frame size for a video stream under each
resize mode. Pictures are only ever reduced: a source that already fits the
requested box is returned unchanged.

All scale factors are exact fractions. Scaled dimensions are rounded to an
even number (ties to even) because 4:2:0 encoders require even sizes; when
rounding would leave the allowed range, the other even neighbour is used.
"""

import logging
import math
from fractions import Fraction

from transcode_planner.policy.exceptions import ResizeSkippedError
from transcode_planner.policy.types.enums import ResizeMode
from transcode_planner.policy.types.options import ResizeOptions
from transcode_planner.policy.types.plan import Crop, GeometryResult, Padding

logger = logging.getLogger(__name__)

# Smallest dimension an encoder accepts for a scaled picture
MIN_SCALED_DIMENSION = 2


def _even_within(value: Fraction, limit: int) -> int:
    """Round to the nearest even integer not above ``limit``."""
    result = round(value / 2) * 2
    if result > limit:
        result = math.floor(value / 2) * 2
    if result < MIN_SCALED_DIMENSION:
        result = min(MIN_SCALED_DIMENSION, limit)
    return result


def _even_covering(value: Fraction, target: int, source: int) -> int:
    """Round to the nearest even integer not below ``target``."""
    result = round(value / 2) * 2
    if result < target:
        result = math.ceil(value / 2) * 2
    return max(min(result, source), target)


def _unchanged(width: int, height: int) -> GeometryResult:
    return GeometryResult(
        width=width,
        height=height,
        scaled_width=width,
        scaled_height=height,
        changed=False,
    )


def _resolve_fit(width: int, height: int, request: ResizeOptions) -> GeometryResult:
    if width <= request.width and height <= request.height:
        return _unchanged(width, height)

    scale = min(Fraction(request.width, width), Fraction(request.height, height))
    scaled_width = _even_within(width * scale, request.width)
    scaled_height = _even_within(height * scale, request.height)

    if not request.pad_to_box:
        return GeometryResult(
            width=scaled_width,
            height=scaled_height,
            scaled_width=scaled_width,
            scaled_height=scaled_height,
        )

    extra_x = request.width - scaled_width
    extra_y = request.height - scaled_height
    padding = None
    if extra_x or extra_y:
        padding = Padding(
            left=extra_x // 2,
            top=extra_y // 2,
            right=extra_x - extra_x // 2,
            bottom=extra_y - extra_y // 2,
            color=request.pad_color,
        )
    return GeometryResult(
        width=request.width,
        height=request.height,
        scaled_width=scaled_width,
        scaled_height=scaled_height,
        padding=padding,
    )


def _resolve_crop(width: int, height: int, request: ResizeOptions) -> GeometryResult:
    # Never upscale on any axis: an axis smaller than the box stays as it is
    target_width = min(request.width, width)
    target_height = min(request.height, height)
    if target_width == width and target_height == height:
        return _unchanged(width, height)

    scale = max(Fraction(target_width, width), Fraction(target_height, height))
    if scale == 1:
        scaled_width, scaled_height = width, height
    else:
        scaled_width = _even_covering(width * scale, target_width, width)
        scaled_height = _even_covering(height * scale, target_height, height)

    crop = None
    if (scaled_width, scaled_height) != (target_width, target_height):
        crop = Crop(
            x=(scaled_width - target_width) // 2,
            y=(scaled_height - target_height) // 2,
            width=target_width,
            height=target_height,
        )
    return GeometryResult(
        width=target_width,
        height=target_height,
        scaled_width=scaled_width,
        scaled_height=scaled_height,
        crop=crop,
    )


def _resolve_stretch(width: int, height: int, request: ResizeOptions) -> GeometryResult:
    target_width = min(request.width, width)
    target_height = min(request.height, height)
    if target_width == width and target_height == height:
        return _unchanged(width, height)
    return GeometryResult(
        width=target_width,
        height=target_height,
        scaled_width=target_width,
        scaled_height=target_height,
    )


_RESOLVERS = {
    ResizeMode.FIT_DOWN: _resolve_fit,
    ResizeMode.CROP_DOWN: _resolve_crop,
    ResizeMode.STRETCH_DOWN: _resolve_stretch,
}


def resolve_geometry(
    source_width: int,
    source_height: int,
    request: ResizeOptions,
    *,
    strict: bool = False,
) -> GeometryResult:
    """Compute the output geometry of a video stream.

    Args:
        source_width: Source picture width in pixels.
        source_height: Source picture height in pixels.
        request: Bounding box and resize mode.
        strict: Raise instead of returning an unchanged result when the
            request has no effect on this source.

    Returns:
        GeometryResult with the scaled size, final frame size, and any
        padding or crop. ``changed`` is False when nothing needs to happen.

    Raises:
        ValueError: If the source dimensions are not positive.
        ResizeSkippedError: If ``strict`` is set and the resize is a no-op.
    """
    if source_width <= 0 or source_height <= 0:
        raise ValueError(
            f"source dimensions must be positive, got {source_width}x{source_height}"
        )

    result = _RESOLVERS[request.mode](source_width, source_height, request)

    if not result.changed:
        logger.debug(
            "Resize to %dx%d (%s) leaves %dx%d unchanged",
            request.width,
            request.height,
            request.mode.value,
            source_width,
            source_height,
        )
        if strict:
            raise ResizeSkippedError(
                source_width, source_height, request.width, request.height
            )
    return result
