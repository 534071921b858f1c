"""Transcode policy resolution.

Source validation, resolvers for geometry, frame rate, codec compatibility, re-encode
decisions and thumbnails, the plan assembler that composes them, and the
YAML policy loader.
"""

from transcode_planner.policy.exceptions import (
    ComparisonStateError,
    IncompatibleCodecError,
    PolicyError,
    PolicyValidationError,
    ResizeSkippedError,
    SizeComparisonError,
    SourceValidationError,
    ThumbnailSelectingError,
)

__all__ = [
    "ComparisonStateError",
    "IncompatibleCodecError",
    "PolicyError",
    "PolicyValidationError",
    "ResizeSkippedError",
    "SizeComparisonError",
    "SourceValidationError",
    "ThumbnailSelectingError",
]
