"""Domain models and enums for the transcode planner.

This package contains the probe-side types every resolver consumes:

- Domain models: StreamDescriptor, ProbeResult, ThumbnailCandidate
- Domain enums: StreamKind

Usage:
    from transcode_planner.domain import ProbeResult, StreamDescriptor
"""

from .enums import StreamKind
from .models import ProbeResult, StreamDescriptor, ThumbnailCandidate

__all__ = [
    # Models
    "ProbeResult",
    "StreamDescriptor",
    "ThumbnailCandidate",
    # Enums
    "StreamKind",
]
