"""Domain enums shared by the probe, the resolvers and the planner."""

from enum import Enum


class StreamKind(Enum):
    """Stream type classification."""

    VIDEO = "video"
    AUDIO = "audio"
    SUBTITLE = "subtitle"
    OTHER = "other"  # Data, attachments and anything unrecognized
