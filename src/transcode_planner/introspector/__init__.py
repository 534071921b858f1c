"""Introspector module for the transcode planner.

This module provides the media probe boundary:

- MediaProbe, FrameExtractor: Protocols for the external collaborators
- parse_ffprobe_output, load_probe_file: ffprobe JSON parsing
- StubMediaProbe, StubFrameExtractor: Stub implementations for testing
"""

from transcode_planner.introspector.interface import (
    FrameExtractionError,
    FrameExtractor,
    MediaProbe,
    MediaProbeError,
    SeekPosition,
)
from transcode_planner.introspector.parsers import load_probe_file, parse_ffprobe_output
from transcode_planner.introspector.stub import StubFrameExtractor, StubMediaProbe

__all__ = [
    "FrameExtractionError",
    "FrameExtractor",
    "MediaProbe",
    "MediaProbeError",
    "SeekPosition",
    "load_probe_file",
    "parse_ffprobe_output",
    "StubFrameExtractor",
    "StubMediaProbe",
]
