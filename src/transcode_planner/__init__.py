"""Transcode planner: resolve per-stream transcode plans for video files."""

from transcode_planner.domain.models import ProbeResult, StreamDescriptor
from transcode_planner.policy.loader import load_policy, load_preset
from transcode_planner.policy.planner import TranscodePlanner, plan_transcode
from transcode_planner.policy.types.options import TranscodeOptions
from transcode_planner.policy.types.plan import TranscodePlan

__version__ = "0.1.0"

__all__ = [
    "ProbeResult",
    "StreamDescriptor",
    "TranscodeOptions",
    "TranscodePlan",
    "TranscodePlanner",
    "load_policy",
    "load_preset",
    "plan_transcode",
    "__version__",
]
