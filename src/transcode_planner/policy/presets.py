"""Built-in policy presets.

Presets are plain policy dictionaries. A policy file naming a preset is
deep-merged over it, so any key the file sets wins.
"""

import copy
from typing import Any

from transcode_planner.core.codecs import AudioCodec, VideoCodec

_STANDARDIZED_AUDIO: dict[str, Any] = {
    "codecs": ["aac"],
    "reencode": "always",
    "max_channels": "stereo",
    "sample_rate": "48000",
}


def _standardized(video_codec: str) -> dict[str, Any]:
    return {
        "container": "mp4",
        "strip_metadata": "thumbnail_only",
        "preserve_other_streams": False,
        "video": {
            "codecs": [video_codec],
            "reencode": "always",
            "bits_per_channel": "8",
            "chroma_subsampling": "420",
            "fps": {"target": 60, "mode": "divide_by_integer"},
            "remap_hdr_to_sdr": True,
            "force_square_pixels": True,
            "force_progressive_frames": True,
        },
        "audio": dict(_STANDARDIZED_AUDIO),
    }


PRESETS: dict[str, dict[str, Any]] = {
    # Always re-encode to H.264 8-bit 4:2:0 SDR progressive square-pixel video
    # and stereo AAC, at most 60 fps
    "standardized_h264_aac_mp4": _standardized("h264"),
    # Same, with hvc1-tagged HEVC video
    "standardized_hevc_aac_mp4": _standardized("h265"),
    # Keep every source codec and only re-encode what the container forces
    "preserve": {
        "container": "mkv",
        "strip_metadata": "thumbnail_only",
        "preserve_other_streams": True,
        "video": {
            "codecs": [codec.name.casefold() for codec in VideoCodec],
            "reencode": "if_needed",
        },
        "audio": {
            "codecs": [codec.name.casefold() for codec in AudioCodec],
            "reencode": "if_needed",
        },
    },
}


def get_preset(name: str) -> dict[str, Any]:
    """Return a copy of a built-in preset.

    Raises:
        KeyError: If no preset has that name.
    """
    return copy.deepcopy(PRESETS[name])


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into a copy of ``base``.

    Nested mappings merge recursively; any other value in ``override``,
    lists included, replaces the base value.
    """
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged
