"""Policy file loading and validation.

Policies are YAML files validated with Pydantic and converted to
immutable TranscodeOptions. A policy may name a built-in preset; its own
keys are deep-merged over the preset.
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from transcode_planner.core.codecs import parse_audio_codec, parse_video_codec
from transcode_planner.policy.exceptions import PolicyValidationError
from transcode_planner.policy.presets import PRESETS, deep_merge, get_preset
from transcode_planner.policy.pydantic_models import (
    AudioPolicyModel,
    PolicyModel,
    ThumbnailPolicyModel,
    VideoPolicyModel,
)
from transcode_planner.policy.types.options import (
    AudioSourceValidation,
    AudioStreamOptions,
    BackgroundColor,
    FpsOptions,
    ResizeOptions,
    ThumbnailOptions,
    TranscodeOptions,
    VideoSourceValidation,
    VideoStreamOptions,
)

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


def load_policy(policy_path: Path, preset: str | None = None) -> TranscodeOptions:
    """Load and validate a policy from a YAML file.

    Args:
        policy_path: Path to the YAML policy file.
        preset: Preset to merge under the file, overriding any preset the
            file names itself.

    Returns:
        Validated TranscodeOptions.

    Raises:
        PolicyValidationError: If the policy file is invalid.
        FileNotFoundError: If the policy file does not exist.
    """
    if not policy_path.exists():
        raise FileNotFoundError(f"Policy file not found: {policy_path}")

    try:
        with open(policy_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise PolicyValidationError(f"Invalid YAML syntax: {e}") from e

    if data is None:
        raise PolicyValidationError("Policy file is empty")

    if not isinstance(data, dict):
        raise PolicyValidationError("Policy file must be a YAML mapping")

    if preset is not None:
        data = {**data, "preset": preset}

    logger.debug("Loading policy from %s", policy_path)
    return load_policy_from_dict(data)


def load_preset(name: str) -> TranscodeOptions:
    """Load a built-in preset without a policy file.

    Raises:
        PolicyValidationError: If no preset has that name.
    """
    return load_policy_from_dict({"schema_version": SCHEMA_VERSION, "preset": name})


def load_policy_from_dict(data: dict[str, Any]) -> TranscodeOptions:
    """Load and validate a policy from a dictionary.

    Args:
        data: Dictionary containing policy configuration.

    Returns:
        Validated TranscodeOptions.

    Raises:
        PolicyValidationError: If the policy data is invalid.
    """
    schema_version = data.get("schema_version")
    if schema_version != SCHEMA_VERSION:
        raise PolicyValidationError(
            f"Only schema_version {SCHEMA_VERSION} is supported, got {schema_version}",
            field="schema_version",
        )

    preset_name = data.get("preset")
    if preset_name is not None:
        if preset_name not in PRESETS:
            valid = ", ".join(sorted(PRESETS))
            raise PolicyValidationError(
                f"Unknown preset '{preset_name}'. Must be one of: {valid}",
                field="preset",
            )
        data = deep_merge(get_preset(preset_name), data)

    try:
        model = PolicyModel.model_validate(data)
    except ValidationError as e:
        raise PolicyValidationError(
            _format_validation_error(e), field=_error_location(e)
        ) from e

    try:
        return _convert_to_options(model)
    except ValueError as e:
        raise PolicyValidationError(f"Policy validation failed: {e}") from e


def _convert_video(model: VideoPolicyModel) -> VideoStreamOptions:
    resize = None
    if model.resize is not None:
        resize = ResizeOptions(
            width=model.resize.width,
            height=model.resize.height,
            mode=model.resize.mode,
            pad_color=_parse_hex_color(model.resize.pad_color),
            pad_to_box=model.resize.pad_to_box,
        )
    fps = None
    if model.fps is not None:
        fps = FpsOptions(target_fps=model.fps.target, mode=model.fps.mode)

    return VideoStreamOptions(
        result_codecs=tuple(parse_video_codec(name) for name in model.codecs),
        reencode=model.reencode,
        quality=model.quality,
        compression=model.compression,
        tune=model.tune,
        h264_profile=model.h264_profile,
        h265_profile=model.h265_profile,
        bits_per_channel=model.bits_per_channel,
        chroma_subsampling=model.chroma_subsampling,
        resize=resize,
        fps=fps,
        selection=model.selection,
        strip_metadata=model.strip_metadata,
        remap_hdr_to_sdr=model.remap_hdr_to_sdr,
        force_square_pixels=model.force_square_pixels,
        force_progressive_frames=model.force_progressive_frames,
        validation=VideoSourceValidation(**model.validation.model_dump()),
    )


def _convert_audio(model: AudioPolicyModel) -> AudioStreamOptions:
    return AudioStreamOptions(
        result_codecs=tuple(parse_audio_codec(name) for name in model.codecs),
        reencode=model.reencode,
        quality=model.quality,
        max_channels=model.max_channels,
        sample_rate=model.sample_rate,
        selection=model.selection,
        strip_metadata=model.strip_metadata,
        validation=AudioSourceValidation(**model.validation.model_dump()),
    )


def _convert_thumbnail(model: ThumbnailPolicyModel) -> ThumbnailOptions:
    return ThumbnailOptions(
        image_timestamp=model.image_timestamp,
        image_timestamp_fraction=model.image_timestamp_fraction,
        include_thumbnail_streams=model.include_thumbnail_streams,
        strategy=model.strategy,
        min_score=model.min_score,
        max_candidates=model.max_candidates,
    )


def _convert_to_options(model: PolicyModel) -> TranscodeOptions:
    """Convert a validated PolicyModel to TranscodeOptions."""
    return TranscodeOptions(
        container=model.container,
        video=_convert_video(model.video),
        audio=_convert_audio(model.audio),
        thumbnail=_convert_thumbnail(model.thumbnail),
        strip_metadata=model.strip_metadata,
        preserve_other_streams=model.preserve_other_streams,
        strict_resize=model.strict_resize,
    )


def _parse_hex_color(value: str) -> BackgroundColor:
    digits = value.lstrip("#")
    r, g, b = (int(digits[i : i + 2], 16) / 255 for i in (0, 2, 4))
    return BackgroundColor(r, g, b)


def _error_location(error: ValidationError) -> str | None:
    errors = error.errors()
    if not errors:
        return None
    return ".".join(str(x) for x in errors[0].get("loc", [])) or None


def _format_validation_error(error: ValidationError) -> str:
    """Format a Pydantic validation error into a user-friendly message."""
    errors = error.errors()
    if errors:
        first_error = errors[0]
        loc = ".".join(str(x) for x in first_error.get("loc", []))
        msg = first_error.get("msg", str(error))
        if loc:
            return f"Policy validation failed: {loc}: {msg}"
        return f"Policy validation failed: {msg}"

    return f"Policy validation failed: {error}"
