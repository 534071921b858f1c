"""Output formatting for CLI commands.

Plans and thumbnail choices are printed either as an indented text
listing or as JSON. Errors go to stderr in the same two formats.
"""

from __future__ import annotations

import json
import sys
from typing import Any, NoReturn

import click

from transcode_planner.cli.exit_codes import ExitCode
from transcode_planner.policy.types.enums import StreamAction
from transcode_planner.policy.types.plan import ResolvedStreamPlan, TranscodePlan

# Map StreamAction to terminal color names (for click.style)
ACTION_COLORS: dict[StreamAction, str] = {
    StreamAction.PASSTHROUGH: "green",
    StreamAction.REENCODE: "yellow",
    StreamAction.REENCODE_THEN_COMPARE: "cyan",
    StreamAction.REMOVE: "bright_black",
}


def error_exit(message: str, code: ExitCode, json_output: bool = False) -> NoReturn:
    """Print an error and exit with the given code.

    Args:
        message: Error message to display.
        code: Exit code to use.
        json_output: Whether to format output as JSON.
    """
    if json_output:
        click.echo(
            json.dumps(
                {
                    "status": "failed",
                    "error": {"code": code.name, "message": message},
                }
            ),
            err=True,
        )
    else:
        click.echo(f"Error: {message}", err=True)

    sys.exit(int(code))


def _format_size(size: int | None) -> str:
    if size is None:
        return "unknown"
    if size < 1024:
        return f"{size} B"
    value = size / 1024
    for unit in ("KiB", "MiB"):
        if value < 1024:
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GiB"


def _describe_source(plan: ResolvedStreamPlan) -> str:
    stream = plan.stream
    parts = [stream.codec_name or "unknown"]
    if stream.width and stream.height:
        parts.append(f"{stream.width}x{stream.height}")
    if stream.frame_rate is not None:
        parts.append(f"{float(stream.frame_rate):.3f} fps")
    if stream.channels:
        parts.append(f"{stream.channels}ch")
    if stream.sample_rate:
        parts.append(f"{stream.sample_rate} Hz")
    return " ".join(parts)


def _describe_targets(plan: ResolvedStreamPlan) -> list[str]:
    lines: list[str] = []
    if plan.video_target is not None:
        t = plan.video_target
        line = (
            f"target: {t.codec.codec_name} {t.encoder_profile} {t.bit_depth}-bit "
            f"{t.pixel_format}, crf {t.crf}, preset {t.preset}"
        )
        if t.tune:
            line += f", tune {t.tune}"
        if t.codec_tag:
            line += f", tag {t.codec_tag}"
        lines.append(line)
        if t.conversions:
            lines.append("convert: " + ", ".join(t.conversions).replace("_", " "))
    if plan.audio_target is not None:
        t = plan.audio_target
        line = f"target: {t.codec.codec_name}"
        if t.profile:
            line += f" {t.profile}"
        if t.channels:
            line += f", {t.channels}ch"
        if t.sample_rate:
            line += f", {t.sample_rate} Hz"
        lines.append(f"{line}, {t.bitrate // 1000} kb/s")
    if plan.geometry is not None:
        g = plan.geometry
        line = f"scale: {g.scaled_width}x{g.scaled_height}"
        if g.crop is not None:
            line += f", crop {g.crop.width}x{g.crop.height}+{g.crop.x}+{g.crop.y}"
        if g.padding is not None and not g.padding.is_empty:
            line += f", pad to {g.width}x{g.height} ({g.padding.color.to_hex()})"
        lines.append(line)
    if plan.frame_rate is not None:
        lines.append(f"fps: {plan.frame_rate} ({float(plan.frame_rate):.3f})")
    if plan.action is StreamAction.REENCODE_THEN_COMPARE:
        lines.append(f"keep smaller than original ({_format_size(plan.original_size)})")
    return lines


def format_plan_text(plan: TranscodePlan) -> str:
    """Format a plan as an indented text listing."""
    lines = [f"Plan for {plan.source_path} -> {plan.container.value}"]
    if plan.strip_metadata.value != "none":
        lines.append(f"Strip metadata: {plan.strip_metadata.value}")

    for stream_plan in plan.streams:
        action = click.style(
            stream_plan.action.value, fg=ACTION_COLORS.get(stream_plan.action)
        )
        header = (
            f"  #{stream_plan.index} {stream_plan.stream.kind.value} "
            f"{_describe_source(stream_plan)}: {action}"
        )
        if stream_plan.reasons:
            header += f" ({', '.join(stream_plan.reasons)})"
        lines.append(header)
        lines.extend(f"      {line}" for line in _describe_targets(stream_plan))

    if not plan.requires_encoding:
        lines.append("No encoding required.")
    return "\n".join(lines)


def format_plan_json(plan: TranscodePlan) -> str:
    """Format a plan as JSON."""
    return json.dumps(plan.to_dict(), indent=2)


def format_json(data: dict[str, Any]) -> str:
    return json.dumps(data, indent=2)
