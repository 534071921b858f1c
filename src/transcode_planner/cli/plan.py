"""CLI plan command."""

import logging
from pathlib import Path

import click

from transcode_planner.cli.exit_codes import ExitCode
from transcode_planner.cli.formatting import (
    error_exit,
    format_plan_json,
    format_plan_text,
)
from transcode_planner.config import PlannerConfig
from transcode_planner.domain.models import ProbeResult
from transcode_planner.introspector import MediaProbeError, load_probe_file
from transcode_planner.policy.exceptions import (
    IncompatibleCodecError,
    PolicyValidationError,
    ResizeSkippedError,
    SourceValidationError,
)
from transcode_planner.policy.loader import load_policy, load_preset
from transcode_planner.policy.planner import plan_transcode
from transcode_planner.policy.presets import PRESETS
from transcode_planner.policy.types.options import TranscodeOptions

logger = logging.getLogger(__name__)


def get_planner_config(ctx: click.Context) -> PlannerConfig:
    """Return the config loaded by the main group, or defaults."""
    obj = ctx.find_root().obj or {}
    return obj.get("config") or PlannerConfig()


def resolve_options(
    policy_path: Path | None,
    preset: str | None,
    config: PlannerConfig,
    json_output: bool = False,
) -> TranscodeOptions:
    """Load transcode options for a command.

    Precedence: --policy (with --preset merged under it), then --preset
    alone, then the configured default policy, then built-in defaults.
    Exits with a CLI error code on failure.
    """
    if policy_path is None:
        policy_path = None if preset else config.planning.default_policy
    try:
        if policy_path is not None:
            return load_policy(policy_path, preset=preset)
        if preset is not None:
            return load_preset(preset)
    except FileNotFoundError as e:
        error_exit(str(e), ExitCode.TARGET_NOT_FOUND, json_output)
    except PolicyValidationError as e:
        error_exit(str(e), ExitCode.POLICY_VALIDATION_ERROR, json_output)
    return TranscodeOptions()


def load_probe(probe_json: Path, json_output: bool = False) -> ProbeResult:
    """Load a saved ffprobe document, exiting with a CLI error code on failure."""
    if not probe_json.exists():
        error_exit(
            f"File not found: {probe_json}", ExitCode.TARGET_NOT_FOUND, json_output
        )
    try:
        probe = load_probe_file(probe_json)
    except MediaProbeError as e:
        error_exit(str(e), ExitCode.PARSE_ERROR, json_output)
    for warning in probe.warnings:
        logger.warning("%s: %s", probe.path, warning)
    return probe


@click.command("plan")
@click.argument("probe_json", type=click.Path(path_type=Path))
@click.option(
    "--policy",
    "-p",
    "policy_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Policy YAML file.",
)
@click.option(
    "--preset",
    type=click.Choice(sorted(PRESETS)),
    default=None,
    help="Built-in preset, merged under --policy when both are given.",
)
@click.option(
    "--strict-resize",
    is_flag=True,
    default=False,
    help="Fail when a resize request would leave the video unchanged.",
)
@click.option("--json", "json_output", is_flag=True, default=False, help="Output JSON.")
@click.pass_context
def plan_command(
    ctx: click.Context,
    probe_json: Path,
    policy_path: Path | None,
    preset: str | None,
    strict_resize: bool,
    json_output: bool,
) -> None:
    """Resolve a transcode plan for a probed file.

    PROBE_JSON is the output of
    ``ffprobe -show_streams -show_format -of json`` saved to a file.
    """
    config = get_planner_config(ctx)
    json_output = json_output or config.planning.output_format.lower() == "json"

    options = resolve_options(policy_path, preset, config, json_output)
    probe = load_probe(probe_json, json_output)

    strict = True if strict_resize or config.planning.strict_resize else None
    try:
        plan = plan_transcode(probe, options, strict_resize=strict)
    except SourceValidationError as e:
        error_exit(str(e), ExitCode.SOURCE_REJECTED, json_output)
    except IncompatibleCodecError as e:
        error_exit(str(e), ExitCode.INCOMPATIBLE_CODEC, json_output)
    except ResizeSkippedError as e:
        error_exit(str(e), ExitCode.RESIZE_SKIPPED, json_output)

    if json_output:
        click.echo(format_plan_json(plan))
    else:
        click.echo(format_plan_text(plan))
