"""CLI thumbnail command."""

import dataclasses
from pathlib import Path
from typing import Any

import click

from transcode_planner.cli.exit_codes import ExitCode
from transcode_planner.cli.formatting import error_exit, format_json
from transcode_planner.cli.plan import get_planner_config, load_probe, resolve_options
from transcode_planner.domain.models import StreamDescriptor
from transcode_planner.introspector import SeekPosition
from transcode_planner.policy.exceptions import ThumbnailSelectingError
from transcode_planner.policy.presets import PRESETS
from transcode_planner.policy.thumbnail import (
    resolve_thumbnail_timestamp,
    seek_attempts,
    select_thumbnail_stream,
)


def _stream_label(stream: StreamDescriptor) -> str:
    if stream.is_attached_pic:
        return "attached picture"
    if stream.is_timed_thumbnails:
        return "timed thumbnails"
    if stream.is_still_image:
        return "still image"
    return "video"


def _seek_label(seek: SeekPosition | None) -> str:
    if seek is None:
        return "first frame"
    return f"{seek.offset:.3f}s from {'end' if seek.from_end else 'start'}"


@click.command("thumbnail")
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
    "--include-thumbnail-streams/--exclude-thumbnail-streams",
    default=None,
    help="Prefer embedded cover art and timed thumbnails (default: from policy).",
)
@click.option("--json", "json_output", is_flag=True, default=False, help="Output JSON.")
@click.pass_context
def thumbnail_command(
    ctx: click.Context,
    probe_json: Path,
    policy_path: Path | None,
    preset: str | None,
    include_thumbnail_streams: bool | None,
    json_output: bool,
) -> None:
    """Show where a thumbnail would be taken from.

    Prints the chosen stream, the resolved timestamp and the seek positions
    that would be tried in order.
    """
    config = get_planner_config(ctx)
    json_output = json_output or config.planning.output_format.lower() == "json"

    options = resolve_options(policy_path, preset, config, json_output).thumbnail
    if include_thumbnail_streams is not None:
        options = dataclasses.replace(
            options, include_thumbnail_streams=include_thumbnail_streams
        )
    probe = load_probe(probe_json, json_output)

    try:
        stream = select_thumbnail_stream(
            probe.streams, options.include_thumbnail_streams
        )
        timestamp = resolve_thumbnail_timestamp(
            options, stream, probe.duration_seconds
        )
    except ThumbnailSelectingError as e:
        error_exit(str(e), ExitCode.THUMBNAIL_ERROR, json_output)
    seeks = seek_attempts(options, timestamp)

    if json_output:
        data: dict[str, Any] = {
            "source": str(probe.path),
            "stream": {
                "index": stream.index,
                "codec": stream.codec_name,
                "type": _stream_label(stream),
            },
            "timestamp": None
            if timestamp is None
            else {
                "seconds": timestamp.seconds,
                "from_fraction": timestamp.from_fraction,
                "duration": timestamp.duration,
            },
            "seek_attempts": [
                None if s is None else {"offset": s.offset, "from_end": s.from_end}
                for s in seeks
            ],
        }
        click.echo(format_json(data))
        return

    click.echo(f"Thumbnail for {probe.path}")
    click.echo(
        f"  stream: #{stream.index} {stream.codec_name or 'unknown'} "
        f"({_stream_label(stream)})"
    )
    if timestamp is None:
        click.echo("  timestamp: none")
    else:
        source = "fraction of duration" if timestamp.from_fraction else "absolute"
        click.echo(f"  timestamp: {timestamp.seconds:.3f}s ({source})")
    click.echo("  seek attempts:")
    for number, seek in enumerate(seeks, start=1):
        click.echo(f"    {number}. {_seek_label(seek)}")
