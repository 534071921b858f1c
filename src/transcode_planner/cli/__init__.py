"""CLI module for the transcode planner."""

import logging
from pathlib import Path

import click

from transcode_planner.cli.exit_codes import ExitCode
from transcode_planner.cli.formatting import error_exit
from transcode_planner.config import ConfigError, get_config
from transcode_planner.logging import configure_logging

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(package_name="transcode-planner")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: info).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Override log file path.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Use JSON log format.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Config file (default: ~/.tplan/config.toml).",
)
@click.pass_context
def main(
    ctx: click.Context,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
    config_path: Path | None,
) -> None:
    """Transcode planner - Resolve per-stream transcode plans from probe data."""
    ctx.ensure_object(dict)

    if config_path is not None and not config_path.exists():
        error_exit(f"Config file not found: {config_path}", ExitCode.CONFIG_ERROR)

    # An explicitly named config file must parse
    try:
        config = get_config(
            config_path=config_path,
            log_level=log_level,
            log_file=log_file,
            log_format="json" if log_json else None,
            strict=config_path is not None,
        )
    except ConfigError as e:
        error_exit(str(e), ExitCode.CONFIG_ERROR)

    configure_logging(config.logging)
    logger.debug(
        "Starting: log_level=%s, log_file=%s", config.logging.level, config.logging.file
    )
    ctx.obj["config"] = config


# Defer import to avoid circular dependency
def _register_commands() -> None:
    from transcode_planner.cli.plan import plan_command
    from transcode_planner.cli.thumbnail import thumbnail_command

    main.add_command(plan_command)
    main.add_command(thumbnail_command)


_register_commands()
