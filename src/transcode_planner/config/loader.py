"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (passed directly to functions)
2. Environment variables (TPLAN_*)
3. Config file (~/.tplan/config.toml)
4. Default values

Environment variables:
- TPLAN_CONFIG_PATH: Path to config file (overrides default location)
- TPLAN_LOG_LEVEL: Log level (debug, info, warning, error)
- TPLAN_LOG_FILE: Path to log file
- TPLAN_LOG_FORMAT: Log format (text, json)
- TPLAN_DEFAULT_POLICY: Policy file used when none is given
- TPLAN_STRICT_RESIZE: Fail when a resize would leave the video unchanged
- TPLAN_OUTPUT_FORMAT: Plan output format (text, json)
"""

from __future__ import annotations

import logging
import os
import threading
import tomllib
from pathlib import Path
from typing import Any

from transcode_planner.config.env import EnvReader
from transcode_planner.config.models import LoggingConfig, PlannerConfig, PlanningConfig

logger = logging.getLogger(__name__)

# Default config location
DEFAULT_CONFIG_DIR = Path.home() / ".tplan"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"

# Cache for loaded config files (path -> (parsed dict, mtime))
_config_cache: dict[Path, tuple[dict, float]] = {}
_config_cache_lock = threading.Lock()


class ConfigError(Exception):
    """Raised when configuration cannot be loaded or is invalid."""

    pass


def get_default_config_path() -> Path:
    """Get the default config file path.

    Can be overridden by TPLAN_CONFIG_PATH environment variable.
    """
    env_path = os.environ.get("TPLAN_CONFIG_PATH")
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_FILE


def load_toml_file(path: Path, *, strict: bool = False) -> dict[str, Any]:
    """Load and parse a TOML file.

    Args:
        path: Path to the TOML file.
        strict: If True, raise ConfigError on read or parse failures.

    Returns:
        Parsed dictionary. Empty dict if the file doesn't exist, or if it
        cannot be parsed and strict is False.
    """
    if not path.exists():
        logger.debug("Config file not found: %s", path)
        return {}

    try:
        with path.open("rb") as f:
            config = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        if strict:
            raise ConfigError(f"Failed to load config file {path}: {e}") from e
        logger.warning("Failed to load config file %s: %s", path, e)
        return {}

    logger.debug("Loaded config from %s", path)
    return config


def load_config_file(path: Path | None = None, *, strict: bool = False) -> dict:
    """Load configuration from TOML file.

    Results are cached with mtime-based invalidation. Use
    clear_config_cache() to force a reload regardless of mtime.

    Args:
        path: Path to config file. If None, uses default location.
        strict: If True, raise ConfigError on parse failures.

    Returns:
        Parsed configuration dict. Empty dict if file doesn't exist.
    """
    if path is None:
        path = get_default_config_path()

    try:
        current_mtime = path.stat().st_mtime
    except FileNotFoundError:
        current_mtime = 0.0

    with _config_cache_lock:
        if path in _config_cache:
            cached_config, cached_mtime = _config_cache[path]
            if current_mtime == cached_mtime:
                return cached_config

        result = load_toml_file(path, strict=strict)
        _config_cache[path] = (result, current_mtime)
        return result


def clear_config_cache() -> None:
    """Clear the config file cache. Primarily useful for testing."""
    with _config_cache_lock:
        _config_cache.clear()


def _section(file_config: dict, name: str) -> dict:
    value = file_config.get(name, {})
    if not isinstance(value, dict):
        raise ConfigError(f"Config section [{name}] must be a table")
    return value


def _file_path(value: Any) -> Path | None:
    return Path(value).expanduser() if value else None


def get_config(
    config_path: Path | None = None,
    # CLI overrides (highest precedence)
    log_level: str | None = None,
    log_file: Path | None = None,
    log_format: str | None = None,
    strict_resize: bool | None = None,
    # Optional dependency injection for testing
    env_reader: EnvReader | None = None,
    *,
    strict: bool = False,
) -> PlannerConfig:
    """Get planner configuration with full precedence handling.

    Args:
        config_path: Path to config file (overrides TPLAN_CONFIG_PATH).
        log_level: CLI override for the log level.
        log_file: CLI override for the log file.
        log_format: CLI override for the log format.
        strict_resize: CLI override for strict resizing.
        env_reader: Optional EnvReader for testing (uses os.environ if None).
        strict: If True, raise ConfigError when the config file cannot be
            parsed instead of falling back to defaults.

    Returns:
        PlannerConfig with merged configuration.

    Raises:
        ConfigError: If a configured value is invalid, or the file cannot be
            parsed in strict mode.
    """
    reader = env_reader or EnvReader()
    file_config = load_config_file(config_path, strict=strict)

    logging_file = _section(file_config, "logging")
    planning_file = _section(file_config, "planning")

    try:
        logging_config = LoggingConfig(
            level=log_level
            or reader.get_str("TPLAN_LOG_LEVEL")
            or logging_file.get("level", "info"),
            file=log_file
            or reader.get_path("TPLAN_LOG_FILE", must_exist=False)
            or _file_path(logging_file.get("file")),
            format=log_format
            or reader.get_str("TPLAN_LOG_FORMAT")
            or logging_file.get("format", "text"),
            include_stderr=reader.get_bool(
                "TPLAN_LOG_INCLUDE_STDERR",
                logging_file.get("include_stderr", False),
            ),
            max_bytes=reader.get_int(
                "TPLAN_LOG_MAX_BYTES",
                logging_file.get("max_bytes", 10_485_760),
            ),
            backup_count=reader.get_int(
                "TPLAN_LOG_BACKUP_COUNT",
                logging_file.get("backup_count", 5),
            ),
        )

        if strict_resize is None:
            strict_resize = reader.get_bool(
                "TPLAN_STRICT_RESIZE",
                planning_file.get("strict_resize", False),
            )
        planning = PlanningConfig(
            default_policy=reader.get_path("TPLAN_DEFAULT_POLICY")
            or _file_path(planning_file.get("default_policy")),
            strict_resize=bool(strict_resize),
            output_format=reader.get_str("TPLAN_OUTPUT_FORMAT")
            or planning_file.get("output_format", "text"),
        )
    except (TypeError, ValueError, AttributeError) as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    return PlannerConfig(logging=logging_config, planning=planning)
