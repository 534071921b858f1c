"""Configuration management for the transcode planner.

Configuration is loaded with precedence handling:
1. CLI flags (highest priority)
2. Environment variables (TPLAN_*)
3. Config file (~/.tplan/config.toml)
4. Default values (lowest priority)
"""

from transcode_planner.config.env import EnvReader
from transcode_planner.config.loader import (
    ConfigError,
    clear_config_cache,
    get_config,
    get_default_config_path,
    load_config_file,
)
from transcode_planner.config.models import LoggingConfig, PlannerConfig, PlanningConfig

__all__ = [
    # Models
    "LoggingConfig",
    "PlannerConfig",
    "PlanningConfig",
    # Loader
    "ConfigError",
    "clear_config_cache",
    "get_config",
    "get_default_config_path",
    "load_config_file",
    "EnvReader",
]
