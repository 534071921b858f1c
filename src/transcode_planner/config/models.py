"""Configuration data models.

This module defines dataclasses for planner configuration options.
"""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got {self.level}")
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ValueError(
                f"format must be one of {valid_formats}, got {self.format}"
            )
        if self.max_bytes <= 0:
            raise ValueError(f"max_bytes must be positive, got {self.max_bytes}")
        if self.backup_count < 0:
            raise ValueError(
                f"backup_count must be non-negative, got {self.backup_count}"
            )


@dataclass
class PlanningConfig:
    """Defaults applied when planning from the command line."""

    # Policy file used when --policy and --preset are not given
    default_policy: Path | None = None

    # Fail when a resize request would leave the video unchanged
    strict_resize: bool = False

    # Output format for plan commands: text or json
    output_format: str = "text"

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_formats = {"text", "json"}
        if self.output_format.lower() not in valid_formats:
            raise ValueError(
                f"output_format must be one of {valid_formats}, "
                f"got {self.output_format}"
            )


@dataclass
class PlannerConfig:
    """Top-level planner configuration."""

    logging: LoggingConfig = field(default_factory=LoggingConfig)
    planning: PlanningConfig = field(default_factory=PlanningConfig)
