"""Centralized exit codes for all CLI commands.

Exit code ranges:
    0: Success
    1-9: General errors
    10-19: Validation errors (policy, config)
    20-29: Target/file errors
    40-49: Planning errors
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for tplan CLI commands."""

    # Success (0)
    SUCCESS = 0

    # General errors (1-9)
    GENERAL_ERROR = 1

    # Validation errors (10-19)
    POLICY_VALIDATION_ERROR = 10
    CONFIG_ERROR = 11

    # Target/file errors (20-29)
    TARGET_NOT_FOUND = 20
    PARSE_ERROR = 21
    SOURCE_REJECTED = 22

    # Planning errors (40-49)
    INCOMPATIBLE_CODEC = 43
    RESIZE_SKIPPED = 44
    THUMBNAIL_ERROR = 45
