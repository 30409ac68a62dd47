"""Centralized exit codes for all CLI commands.

Exit code ranges:
    0: Success
    1-9: General errors
    10-19: Validation errors (config, input)
    20-29: Target/file errors
    30-39: Tool/dependency errors
    40-49: Operation errors
    50-59: Analysis errors
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Standardized CLI exit codes."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    INTERRUPTED = 2

    CONFIG_ERROR = 11
    INVALID_ARGUMENTS = 12

    TARGET_NOT_FOUND = 20
    PATH_OUTSIDE_ROOT = 21

    TOOL_NOT_AVAILABLE = 30
    FFPROBE_NOT_FOUND = 32

    OPERATION_FAILED = 40
    DATABASE_ERROR = 42

    ANALYSIS_ERROR = 50
