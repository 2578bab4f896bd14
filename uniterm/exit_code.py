"""
Exit Codes

POSIX-style exit codes returned by commands and pipelines.

Author: YSNRFD
Version: 1.0.0
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """
    Result of a command or pipeline execution.

    This is the sole contract between a command body and the
    pipeline executor.
    """
    SUCCESS = 0
    RUNTIME_ERROR = 1
    USAGE_ERROR = 2

    @property
    def is_success(self) -> bool:
        return self is ExitCode.SUCCESS
