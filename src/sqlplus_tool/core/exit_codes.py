"""Standard exit codes for SQL*Plus Tool.

Exit codes follow Unix conventions.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for SQL*Plus Tool commands."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    USAGE_ERROR = 2
    INPUT_ERROR = 3
    OUTPUT_ERROR = 4
    CONNECTION_ERROR = 5
    TIMEOUT = 6
    CONFIG_ERROR = 7
    DATABASE_ERROR = 8
    INTERRUPTED = 130
