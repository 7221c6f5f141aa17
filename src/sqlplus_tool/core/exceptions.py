"""Exception hierarchy for SQL*Plus Tool.

All exceptions carry an exit_code for CLI return value mapping.
Exit codes are defined in exit_codes.py.
"""

from sqlplus_tool.core.exit_codes import ExitCode


class SqlToolError(Exception):
    """Base exception for all SQL*Plus Tool errors."""

    exit_code: int = ExitCode.GENERAL_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConnectionMarkerMissingError(SqlToolError):
    """The sqlplus output never contained the 'Connected' banner."""

    exit_code: int = ExitCode.CONNECTION_ERROR


class ExternalToolError(SqlToolError):
    """ORA-/SP2- error lines reported by sqlplus."""

    exit_code: int = ExitCode.DATABASE_ERROR


class LayoutInferenceError(ExternalToolError):
    """Query output had no recognizable dashed separator line."""


class TempFileError(SqlToolError):
    """Script or spool file could not be created, read or removed."""

    exit_code: int = ExitCode.OUTPUT_ERROR


class TimeoutError(SqlToolError):
    """sqlplus did not exit within the configured timeout."""

    exit_code: int = ExitCode.TIMEOUT


class NoResultError(SqlToolError, LookupError):
    """Result accessed before any statement was executed."""


class InputError(SqlToolError):
    """File not found, invalid parameters."""

    exit_code: int = ExitCode.INPUT_ERROR


class ConfigError(SqlToolError):
    """Malformed config, missing profile."""

    exit_code: int = ExitCode.CONFIG_ERROR


class ToolNotFoundError(ConfigError):
    """The sqlplus executable could not be found."""
