"""Logging configuration and statement logging using structlog.

Logs go to stderr to keep stdout clean for data output (piping).
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from sqlplus_tool.core.models import StatementResult

_LOG_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


class _LazyStderrFactory:
    """Resolve sys.stderr at logger creation time, not at configure() time.

    Under CliRunner tests a handle captured at configure() time becomes
    stale when stderr is swapped between invocations.
    """

    def __call__(self, *args: Any, **kwargs: Any) -> structlog.PrintLogger:
        return structlog.PrintLogger(file=sys.stderr)


def setup_logging(verbose: bool = False) -> None:
    """Configure structlog for SQL*Plus Tool.

    Args:
        verbose: If True, set log level to DEBUG. Otherwise INFO.
    """
    log_level = "debug" if verbose else "info"

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_LOG_LEVELS[log_level]),
        context_class=dict,
        logger_factory=_LazyStderrFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structlog logger, optionally bound with a name.

    Never call this at module level; loggers are created after
    setup_logging() has run.
    """
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(logger=name)
    return logger


def _one_line(sql: str) -> str:
    return " ".join(sql.split())


class StatementLog:
    """Statement lifecycle events for one connection.

    verbosity 0 keeps everything at debug level; 1 reports connects,
    statement starts and outcomes at info (failures at error); 2 also
    dumps the headers and rows of successful results.
    """

    def __init__(self, logger: Any, verbosity: int = 0) -> None:
        self.logger = logger
        self.verbosity = verbosity

    def _emit(self, event: str, **kw: Any) -> None:
        if self.verbosity >= 1:
            self.logger.info(event, **kw)
        else:
            self.logger.debug(event, **kw)

    def connecting(self, target: str) -> None:
        self._emit("connecting", target=target)

    def start(self, statement: str) -> None:
        self._emit("statement start", sql=_one_line(statement))

    def finished(self, result: StatementResult) -> None:
        sql = _one_line(result.statement)
        if result.error:
            method = self.logger.error if self.verbosity >= 1 else self.logger.debug
            method("statement failed", sql=sql, error=result.error_message)
            return

        self._emit("statement ok", sql=sql, affected_rows=result.affected_rows)
        if self.verbosity >= 2 and result.rows:
            self.logger.info("result headers", headers=result.headers)
            for row in result.fetchall_rows():
                self.logger.info("result row", row=row)
