"""sqlplus-backed database connection for SQL*Plus Tool.

A Connection does not hold a database session. Every statement is
compiled into a small script, run by a fresh sqlplus process that spools
its report to a file, and decoded from that file. The Connection keeps
the two temp files and the result of the last statement.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Any

from sqlplus_tool.core.classifier import classify_statement
from sqlplus_tool.core.config import ConnectOptions
from sqlplus_tool.core.decoder import decode_output, read_spool
from sqlplus_tool.core.exceptions import (
    ConnectionMarkerMissingError,
    ExternalToolError,
    InputError,
    LayoutInferenceError,
    NoResultError,
    SqlToolError,
    TempFileError,
)
from sqlplus_tool.core.logging import StatementLog, get_logger
from sqlplus_tool.core.models import FIELD_SEPARATOR, ErrorKind, StatementResult
from sqlplus_tool.core.registry import ConnectionRegistry
from sqlplus_tool.core.runner import SqlPlusRunner
from sqlplus_tool.core.script import (
    build_connect_target,
    compile_script,
    redact_connect_string,
    write_script,
)
from sqlplus_tool.core.splitter import iter_statements

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sqlplus_tool.core.runner import RunOutcome, Runner

CONSOLE_TAIL_LINES = 5

_ERRORS: dict[ErrorKind, type[SqlToolError]] = {
    ErrorKind.CONNECTION_MARKER_MISSING: ConnectionMarkerMissingError,
    ErrorKind.EXTERNAL_TOOL: ExternalToolError,
    ErrorKind.LAYOUT_INFERENCE: LayoutInferenceError,
}


def raise_for_result(result: StatementResult) -> None:
    """Raise the SqlToolError matching a failed result; no-op on success."""
    if not result.error:
        return
    error_type = _ERRORS[result.error_kind] if result.error_kind else ExternalToolError
    raise error_type(result.error_message)


class Connection:
    """A sqlplus session descriptor: target, temp files, last result.

    Not thread-safe; run one statement at a time.
    """

    def __init__(
        self,
        target: str,
        options: ConnectOptions | None = None,
        registry: ConnectionRegistry | None = None,
        runner: Runner | None = None,
    ) -> None:
        self.target = target
        self.options = options or ConnectOptions()
        self.registry = registry if registry is not None else ConnectionRegistry()
        self.runner: Runner = runner or SqlPlusRunner(
            self.options.executable, timeout=self.options.timeout
        )
        self.connect_target = build_connect_target(target, self.options.connect_as)
        self.active_statement: str | None = None
        self.closed = False
        self._result: StatementResult | None = None
        self._log = StatementLog(
            self.options.logger or get_logger("sqlplus_tool.connection"),
            self.options.log_level,
        )

        self.script_path, self.spool_path = self._create_temp_files()
        self.registry.register(self)

    def __enter__(self) -> Connection:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<Connection {self.redacted_target} ({state})>"

    @property
    def redacted_target(self) -> str:
        return redact_connect_string(self.connect_target)

    def _create_temp_files(self) -> tuple[Path, Path]:
        temp_dir = self.options.temp_dir or Path(tempfile.gettempdir())
        prefix = f"sqlplus_tool.{os.getpid()}.{self.registry.next_sequence()}."
        paths: list[Path] = []
        try:
            for suffix in (".sql", ".out"):
                fd, name = tempfile.mkstemp(suffix=suffix, prefix=prefix, dir=temp_dir)
                os.close(fd)
                paths.append(Path(name))
        except OSError as e:
            for path in paths:
                path.unlink(missing_ok=True)
            msg = f"Cannot create temp files in {temp_dir}: {e}"
            raise TempFileError(msg) from e
        return paths[0], paths[1]

    def _ensure_open(self) -> None:
        if self.closed:
            msg = f"Connection to {self.redacted_target} is closed"
            raise SqlToolError(msg)

    def _reset_spool(self) -> None:
        try:
            self.spool_path.write_text("")
        except OSError as e:
            msg = f"Cannot reset spool file {self.spool_path}: {e}"
            raise TempFileError(msg) from e

    def _require_result(self) -> StatementResult:
        if self._result is None:
            msg = "No statement has been executed on this connection"
            raise NoResultError(msg)
        return self._result

    # -- Execution --

    def execute(self, sql: str, *args: str) -> int | None:
        """Run one statement and decode its report.

        Extra args are passed to sqlplus after the script and can be
        referenced as &1, &2, ... in the statement. Returns the affected
        row count for non-queries, None for queries and failures.
        Raises the matching SqlToolError when raise_on_error is set.
        """
        self._ensure_open()
        statement = sql.strip()
        kind = classify_statement(statement)

        write_script(
            self.script_path,
            compile_script(statement, self.spool_path, self.connect_target),
        )
        self.active_statement = statement
        self._result = None
        self._reset_spool()

        self._log.connecting(self.redacted_target)
        self._log.start(statement)
        with self.registry.interrupt_guard():
            outcome = self.runner.run(self.script_path, args)

        result = decode_output(read_spool(self.spool_path), kind, statement)
        if result.error_kind == ErrorKind.CONNECTION_MARKER_MISSING:
            result = _with_tool_output(result, outcome)
        self._result = result
        self._log.finished(result)

        if self.options.raise_on_error:
            raise_for_result(result)

        return result.affected_rows

    def execute_script(
        self, text: str, substitutions: Mapping[str, str] | None = None
    ) -> int | None:
        """Split a script and run each statement in turn.

        Returns the affected row count of the last statement, or None
        when the script holds no statement.
        """
        affected: int | None = None
        for statement in iter_statements(text, substitutions):
            affected = self.execute(statement)
        return affected

    def execute_file(
        self, path: str | Path, substitutions: Mapping[str, str] | None = None
    ) -> int | None:
        p = Path(path)
        try:
            text = p.read_text()
        except OSError as e:
            msg = f"Cannot open SQL file: {p}: {e}"
            raise InputError(msg) from e
        return self.execute_script(text, substitutions)

    # -- Status of the last statement --

    @property
    def last_result(self) -> StatementResult | None:
        return self._result

    @property
    def error(self) -> bool:
        return self._result is not None and self._result.error

    @property
    def error_message(self) -> str:
        return self._result.error_message if self._result is not None else ""

    @property
    def affected_rows(self) -> int | None:
        if self._result is None or self._result.error:
            return None
        return self._result.affected_rows

    @property
    def row_count(self) -> int | None:
        return self._result.row_count if self._result is not None else None

    @property
    def headers(self) -> list[str]:
        return self._require_result().headers

    @property
    def column_widths(self) -> list[int]:
        return self._require_result().column_widths

    # -- Result views of the last statement --

    def fetchall_rows(self) -> list[list[str]]:
        return self._require_result().fetchall_rows()

    def fetchall_records(self) -> list[dict[str, str]]:
        return self._require_result().fetchall_records()

    def fetchall_text(self) -> str:
        return self._require_result().fetchall_text()

    # -- Execute-if-needed helpers --

    def _run_if_new(self, sql: str) -> None:
        if sql.strip() != self.active_statement or self._result is None:
            self.execute(sql)

    def select_all_rows(self, sql: str) -> list[list[str]]:
        self._run_if_new(sql)
        return self.fetchall_rows()

    def select_all_records(self, sql: str) -> list[dict[str, str]]:
        self._run_if_new(sql)
        return self.fetchall_records()

    def select_all_text(self, sql: str) -> str:
        self._run_if_new(sql)
        return self.fetchall_text()

    def select_row(self, sql: str, row_number: int) -> list[str] | None:
        """Return the 1-based row_number-th row, or None if out of range."""
        return _nth(self.select_all_rows(sql), row_number)

    def select_row_record(self, sql: str, row_number: int) -> dict[str, str] | None:
        return _nth(self.select_all_records(sql), row_number)

    def select_row_text(self, sql: str, row_number: int) -> str | None:
        row = _nth(self.select_all_rows(sql), row_number)
        return None if row is None else FIELD_SEPARATOR.join(row)

    # -- Lifecycle --

    def close(self) -> None:
        """Remove the temp files and deregister. Safe to call twice."""
        if self.closed:
            return
        self.closed = True
        self.active_statement = None
        self.registry.deregister(self)
        failures: list[str] = []
        for path in (self.script_path, self.spool_path):
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                failures.append(f"{path}: {e}")
        if failures:
            msg = "Cannot remove temp files: " + "; ".join(failures)
            raise TempFileError(msg)


def _with_tool_output(
    result: StatementResult, outcome: RunOutcome
) -> StatementResult:
    """Attach the sqlplus exit code and console tail to a banner-less result."""
    tail = [line for line in outcome.console.splitlines() if line.strip()]
    message = f"{result.error_message} (sqlplus exit code {outcome.returncode})"
    if tail:
        message += ":\n" + "\n".join(tail[-CONSOLE_TAIL_LINES:])
    return result.model_copy(update={"error_message": message})


def _nth(items: list[Any], row_number: int) -> Any:
    if row_number <= 0 or row_number > len(items):
        return None
    return items[row_number - 1]


def connect(
    target: str,
    options: ConnectOptions | None = None,
    registry: ConnectionRegistry | None = None,
    runner: Runner | None = None,
) -> Connection:
    """Create a Connection for a ``user/password@tns`` target."""
    return Connection(target, options=options, registry=registry, runner=runner)
