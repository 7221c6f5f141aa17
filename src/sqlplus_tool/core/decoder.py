"""Decoder for sqlplus spool output.

Turns the console report of one sqlplus session into a StatementResult.
A report looks like::

    Connected.
    NAME       VALUE
    ---------- -----
    foo            1
    bar            2

    2 rows selected.

The decoder is a single-pass state machine. It waits for the connection
banner, then captures lines. For queries the first captured line is the
heading and the second must be the dashed separator that fixes the
column layout; everything after that is data. A heading line followed
by its separator again is a repeated page heading and is dropped
wherever it appears. A trailing feedback line
(``3 rows updated.``) is status, not data. Any ``ORA-``/``SP2-`` line,
wherever it appears, fails the whole result.
"""

from __future__ import annotations

import re
from enum import StrEnum
from typing import TYPE_CHECKING

import structlog

from sqlplus_tool.core.exceptions import TempFileError
from sqlplus_tool.core.layout import Layout, is_separator_line
from sqlplus_tool.core.models import (
    ColumnMeta,
    ErrorKind,
    StatementKind,
    StatementResult,
)

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

CONNECTED_MARKER = "Connected"
ERROR_PREFIXES = ("ORA-", "SP2-")
MISSING_MARKER_MESSAGE = "cannot find connection marker in output"
MISSING_SEPARATOR_MESSAGE = "cannot find column separator line in output"

_STATUS_RE = re.compile(
    r"^(?P<count>\d+|no)\s+rows?\s+(?:selected|created|updated|deleted)\b",
    re.IGNORECASE,
)


class DecoderState(StrEnum):
    SEEKING_CONNECTION = "seeking_connection"
    CAPTURING = "capturing"
    MALFORMED = "malformed"
    ERROR = "error"


def parse_status_line(line: str | None) -> int | None:
    """Return the row count of a feedback line, or None if it is not one.

    ``no rows selected`` counts as 0.
    """
    if not line:
        return None
    match = _STATUS_RE.match(line.strip())
    if match is None:
        return None
    count = match.group("count")
    if count.lower() == "no":
        return 0
    return int(count)


class ResultDecoder:
    """Line-by-line decoder for the output of one statement."""

    def __init__(self, kind: StatementKind, statement: str = "") -> None:
        self.kind = kind
        self.statement = statement
        self.state = DecoderState.SEEKING_CONNECTION
        self._errors: list[str] = []
        self._malformed_message = ""
        self._header_line: str | None = None
        self._separator_line: str | None = None
        self._layout: Layout | None = None
        self._columns: list[ColumnMeta] = []
        self._raw_rows: list[str] = []
        self._last_good_line: str | None = None
        self._held_line: str | None = None

    @property
    def layout(self) -> Layout | None:
        return self._layout

    def feed(self, line: str) -> None:
        line = line.rstrip("\r\n")

        if line.startswith(ERROR_PREFIXES):
            self.state = DecoderState.ERROR
            self._errors.append(line)
            return

        if self.state == DecoderState.SEEKING_CONNECTION:
            if CONNECTED_MARKER in line:
                self.state = DecoderState.CAPTURING
            return

        if self.state != DecoderState.CAPTURING:
            return

        if not line.strip():
            return

        self._last_good_line = line

        if self.kind == StatementKind.NON_QUERY:
            self._raw_rows.append(line)
            return

        if self._layout is None:
            if self._header_line is None:
                self._header_line = line
            else:
                self._set_layout(line)
            return

        if self._held_line is not None:
            held, self._held_line = self._held_line, None
            if line == self._separator_line:
                # Heading repeated at a page boundary.
                return
            self._raw_rows.append(self._layout.fit(held))

        if line == self._header_line:
            self._held_line = line
            return
        self._raw_rows.append(self._layout.fit(line))

    def _flush_held(self) -> None:
        if self._held_line is not None and self._layout is not None:
            self._raw_rows.append(self._layout.fit(self._held_line))
            self._held_line = None

    def _set_layout(self, line: str) -> None:
        if not is_separator_line(line):
            self.state = DecoderState.MALFORMED
            self._malformed_message = (
                f"{MISSING_SEPARATOR_MESSAGE}: expected dashes, got {line.strip()!r}"
            )
            return

        layout = Layout.from_separator(line)
        headers = layout.split(self._header_line or "")
        self._layout = layout
        self._separator_line = line
        self._columns = [
            ColumnMeta(name=name, width=width)
            for name, width in zip(headers, layout.widths, strict=True)
        ]

    def _failed(self, kind: ErrorKind, message: str) -> StatementResult:
        return StatementResult(
            statement=self.statement,
            kind=self.kind,
            error=True,
            error_message=message,
            error_kind=kind,
        )

    def finish(self) -> StatementResult:
        log = structlog.get_logger()

        if self.state == DecoderState.ERROR:
            result = self._failed(ErrorKind.EXTERNAL_TOOL, "\n".join(self._errors))
        elif self.state == DecoderState.SEEKING_CONNECTION:
            result = self._failed(
                ErrorKind.CONNECTION_MARKER_MISSING, MISSING_MARKER_MESSAGE
            )
        elif self.state == DecoderState.MALFORMED:
            result = self._failed(ErrorKind.LAYOUT_INFERENCE, self._malformed_message)
        else:
            result = self._decoded()

        log.debug(
            "decoded output",
            state=str(self.state),
            kind=str(self.kind),
            error=result.error,
            rows=len(result.rows),
            affected_rows=result.affected_rows,
        )
        return result

    def _decoded(self) -> StatementResult:
        self._flush_held()
        raw_rows = list(self._raw_rows)
        count = parse_status_line(self._last_good_line)
        if count is not None and raw_rows:
            raw_rows.pop()

        if self.kind == StatementKind.NON_QUERY:
            return StatementResult(
                statement=self.statement,
                kind=self.kind,
                affected_rows=count,
                raw_rows=raw_rows,
                rows=[[row.strip()] for row in raw_rows],
            )

        if self._layout is None:
            if count is None:
                return self._failed(
                    ErrorKind.LAYOUT_INFERENCE, MISSING_SEPARATOR_MESSAGE
                )
            # Only a feedback line, e.g. "no rows selected".
            return StatementResult(statement=self.statement, kind=self.kind)

        layout = self._layout
        return StatementResult(
            statement=self.statement,
            kind=self.kind,
            columns=self._columns,
            raw_rows=raw_rows,
            rows=[layout.split(row) for row in raw_rows],
        )


def decode_lines(
    lines: Iterable[str], kind: StatementKind, statement: str = ""
) -> StatementResult:
    decoder = ResultDecoder(kind, statement)
    for line in lines:
        decoder.feed(line)
    return decoder.finish()


def decode_output(
    text: str, kind: StatementKind, statement: str = ""
) -> StatementResult:
    """Decode the full captured text of one sqlplus run.

    Lines break on ``\\n`` only; form feeds and other characters that
    ``str.splitlines`` treats as breaks stay inside the row.
    """
    return decode_lines(text.split("\n"), kind, statement)


def read_spool(path: Path) -> str:
    """Read a spool file.

    Raises TempFileError if the file is missing or unreadable.
    """
    try:
        return path.read_text(errors="replace")
    except OSError as e:
        msg = f"Cannot open sqlplus spool file: {path}: {e}"
        raise TempFileError(msg) from e
