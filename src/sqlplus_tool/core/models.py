"""Statement result models for SQL*Plus Tool.

Pydantic models for the decoded output of one sqlplus run. The three
caller-facing views (rows, records, text) are built lazily and cached on
the result, so a new statement on a Connection, which produces a new
result object, discards them.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, PrivateAttr

# Joins the fields of one row in the text view.
FIELD_SEPARATOR = " "


class StatementKind(StrEnum):
    QUERY = "query"
    NON_QUERY = "non_query"


class ErrorKind(StrEnum):
    CONNECTION_MARKER_MISSING = "connection_marker_missing"
    EXTERNAL_TOOL = "external_tool"
    LAYOUT_INFERENCE = "layout_inference"


class ColumnMeta(BaseModel):
    """A decoded result column: header text and fixed width."""

    name: str
    width: int


class StatementResult(BaseModel):
    """Decoded outcome of one executed statement."""

    statement: str = ""
    kind: StatementKind
    error: bool = False
    error_message: str = ""
    error_kind: ErrorKind | None = None
    affected_rows: int | None = None
    columns: list[ColumnMeta] = []
    raw_rows: list[str] = []
    rows: list[list[str]] = []

    _rows_view: list[list[str]] | None = PrivateAttr(default=None)
    _records_view: list[dict[str, str]] | None = PrivateAttr(default=None)
    _text_view: str | None = PrivateAttr(default=None)

    @property
    def headers(self) -> list[str]:
        if self.error:
            return []
        return [col.name for col in self.columns]

    @property
    def column_widths(self) -> list[int]:
        if self.error:
            return []
        return [col.width for col in self.columns]

    @property
    def row_count(self) -> int | None:
        """Affected rows for non-queries, decoded rows for queries.

        None when the statement failed or the count is unknown.
        """
        if self.error:
            return None
        if self.kind == StatementKind.QUERY:
            return len(self.rows)
        return self.affected_rows

    def fetchall_rows(self) -> list[list[str]]:
        if self._rows_view is None:
            self._rows_view = [] if self.error else [list(row) for row in self.rows]
        return self._rows_view

    def fetchall_records(self) -> list[dict[str, str]]:
        if self._records_view is None:
            headers = self.headers
            if not headers:
                self._records_view = []
            else:
                self._records_view = [
                    dict(zip(headers, row, strict=True))
                    for row in self.fetchall_rows()
                ]
        return self._records_view

    def fetchall_text(self) -> str:
        if self._text_view is None:
            self._text_view = "\n".join(
                FIELD_SEPARATOR.join(row) for row in self.fetchall_rows()
            )
        return self._text_view
