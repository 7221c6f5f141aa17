"""CSV formatter for decoded sqlplus results (RFC 4180 compliant)."""

from __future__ import annotations

import csv
from io import StringIO
from typing import TYPE_CHECKING

from sqlplus_tool.formatters.base import registry

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlplus_tool.core.models import StatementResult


def _write_row(values: list[str]) -> str:
    buf = StringIO()
    writer = csv.writer(buf)
    writer.writerow(values)
    return buf.getvalue().rstrip("\r\n")


class CSVFormatter:
    def __init__(self, no_header: bool = False) -> None:
        self.no_header = no_header

    def format(self, result: StatementResult) -> Iterator[str]:
        if not self.no_header and result.headers:
            yield _write_row(result.headers)

        for row in result.fetchall_rows():
            yield _write_row(row)


registry.register("csv", CSVFormatter)
