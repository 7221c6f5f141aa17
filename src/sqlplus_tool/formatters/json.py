"""JSON formatter for decoded sqlplus results."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from sqlplus_tool.formatters.base import registry

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlplus_tool.core.models import StatementResult


class JSONFormatter:
    def __init__(self, compact: bool = False) -> None:
        self.compact = compact

    def format(self, result: StatementResult) -> Iterator[str]:
        # Queries become records; non-query output has no headers.
        if result.headers:
            payload: object = result.fetchall_records()
        else:
            payload = [row[0] for row in result.fetchall_rows()]

        if self.compact:
            yield json.dumps(payload)
        else:
            yield json.dumps(payload, indent=2)


registry.register("json", JSONFormatter)
