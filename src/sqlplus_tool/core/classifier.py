"""Lexical statement classification.

A statement is a query when the word SELECT appears anywhere in it,
which covers subqueries and INSERT ... SELECT. Everything else is a
non-query whose output is a single status line.
"""

from __future__ import annotations

import re

from sqlplus_tool.core.models import StatementKind

_SELECT_RE = re.compile(r"SELECT", re.IGNORECASE)


def classify_statement(sql: str) -> StatementKind:
    if _SELECT_RE.search(sql):
        return StatementKind.QUERY
    return StatementKind.NON_QUERY
