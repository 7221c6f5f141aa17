"""Split a sqlplus script into standalone statements.

The splitter is line-oriented, like sqlplus itself: ``;`` and ``/`` end a
statement wherever they appear. Delimiters inside string literals and
PL/SQL blocks are not recognized, so such scripts are split too early.
Client-side directives (``set``, ``spool``, ``connect``, ``exit``) are
dropped because every statement gets its own compiled session script.
The match is on the first word of a line, so the ``SET col = ...`` line
of an UPDATE written over several lines is dropped as well; keep the SET
clause on the UPDATE line.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

_DIRECTIVE_RE = re.compile(r"^\s*(?:exit|spool|set|connect)\b", re.IGNORECASE)
_COMMENT_RE = re.compile(r"^\s*(?:--|rem(?:ark)?\b|/\*.*\*/\s*$)", re.IGNORECASE)
_DELIMITER_RE = re.compile(r"[/;]")
_PLACEHOLDER_RE = re.compile(r"&(\w+)")


def substitute_placeholders(line: str, substitutions: Mapping[str, str]) -> str:
    """Replace ``&name`` with its mapped value; unknown names are left as is."""
    if not substitutions:
        return line
    return _PLACEHOLDER_RE.sub(
        lambda m: str(substitutions.get(m.group(1), m.group(0))), line
    )


def _skip(line: str) -> bool:
    return (
        not line.strip()
        or bool(_DIRECTIVE_RE.match(line))
        or bool(_COMMENT_RE.match(line))
    )


def _fragments(line: str) -> list[str]:
    parts = _DELIMITER_RE.split(line)
    while parts and parts[-1] == "":
        parts.pop()
    return parts


def iter_statements(
    text: str, substitutions: Mapping[str, str] | None = None
) -> Iterator[str]:
    """Yield statements from a script as soon as each one is terminated."""
    subs = substitutions or {}
    pending: list[str] = []

    def flush() -> str | None:
        statement = "\n".join(pending).strip()
        pending.clear()
        return statement or None

    for raw in text.splitlines():
        if _skip(raw):
            continue
        line = substitute_placeholders(raw, subs)

        if not _DELIMITER_RE.search(line):
            pending.append(line)
            continue

        parts = _fragments(line)
        if not parts:
            if statement := flush():
                yield statement
        elif len(parts) == 1:
            pending.append(parts[0])
            if parts[0] != line and (statement := flush()):
                yield statement
        else:
            terminated = bool(_DELIMITER_RE.match(line.rstrip()[-1:]))
            last = len(parts) - 1
            for i, part in enumerate(parts):
                pending.append(part)
                if (i != last or terminated) and (statement := flush()):
                    yield statement

    if statement := flush():
        yield statement


def split_script(
    text: str, substitutions: Mapping[str, str] | None = None
) -> list[str]:
    return list(iter_statements(text, substitutions))
