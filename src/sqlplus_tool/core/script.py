"""sqlplus script compilation.

Each statement runs in its own sqlplus session. The script spools the
console to a file, connects, pins the report formatting the decoder
depends on, runs the statement and exits. The page and line sizes are
part of the output protocol: a narrower line size wraps rows and breaks
column inference.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from sqlplus_tool.core.exceptions import TempFileError

if TYPE_CHECKING:
    from pathlib import Path

PAGE_SIZE = 9999
LINE_SIZE = 8192
STATEMENT_TERMINATOR = ";"

_FORMAT_DIRECTIVES: tuple[str, ...] = (
    f"set pagesize {PAGE_SIZE}",
    f"set linesize {LINE_SIZE}",
    "clear columns",
    "set heading on",
    "set feedback on",
    "set verify off",
    "set newpage none",
    "set trimspool on",
)

_PASSWORD_RE = re.compile(r"/[^@]+")


def redact_connect_string(target: str) -> str:
    """Mask the password in a ``user/password@tns`` connect string."""
    return _PASSWORD_RE.sub("/***", target, count=1)


def build_connect_target(target: str, connect_as: str | None = None) -> str:
    """Return the argument of the sqlplus ``connect`` directive.

    SYS can only log on with a privileged role, so ``sys/...`` targets
    always connect ``as sysdba``.
    """
    if target.lower().startswith("sys/"):
        return f"{target} as sysdba"
    if connect_as:
        return f"{target} as {connect_as}"
    return target


def terminate_statement(statement: str) -> str:
    statement = statement.strip()
    if not statement.endswith(STATEMENT_TERMINATOR):
        statement += STATEMENT_TERMINATOR
    return statement


def compile_script(statement: str, spool_path: Path | str, connect_target: str) -> str:
    lines = [
        f"spool {spool_path}",
        f"connect {connect_target}",
        *_FORMAT_DIRECTIVES,
        terminate_statement(statement),
        "exit",
    ]
    return "\n".join(lines) + "\n"


def write_script(path: Path, text: str) -> None:
    """Overwrite the script file.

    Raises TempFileError if the file cannot be written.
    """
    try:
        path.write_text(text)
    except OSError as e:
        msg = f"Cannot open {path}: {e}"
        raise TempFileError(msg) from e
