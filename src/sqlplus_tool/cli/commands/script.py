from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from sqlplus_tool.cli.commands._shared import echo_affected, get_connection
from sqlplus_tool.core.exceptions import InputError
from sqlplus_tool.core.query_source import parse_definitions


def script_command(
    ctx: typer.Context,
    file: Annotated[
        Path,
        typer.Argument(help="SQL script with ';' or '/' terminated statements"),
    ],
    define: Annotated[
        list[str] | None,
        typer.Option("--define", "-D", help="Substitute &name, as name=value"),
    ] = None,
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", "-t", help="sqlplus timeout per statement"),
    ] = None,
) -> None:
    """Run every statement of a SQL script, one sqlplus session each.

    Prints the affected row count of the last statement.
    """
    if not file.exists():
        msg = f"SQL file not found: {file}"
        raise InputError(msg)
    substitutions = parse_definitions(define)

    with get_connection(ctx, timeout=timeout) as conn:
        affected = conn.execute_file(file, substitutions)

    echo_affected(affected)
