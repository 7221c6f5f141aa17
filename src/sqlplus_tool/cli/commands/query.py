from __future__ import annotations

import sys
from typing import Annotated

import typer

from sqlplus_tool.cli.commands._shared import echo_affected, get_connection, output_result
from sqlplus_tool.core.exceptions import InputError
from sqlplus_tool.core.exit_codes import ExitCode
from sqlplus_tool.core.models import StatementKind
from sqlplus_tool.core.query_source import resolve_query_source


def query_command(
    ctx: typer.Context,
    file: Annotated[
        str | None,
        typer.Argument(help="SQL file holding one statement"),
    ] = None,
    execute: Annotated[
        str | None,
        typer.Option("--execute", "-e", help="Execute inline SQL statement"),
    ] = None,
    arg: Annotated[
        list[str] | None,
        typer.Option("--arg", "-a", help="Positional argument for &1, &2, ..."),
    ] = None,
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", "-t", help="sqlplus timeout in seconds"),
    ] = None,
) -> None:
    """Execute a SQL statement from file, inline (-e), or stdin."""
    try:
        is_tty = sys.stdin.isatty()
    except (ValueError, AttributeError):
        is_tty = False
    if execute is None and file is None and is_tty:
        typer.echo(ctx.get_help())
        raise typer.Exit()

    try:
        sql = resolve_query_source(inline=execute, file_path=file)
    except InputError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(ExitCode.INPUT_ERROR) from exc

    with get_connection(ctx, timeout=timeout) as conn:
        affected = conn.execute(sql, *(arg or []))
        result = conn.last_result

    if result is None:
        return
    if result.kind == StatementKind.QUERY:
        output_result(ctx, result)
        return
    text = result.fetchall_text()
    if text:
        typer.echo(text)
    echo_affected(affected)
