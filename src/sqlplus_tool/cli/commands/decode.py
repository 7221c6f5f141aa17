"""Decode a captured sqlplus spool file without running sqlplus."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from sqlplus_tool.cli.commands._shared import echo_affected, output_result
from sqlplus_tool.core.classifier import classify_statement
from sqlplus_tool.core.client import raise_for_result
from sqlplus_tool.core.decoder import decode_output, read_spool
from sqlplus_tool.core.exceptions import InputError
from sqlplus_tool.core.models import StatementKind


def decode_command(
    ctx: typer.Context,
    file: Annotated[
        Path,
        typer.Argument(help="Spool file captured from sqlplus"),
    ],
    statement: Annotated[
        str | None,
        typer.Option("--statement", "-s", help="Statement that produced the output"),
    ] = None,
    non_query: Annotated[
        bool,
        typer.Option("--non-query", help="Treat output as DML/DDL feedback"),
    ] = False,
) -> None:
    """Decode a sqlplus spool file into rows."""
    if not file.exists():
        msg = f"Spool file not found: {file}"
        raise InputError(msg)

    if statement is not None:
        kind = classify_statement(statement)
    else:
        kind = StatementKind.NON_QUERY if non_query else StatementKind.QUERY

    result = decode_output(read_spool(file), kind, statement or "")
    raise_for_result(result)

    if kind == StatementKind.QUERY:
        output_result(ctx, result)
        return
    text = result.fetchall_text()
    if text:
        typer.echo(text)
    echo_affected(result.affected_rows)
