"""SQL*Plus Tool main entry point and command registration."""

from __future__ import annotations

import atexit
from pathlib import Path  # noqa: TC003
from typing import Annotated

import sentry_sdk
import typer

from sqlplus_tool.__about__ import __version__
from sqlplus_tool.cli.commands._shared import get_registry
from sqlplus_tool.cli.commands.config import config_app
from sqlplus_tool.cli.commands.decode import decode_command
from sqlplus_tool.cli.commands.query import query_command
from sqlplus_tool.cli.commands.script import script_command
from sqlplus_tool.cli.output import OutputFormat  # noqa: TC001
from sqlplus_tool.core.exceptions import SqlToolError
from sqlplus_tool.core.exit_codes import ExitCode
from sqlplus_tool.core.logging import setup_logging
from sqlplus_tool.core.monitoring import setup_sentry

app = typer.Typer(
    help="SQL*Plus Tool - run SQL through sqlplus and decode its reports",
    no_args_is_help=True,
)

app.add_typer(config_app, name="config")
app.command("query")(query_command)
app.command("script")(script_command)
app.command("decode")(decode_command)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"sqlplus-tool {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Enable verbose logging"),
    ] = False,
    profile: Annotated[
        str | None,
        typer.Option("--profile", "-P", help="Named connection profile"),
    ] = None,
    connect: Annotated[
        str | None,
        typer.Option("--connect", "-c", help="Connect string user/password@tns"),
    ] = None,
    connect_as: Annotated[
        str | None,
        typer.Option("--connect-as", help="Privileged role, e.g. sysdba"),
    ] = None,
    executable: Annotated[
        str | None,
        typer.Option("--executable", help="Path to the sqlplus binary"),
    ] = None,
    temp_dir: Annotated[
        Path | None,
        typer.Option("--temp-dir", help="Directory for script and spool files"),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config file"),
    ] = None,
    format: Annotated[
        OutputFormat | None,
        typer.Option("--format", "-f", help="Output format: table|json|csv"),
    ] = None,
    compact: Annotated[
        bool,
        typer.Option("--compact", help="Compact JSON output (no indentation)"),
    ] = False,
    width: Annotated[
        int,
        typer.Option("--width", help="Column width for table format"),
    ] = 40,
    no_header: Annotated[
        bool,
        typer.Option("--no-header", help="Suppress header row in CSV output"),
    ] = False,
) -> None:
    """SQL*Plus Tool - run SQL through sqlplus and decode its reports."""
    setup_logging(verbose)
    setup_sentry()

    transaction = sentry_sdk.start_transaction(
        op="cli", name=ctx.invoked_subcommand or "sqlplus-tool"
    )
    transaction.__enter__()

    ctx.ensure_object(dict)
    registry = get_registry(ctx)

    def cleanup() -> None:
        registry.close_all()
        transaction.__exit__(None, None, None)
        sentry_sdk.flush(timeout=2)

    atexit.register(cleanup)

    ctx.obj["verbose"] = verbose
    ctx.obj["profile"] = profile
    ctx.obj["connect"] = connect
    ctx.obj["connect_as"] = connect_as
    ctx.obj["executable"] = executable
    ctx.obj["temp_dir"] = temp_dir
    ctx.obj["config_file"] = config_file

    ctx.obj["format"] = format.value if format else None
    ctx.obj["compact"] = compact
    ctx.obj["width"] = width
    ctx.obj["no_header"] = no_header


def run() -> None:
    """Entry point with global error handling."""
    try:
        app()
    except SqlToolError as e:
        sentry_sdk.capture_exception(e)
        typer.echo(f"Error: {e.message}", err=True)
        raise SystemExit(e.exit_code) from None
    except SystemExit:
        raise
    except KeyboardInterrupt:
        typer.echo("Interrupted while executing SQL", err=True)
        raise SystemExit(ExitCode.INTERRUPTED) from None
    except Exception as e:
        sentry_sdk.capture_exception(e)
        typer.echo(f"Error: {e}", err=True)
        raise SystemExit(1) from None
