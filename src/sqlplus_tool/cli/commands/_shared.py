"""Shared CLI plumbing for command modules.

Connection creation, config resolution and output helpers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import typer

from sqlplus_tool.cli.output import get_formatter, write_output
from sqlplus_tool.core.client import Connection
from sqlplus_tool.core.config import load_config, resolve_config
from sqlplus_tool.core.exceptions import ConfigError
from sqlplus_tool.core.registry import ConnectionRegistry

if TYPE_CHECKING:
    from sqlplus_tool.core.config import ResolvedConfig
    from sqlplus_tool.core.models import StatementResult


def get_resolved_config(ctx: typer.Context, **overrides: Any) -> ResolvedConfig:
    obj = ctx.ensure_object(dict)
    config = load_config(obj.get("config_file"))

    cli_overrides: dict[str, Any] = {}
    for key in ("connect", "connect_as", "executable", "temp_dir"):
        val = obj.get(key)
        if val is not None:
            cli_overrides[key] = val
    for key, val in overrides.items():
        if val is not None:
            cli_overrides[key] = val

    return resolve_config(config, profile_name=obj.get("profile"), **cli_overrides)


def get_registry(ctx: typer.Context) -> ConnectionRegistry:
    obj = ctx.ensure_object(dict)
    registry = obj.get("registry")
    if registry is None:
        registry = ConnectionRegistry()
        obj["registry"] = registry
    return registry


def get_connection(ctx: typer.Context, timeout: float | None = None) -> Connection:
    """Open a Connection that raises on any sqlplus error."""
    obj = ctx.ensure_object(dict)
    resolved = get_resolved_config(ctx, timeout=timeout)
    if not resolved.connect:
        msg = (
            "No connect string. Use --connect, SQLPLUS_TOOL_CONNECT "
            "or a profile with 'connect' set."
        )
        raise ConfigError(msg)

    options = resolved.connect_options(
        log_level=1 if obj.get("verbose") else 0,
        raise_on_error=True,
    )
    return Connection(resolved.connect, options=options, registry=get_registry(ctx))


def format_options(ctx: typer.Context) -> dict[str, Any]:
    obj = ctx.ensure_object(dict)
    return {
        "format_flag": obj.get("format"),
        "default": (
            get_resolved_config(ctx).default_format
            if obj.get("format") is None
            else None
        ),
        "compact": obj.get("compact", False),
        "width": obj.get("width", 40),
        "no_header": obj.get("no_header", False),
    }


def output_result(ctx: typer.Context, result: StatementResult) -> None:
    opts = format_options(ctx)
    formatter = get_formatter(**opts)
    write_output(formatter, result)


def echo_affected(affected: int | None) -> None:
    if affected is None:
        return
    noun = "row" if affected == 1 else "rows"
    typer.echo(f"{affected} {noun} affected", err=True)
