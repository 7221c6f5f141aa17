"""Subprocess runner for the sqlplus client.

Runs ``sqlplus /nolog @script [args...]`` and waits for it to exit. The
report itself is spooled to a file by the script; the console output is
kept only for diagnostics.
"""

from __future__ import annotations

import shutil
import subprocess
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import sentry_sdk
import structlog

from sqlplus_tool.core.exceptions import TimeoutError, ToolNotFoundError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

DEFAULT_EXECUTABLE = "sqlplus"


@dataclass
class RunOutcome:
    returncode: int
    console: str
    duration_ms: float


@runtime_checkable
class Runner(Protocol):
    """Anything that can run a compiled script and let it spool its report."""

    def run(self, script_path: Path, args: Sequence[str] = ()) -> RunOutcome: ...


class SqlPlusRunner:
    """Runs compiled scripts through the sqlplus binary."""

    def __init__(
        self, executable: str = DEFAULT_EXECUTABLE, timeout: float | None = None
    ) -> None:
        self.executable = executable
        self.timeout = timeout

    def resolve_executable(self) -> str:
        path = shutil.which(self.executable)
        if path is None:
            msg = (
                f"sqlplus executable not found: {self.executable}\n"
                "Install Oracle Instant Client or set --executable."
            )
            raise ToolNotFoundError(msg)
        return path

    def build_command(self, script_path: Path, args: Sequence[str] = ()) -> list[str]:
        return [self.resolve_executable(), "/nolog", f"@{script_path}", *args]

    def run(self, script_path: Path, args: Sequence[str] = ()) -> RunOutcome:
        log = structlog.get_logger()
        cmd = self.build_command(script_path, args)
        log.debug("running sqlplus", command=cmd)

        with sentry_sdk.start_span(op="db.query", description="sqlplus") as span:
            start_time = time.monotonic()
            try:
                proc = subprocess.run(
                    cmd,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.STDOUT,
                    text=True,
                    timeout=self.timeout,
                    check=False,
                )
            except subprocess.TimeoutExpired as e:
                span.set_status("deadline_exceeded")
                log.error("sqlplus timeout", timeout=self.timeout)
                msg = f"sqlplus did not finish within {self.timeout}s"
                raise TimeoutError(msg) from e

            duration_ms = (time.monotonic() - start_time) * 1000
            span.set_data("duration_ms", duration_ms)
            span.set_data("returncode", proc.returncode)
            log.debug(
                "sqlplus exited",
                returncode=proc.returncode,
                duration_ms=f"{duration_ms:.1f}",
            )
            return RunOutcome(
                returncode=proc.returncode,
                console=proc.stdout or "",
                duration_ms=duration_ms,
            )
