"""Registry of open connections for bulk cleanup.

Whoever drives connections (the CLI, or an application) owns one
registry. Connections register on creation and deregister on close.
While a statement runs, the registry's interrupt guard replaces the
SIGINT handler so that Ctrl-C first removes every connection's temp
files and only then raises KeyboardInterrupt.
"""

from __future__ import annotations

import contextlib
import itertools
import signal
import threading
from typing import TYPE_CHECKING

import structlog

from sqlplus_tool.core.exceptions import TempFileError

if TYPE_CHECKING:
    from collections.abc import Iterator
    from types import FrameType

    from sqlplus_tool.core.client import Connection


class ConnectionRegistry:
    def __init__(self) -> None:
        self._connections: list[Connection] = []
        self._sequence = itertools.count()

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, connection: object) -> bool:
        return connection in self._connections

    def next_sequence(self) -> int:
        return next(self._sequence)

    def register(self, connection: Connection) -> None:
        if connection not in self._connections:
            self._connections.append(connection)

    def deregister(self, connection: Connection) -> None:
        if connection in self._connections:
            self._connections.remove(connection)

    def close_all(self) -> None:
        """Close every registered connection, best effort."""
        log = structlog.get_logger()
        for connection in list(self._connections):
            try:
                connection.close()
            except TempFileError as e:
                log.warning("connection cleanup failed", error=e.message)
                self.deregister(connection)

    def _on_interrupt(self, signum: int, frame: FrameType | None) -> None:
        self.close_all()
        raise KeyboardInterrupt

    @contextlib.contextmanager
    def interrupt_guard(self) -> Iterator[None]:
        """Clean up all connections if SIGINT arrives inside the block.

        Signal handlers can only be installed from the main thread;
        elsewhere this is a no-op.
        """
        if threading.current_thread() is not threading.main_thread():
            yield
            return

        previous = signal.getsignal(signal.SIGINT)
        signal.signal(signal.SIGINT, self._on_interrupt)
        try:
            yield
        finally:
            signal.signal(signal.SIGINT, previous)
