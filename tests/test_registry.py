"""Tests for the connection registry and interrupt cleanup."""

import signal
import threading

import pytest

from sqlplus_tool.core.exceptions import TempFileError
from sqlplus_tool.core.registry import ConnectionRegistry


class _Closable:
    def __init__(self, registry, fail=False):
        self.registry = registry
        self.fail = fail
        self.closed = False
        registry.register(self)

    def close(self):
        self.closed = True
        if self.fail:
            raise TempFileError("Cannot remove temp files: boom")
        self.registry.deregister(self)


@pytest.mark.unit
class TestRegistration:
    def test_register_and_deregister(self):
        registry = ConnectionRegistry()
        conn = _Closable(registry)
        assert conn in registry
        assert len(registry) == 1
        registry.deregister(conn)
        assert conn not in registry
        assert len(registry) == 0

    def test_register_twice_is_noop(self):
        registry = ConnectionRegistry()
        conn = _Closable(registry)
        registry.register(conn)
        assert len(registry) == 1

    def test_deregister_unknown_is_noop(self):
        registry = ConnectionRegistry()
        registry.deregister(object())
        assert len(registry) == 0

    def test_sequence_increments(self):
        registry = ConnectionRegistry()
        assert [registry.next_sequence() for _ in range(3)] == [0, 1, 2]


@pytest.mark.unit
class TestCloseAll:
    def test_closes_everything(self):
        registry = ConnectionRegistry()
        conns = [_Closable(registry) for _ in range(3)]
        registry.close_all()
        assert all(c.closed for c in conns)
        assert len(registry) == 0

    def test_failure_does_not_stop_cleanup(self):
        registry = ConnectionRegistry()
        bad = _Closable(registry, fail=True)
        good = _Closable(registry)
        registry.close_all()
        assert bad.closed and good.closed
        assert len(registry) == 0


@pytest.mark.unit
class TestInterruptGuard:
    def test_handler_swapped_and_restored(self):
        registry = ConnectionRegistry()
        before = signal.getsignal(signal.SIGINT)
        with registry.interrupt_guard():
            assert signal.getsignal(signal.SIGINT) == registry._on_interrupt
        assert signal.getsignal(signal.SIGINT) == before

    def test_restored_after_exception(self):
        registry = ConnectionRegistry()
        before = signal.getsignal(signal.SIGINT)
        with pytest.raises(RuntimeError), registry.interrupt_guard():
            raise RuntimeError("boom")
        assert signal.getsignal(signal.SIGINT) == before

    def test_interrupt_cleans_up_then_raises(self):
        registry = ConnectionRegistry()
        conn = _Closable(registry)
        with pytest.raises(KeyboardInterrupt):
            registry._on_interrupt(signal.SIGINT, None)
        assert conn.closed
        assert len(registry) == 0

    def test_noop_outside_main_thread(self):
        registry = ConnectionRegistry()
        seen = []

        def worker():
            with registry.interrupt_guard():
                seen.append(signal.getsignal(signal.SIGINT))

        before = signal.getsignal(signal.SIGINT)
        thread = threading.Thread(target=worker)
        thread.start()
        thread.join()
        assert seen == [before]
