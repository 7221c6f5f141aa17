"""Shared test fixtures for SQL*Plus Tool."""

from pathlib import Path
from tempfile import TemporaryDirectory

import pytest
from typer.testing import CliRunner

from sqlplus_tool.cli.main import app
from sqlplus_tool.core.client import Connection
from sqlplus_tool.core.config import ConnectOptions
from sqlplus_tool.core.registry import ConnectionRegistry
from tests.fakes import FakeSqlPlus, read_fixture


@pytest.fixture
def runner():
    """Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_runner(runner):
    """Invoke the CLI app with the given arguments."""

    def invoke(*args: str, **kwargs):
        return runner.invoke(app, list(args), **kwargs)

    return invoke


@pytest.fixture
def temp_dir():
    """Temporary directory for test files."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def registry():
    reg = ConnectionRegistry()
    yield reg
    reg.close_all()


@pytest.fixture
def options(temp_dir):
    return ConnectOptions(temp_dir=temp_dir)


@pytest.fixture
def make_connection(registry, options):
    """Build a Connection whose sqlplus runs are served from fixture text."""

    def make(*responses: str, target: str = "scott/tiger@orcl", **option_updates):
        fake = FakeSqlPlus(*responses)
        opts = options.model_copy(update=option_updates) if option_updates else options
        conn = Connection(target, options=opts, registry=registry, runner=fake)
        return conn, fake

    return make


@pytest.fixture
def fixture_text():
    return read_fixture


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's SQLPLUS_TOOL_* settings out of tests."""
    for name in (
        "SQLPLUS_TOOL_CONNECT",
        "SQLPLUS_TOOL_EXECUTABLE",
        "SQLPLUS_TOOL_TEMP_DIR",
        "SQLPLUS_TOOL_PROFILE",
        "SQLPLUS_TOOL_SENTRY_DSN",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_sqlplus(monkeypatch):
    """Route every Connection built by the CLI to a FakeSqlPlus."""

    def install(*responses: str) -> FakeSqlPlus:
        fake = FakeSqlPlus(*responses)
        fake.created = []

        def factory(executable, timeout=None):
            fake.created.append((executable, timeout))
            return fake

        monkeypatch.setattr("sqlplus_tool.core.client.SqlPlusRunner", factory)
        return fake

    return install


@pytest.fixture
def base_args(temp_dir):
    """Global options isolating a CLI run from the user's config."""
    return [
        "--config",
        str(temp_dir / "config.toml"),
        "--temp-dir",
        str(temp_dir),
    ]
