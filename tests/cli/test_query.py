"""Tests for the query command."""

import json
import sys

import pytest

from sqlplus_tool.core.exceptions import ConfigError, ExternalToolError
from sqlplus_tool.core.exit_codes import ExitCode
from tests.fakes import FIXTURES, read_fixture

CONNECT = ["--connect", "scott/tiger@orcl"]


@pytest.mark.unit
class TestQueryCommand:
    def test_query_as_json(self, cli_runner, base_args, fake_sqlplus):
        fake = fake_sqlplus(read_fixture("select_emp.lst"))
        result = cli_runner(
            *base_args, *CONNECT, "--format", "json",
            "query", "-e", "SELECT empno, ename, job, sal FROM emp",
        )  # fmt: skip
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data[0] == {"EMPNO": "7369", "ENAME": "SMITH", "JOB": "CLERK", "SAL": "800"}
        assert fake.statements == ["SELECT empno, ename, job, sal FROM emp;"]

    def test_query_as_csv(self, cli_runner, base_args, fake_sqlplus):
        fake_sqlplus(read_fixture("select_one_row.lst"))
        result = cli_runner(
            *base_args, *CONNECT, "--format", "csv", "query", "-e", "SELECT name FROM t"
        )
        assert result.exit_code == 0, result.output
        assert result.stdout.splitlines() == ["NAME", "foo"]

    def test_query_from_file(self, cli_runner, base_args, fake_sqlplus):
        fake = fake_sqlplus(read_fixture("select_one_row.lst"))
        result = cli_runner(
            *base_args, *CONNECT, "--format", "csv",
            "query", str(FIXTURES / "select_42.sql"),
        )  # fmt: skip
        assert result.exit_code == 0, result.output
        assert fake.statements == ["SELECT 42 AS answer FROM dual;"]

    def test_non_query_reports_affected_rows(self, cli_runner, base_args, fake_sqlplus):
        fake_sqlplus(read_fixture("update_3_rows.lst"))
        result = cli_runner(
            *base_args, *CONNECT, "query", "-e", "UPDATE emp SET sal = sal + 1"
        )
        assert result.exit_code == 0, result.output
        assert "3 rows affected" in result.output

    def test_positional_args(self, cli_runner, base_args, fake_sqlplus):
        fake = fake_sqlplus(read_fixture("select_one_row.lst"))
        result = cli_runner(
            *base_args, *CONNECT, "--format", "csv",
            "query", "-e", "SELECT name FROM t WHERE id = &1", "--arg", "42",
        )  # fmt: skip
        assert result.exit_code == 0, result.output
        assert fake.calls[0][1] == ("42",)

    def test_executable_and_timeout_reach_runner(
        self, cli_runner, base_args, fake_sqlplus
    ):
        fake = fake_sqlplus(read_fixture("select_one_row.lst"))
        cli_runner(
            *base_args, *CONNECT, "--executable", "/opt/oracle/sqlplus",
            "--format", "csv", "query", "-e", "SELECT name FROM t", "--timeout", "5",
        )  # fmt: skip
        assert fake.created == [("/opt/oracle/sqlplus", 5.0)]

    def test_temp_files_removed(self, cli_runner, base_args, fake_sqlplus, temp_dir):
        fake_sqlplus(read_fixture("select_one_row.lst"))
        cli_runner(*base_args, *CONNECT, "query", "-e", "SELECT name FROM t")
        assert list(temp_dir.glob("sqlplus_tool.*")) == []

    def test_sqlplus_error_raises(self, cli_runner, base_args, fake_sqlplus, temp_dir):
        fake_sqlplus(read_fixture("ora_after_connect.lst"))
        result = cli_runner(
            *base_args, *CONNECT, "query", "-e", "SELECT * FROM missing_table"
        )
        assert isinstance(result.exception, ExternalToolError)
        assert "ORA-00942" in result.exception.message
        assert list(temp_dir.glob("sqlplus_tool.*")) == []

    def test_missing_connect_string(self, cli_runner, base_args, fake_sqlplus):
        fake_sqlplus()
        result = cli_runner(*base_args, "query", "-e", "SELECT 1 FROM dual")
        assert isinstance(result.exception, ConfigError)
        assert "No connect string" in result.exception.message

    def test_connect_from_env(self, cli_runner, base_args, fake_sqlplus, monkeypatch):
        monkeypatch.setenv("SQLPLUS_TOOL_CONNECT", "env/pw@envdb")
        fake = fake_sqlplus(read_fixture("select_one_row.lst"))
        result = cli_runner(*base_args, "query", "-e", "SELECT name FROM t")
        assert result.exit_code == 0, result.output
        assert "connect env/pw@envdb" in fake.calls[0][0]

    def test_missing_file(self, cli_runner, base_args, fake_sqlplus):
        fake_sqlplus()
        result = cli_runner(*base_args, *CONNECT, "query", "/nonexistent/q.sql")
        assert result.exit_code == ExitCode.INPUT_ERROR
        assert "SQL file not found" in result.output


@pytest.mark.unit
@pytest.mark.skipif(sys.platform == "win32", reason="fake sqlplus is a shell script")
def test_query_through_fake_binary(cli_runner, base_args, temp_dir):
    """Run the real subprocess path against a shell script posing as sqlplus."""
    exe = temp_dir / "sqlplus"
    exe.write_text(
        "#!/bin/sh\n"
        'script="${2#@}"\n'
        'spool=$(head -n 1 "$script" | cut -c7-)\n'
        f'cp "{FIXTURES / "select_emp.lst"}" "$spool"\n'
    )
    exe.chmod(0o755)
    result = cli_runner(
        *base_args, *CONNECT, "--executable", str(exe), "--format", "json",
        "query", "-e", "SELECT empno, ename, job, sal FROM emp",
    )  # fmt: skip
    assert result.exit_code == 0, result.output
    assert [row["ENAME"] for row in json.loads(result.stdout)] == [
        "SMITH",
        "ALLEN",
        "WARD",
        "JAMES",
    ]
