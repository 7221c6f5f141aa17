"""Tests for JSONFormatter."""

import json

import pytest

from sqlplus_tool.core.decoder import decode_output
from sqlplus_tool.core.models import ColumnMeta, StatementKind, StatementResult
from sqlplus_tool.formatters.base import Formatter
from sqlplus_tool.formatters.json import JSONFormatter
from tests.fakes import read_fixture


def _make_result(rows=None):
    if rows is None:
        rows = [["1", "alice"], ["2", "bob"]]
    return StatementResult(
        kind=StatementKind.QUERY,
        columns=[ColumnMeta(name="ID", width=2), ColumnMeta(name="NAME", width=10)],
        rows=rows,
    )


@pytest.mark.unit
def test_json_formatter_implements_protocol():
    assert isinstance(JSONFormatter(), Formatter)


@pytest.mark.unit
def test_json_formatter_rows_as_records():
    output = "\n".join(JSONFormatter().format(_make_result()))
    assert json.loads(output) == [
        {"ID": "1", "NAME": "alice"},
        {"ID": "2", "NAME": "bob"},
    ]


@pytest.mark.unit
def test_json_formatter_pretty_print_default():
    output = "\n".join(JSONFormatter().format(_make_result()))
    assert "\n" in output
    assert "  " in output


@pytest.mark.unit
def test_json_formatter_compact():
    lines = list(JSONFormatter(compact=True).format(_make_result()))
    assert len(lines) == 1
    assert "\n" not in lines[0]


@pytest.mark.unit
def test_json_formatter_empty_result():
    output = "\n".join(JSONFormatter().format(_make_result(rows=[])))
    assert json.loads(output) == []


@pytest.mark.unit
def test_json_formatter_non_query_lines():
    result = decode_output(read_fixture("create_table.lst"), StatementKind.NON_QUERY)
    output = "\n".join(JSONFormatter(compact=True).format(result))
    assert json.loads(output) == ["Table created."]
