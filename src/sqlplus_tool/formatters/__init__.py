"""Output formatters for SQL*Plus Tool."""

from sqlplus_tool.formatters.base import Formatter, FormatterRegistry, registry
from sqlplus_tool.formatters.csv import CSVFormatter
from sqlplus_tool.formatters.json import JSONFormatter
from sqlplus_tool.formatters.table import TableFormatter
