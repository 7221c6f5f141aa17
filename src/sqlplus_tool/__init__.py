"""SQL*Plus Tool - run SQL through the sqlplus console and decode its reports."""

from sqlplus_tool.__about__ import __version__

__all__ = ["__version__"]
