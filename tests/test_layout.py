"""Tests for separator-line layout inference."""

import pytest

from sqlplus_tool.core.exceptions import LayoutInferenceError
from sqlplus_tool.core.layout import Layout, Segment, is_separator_line


@pytest.mark.unit
class TestIsSeparatorLine:
    @pytest.mark.parametrize(
        "line", ["-", "----", "----- ---", "-- --  ----", "---   "]
    )
    def test_separator_lines(self, line):
        assert is_separator_line(line)

    @pytest.mark.parametrize(
        "line", ["", "   ----", "NAME", "--*--", "-- x --", "no rows selected"]
    )
    def test_other_lines(self, line):
        assert not is_separator_line(line)


@pytest.mark.unit
class TestFromSeparator:
    def test_segments(self):
        layout = Layout.from_separator("----- ---  --")
        assert layout.segments == (
            Segment(width=5, is_field=True),
            Segment(width=1, is_field=False),
            Segment(width=3, is_field=True),
            Segment(width=2, is_field=False),
            Segment(width=2, is_field=True),
        )

    @pytest.mark.parametrize(
        "separator", ["-", "-- -", "----- ---------- --------- ----------", "--- "]
    )
    def test_length_equals_separator_length(self, separator):
        assert Layout.from_separator(separator).length == len(separator)

    def test_widths_are_fields_only(self):
        assert Layout.from_separator("-- ---- -").widths == [2, 4, 1]

    def test_rejects_non_separator(self):
        with pytest.raises(LayoutInferenceError, match="Expected a dashed separator"):
            Layout.from_separator("NAME VALUE")


@pytest.mark.unit
class TestSplit:
    def test_split_trims_fields(self):
        layout = Layout.from_separator("----- ----------")
        assert layout.split(" 7369 SMITH     ") == ["7369", "SMITH"]

    def test_short_line_is_padded(self):
        layout = Layout.from_separator("----- ---------- ---")
        assert layout.fit("7900") == "7900".ljust(20)
        assert layout.split("7900") == ["7900", "", ""]

    def test_long_line_is_truncated(self):
        layout = Layout.from_separator("--- ---")
        assert layout.fit("abc defghij") == "abc def"
        assert layout.split("abc defghij") == ["abc", "def"]

    def test_gap_characters_are_dropped(self):
        layout = Layout.from_separator("-- --")
        assert layout.split("abXcd") == ["ab", "cd"]
