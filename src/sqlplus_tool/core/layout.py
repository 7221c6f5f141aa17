"""Fixed-width column layout inferred from a sqlplus separator line.

sqlplus never reports column widths directly. Under the heading it
prints a line such as ``---------- ----- ----`` where each run of dashes
spans one column and each run of blanks is the gap between columns.
The separator's length becomes the canonical length of every data line
in the same result: shorter lines are right-padded and longer ones are
truncated before slicing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from sqlplus_tool.core.exceptions import LayoutInferenceError

_SEPARATOR_RE = re.compile(r"^-[-\s]*$")
_RUN_RE = re.compile(r"-+|\s+")


@dataclass(frozen=True)
class Segment:
    """One slice of a layout: a column field or a literal gap."""

    width: int
    is_field: bool


def is_separator_line(line: str) -> bool:
    return bool(_SEPARATOR_RE.match(line))


@dataclass(frozen=True)
class Layout:
    segments: tuple[Segment, ...]

    @classmethod
    def from_separator(cls, line: str) -> Layout:
        """Build a layout from a dashed separator line.

        Raises LayoutInferenceError if the line is not made of dash runs
        separated by whitespace.
        """
        if not is_separator_line(line):
            msg = f"Expected a dashed separator line, got: {line!r}"
            raise LayoutInferenceError(msg)
        segments = tuple(
            Segment(width=len(run), is_field=run.startswith("-"))
            for run in _RUN_RE.findall(line)
        )
        return cls(segments=segments)

    @property
    def length(self) -> int:
        return sum(seg.width for seg in self.segments)

    @property
    def widths(self) -> list[int]:
        return [seg.width for seg in self.segments if seg.is_field]

    def fit(self, line: str) -> str:
        """Pad or truncate a line to exactly the layout length."""
        return line[: self.length].ljust(self.length)

    def split(self, line: str) -> list[str]:
        """Slice a line into trimmed field values, dropping the gaps."""
        line = self.fit(line)
        fields: list[str] = []
        pos = 0
        for seg in self.segments:
            if seg.is_field:
                fields.append(line[pos : pos + seg.width].strip())
            pos += seg.width
        return fields
