"""Core document data structures for indent_guide buffers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Sequence

WHITESPACE = " \t"


@dataclass(slots=True)
class BufferDocument:
    """Immutable-ish text storage built on a simple list-of-lines model.

    Lines are addressed 1-based, the way editors number them. A document
    always holds at least one (possibly empty) line.
    """

    _lines: List[str] = field(default_factory=lambda: [""])
    version: int = 0

    @classmethod
    def from_text(cls, text: str) -> "BufferDocument":
        lines = text.split("\n")
        return cls(_lines=[line.rstrip("\r") for line in lines], version=0)

    def snapshot(self) -> Sequence[str]:
        """Return the current lines without exposing internal mutability."""

        return tuple(self._lines)

    def replace(self, *, lines: Iterable[str]) -> "BufferDocument":
        """Return a new document with the provided lines and bumped version."""

        new_lines = list(lines) or [""]
        return BufferDocument(_lines=new_lines, version=self.version + 1)

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def get_line(self, number: int) -> str:
        return self._lines[number - 1]

    def is_blank(self, number: int) -> bool:
        return not self._lines[number - 1].strip(WHITESPACE)


def visual_width(text: str, tab_width: int, *, start: int = 0) -> int:
    """Visual column reached after drawing ``text`` from column ``start``."""

    column = start
    for char in text:
        column = next_column(column, char, tab_width)
    return column


def next_column(column: int, char: str, tab_width: int) -> int:
    if char == "\t":
        return (column // tab_width + 1) * tab_width
    return column + 1


def indentation_prefix(line: str) -> str:
    return line[: len(line) - len(line.lstrip(WHITESPACE))]


def indentation(line: str, tab_width: int) -> int:
    """Visual column of the first non-whitespace character of ``line``."""

    return visual_width(indentation_prefix(line), tab_width)
