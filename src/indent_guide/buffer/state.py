"""Cursor and viewport state for buffers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple


class Position(NamedTuple):
    """1-based line plus character index within that line."""

    line: int
    column: int


@dataclass(frozen=True, slots=True)
class Viewport:
    """Inclusive range of lines currently displayed by the host."""

    first_line: int
    last_line: int

    def __post_init__(self) -> None:
        if self.first_line < 1:
            raise ValueError("first_line must be >= 1")
        if self.last_line < self.first_line:
            raise ValueError("last_line must not precede first_line")

    def __contains__(self, line: object) -> bool:
        return isinstance(line, int) and self.first_line <= line <= self.last_line

    @property
    def height(self) -> int:
        return self.last_line - self.first_line + 1

    def scrolled_to(self, line: int) -> "Viewport":
        """Return the smallest shift of this viewport that shows ``line``."""

        if line < self.first_line:
            return Viewport(line, line + self.height - 1)
        if line > self.last_line:
            return Viewport(line - self.height + 1, line)
        return self


@dataclass(slots=True)
class BufferState:
    """Mutable cursor info tied to a BufferDocument version."""

    cursor: Position = Position(1, 0)
    last_change_tick: int = 0

    def set_cursor(self, line: int, column: int) -> None:
        self.cursor = Position(line, column)
