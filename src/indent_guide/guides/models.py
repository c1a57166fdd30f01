"""Dataclasses describing guide spans, glyphs and annotations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from rich.style import Style


class GuideState(str, Enum):
    """States of the per-buffer guide controller."""

    IDLE = "idle"
    PENDING_REDRAW = "pending_redraw"
    DRAWN = "drawn"


class RenderMode(str, Enum):
    """How a host composites an annotation onto its line."""

    APPEND = "append"  # drawn after the last character of the line
    REPLACE = "replace"  # replaces the display of the character at ``offset``


@dataclass(frozen=True, slots=True)
class Fixed:
    """Cell dimension pinned to a number of pixels."""

    pixels: int

    def __post_init__(self) -> None:
        if self.pixels < 1:
            raise ValueError("pixels must be positive")


@dataclass(frozen=True, slots=True)
class Derived:
    """Cell dimension taken from what the host currently renders."""


CellSize = Union[Fixed, Derived]


@dataclass(frozen=True, slots=True)
class CellMetrics:
    """Size of one character cell in the units glyphs are drawn in."""

    width: int
    height: int


CHARACTER_CELL = CellMetrics(1, 1)


@dataclass(frozen=True, slots=True)
class BlockStart:
    """Where the block around the cursor begins.

    ``column`` is the indentation level of the block, ``guide_column`` the
    visual column of the opener's first character, where the bar is drawn.
    ``opened`` is False when no opener exists and the block starts at the top
    of the buffer.
    """

    column: int
    start_line: int
    guide_column: int = 0
    opened: bool = True


@dataclass(frozen=True, slots=True)
class GuideSpan:
    """Contiguous run of lines carrying a guide bar at ``guide_column``."""

    start_line: int
    end_line: int
    column: int
    guide_column: int

    def __post_init__(self) -> None:
        if self.start_line > self.end_line:
            raise ValueError("start_line must not exceed end_line")

    def __contains__(self, line: object) -> bool:
        return isinstance(line, int) and self.start_line <= line <= self.end_line

    @property
    def lines(self) -> range:
        return range(self.start_line, self.end_line + 1)


@dataclass(frozen=True, slots=True, eq=False)
class Glyph:
    """Rendered guide segment.

    ``text`` is always usable; ``image`` is set only for bitmap glyphs.
    Glyphs compare by identity since the cache hands out shared instances.
    """

    text: str
    style: Style
    width: int
    height: int
    bar_offset: int
    image: Optional[Any] = None

    @property
    def is_bitmap(self) -> bool:
        return self.image is not None


@dataclass(frozen=True, slots=True)
class Annotation:
    """Transient marker attached to ``offset`` on ``line``."""

    line: int
    offset: int
    glyph: Glyph
    mode: RenderMode

    def covers(self, line: int, offset: int) -> bool:
        return self.line == line and self.offset == offset


__all__ = [
    "Annotation",
    "BlockStart",
    "CHARACTER_CELL",
    "CellMetrics",
    "CellSize",
    "Derived",
    "Fixed",
    "Glyph",
    "GuideSpan",
    "GuideState",
    "RenderMode",
]
