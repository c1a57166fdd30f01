"""Expand a located block downwards into the span of lines to annotate."""

from __future__ import annotations

from typing import Optional

from indent_guide.buffer import Buffer, Viewport, indentation


def first_guided_line(start_line: int, viewport: Viewport, *, opened: bool = True) -> int:
    """First line that may carry the guide: below the opener and on screen."""

    first = start_line + 1 if opened else start_line
    return max(first, viewport.first_line)


def expand(
    buffer: Buffer,
    column: int,
    start_line: int,
    viewport: Viewport,
    *,
    opened: bool = True,
    keep_line: Optional[int] = None,
) -> int:
    """Return the last line of the block opened at ``start_line``.

    Lines belong to the block while they are blank or indented at least to
    ``column``; the scan starts below the opener (on the opener itself when
    the block has none) and never leaves ``viewport``. When it ends on a
    shallower line or at the end of the buffer, trailing blank lines are
    dropped again, though never above the first scanned line or
    ``keep_line``. A result above the first scanned line means no line
    qualifies.
    """

    first = first_guided_line(start_line, viewport, opened=opened)
    last = min(viewport.last_line, buffer.line_count)
    line = first
    while line <= last and _belongs(buffer, line, column):
        line += 1

    if line > last and last < buffer.line_count:
        # ran into the bottom of the viewport, the block may go on below
        return last

    end = line - 1
    floor = max(first, keep_line or first)
    while end > floor and buffer.is_blank(end):
        end -= 1
    return end


def _belongs(buffer: Buffer, line: int, column: int) -> bool:
    if buffer.is_blank(line):
        return True
    return indentation(buffer.line(line), buffer.tab_width) >= column


__all__ = ["expand", "first_guided_line"]
