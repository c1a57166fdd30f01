"""Locate the indentation level around the cursor and the line opening it."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Optional, Pattern

from indent_guide.buffer import Buffer, Position, indentation

from .models import BlockStart


def prefix_pattern(width: int, tab_width: int) -> str:
    """Regex matching every tab/space prefix of visual ``width``.

    A prefix is a run of full tab cells followed by fewer than ``tab_width``
    spaces. A full cell is either ``tab_width`` spaces or up to
    ``tab_width - 1`` spaces closed by a tab.
    """

    cell = f"(?: {{0,{tab_width - 1}}}\\t| {{{tab_width}}})"
    cells, rest = divmod(width, tab_width)
    return f"(?:{cell}){{{cells}}} {{{rest}}}"


@lru_cache(maxsize=128)
def opener_pattern(column: int, tab_width: int) -> Pattern[str]:
    """Match lines indented strictly less than ``column`` that contain code."""

    candidates = [prefix_pattern(width, tab_width) for width in range(column)]
    return re.compile(f"(?:{'|'.join(candidates)})(?=[^ \\t])")


def base_level(buffer: Buffer, line: int) -> int:
    """Indentation column of ``line``, looking around it when it is blank."""

    if not buffer.is_blank(line):
        return indentation(buffer.line(line), buffer.tab_width)
    after = _nearest_code_line(buffer, line, step=1)
    before = _nearest_code_line(buffer, line, step=-1)
    return max(
        indentation(buffer.line(after), buffer.tab_width) if after else 0,
        indentation(buffer.line(before), buffer.tab_width) if before else 0,
    )


def locate(buffer: Buffer, cursor: Optional[Position] = None) -> BlockStart:
    """Find the level of the block holding ``cursor`` and the line opening it."""

    line = (cursor or buffer.cursor).line
    column = base_level(buffer, line)
    if column == 0:
        return BlockStart(column=0, start_line=line, guide_column=0)

    pattern = opener_pattern(column, buffer.tab_width)
    for candidate in range(line - 1, 0, -1):
        text = buffer.line(candidate)
        if pattern.match(text):
            return BlockStart(
                column=column,
                start_line=candidate,
                guide_column=indentation(text, buffer.tab_width),
            )
    return BlockStart(column=column, start_line=1, guide_column=0, opened=False)


def _nearest_code_line(buffer: Buffer, line: int, *, step: int) -> Optional[int]:
    current = line + step
    while 1 <= current <= buffer.line_count:
        if not buffer.is_blank(current):
            return current
        current += step
    return None


__all__ = ["base_level", "locate", "opener_pattern", "prefix_pattern"]
