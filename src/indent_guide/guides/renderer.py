"""Per-line guide geometry: which glyph goes where on a single line."""

from __future__ import annotations

from typing import Optional, Tuple

from indent_guide.buffer import Buffer
from indent_guide.buffer.document import next_column

from .glyphs import GlyphCache
from .models import (
    CHARACTER_CELL,
    Annotation,
    CellMetrics,
    CellSize,
    Fixed,
    RenderMode,
)
from .options import GuideOptions


def resolve_metrics(
    options: GuideOptions,
    *,
    bitmaps: bool,
    rendered: Optional[CellMetrics],
    nominal: CellMetrics,
) -> CellMetrics:
    """Cell size for one render pass.

    Character glyphs always count in cells. Bitmaps use fixed sizes where
    configured and otherwise what the host renders, falling back to the
    font's nominal size when the reference line is not fully visible.
    """

    if not bitmaps:
        return CHARACTER_CELL
    measured = rendered or nominal
    return CellMetrics(
        width=_pick(options.character_width, measured.width),
        height=_pick(options.character_height, measured.height),
    )


def _pick(size: CellSize, measured: int) -> int:
    if isinstance(size, Fixed):
        return size.pixels
    return max(1, measured)


def locate_column(text: str, target: int, tab_width: int) -> Tuple[int, int]:
    """Move to visual column ``target`` the way a cursor would.

    Returns ``(index, column)``: the character index reached and its visual
    column, which is ``<= target``. The character at ``index`` (if any)
    starts at ``target`` or is a tab spanning it.
    """

    column = 0
    index = 0
    while index < len(text):
        following = next_column(column, text[index], tab_width)
        if following > target:
            break
        column = following
        index += 1
    return index, column


class LineRenderer:
    """Turns ``(line, target column)`` into an annotation with a cached glyph."""

    def __init__(self, options: GuideOptions, cache: GlyphCache) -> None:
        self.options = options
        self.cache = cache

    def render(
        self,
        buffer: Buffer,
        line: int,
        target_column: int,
        metrics: CellMetrics = CHARACTER_CELL,
    ) -> Optional[Annotation]:
        text = buffer.line(line)
        index, column = locate_column(text, target_column, buffer.tab_width)

        if index == len(text):
            # short line: pad out to the guide and draw the bar in the last cell
            cells = target_column - column + 1
            return self._annotate(
                line, index, cells, cells - 1, RenderMode.APPEND, metrics
            )

        char = text[index]
        if char == "\t":
            cells = next_column(column, char, buffer.tab_width) - column
            return self._annotate(
                line, index, cells, target_column - column, RenderMode.REPLACE, metrics
            )
        if char == " ":
            return self._annotate(line, index, 1, 0, RenderMode.REPLACE, metrics)
        return None

    def _annotate(
        self,
        line: int,
        offset: int,
        cells: int,
        bar_cell: int,
        mode: RenderMode,
        metrics: CellMetrics,
    ) -> Annotation:
        width = cells * metrics.width
        height = metrics.height
        bar_offset = bar_cell * metrics.width
        if self.cache.bitmaps:
            height = max(1, height + self.options.height_adjustment)
            bar_offset += self.options.left_margin
        self.cache.use_cell_width(metrics.width)
        glyph = self.cache.get(width, height, bar_offset)
        return Annotation(line=line, offset=offset, glyph=glyph, mode=mode)


__all__ = ["LineRenderer", "locate_column", "resolve_metrics"]
