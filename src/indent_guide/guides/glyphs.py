"""Glyph construction and the cache that memoizes it."""

from __future__ import annotations

from typing import Dict, Tuple

from PIL import Image, ImageColor, ImageDraw
from rich.style import Style

from indent_guide.runtime import telemetry

from .models import Glyph
from .options import GuideOptions

GlyphKey = Tuple[int, int, int]


def _bar_text(cells: int, bar_cell: int, line_char: str) -> str:
    cells = max(1, cells)
    bar = min(max(0, bar_cell), cells - 1)
    return " " * bar + line_char + " " * (cells - bar - 1)


def character_glyph(
    width: int, height: int, bar_offset: int, options: GuideOptions
) -> Glyph:
    """``width`` cells of padding with ``line_char`` at ``bar_offset``."""

    width = max(1, width)
    bar = min(max(0, bar_offset), width - 1)
    return Glyph(
        text=_bar_text(width, bar, options.line_char),
        style=Style(color=options.color),
        width=width,
        height=height,
        bar_offset=bar,
    )


def bitmap_glyph(
    width: int,
    height: int,
    bar_offset: int,
    options: GuideOptions,
    *,
    cell_width: int = 1,
) -> Glyph:
    """Transparent ``width`` x ``height`` image with a 1-px bar at ``bar_offset``.

    With a dash length ``d`` every ``(d + 1)``-th row stays blank. The glyph
    text carries the same bar laid out in ``cell_width``-pixel cells.
    """

    if width < 1 or height < 1:
        raise ValueError(f"cannot draw a {width}x{height} glyph")
    fill = ImageColor.getcolor(options.color, "RGBA")
    x = min(max(0, bar_offset), width - 1)
    period = options.dash_length + 1 if options.dash_length else None

    image = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)
    rows = [(x, y) for y in range(height) if period is None or (y + 1) % period]
    if rows:
        draw.point(rows, fill=fill)
    return Glyph(
        text=_text_cells(width, bar_offset, options, cell_width),
        style=Style(color=options.color),
        width=width,
        height=height,
        bar_offset=x,
        image=image,
    )


def _text_cells(
    width: int, bar_offset: int, options: GuideOptions, cell_width: int
) -> str:
    cells, bar_cell = _cell_layout(width, bar_offset, options, cell_width)
    return _bar_text(cells, bar_cell, options.line_char)


def _cell_layout(
    width: int, bar_offset: int, options: GuideOptions, cell_width: int
) -> Tuple[int, int]:
    cell_width = max(1, cell_width)
    cells = max(1, width // cell_width)
    return cells, max(0, bar_offset - options.left_margin) // cell_width


class GlyphCache:
    """Memoizes glyphs on ``(width, height, bar_offset)``.

    Bitmaps are drawn while ``bitmaps`` is on, character glyphs otherwise.
    Bitmap text is laid out in ``cell_width``-pixel cells. Switching strategy
    or cell width empties the cache, since neither is part of the key.
    Entries otherwise live until ``clear``, which hosts call when the font
    or theme changes.
    """

    def __init__(self, options: GuideOptions, *, bitmaps: bool = False) -> None:
        self.options = options
        self._bitmaps = bitmaps
        self._cell_width = 1
        self._entries: Dict[GlyphKey, Glyph] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    @property
    def bitmaps(self) -> bool:
        return self._bitmaps

    def use_bitmaps(self, enabled: bool) -> None:
        if enabled != self._bitmaps:
            self._bitmaps = enabled
            self.clear()

    @property
    def cell_width(self) -> int:
        return self._cell_width

    def use_cell_width(self, cell_width: int) -> None:
        cell_width = max(1, cell_width)
        if cell_width != self._cell_width:
            self._cell_width = cell_width
            self.clear()

    def get(self, width: int, height: int, bar_offset: int) -> Glyph:
        key = (width, height, bar_offset)
        glyph = self._entries.get(key)
        if glyph is None:
            glyph = self._build(width, height, bar_offset)
            self._entries[key] = glyph
        return glyph

    def clear(self) -> None:
        dropped = len(self._entries)
        self._entries.clear()
        telemetry.record_event("glyphs.clear", data={"dropped": dropped})

    def _build(self, width: int, height: int, bar_offset: int) -> Glyph:
        if not self._bitmaps:
            return character_glyph(width, height, bar_offset, self.options)
        try:
            return bitmap_glyph(
                width, height, bar_offset, self.options, cell_width=self._cell_width
            )
        except (ValueError, OSError) as exc:
            telemetry.record_event(
                "glyphs.fallback",
                data={"key": (width, height, bar_offset), "reason": str(exc)},
            )
            cells, bar_cell = _cell_layout(
                width, bar_offset, self.options, self._cell_width
            )
            return character_glyph(cells, 1, bar_cell, self.options)


__all__ = ["GlyphCache", "GlyphKey", "bitmap_glyph", "character_glyph"]
