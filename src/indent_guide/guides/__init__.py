"""Indentation block detection, guide geometry and the per-buffer controller."""

from .controller import GuideController, GuideHooks, PendingRedraw
from .expander import expand, first_guided_line
from .glyphs import GlyphCache, bitmap_glyph, character_glyph
from .locator import base_level, locate, opener_pattern, prefix_pattern
from .models import (
    CHARACTER_CELL,
    Annotation,
    BlockStart,
    CellMetrics,
    Derived,
    Fixed,
    Glyph,
    GuideSpan,
    GuideState,
    RenderMode,
)
from .options import GuideOptions
from .renderer import LineRenderer, locate_column, resolve_metrics

__all__ = [
    "CHARACTER_CELL",
    "Annotation",
    "BlockStart",
    "CellMetrics",
    "Derived",
    "Fixed",
    "Glyph",
    "GlyphCache",
    "GuideController",
    "GuideHooks",
    "GuideOptions",
    "GuideSpan",
    "GuideState",
    "LineRenderer",
    "PendingRedraw",
    "RenderMode",
    "base_level",
    "bitmap_glyph",
    "character_glyph",
    "expand",
    "first_guided_line",
    "locate",
    "locate_column",
    "opener_pattern",
    "prefix_pattern",
    "resolve_metrics",
]
