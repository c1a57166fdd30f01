"""Guide configuration and environment loading."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, FrozenSet, Mapping, Optional, Tuple

from indent_guide.runtime.telemetry import ENV_PREFIX

from .models import CellSize, Derived, Fixed

DEFAULT_COLOR = "#535353"
DEFAULT_LINE_CHAR = "|"


@dataclass(frozen=True)
class GuideOptions:
    """Recognized guide options.

    ``threshold`` is the deepest block column that still gets no guide, so the
    default of 0 draws every indented block. ``redraw_delay`` is in seconds;
    ``None`` redraws synchronously after each command.
    """

    color: str = DEFAULT_COLOR
    character_width: CellSize = field(default_factory=Derived)
    character_height: CellSize = field(default_factory=Derived)
    line_char: str = DEFAULT_LINE_CHAR
    rich_glyphs: bool = False
    left_margin: int = 0
    height_adjustment: int = 0
    dash_length: Optional[int] = None
    threshold: int = 0
    redraw_delay: Optional[float] = None
    excluded_contexts: FrozenSet[str] = frozenset()
    recursive: bool = False

    def __post_init__(self) -> None:
        if len(self.line_char) != 1:
            raise ValueError("line_char must be a single character")
        if self.dash_length is not None and self.dash_length < 1:
            raise ValueError("dash_length must be positive")
        if self.redraw_delay is not None and self.redraw_delay < 0:
            raise ValueError("redraw_delay must not be negative")
        if self.left_margin < 0:
            raise ValueError("left_margin must not be negative")
        if self.threshold < 0:
            raise ValueError("threshold must not be negative")
        if not self.color:
            raise ValueError("color cannot be empty")
        object.__setattr__(self, "excluded_contexts", frozenset(self.excluded_contexts))

    def replace(self, **changes: object) -> "GuideOptions":
        return replace(self, **changes)

    def eligibility(self, context_id: Callable[[], str]) -> Callable[[], bool]:
        """Predicate telling whether the host's current context may show guides."""

        excluded = self.excluded_contexts
        return lambda: context_id() not in excluded

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GuideOptions":
        """Build options from ``INDENT_GUIDE_*`` variables, defaults elsewhere."""

        env = os.environ if environ is None else environ
        changes: Dict[str, object] = {}
        for suffix, (option, parse) in _ENV_FIELDS.items():
            raw = env.get(f"{ENV_PREFIX}{suffix}")
            if raw is None:
                continue
            changes[option] = parse(suffix, raw.strip())
        return cls(**changes)  # type: ignore[arg-type]


def _parse_text(name: str, raw: str) -> str:
    del name
    return raw


def _parse_flag(name: str, raw: str) -> bool:
    del name
    return raw.lower() in {"1", "true", "yes", "on"}


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from exc


def _parse_float(name: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{ENV_PREFIX}{name} must be a number, got {raw!r}") from exc


def _parse_optional_int(name: str, raw: str) -> Optional[int]:
    return _parse_int(name, raw) if raw else None


def _parse_optional_float(name: str, raw: str) -> Optional[float]:
    return _parse_float(name, raw) if raw else None


def _parse_cell_size(name: str, raw: str) -> CellSize:
    if raw.lower() in {"", "auto", "derived"}:
        return Derived()
    return Fixed(_parse_int(name, raw))


def _parse_contexts(name: str, raw: str) -> FrozenSet[str]:
    del name
    return frozenset(part.strip() for part in raw.split(",") if part.strip())


_ENV_FIELDS: Dict[str, Tuple[str, Callable[[str, str], object]]] = {
    "COLOR": ("color", _parse_text),
    "CHAR": ("line_char", _parse_text),
    "RICH_GLYPHS": ("rich_glyphs", _parse_flag),
    "RECURSIVE": ("recursive", _parse_flag),
    "THRESHOLD": ("threshold", _parse_int),
    "LEFT_MARGIN": ("left_margin", _parse_int),
    "HEIGHT_ADJUSTMENT": ("height_adjustment", _parse_int),
    "DASH_LENGTH": ("dash_length", _parse_optional_int),
    "DELAY": ("redraw_delay", _parse_optional_float),
    "CHAR_WIDTH": ("character_width", _parse_cell_size),
    "CHAR_HEIGHT": ("character_height", _parse_cell_size),
    "EXCLUDED": ("excluded_contexts", _parse_contexts),
}


__all__ = ["DEFAULT_COLOR", "DEFAULT_LINE_CHAR", "GuideOptions"]
