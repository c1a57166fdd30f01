"""Textual-facing adapter driving a GuideController from key events."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from rich.style import Style
from rich.text import Text

from indent_guide.buffer import Buffer, Position, Viewport
from indent_guide.buffer.document import next_column
from indent_guide.guides import (
    Annotation,
    GuideController,
    GuideHooks,
    GuideOptions,
    RenderMode,
)

CURSOR_STYLE = Style(reverse=True)


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class TextualViewHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    update_view: Callable[[List[Text]], None]
    update_status: Callable[[str], None] = _noop
    log: Callable[[str], None] = _noop


def compose_line(
    text: str,
    annotations: Iterable[Annotation],
    tab_width: int,
    *,
    cursor: Optional[int] = None,
) -> Text:
    """Render one buffer line with its guide glyphs composited in."""

    replaced: Dict[int, Annotation] = {}
    appended: List[Annotation] = []
    for annotation in annotations:
        if annotation.mode is RenderMode.APPEND:
            appended.append(annotation)
        else:
            replaced[annotation.offset] = annotation

    rendered = Text(no_wrap=True)
    column = 0
    for index, char in enumerate(text):
        following = next_column(column, char, tab_width)
        style = CURSOR_STYLE if index == cursor else None
        annotation = replaced.get(index)
        if annotation is not None:
            rendered.append(annotation.glyph.text, style=annotation.glyph.style)
        elif char == "\t":
            rendered.append(" " * (following - column), style=style)
        else:
            rendered.append(char, style=style)
        column = following

    for annotation in appended:
        rendered.append(annotation.glyph.text, style=annotation.glyph.style)
    if cursor is not None and cursor >= len(text):
        rendered.append(" ", style=CURSOR_STYLE)
    return rendered


class TextualGuideAdapter:
    """Bridges Textual key events to buffer edits and guide redraws.

    Every key runs one command cycle: ``pre_command`` clears the guides,
    the key moves the cursor or edits the buffer, ``post_command`` redraws
    (or arms the delayed redraw polled through ``process_timeouts``).
    """

    def __init__(
        self,
        buffer: Buffer,
        hooks: TextualViewHooks,
        options: Optional[GuideOptions] = None,
        *,
        height: int = 24,
        context_id: Callable[[], str] = lambda: "text",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.buffer = buffer
        self.hooks = hooks
        self.options = options or GuideOptions()
        self.viewport = Viewport(1, max(1, height))
        self.prompt_open = False
        guide_hooks = GuideHooks(
            viewport=lambda: self.viewport,
            show=self._on_show,
            clear=self._on_clear,
            prompt_active=lambda: self.prompt_open,
            eligible=self.options.eligibility(context_id),
        )
        self.controller = GuideController(
            buffer, guide_hooks, self.options, clock=clock
        )
        self.controller.post_command()
        self._refresh()

    def handle_textual_key(self, key: str, *, text: Optional[str] = None) -> bool:
        """Run one command cycle for ``key``; returns whether it was handled."""

        self.controller.pre_command()
        handled = self._apply(key, text)
        self.viewport = self.viewport.scrolled_to(self.buffer.cursor.line)
        self.controller.post_command()
        self._log_state("key ->", key=key, handled=handled)
        self._refresh()
        return handled

    def process_timeouts(self) -> bool:
        fired = self.controller.process_timeouts()
        if fired:
            self._log_state("timeout ->")
            self._refresh()
        return fired

    def resize(self, height: int) -> None:
        first = self.viewport.first_line
        self.viewport = Viewport(first, first + max(1, height) - 1).scrolled_to(
            self.buffer.cursor.line
        )
        self.controller.pre_command()
        self.controller.post_command()
        self._refresh()

    def render_lines(self) -> List[Text]:
        by_line: Dict[int, List[Annotation]] = {}
        for annotation in self.controller.annotations:
            by_line.setdefault(annotation.line, []).append(annotation)
        cursor = self.buffer.cursor
        last = min(self.viewport.last_line, self.buffer.line_count)
        return [
            compose_line(
                self.buffer.line(line),
                by_line.get(line, ()),
                self.buffer.tab_width,
                cursor=cursor.column if line == cursor.line else None,
            )
            for line in range(self.viewport.first_line, last + 1)
        ]

    def _apply(self, key: str, text: Optional[str]) -> bool:
        line, column = self.buffer.cursor
        if key == "up":
            self._move(line - 1, column)
        elif key == "down":
            self._move(line + 1, column)
        elif key == "left":
            self._move(line, column - 1)
        elif key == "right":
            self._move(line, column + 1)
        elif key == "home":
            self._move(line, 0)
        elif key == "end":
            self._move(line, len(self.buffer.line(line)))
        elif key == "pageup":
            self._move(line - self.viewport.height, column)
        elif key == "pagedown":
            self._move(line + self.viewport.height, column)
        elif key == "enter":
            self.buffer.insert_text("\n")
        elif key == "tab":
            self.buffer.insert_text("\t")
        elif key == "backspace":
            self._backspace(line, column)
        elif text and text.isprintable():
            self.buffer.insert_text(text)
        else:
            return False
        return True

    def _move(self, line: int, column: int) -> None:
        self.buffer.move_cursor(*self.buffer.clamp(line, column))

    def _backspace(self, line: int, column: int) -> None:
        if column > 0:
            self.buffer.delete_range(Position(line, column - 1), Position(line, column))
        elif line > 1:
            previous = Position(line - 1, len(self.buffer.line(line - 1)))
            self.buffer.delete_range(previous, Position(line, 0))

    def _on_show(self, annotations: Sequence[Annotation]) -> None:
        self._log_state("show ->", count=len(annotations))

    def _on_clear(self, annotations: Sequence[Annotation]) -> None:
        self._log_state("clear ->", count=len(annotations))

    def _refresh(self) -> None:
        self.hooks.update_view(self.render_lines())
        self.hooks.update_status(self._status_text())

    def _status_text(self) -> str:
        spans = self.controller.spans
        line, column = self.buffer.cursor
        guide = ", ".join(
            f"{span.start_line}-{span.end_line}@{span.guide_column}" for span in spans
        )
        return f"{line}:{column} [{self.controller.state.value}] {guide}".rstrip()

    def _log_state(self, prefix: str, **fields: object) -> None:
        snapshot: Dict[str, object] = {
            "cursor": tuple(self.buffer.cursor),
            "viewport": (self.viewport.first_line, self.viewport.last_line),
            "state": self.controller.state.value,
            "buffer_version": self.buffer.document.version,
        }
        snapshot.update({k: v for k, v in fields.items() if v is not None})
        parts = [prefix] + [f"{key}={value!r}" for key, value in snapshot.items()]
        self.hooks.log(" ".join(parts))


__all__ = ["TextualGuideAdapter", "TextualViewHooks", "compose_line"]
