"""High-level buffer facade combining document, cursor state and tab width."""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import ContextManager, Optional

from indent_guide.runtime import telemetry

from .document import BufferDocument, visual_width
from .state import BufferState, Position
from .validation import BufferValidationError, ensure_position

DEFAULT_TAB_WIDTH = 8


@dataclass(slots=True)
class BufferDelta:
    version: int
    text: str
    cursor: Position
    label: str


class Buffer:
    def __init__(
        self,
        *,
        name: str = "default",
        document: Optional[BufferDocument] = None,
        state: Optional[BufferState] = None,
        tab_width: int = DEFAULT_TAB_WIDTH,
    ) -> None:
        if tab_width < 1:
            raise ValueError("tab_width must be positive")
        self.name = name
        self.document = document or BufferDocument()
        self.state = state or BufferState()
        self.tab_width = tab_width

    @classmethod
    def from_text(
        cls, text: str, *, name: str = "default", tab_width: int = DEFAULT_TAB_WIDTH
    ) -> "Buffer":
        return cls(
            name=name, document=BufferDocument.from_text(text), tab_width=tab_width
        )

    @property
    def cursor(self) -> Position:
        return self.state.cursor

    @property
    def line_count(self) -> int:
        return self.document.line_count

    def line(self, number: int) -> str:
        return self.document.get_line(number)

    def is_blank(self, number: int) -> bool:
        return self.document.is_blank(number)

    def move_cursor(self, line: int, column: int) -> Position:
        position = ensure_position(self.document, Position(line, column))
        self.state.set_cursor(*position)
        return position

    def clamp(self, line: int, column: int) -> Position:
        """Closest valid position to ``(line, column)``."""

        line = max(1, min(line, self.line_count))
        column = max(0, min(column, len(self.line(line))))
        return Position(line, column)

    def visual_column(self, position: Optional[Position] = None) -> int:
        """Visual column of ``position`` (default: the cursor) after tab expansion."""

        line, column = position or self.state.cursor
        return visual_width(self.line(line)[:column], self.tab_width)

    def replace_range(
        self, start: Position, end: Position, text: str, *, label: str
    ) -> BufferDelta:
        start = ensure_position(self.document, start)
        end = ensure_position(self.document, end)
        if end < start:
            raise BufferValidationError("Range end precedes start", position=end)
        with Transaction(self, label):
            before_text = _flatten_lines(self.document.snapshot())
            start_offset = _offset_for_position(self.document, start)
            end_offset = _offset_for_position(self.document, end)
            new_text = before_text[:start_offset] + text + before_text[end_offset:]
            self.document = self.document.replace(lines=new_text.split("\n"))
            self.state.set_cursor(
                *_position_from_offset(self.document, start_offset + len(text))
            )
            self.state.last_change_tick = self.document.version

        return BufferDelta(
            version=self.document.version,
            text=new_text,
            cursor=self.state.cursor,
            label=label,
        )

    def insert_text(
        self, text: str, *, position: Optional[Position] = None
    ) -> BufferDelta:
        target = position or self.state.cursor
        return self.replace_range(target, target, text, label="insert_text")

    def delete_range(self, start: Position, end: Position) -> BufferDelta:
        return self.replace_range(start, end, "", label="delete_range")


class Transaction(AbstractContextManager["Transaction"]):
    def __init__(self, buffer: Buffer, label: str) -> None:
        self.buffer = buffer
        self.label = label
        self._span_cm: Optional[ContextManager[object]] = None

    def __enter__(self) -> "Transaction":
        self._span_cm = telemetry.span(
            name=f"buffer::{self.label}",
            component=True,
            metadata={"buffer": self.buffer.name},
        )
        self._span_cm.__enter__()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self._span_cm is not None:
            self._span_cm.__exit__(exc_type, exc, tb)
        return False


def _flatten_lines(lines) -> str:
    return "\n".join(lines)


def _offset_for_position(document: BufferDocument, position: Position) -> int:
    lines = document.snapshot()
    line, column = position
    offset = 0
    for i in range(line - 1):
        offset += len(lines[i]) + 1  # newline
    offset += column
    return offset


def _position_from_offset(document: BufferDocument, offset: int) -> Position:
    lines = document.snapshot()
    running = 0
    for index, text in enumerate(lines):
        if offset <= running + len(text):
            return Position(index + 1, offset - running)
        running += len(text) + 1
    return Position(len(lines), len(lines[-1]))
