"""Validation helpers shared across buffer services."""

from __future__ import annotations

from .document import BufferDocument
from .state import Position


class BufferValidationError(RuntimeError):
    """Raised when an edit or cursor move names a position outside the buffer."""

    def __init__(self, message: str, *, position: Position | None = None) -> None:
        super().__init__(message)
        self.position = position


def ensure_position(document: BufferDocument, position: Position) -> Position:
    line, column = position
    if line < 1 or line > document.line_count:
        raise BufferValidationError("Line out of range", position=position)
    text = document.get_line(line)
    if column < 0 or column > len(text):
        raise BufferValidationError("Column out of range", position=position)
    return Position(line, column)
