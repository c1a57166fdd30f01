"""Buffer abstractions: line storage, cursor state and validation."""

from .buffer import DEFAULT_TAB_WIDTH, Buffer, BufferDelta, Transaction
from .document import BufferDocument, indentation, indentation_prefix, visual_width
from .state import BufferState, Position, Viewport
from .validation import BufferValidationError, ensure_position

__all__ = [
    "DEFAULT_TAB_WIDTH",
    "Buffer",
    "BufferDelta",
    "BufferDocument",
    "BufferState",
    "BufferValidationError",
    "Position",
    "Transaction",
    "Viewport",
    "ensure_position",
    "indentation",
    "indentation_prefix",
    "visual_width",
]
