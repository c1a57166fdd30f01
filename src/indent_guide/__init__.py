"""UI-agnostic indentation guide engine."""

__all__ = [
    "adapters",
    "buffer",
    "guides",
    "runtime",
]

__version__ = "0.1.0"
