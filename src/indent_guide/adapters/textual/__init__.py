"""Textual host adapter for the guide controller."""

from .controller import TextualGuideAdapter, TextualViewHooks, compose_line

__all__ = ["TextualGuideAdapter", "TextualViewHooks", "compose_line"]
