"""Guide controller coordinating locate/expand/render per command cycle."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from indent_guide.buffer import Buffer, Position, Viewport
from indent_guide.runtime import telemetry

from .expander import expand, first_guided_line
from .glyphs import GlyphCache
from .locator import locate
from .models import CHARACTER_CELL, Annotation, CellMetrics, GuideSpan, GuideState
from .options import GuideOptions
from .renderer import LineRenderer, resolve_metrics


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


def _never() -> bool:
    return False


def _always() -> bool:
    return True


def _unmeasured(_line: int) -> Optional[CellMetrics]:
    return None


def _nominal() -> CellMetrics:
    return CHARACTER_CELL


@dataclass(slots=True)
class GuideHooks:
    """Callbacks through which the controller reads and paints its host."""

    viewport: Callable[[], Viewport]
    show: Callable[[Sequence[Annotation]], None] = _noop
    clear: Callable[[Sequence[Annotation]], None] = _noop
    prompt_active: Callable[[], bool] = _never
    eligible: Callable[[], bool] = _always
    # rendered cell size of a line, None when the line is not fully visible
    line_metrics: Callable[[int], Optional[CellMetrics]] = _unmeasured
    font_metrics: Callable[[], CellMetrics] = _nominal
    graphical: bool = False


@dataclass
class PendingRedraw:
    deadline: float
    delay: float
    generation: int


class GuideController:
    """Owns the annotations of one buffer and redraws them after commands."""

    def __init__(
        self,
        buffer: Buffer,
        hooks: GuideHooks,
        options: Optional[GuideOptions] = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.buffer = buffer
        self.hooks = hooks
        self.options = options or GuideOptions()
        self.cache = GlyphCache(self.options, bitmaps=self._wants_bitmaps())
        self.renderer = LineRenderer(self.options, self.cache)
        self._clock = clock
        self._state = GuideState.IDLE
        self._annotations: Tuple[Annotation, ...] = ()
        self._spans: Tuple[GuideSpan, ...] = ()
        self._pending: Optional[PendingRedraw] = None
        self._timer_counter = 0

    @property
    def state(self) -> GuideState:
        return self._state

    @property
    def annotations(self) -> Tuple[Annotation, ...]:
        return self._annotations

    @property
    def spans(self) -> Tuple[GuideSpan, ...]:
        return self._spans

    @property
    def pending(self) -> Optional[PendingRedraw]:
        return self._pending

    def configure(self, options: GuideOptions) -> None:
        """Adopt new options; cached glyphs are dropped since colors may differ."""

        self.options = options
        self.cache.options = options
        self.renderer.options = options
        self.cache.clear()

    def clear_cache(self) -> None:
        self.cache.clear()

    def pre_command(self) -> None:
        """Command-loop entry: cancel pending work and remove all annotations."""

        if self._pending is not None:
            telemetry.record_event(
                "guides.cancel", data={"generation": self._pending.generation}
            )
        self._pending = None
        self._remove_annotations()
        self._transition(GuideState.IDLE)

    def post_command(self) -> None:
        """Command-loop exit: redraw now, or arm the idle timer."""

        delay = self.options.redraw_delay
        if delay is None:
            self.redraw()
            return
        self._timer_counter += 1
        self._pending = PendingRedraw(
            deadline=self._clock() + delay,
            delay=delay,
            generation=self._timer_counter,
        )
        self._transition(GuideState.PENDING_REDRAW)

    def process_timeouts(self, now: Optional[float] = None) -> bool:
        """Fire the pending redraw once its deadline passed."""

        pending = self._pending
        if pending is None:
            return False
        current = self._clock() if now is None else now
        if pending.deadline > current:
            return False
        return self.fire(pending.generation)

    def fire(self, generation: int) -> bool:
        """Run the redraw armed as ``generation``; stale generations are no-ops."""

        pending = self._pending
        if pending is None or pending.generation != generation:
            return False
        self._pending = None
        self.redraw()
        return True

    def redraw(self) -> Tuple[GuideSpan, ...]:
        """Replace the current annotations with freshly computed ones."""

        self._remove_annotations()
        cursor = self.buffer.cursor
        with telemetry.span(
            name="guides::redraw",
            component="guides",
            metadata={"buffer": self.buffer.name, "cursor": tuple(cursor)},
        ) as handle:
            if self.hooks.prompt_active():
                handle.skip("prompt_active")
                self._transition(GuideState.IDLE)
                return ()
            if not self.hooks.eligible():
                handle.skip("excluded_context")
                self._transition(GuideState.IDLE)
                return ()

            spans, annotations = self.compute(cursor)
            handle.add_metadata("spans", len(spans))
            handle.add_metadata("annotations", len(annotations))
            self._spans = spans
            self._annotations = annotations
            if annotations:
                self.hooks.show(annotations)
        self._transition(GuideState.DRAWN)
        return spans

    def compute(
        self, cursor: Optional[Position] = None
    ) -> Tuple[Tuple[GuideSpan, ...], Tuple[Annotation, ...]]:
        """Spans and annotations for ``cursor`` without touching the host."""

        cursor = cursor or self.buffer.cursor
        viewport = self.hooks.viewport()
        self.cache.use_bitmaps(self._wants_bitmaps())
        metrics = self._metrics(cursor.line)

        spans: List[GuideSpan] = []
        annotations: List[Annotation] = []
        block = locate(self.buffer, cursor)
        keep_line = cursor.line
        while block.column > self.options.threshold:
            first = first_guided_line(block.start_line, viewport, opened=block.opened)
            end = expand(
                self.buffer,
                block.column,
                block.start_line,
                viewport,
                opened=block.opened,
                keep_line=keep_line,
            )
            if end >= first:
                span = GuideSpan(first, end, block.column, block.guide_column)
                spans.append(span)
                annotations.extend(self._render_span(span, cursor, metrics))
            if not (self.options.recursive and block.opened):
                break
            keep_line = block.start_line
            block = locate(self.buffer, Position(block.start_line, 0))
        return tuple(spans), tuple(annotations)

    def _render_span(
        self, span: GuideSpan, cursor: Position, metrics: CellMetrics
    ) -> List[Annotation]:
        rendered: List[Annotation] = []
        for line in span.lines:
            annotation = self.renderer.render(
                self.buffer, line, span.guide_column, metrics
            )
            if annotation is None or annotation.covers(cursor.line, cursor.column):
                continue
            rendered.append(annotation)
        return rendered

    def _metrics(self, line: int) -> CellMetrics:
        if not self.cache.bitmaps:
            return CHARACTER_CELL
        return resolve_metrics(
            self.options,
            bitmaps=True,
            rendered=self.hooks.line_metrics(line),
            nominal=self.hooks.font_metrics(),
        )

    def _wants_bitmaps(self) -> bool:
        return self.options.rich_glyphs and self.hooks.graphical

    def _remove_annotations(self) -> None:
        if self._annotations:
            self.hooks.clear(self._annotations)
        self._annotations = ()
        self._spans = ()

    def _transition(self, state: GuideState) -> None:
        if state is self._state:
            return
        telemetry.record_event(
            "guides.state",
            data={"from": self._state.value, "to": state.value},
        )
        self._state = state


__all__ = ["GuideController", "GuideHooks", "PendingRedraw"]
