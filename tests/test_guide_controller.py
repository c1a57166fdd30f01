from __future__ import annotations

from typing import List, Optional, Sequence

from indent_guide.buffer import Buffer, Position, Viewport
from indent_guide.guides import (
    Annotation,
    CellMetrics,
    GuideController,
    GuideHooks,
    GuideOptions,
    GuideSpan,
    GuideState,
    RenderMode,
    locate,
)

SAMPLE = "\n".join(
    [
        "class A:",
        "    def f(self):",
        "        if x:",
        "            a = 1",
        "",
        "            b = 2",
        "        return a",
        "",
        "    def g(self):",
        "\tpass",
        "",
    ]
)


class FakeHost:
    def __init__(self, viewport: Viewport) -> None:
        self.viewport = viewport
        self.shown: List[Sequence[Annotation]] = []
        self.cleared: List[Sequence[Annotation]] = []
        self.prompt = False
        self.now = 0.0

    def hooks(self, **overrides: object) -> GuideHooks:
        params: dict[str, object] = dict(
            viewport=lambda: self.viewport,
            show=self.shown.append,
            clear=self.cleared.append,
            prompt_active=lambda: self.prompt,
        )
        params.update(overrides)
        return GuideHooks(**params)  # type: ignore[arg-type]

    def clock(self) -> float:
        return self.now


def make_controller(
    text: str,
    cursor: Position,
    *,
    options: Optional[GuideOptions] = None,
    viewport: Viewport = Viewport(1, 50),
    host: Optional[FakeHost] = None,
    **hook_overrides: object,
) -> tuple[GuideController, FakeHost]:
    buffer = Buffer.from_text(text)
    buffer.move_cursor(*cursor)
    host = host or FakeHost(viewport)
    controller = GuideController(
        buffer, host.hooks(**hook_overrides), options, clock=host.clock
    )
    return controller, host


def test_blank_line_inside_block_is_covered() -> None:
    controller, host = make_controller("if x:\n    a\n\n    b", Position(4, 4))

    controller.post_command()

    assert controller.state is GuideState.DRAWN
    assert controller.spans == (GuideSpan(2, 4, 4, 0),)
    assert [a.line for a in controller.annotations] == [2, 3, 4]
    assert controller.annotations[1].mode is RenderMode.APPEND
    assert host.shown == [controller.annotations]


def test_whitespace_only_line_still_gets_annotation() -> None:
    controller, _ = make_controller("if x:\n    a\n    \n    b", Position(2, 4))

    controller.post_command()

    assert 3 in {annotation.line for annotation in controller.annotations}


def test_short_line_inside_nested_block_gets_padding() -> None:
    text = "def f():\n    if x:\n        a\n\n        b"
    controller, _ = make_controller(text, Position(5, 8))

    controller.post_command()

    assert controller.spans == (GuideSpan(3, 5, 8, 4),)
    padding = next(a for a in controller.annotations if a.line == 4)
    assert padding.mode is RenderMode.APPEND
    assert padding.glyph.text == "    |"


def test_threshold_boundary() -> None:
    options = GuideOptions(threshold=2)

    at_threshold, _ = make_controller("if x:\n  a", Position(2, 2), options=options)
    above, _ = make_controller("if x:\n   a", Position(2, 3), options=options)
    at_threshold.post_command()
    above.post_command()

    assert at_threshold.spans == ()
    assert at_threshold.annotations == ()
    assert len(above.spans) == 1


def test_top_level_code_never_gets_a_guide() -> None:
    controller, host = make_controller("a = 1\n\nb = 2\nc = 3", Position(1, 0))

    controller.post_command()

    assert controller.spans == ()
    assert controller.annotations == ()
    assert host.shown == []


def test_pipeline_is_idempotent() -> None:
    controller, _ = make_controller(SAMPLE, Position(4, 12))

    first_spans, first = controller.compute()
    second_spans, second = controller.compute()

    assert first_spans == second_spans
    assert [a.glyph for a in first] == [a.glyph for a in second]
    assert all(x.glyph is y.glyph for x, y in zip(first, second))


def test_span_always_contains_the_cursor_line() -> None:
    buffer = Buffer.from_text(SAMPLE)
    controller = GuideController(buffer, GuideHooks(viewport=lambda: Viewport(1, 50)))

    for line in range(1, buffer.line_count + 1):
        cursor = Position(line, 0)
        if locate(buffer, cursor).column == 0:
            continue
        spans, _ = controller.compute(cursor)
        assert spans, line
        assert spans[0].start_line <= line <= spans[0].end_line, line


def test_annotation_under_caret_is_dropped() -> None:
    controller, _ = make_controller("if x:\n    a\n    b", Position(2, 0))

    controller.post_command()

    assert [a.line for a in controller.annotations] == [3]


def test_caret_on_tab_holding_the_bar_drops_its_glyph() -> None:
    on_tab, _ = make_controller("  if x:\n\ta", Position(2, 0))
    past_tab, _ = make_controller("  if x:\n\ta", Position(2, 1))
    on_tab.post_command()
    past_tab.post_command()

    assert on_tab.spans == (GuideSpan(2, 2, 8, 2),)
    assert on_tab.annotations == ()
    (kept,) = past_tab.annotations
    assert (kept.offset, kept.mode) == (0, RenderMode.REPLACE)
    assert kept.glyph.text == "  |     "


def test_caret_at_end_of_short_line_drops_padding() -> None:
    controller, _ = make_controller("if x:\n    a\n\n    b", Position(3, 0))

    controller.post_command()

    assert controller.spans == (GuideSpan(2, 4, 4, 0),)
    assert [a.line for a in controller.annotations] == [2, 4]


def test_pre_command_removes_annotations() -> None:
    controller, host = make_controller("if x:\n    a", Position(2, 4))
    controller.post_command()
    drawn = controller.annotations

    controller.pre_command()
    controller.pre_command()

    assert controller.state is GuideState.IDLE
    assert controller.annotations == ()
    assert host.cleared == [drawn]


def test_delayed_redraw_fires_after_deadline() -> None:
    options = GuideOptions(redraw_delay=0.5)
    controller, host = make_controller("if x:\n    a", Position(2, 4), options=options)

    controller.post_command()
    assert controller.state is GuideState.PENDING_REDRAW
    assert controller.annotations == ()

    assert controller.process_timeouts(now=0.4) is False
    host.now = 0.6
    assert controller.process_timeouts() is True
    assert controller.state is GuideState.DRAWN
    assert len(controller.annotations) == 1
    assert controller.pending is None


def test_command_before_deadline_cancels_scheduled_redraw() -> None:
    options = GuideOptions(redraw_delay=0.5)
    controller, host = make_controller("if x:\n    a", Position(2, 4), options=options)

    controller.post_command()
    stale = controller.pending
    assert stale is not None
    controller.pre_command()

    assert controller.process_timeouts(now=5.0) is False
    assert controller.fire(stale.generation) is False
    assert host.shown == []
    assert controller.state is GuideState.IDLE


def test_stale_generation_does_not_install_annotations() -> None:
    options = GuideOptions(redraw_delay=0.5)
    controller, host = make_controller("if x:\n    a", Position(2, 4), options=options)

    controller.post_command()
    stale = controller.pending
    controller.pre_command()
    controller.post_command()
    current = controller.pending

    assert stale is not None and current is not None
    assert current.generation != stale.generation
    assert controller.fire(stale.generation) is False
    assert host.shown == []
    assert controller.fire(current.generation) is True
    assert len(host.shown) == 1


def test_prompt_suppresses_redraw() -> None:
    controller, host = make_controller("if x:\n    a", Position(2, 4))
    host.prompt = True

    controller.post_command()

    assert controller.annotations == ()
    assert controller.state is GuideState.IDLE


def test_excluded_context_suppresses_redraw() -> None:
    options = GuideOptions(excluded_contexts=frozenset({"minibuffer"}))
    controller, host = make_controller(
        "if x:\n    a",
        Position(2, 4),
        options=options,
        eligible=options.eligibility(lambda: "minibuffer"),
    )

    controller.post_command()

    assert controller.annotations == ()
    assert host.shown == []


def test_recursive_mode_draws_every_enclosing_block() -> None:
    options = GuideOptions(recursive=True)
    controller, _ = make_controller(SAMPLE, Position(4, 12), options=options)

    spans = controller.redraw()

    assert spans == (
        GuideSpan(4, 6, 12, 8),
        GuideSpan(3, 7, 8, 4),
        GuideSpan(2, 10, 4, 0),
    )


def test_viewport_bounds_the_span() -> None:
    controller, _ = make_controller(SAMPLE, Position(4, 12), viewport=Viewport(5, 5))

    controller.post_command()

    assert controller.spans == (GuideSpan(5, 5, 12, 8),)


def test_graphical_host_gets_bitmap_glyphs() -> None:
    options = GuideOptions(rich_glyphs=True)
    controller, _ = make_controller(
        "if x:\n    a",
        Position(2, 4),
        options=options,
        graphical=True,
        line_metrics=lambda line: CellMetrics(8, 16),
    )

    controller.post_command()

    glyph = controller.annotations[0].glyph
    assert glyph.is_bitmap
    assert (glyph.width, glyph.height) == (8, 16)


def test_configure_drops_cached_glyphs() -> None:
    controller, _ = make_controller("if x:\n    a", Position(2, 4))
    controller.post_command()
    old_glyph = controller.annotations[0].glyph

    controller.configure(GuideOptions(color="#ff0000"))
    controller.pre_command()
    controller.post_command()

    assert controller.annotations[0].glyph is not old_glyph


def test_clear_cache_empties_glyph_cache() -> None:
    controller, _ = make_controller("if x:\n    a", Position(2, 4))
    controller.post_command()
    assert len(controller.cache) == 1

    controller.clear_cache()

    assert len(controller.cache) == 0
