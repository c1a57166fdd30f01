import pytest

from indent_guide.buffer import (
    Buffer,
    BufferValidationError,
    Position,
    Viewport,
    indentation,
    visual_width,
)


def test_from_text_keeps_trailing_empty_line() -> None:
    buffer = Buffer.from_text("if x:\n    a\n")

    assert buffer.line_count == 3
    assert buffer.line(1) == "if x:"
    assert buffer.line(3) == ""
    assert buffer.is_blank(3)


def test_empty_buffer_has_one_line() -> None:
    buffer = Buffer()

    assert buffer.line_count == 1
    assert buffer.line(1) == ""
    assert buffer.cursor == Position(1, 0)


def test_visual_width_expands_tabs_to_next_stop() -> None:
    assert visual_width("\t", 4) == 4
    assert visual_width("  \t", 4) == 4
    assert visual_width("    \t", 4) == 8
    assert visual_width("ab", 4, start=3) == 5


def test_indentation_mixes_tabs_and_spaces() -> None:
    assert indentation("\t  x", 8) == 10
    assert indentation("   ", 4) == 3
    assert indentation("x", 4) == 0


def test_visual_column_of_cursor() -> None:
    buffer = Buffer.from_text("\tfoo", tab_width=4)
    buffer.move_cursor(1, 2)

    assert buffer.visual_column() == 5


def test_move_cursor_rejects_out_of_range() -> None:
    buffer = Buffer.from_text("abc")

    with pytest.raises(BufferValidationError) as excinfo:
        buffer.move_cursor(1, 4)

    assert excinfo.value.position == Position(1, 4)


def test_clamp_stays_inside_buffer() -> None:
    buffer = Buffer.from_text("abc\nde")

    assert buffer.clamp(0, 9) == Position(1, 3)
    assert buffer.clamp(7, 9) == Position(2, 2)


def test_insert_text_moves_cursor_and_bumps_version() -> None:
    buffer = Buffer.from_text("if x:\n")
    buffer.move_cursor(2, 0)

    delta = buffer.insert_text("    a\nb")

    assert buffer.line(2) == "    a"
    assert buffer.line(3) == "b"
    assert delta.cursor == Position(3, 1)
    assert delta.version == buffer.document.version == 1


def test_delete_range_joins_lines() -> None:
    buffer = Buffer.from_text("ab\ncd")

    buffer.delete_range(Position(1, 2), Position(2, 0))

    assert buffer.line_count == 1
    assert buffer.line(1) == "abcd"


def test_viewport_scrolls_to_line() -> None:
    viewport = Viewport(5, 9)

    assert viewport.scrolled_to(7) is viewport
    assert viewport.scrolled_to(2) == Viewport(2, 6)
    assert viewport.scrolled_to(12) == Viewport(8, 12)
    assert 9 in viewport and 10 not in viewport


def test_viewport_rejects_inverted_range() -> None:
    with pytest.raises(ValueError):
        Viewport(4, 3)
