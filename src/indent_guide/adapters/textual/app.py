"""Executable Textual app that shows indent guides over a file."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional, Sequence

try:  # pragma: no cover - imported only when demo is run
    from rich.console import Group
    from rich.text import Text
    from textual import events
    from textual.app import App, ComposeResult
    from textual.widgets import Footer, Header, Static
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use indent_guide.adapters.textual.app"
    ) from exc

from indent_guide.buffer import DEFAULT_TAB_WIDTH, Buffer
from indent_guide.guides import GuideOptions
from indent_guide.runtime import telemetry

from .controller import TextualGuideAdapter, TextualViewHooks

TIMER_POLL_SECONDS = 0.05


class GuideViewerApp(App[None]):
    """Minimal Textual UI showing guides for the block under the cursor."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#buffer-view {
		height: 1fr;
		border: round $accent;
		padding: 0 1;
		overflow: hidden;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        ("ctrl+c", "quit", "Quit"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, buffer: Buffer, options: GuideOptions) -> None:
        super().__init__()
        self.buffer = buffer
        self.options = options
        self.adapter: TextualGuideAdapter | None = None
        self._buffer_widget: Static | None = None
        self._status_widget: Static | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        self._buffer_widget = Static("", id="buffer-view")
        yield self._buffer_widget
        self._status_widget = Static("", id="status-line")
        yield self._status_widget
        yield Footer()

    async def on_mount(self) -> None:
        hooks = TextualViewHooks(
            update_view=self._update_view,
            update_status=self._update_status,
        )
        self.adapter = TextualGuideAdapter(
            self.buffer,
            hooks,
            self.options,
            height=self._view_height(),
        )
        self.set_interval(TIMER_POLL_SECONDS, self._process_timeouts)

    def on_resize(self, event: events.Resize) -> None:
        del event
        if self.adapter:
            self.adapter.resize(self._view_height())

    def _process_timeouts(self) -> None:
        if self.adapter:
            self.adapter.process_timeouts()

    async def on_key(self, event: events.Key) -> None:
        if not self.adapter or event.key in {"ctrl+c", "ctrl+q"}:
            return
        if self.adapter.handle_textual_key(event.key, text=event.character):
            event.stop()

    def _view_height(self) -> int:
        if self._buffer_widget is None:
            return 24
        return max(1, self._buffer_widget.size.height or self.size.height - 4)

    def _update_view(self, lines: List[Text]) -> None:
        if self._buffer_widget:
            self._buffer_widget.update(Group(*lines))

    def _update_status(self, status: str) -> None:
        if self._status_widget:
            self._status_widget.update(status)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Browse a file with indentation guides."
    )
    parser.add_argument("path", type=Path, help="File to open")
    parser.add_argument(
        "--tab-width",
        type=int,
        default=DEFAULT_TAB_WIDTH,
        help=f"Tab expansion width (default: {DEFAULT_TAB_WIDTH})",
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=None,
        help="Seconds of idle time before guides are redrawn (default: immediate)",
    )
    parser.add_argument(
        "--threshold",
        type=int,
        default=None,
        help="Deepest block column that still gets no guide",
    )
    parser.add_argument(
        "--char", default=None, help="Character used to draw the guide bar"
    )
    parser.add_argument(
        "--recursive",
        action="store_true",
        help="Also draw guides for every enclosing block",
    )
    parser.add_argument(
        "--log-preset",
        choices=sorted(telemetry.PRESETS),
        default=None,
        help="telelog preset to use instead of the environment defaults",
    )
    return parser.parse_args(argv)


def build_options(args: argparse.Namespace) -> GuideOptions:
    """Environment options with command-line overrides applied on top."""

    options = GuideOptions.from_env()
    changes: dict[str, object] = {}
    if args.delay is not None:
        changes["redraw_delay"] = args.delay
    if args.threshold is not None:
        changes["threshold"] = args.threshold
    if args.char is not None:
        changes["line_char"] = args.char
    if args.recursive:
        changes["recursive"] = True
    return options.replace(**changes) if changes else options


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    if args.log_preset:
        telemetry.configure(preset=args.log_preset)
    text = args.path.read_text(encoding="utf-8")
    buffer = Buffer.from_text(text, name=args.path.name, tab_width=args.tab_width)
    app = GuideViewerApp(buffer, build_options(args))
    app.run()


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()
