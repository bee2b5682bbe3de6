"""Executable Textual app: a plain editor next to a live styled preview."""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

try:  # pragma: no cover - imported only when demo is run
    from textual.app import App, ComposeResult
    from textual.containers import Horizontal
    from textual.widgets import Footer, Header, Static, TextArea
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use markdown_engine.adapters.textual.app"
    ) from exc

from markdown_engine.buffer import BufferMirror, StyledBuffer
from markdown_engine.config import Options
from markdown_engine.engine import MarkdownStyler, PassScheduler

from .controller import TextualHostHooks, TextualMarkdownAdapter
from .render import render_rich_text


class MarkdownEngineApp(App[None]):
    """Minimal Textual UI embedding the markdown styler."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#panes {
		height: 1fr;
	}

	#editor {
		width: 1fr;
		border: round $accent;
	}

	#preview {
		width: 1fr;
		border: round $accent;
		padding: 0 1;
		overflow: auto;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        ("ctrl+q", "quit", "Quit"),
        ("ctrl+r", "rerender", "Full render"),
    ]

    def __init__(
        self, *, text: str = "", options: Optional[Options] = None
    ) -> None:
        super().__init__()
        self.initial_text = text
        self.options = options or Options.from_env()
        self.adapter: TextualMarkdownAdapter | None = None
        self._preview: Static | None = None
        self._status: Static | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Horizontal(id="panes"):
            yield TextArea(self.initial_text, id="editor")
            self._preview = Static("", id="preview")
            yield self._preview
        self._status = Static("", id="status-line")
        yield self._status
        yield Footer()

    def on_mount(self) -> None:
        hooks = TextualHostHooks(
            update_view=self._update_view,
            update_status=self._update_status,
            log=self.log.debug,
        )
        self.adapter = TextualMarkdownAdapter(
            MarkdownStyler(self.options),
            StyledBuffer(name="demo"),
            hooks,
            scheduler=PassScheduler(),
        )
        self.adapter.load_text(self.initial_text)

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        if not self.adapter:
            return
        self.adapter.sync_text(event.text_area.text)
        self.call_later(self.adapter.flush)

    def action_rerender(self) -> None:
        if self.adapter:
            self.adapter.styler.force_full_render(self.adapter.buffer)
            self.adapter.flush()

    def _update_view(self, mirror: BufferMirror) -> None:
        if self._preview:
            self._preview.update(render_rich_text(mirror, self.options))

    def _update_status(self, status: str) -> None:
        if self._status:
            self._status.update(status)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run the markdown engine Textual demo."
    )
    parser.add_argument(
        "path",
        nargs="?",
        type=Path,
        help="Markdown file to open (starts empty when omitted)",
    )
    parser.add_argument(
        "--hide-syntax",
        action="store_true",
        help="Render markdown delimiters invisibly in the preview",
    )
    parser.add_argument(
        "--no-tags",
        action="store_true",
        help="Disable #tag links",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    options = Options.from_env()
    if args.hide_syntax:
        options = replace(options, hide_syntax=True)
    if args.no_tags:
        options = replace(options, inline_tags=False)
    text = args.path.read_text(encoding="utf-8") if args.path else ""
    app = MarkdownEngineApp(text=text, options=options)
    app.run()


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()
