"""Minimal Textual adapter that keeps a styled buffer in step with an editor."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from markdown_engine.buffer import BufferMirror, StyledBuffer, TextRange
from markdown_engine.codeblocks import CodeHighlighter
from markdown_engine.engine import MarkdownStyler, PassScheduler


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class TextualHostHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    update_view: Callable[[BufferMirror], None]
    update_status: Callable[[str], None] = _noop
    # Optional realtime log callback a host may use to surface debug lines
    log: Callable[[str], None] = _noop


class TextualMarkdownAdapter:
    """Bridges host text edits to :class:`MarkdownStyler` passes.

    With a scheduler, passes queue up until :meth:`flush`; without one, every
    edit is restyled before :meth:`apply_host_edit` returns.
    """

    def __init__(
        self,
        styler: MarkdownStyler,
        buffer: StyledBuffer,
        hooks: TextualHostHooks,
        scheduler: Optional[PassScheduler] = None,
    ) -> None:
        self.styler = styler
        self.buffer = buffer
        self.hooks = hooks
        self.scheduler = scheduler
        self.styler.attach(buffer, scheduler)
        self._refresh_view()

    def load_text(self, text: str) -> None:
        """Replace the whole document and run a full pass."""

        self.styler.detach(self.buffer)
        self.buffer.set_text(text)
        self.styler.process_initial(self.buffer)
        self.styler.attach(self.buffer, self.scheduler)
        self.hooks.update_status(f"loaded {len(text)} chars")
        self._log_state("load ->")
        self._refresh_view()

    def apply_host_edit(self, start: int, end: int, text: str) -> TextRange:
        """Replace ``[start, end)`` with ``text`` as the editor did."""

        edited = self.buffer.replace_characters(start, end, text)
        self._log_state("edit ->", range=edited, inserted=text)
        if self.scheduler is None:
            self._refresh_view()
        else:
            self.hooks.update_status(f"pending:{self.scheduler.pending_count}")
        return edited

    def sync_text(self, text: str) -> Optional[TextRange]:
        """Apply the single replacement turning the buffer into ``text``."""

        current = self.buffer.text
        if text == current:
            return None
        limit = min(len(current), len(text))
        prefix = 0
        while prefix < limit and current[prefix] == text[prefix]:
            prefix += 1
        suffix = 0
        while (
            suffix < limit - prefix
            and current[len(current) - 1 - suffix] == text[len(text) - 1 - suffix]
        ):
            suffix += 1
        return self.apply_host_edit(
            prefix, len(current) - suffix, text[prefix : len(text) - suffix]
        )

    def flush(self) -> int:
        """Run queued passes and push the refreshed view."""

        ran = self.scheduler.run_pending() if self.scheduler is not None else 0
        if ran:
            self._log_state("flush <-", passes=ran)
        self._refresh_view()
        return ran

    def set_highlighter(self, highlighter: Optional[CodeHighlighter]) -> None:
        self.styler.set_highlighter(highlighter)
        self.styler.force_full_render(self.buffer)
        self.hooks.update_status(
            f"highlighter:{type(self.styler.highlighter).__name__}"
        )
        self._refresh_view()

    def _refresh_view(self) -> None:
        self.hooks.update_view(self.buffer.mirror())

    def _log_state(self, prefix: str, **fields: object) -> None:
        snapshot = self._state_metadata()
        snapshot.update({k: v for k, v in fields.items() if v is not None})
        parts = [prefix]
        for key, value in snapshot.items():
            parts.append(f"{key}={value!r}")
        self.hooks.log(" ".join(parts))

    def _state_metadata(self) -> Dict[str, object]:
        pending = self.scheduler.pending_count if self.scheduler is not None else 0
        return {
            "buffer": self.buffer.name,
            "buffer_version": self.buffer.version,
            "length": len(self.buffer),
            "pending": pending,
        }


__all__ = ["TextualHostHooks", "TextualMarkdownAdapter"]
