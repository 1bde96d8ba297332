"""Diagnostic log: append-only transcript shown in the debug pane.

Scroll position is stored as an offset from the bottom (0 = newest line
visible), so it stays meaningful whatever the pane height turns out to be.

Scroll policy: record() snaps to the bottom unless the debug pane holds
focus and the operator has scrolled up, in which case the visible window is
kept where it is.
"""

from __future__ import annotations

import datetime
import logging

from mcp_console.io.transcript import TranscriptWriter

logger = logging.getLogger(__name__)


class DiagnosticLog:
    def __init__(self, verbose: bool = False, transcript: TranscriptWriter | None = None):
        self.verbose = verbose
        self._transcript = transcript
        self._entries: list[str] = []
        self._lines: list[str] = []
        self.scroll_offset = 0
        self.focused = False  # set by the controller when the debug pane has focus
        self.viewport_height = 0

    # ─── Appending ─────────────────────────────────────────────────────

    def record(self, entry: str) -> None:
        """Append a formatted line or block and scroll to it."""
        timestamp = datetime.datetime.now().strftime("%H:%M:%S")
        formatted = "[{}] {}".format(timestamp, entry)
        new_lines = formatted.split("\n")
        self._entries.append(entry)
        self._lines.extend(new_lines)
        if self.focused and self.scroll_offset > 0:
            # Keep the same window on screen while new lines land below it.
            self.scroll_offset += len(new_lines)
        else:
            self.scroll_offset = 0
        if self._transcript is not None:
            self._transcript.write(formatted)

    def debug(self, entry: str) -> None:
        """Record only when verbose diagnostics are enabled."""
        if self.verbose:
            self.record(entry)

    # ─── Reading ───────────────────────────────────────────────────────

    @property
    def entries(self) -> list[str]:
        return list(self._entries)

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    def __len__(self) -> int:
        return len(self._entries)

    def visible_lines(self, height: int) -> list[str]:
        """The window of lines for a pane of the given height."""
        if height <= 0:
            return []
        total = len(self._lines)
        offset = min(self.scroll_offset, max(total - height, 0))
        end = total - offset
        return self._lines[max(end - height, 0):end]

    # ─── Scrolling ─────────────────────────────────────────────────────

    def set_viewport(self, height: int) -> None:
        self.viewport_height = max(height, 0)
        self.scroll_offset = min(self.scroll_offset, self._max_offset())

    def _max_offset(self) -> int:
        if self.viewport_height:
            return max(len(self._lines) - self.viewport_height, 0)
        return max(len(self._lines) - 1, 0)

    def scroll(self, delta: int) -> None:
        """Positive delta scrolls down (towards newest), negative up."""
        self.scroll_offset = min(max(self.scroll_offset - delta, 0), self._max_offset())

    def scroll_to_top(self) -> None:
        self.scroll_offset = self._max_offset()

    def scroll_to_bottom(self) -> None:
        self.scroll_offset = 0

    def close(self) -> None:
        if self._transcript is not None:
            self._transcript.close()
