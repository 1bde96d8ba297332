"""Append-only transcript file for the diagnostic log (verbose mode).

Each entry is written and flushed immediately so the file is useful even if
the session is killed.
"""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class TranscriptWriter:
    """Appends diagnostic entries to a text file, one block per entry."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._fh = self.path.open("a", encoding="utf-8")
        self._broken = False
        logger.info("transcript path=%s", self.path)

    def write(self, entry: str) -> None:
        if self._broken:
            return
        try:
            self._fh.write(entry)
            if not entry.endswith("\n"):
                self._fh.write("\n")
            self._fh.flush()
        except (OSError, ValueError) as exc:
            # Disk full or closed file: keep the session alive, stop writing.
            self._broken = True
            logger.error("transcript write failed path=%s error=%s", self.path, exc)

    def close(self) -> None:
        if not self._fh.closed:
            self._fh.close()
