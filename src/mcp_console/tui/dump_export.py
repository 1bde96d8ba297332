"""Frame dump to a text file.

// [LAW:one-way-deps] Depends on rendering only. No upward deps.
// [LAW:locality-or-seam] All dump logic here; app.py only calls dump_frame().
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from mcp_console.core.controller import SessionController
from mcp_console.tui import rendering

logger = logging.getLogger(__name__)


def dump_path(directory: str | Path, now: datetime | None = None) -> Path:
    stamp = (now or datetime.now()).strftime("%Y%m%d-%H%M%S-%f")
    return Path(directory) / "mcp-console-frame-{}.txt".format(stamp)


def dump_frame(
    controller: SessionController,
    width: int,
    height: int,
    directory: str | Path = ".",
) -> Path | None:
    """Write the current frame as plain text and note the path in the log.

    Returns the written path, or None if the file could not be written.
    """
    path = dump_path(directory)
    try:
        text = rendering.render_text(controller, width, height)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        logger.error("frame dump failed path=%s error=%s", path, e)
        controller.log.record("Frame dump failed: {}".format(e))
        return None
    logger.info("frame dumped path=%s", path)
    controller.log.record("Frame dumped to: {}".format(path))
    return path
