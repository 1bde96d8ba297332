"""Textual in-process test harness for mcp-console.

Re-exports all public API for convenient imports:
    from tests.harness import run_app, press_and_settle, frame_text, ...
"""

from tests.harness.app_runner import run_app
from tests.harness.interactions import (
    press_and_settle,
    press_sequence,
    resize_and_settle,
    type_text,
)
from tests.harness.content import frame_text, main_pane_text, debug_pane_text
from tests.harness.fakes import FakeRemote, inline_spawn

__all__ = [
    "run_app",
    "press_and_settle",
    "press_sequence",
    "resize_and_settle",
    "type_text",
    "frame_text",
    "main_pane_text",
    "debug_pane_text",
    "FakeRemote",
    "inline_spawn",
]
