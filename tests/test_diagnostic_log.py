"""Tests for the diagnostic log and its transcript file."""

import re

from mcp_console.core.diagnostic_log import DiagnosticLog
from mcp_console.io.transcript import TranscriptWriter

_STAMP = re.compile(r"^\[\d\d:\d\d:\d\d\] ")


def test_three_records_then_a_fourth():
    log = DiagnosticLog()
    for entry in ("started", "key pressed", "called add"):
        log.record(entry)
    assert log.entries == ["started", "key pressed", "called add"]

    log.record("fourth")
    assert log.entries[:3] == ["started", "key pressed", "called add"]
    assert log.entries[3] == "fourth"
    assert len(log) == 4


def test_lines_are_timestamped():
    log = DiagnosticLog()
    log.record("hello")
    assert _STAMP.match(log.lines[0])
    assert log.lines[0].endswith("hello")


def test_multiline_entry_splits_into_lines():
    log = DiagnosticLog()
    log.record("Result:\n========\npong")
    assert len(log) == 1
    assert len(log.lines) == 3
    assert log.lines[1:] == ["========", "pong"]


def test_debug_only_when_verbose():
    quiet = DiagnosticLog(verbose=False)
    quiet.debug("Key pressed: a")
    assert quiet.entries == []

    loud = DiagnosticLog(verbose=True)
    loud.debug("Key pressed: a")
    assert loud.entries == ["Key pressed: a"]


class TestScrolling:
    def _log(self, n=20, height=5):
        log = DiagnosticLog()
        for i in range(n):
            log.record(f"line {i}")
        log.set_viewport(height)
        return log

    def test_visible_window_is_newest(self):
        log = self._log()
        visible = log.visible_lines(5)
        assert len(visible) == 5
        assert visible[-1].endswith("line 19")

    def test_scroll_up_and_clamp(self):
        log = self._log()
        log.scroll(-3)
        assert log.scroll_offset == 3
        assert log.visible_lines(5)[-1].endswith("line 16")
        log.scroll(-100)
        assert log.scroll_offset == 15
        log.scroll(100)
        assert log.scroll_offset == 0

    def test_top_and_bottom(self):
        log = self._log()
        log.scroll_to_top()
        assert log.visible_lines(5)[0].endswith("line 0")
        log.scroll_to_bottom()
        assert log.scroll_offset == 0

    def test_record_snaps_to_bottom_when_unfocused(self):
        log = self._log()
        log.scroll(-4)
        log.record("new")
        assert log.scroll_offset == 0
        assert log.visible_lines(5)[-1].endswith("new")

    def test_record_keeps_view_when_focused_and_scrolled(self):
        log = self._log()
        log.focused = True
        log.scroll(-4)
        before = log.visible_lines(5)
        log.record("new")
        assert log.visible_lines(5) == before

    def test_record_follows_when_focused_at_bottom(self):
        log = self._log()
        log.focused = True
        log.record("new")
        assert log.visible_lines(5)[-1].endswith("new")

    def test_empty_or_zero_height(self):
        log = DiagnosticLog()
        assert log.visible_lines(5) == []
        log.record("x")
        assert log.visible_lines(0) == []


class TestTranscript:
    def test_entries_appended_to_file(self, tmp_path):
        path = tmp_path / "nested" / "debug.log"
        log = DiagnosticLog(verbose=True, transcript=TranscriptWriter(path))
        log.record("first")
        log.record("second\nblock")
        log.close()

        lines = path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 3
        assert lines[0].endswith("first")
        assert lines[2] == "block"

    def test_appends_to_existing_file(self, tmp_path):
        path = tmp_path / "debug.log"
        path.write_text("earlier session\n", encoding="utf-8")
        writer = TranscriptWriter(path)
        writer.write("later")
        writer.close()
        assert path.read_text(encoding="utf-8") == "earlier session\nlater\n"

    def test_write_after_close_does_not_raise(self, tmp_path):
        writer = TranscriptWriter(tmp_path / "debug.log")
        writer.close()
        writer.write("ignored")
        writer.write("still ignored")
