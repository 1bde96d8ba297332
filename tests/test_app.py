"""In-process tests for the Textual host.

Drive McpConsoleApp through pilot key presses against a FakeRemote and
check both the controller state and the frame it renders.
"""

import pytest

from mcp_console.core.controller import (
    ARGUMENT_ENTRY,
    BROWSE_RESOURCES,
    BROWSE_TOOLS,
    RESOURCE_DETAIL,
    RESULT_DISPLAY,
    FocusTarget,
)
from tests.harness import (
    FakeRemote,
    debug_pane_text,
    frame_text,
    main_pane_text,
    press_and_settle,
    press_sequence,
    resize_and_settle,
    run_app,
    type_text,
)

pytestmark = pytest.mark.textual


async def test_startup_shows_tool_list(fake_remote):
    async with run_app(fake_remote) as (pilot, app):
        main = main_pane_text(app)
        assert "Tools (2)" in main
        assert "> add" in main
        assert "Catalog loaded" in debug_pane_text(app)


async def test_call_tool_without_arguments(fake_remote):
    async with run_app(fake_remote) as (pilot, app):
        await press_sequence(pilot, ["down", "enter"])
        await pilot.pause()

        assert fake_remote.calls == [("ping", {})]
        assert app.controller.view == RESULT_DISPLAY
        main = main_pane_text(app)
        assert "Result: ping" in main
        assert "pong" in main


async def test_fill_arguments_and_call(fake_remote):
    async with run_app(fake_remote) as (pilot, app):
        await press_and_settle(pilot, "enter")
        assert app.controller.view == ARGUMENT_ENTRY

        await type_text(pilot, "3")
        await press_and_settle(pilot, "enter")
        await type_text(pilot, "4")
        await press_and_settle(pilot, "enter")
        await pilot.pause()

        assert fake_remote.calls == [("add", {"a": 3.0, "b": 4.0})]
        assert app.controller.view == RESULT_DISPLAY
        assert "7.0" in main_pane_text(app)


async def test_escape_returns_to_tool_list(fake_remote):
    async with run_app(fake_remote) as (pilot, app):
        await press_and_settle(pilot, "enter")
        await press_and_settle(pilot, "escape")
        assert app.controller.view == BROWSE_TOOLS
        assert fake_remote.calls == []


async def test_failed_resource_read_shows_error(fake_remote):
    async with run_app(fake_remote) as (pilot, app):
        await press_sequence(pilot, ["r", "down", "enter"])
        await pilot.pause()

        assert app.controller.view == RESOURCE_DETAIL
        assert app.controller.result.success is False
        assert "connection reset" in main_pane_text(app)

        await press_and_settle(pilot, "escape")
        assert app.controller.view == BROWSE_RESOURCES


async def test_ctrl_o_moves_focus_to_debug_pane(fake_remote):
    async with run_app(fake_remote) as (pilot, app):
        await press_and_settle(pilot, "ctrl+o")
        assert app.controller.focus == FocusTarget.DEBUG

        # Enter is inert while the debug pane has focus.
        await press_and_settle(pilot, "enter")
        assert app.controller.view == BROWSE_TOOLS

        await press_and_settle(pilot, "ctrl+o")
        assert app.controller.focus == FocusTarget.MAIN


async def test_f2_dumps_frame(fake_remote, tmp_path):
    async with run_app(fake_remote, dump_dir=str(tmp_path)) as (pilot, app):
        await press_and_settle(pilot, "f2")

        assert app.last_dump is not None
        assert app.last_dump.parent == tmp_path
        assert "Tools (2)" in app.last_dump.read_text(encoding="utf-8")
        assert "Frame dumped to" in app.controller.log.entries[-1]


async def test_resize_refits_frame(fake_remote):
    async with run_app(fake_remote) as (pilot, app):
        await resize_and_settle(pilot, 80, 24)
        lines = frame_text(app).splitlines()
        assert len(lines) == 24
        assert all(len(line) == 80 for line in lines)


async def test_unhandled_exception_is_recorded(fake_remote):
    async with run_app(fake_remote) as (pilot, app):
        app._handle_exception(RuntimeError("boom"))
        await pilot.pause()

        assert app._error_log[0] == "EXCEPTION: boom"
        assert any(e.startswith("Unhandled exception: RuntimeError: boom") for e in app.controller.log.entries)
        assert app.is_running


async def test_fatal_catalog_error_shows_message_only():
    remote = FakeRemote(listing_error="list tools failed: connection refused")
    async with run_app(remote) as (pilot, app):
        await press_sequence(pilot, ["down", "enter"])

        text = frame_text(app)
        assert "Error: list tools failed: connection refused" in text
        assert "Press ctrl+c to quit." in text
        assert remote.calls == []


async def test_outcome_from_worker_thread(fake_remote):
    async with run_app(fake_remote, spawn=None) as (pilot, app):
        await press_sequence(pilot, ["down", "enter"])
        for _ in range(50):
            if app.controller.result is not None:
                break
            await pilot.pause(0.05)

        assert app.controller.result is not None
        assert app.controller.result.rendered_text == "pong"
        assert not app.controller.is_pending
