"""Main TUI application using Textual.

// [LAW:locality-or-seam] Thin host: classify keys, hand triggers to the
//   SessionController, carry out the effects it returns, redraw.
// [LAW:one-source-of-truth] All session state lives in the controller; the
//   app holds nothing but the widget that shows the rendered frame.
"""

import logging
import traceback

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.message import Message
from textual.widgets import Static

from mcp_console.core import triggers
from mcp_console.core.controller import Dispatch, DumpFrame, Quit, SessionController
from mcp_console.core.invoker import AsyncInvoker
from mcp_console.core.outcome import InvocationOutcome
from mcp_console.tui import dump_export as _dump
from mcp_console.tui import input_modes
from mcp_console.tui import rendering

logger = logging.getLogger(__name__)


class _InvocationFinished(Message, bubble=False):
    """Thread-safe bridge: job thread -> app message pump."""

    def __init__(self, outcome: InvocationOutcome) -> None:
        self.outcome = outcome
        super().__init__()


class McpConsoleApp(App):
    """TUI host for one MCP console session."""

    CSS = """
    #frame {
        width: 100%;
        height: 100%;
    }
    """

    ENABLE_COMMAND_PALETTE = False

    # ctrl+c must reach the controller even while a key handler is busy.
    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit", show=False, priority=True),
    ]

    def __init__(self, controller: SessionController, remote=None, dump_dir: str = ".", spawn=None):
        super().__init__()
        self._controller = controller
        self._remote = remote
        self._dump_dir = dump_dir
        self._error_log: list[str] = []
        self._invoker = AsyncInvoker(remote, self._deliver, spawn=spawn)
        self.last_dump = None

        # [LAW:dataflow-not-control-flow] Effect type -> handler
        self._effect_handlers = {
            Dispatch: self._run_dispatch,
            Quit: self._run_quit,
            DumpFrame: self._run_dump,
        }

    @property
    def controller(self) -> SessionController:
        return self._controller

    def compose(self) -> ComposeResult:
        yield Static(id="frame")

    def on_mount(self) -> None:
        self._controller.set_viewport(self.size.width, self.size.height)
        self._redraw()

    def on_resize(self, event) -> None:
        self._controller.set_viewport(event.size.width, event.size.height)
        self._redraw()

    def action_quit(self) -> None:
        self._apply(self._controller.handle(triggers.quit_()))

    def _handle_exception(self, error: Exception) -> None:
        """// [LAW:single-enforcer] Top-level exception handler - keeps the session running.

        Records the traceback in the debug pane and buffers it for the
        post-exit stderr dump. Does NOT call super().
        """
        tb = "".join(traceback.format_exception(type(error), error, error.__traceback__))

        # Buffer for post-exit dump
        self._error_log.append(f"EXCEPTION: {error}")
        self._error_log.append(tb)

        logger.error("Unhandled exception: %s\n%s", error, tb)
        self._controller.log.record(f"Unhandled exception: {type(error).__name__}: {error}\n{tb.rstrip()}")
        if self.is_running:
            self._redraw()

    # ─── Effects ───────────────────────────────────────────────────────

    def _apply(self, effects) -> None:
        for effect in effects:
            self._effect_handlers[type(effect)](effect)
        if self.is_running:
            self._redraw()

    def _run_dispatch(self, effect: Dispatch) -> None:
        self._invoker.submit(effect.job)

    def _run_quit(self, effect: Quit) -> None:
        self.exit()

    def _run_dump(self, effect: DumpFrame) -> None:
        self.last_dump = _dump.dump_frame(
            self._controller, self.size.width, self.size.height, directory=self._dump_dir
        )

    # ─── Outcomes ──────────────────────────────────────────────────────

    def _deliver(self, outcome: InvocationOutcome) -> None:
        """Called on the job's thread; post_message is thread-safe."""
        self.post_message(_InvocationFinished(outcome))

    def on__invocation_finished(self, message: _InvocationFinished) -> None:
        self._controller.apply_outcome(message.outcome)
        self._redraw()

    # ─── Rendering ─────────────────────────────────────────────────────

    def _redraw(self) -> None:
        frame = self.query_one("#frame", Static)
        frame.update(rendering.render(self._controller, self.size.width, self.size.height))

    async def on_key(self, event) -> None:
        """// [LAW:single-enforcer] on_key is the sole key dispatcher.

        Every key is classified into exactly one trigger for the controller.
        """
        event.prevent_default()
        event.stop()
        controller = self._controller
        controller.log.debug(f"Key pressed: {event.key}")
        trigger = input_modes.classify(event.key, event.character, controller.view, controller.focus)
        self._apply(controller.handle(trigger))
