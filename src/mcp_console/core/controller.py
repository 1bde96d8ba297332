"""Session controller: the state machine behind the console.

Owns view, focus and selection state. Consumes classified triggers and
invocation outcomes one at a time on the host's event thread, and returns
effects (Dispatch, Quit, DumpFrame) for the host to carry out. Never touches
the network or the terminal itself.

States: Browsing(Tool) [initial], Browsing(Resource), Browsing(Prompt),
ArgumentEntry, ResultDisplay, ResourceDetail.

// [LAW:single-enforcer] handle() and apply_outcome() are the only mutators.
// [LAW:one-source-of-truth] pending_job_id decides whether an outcome is current.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from mcp_console.core import outcome as _outcome
from mcp_console.core.arguments import ArgumentForm
from mcp_console.core.diagnostic_log import DiagnosticLog
from mcp_console.core.invoker import Job, ResourceReadJob, ToolCallJob
from mcp_console.core.outcome import InvocationOutcome
from mcp_console.core.triggers import SCROLL_BOTTOM, SCROLL_TOP, ListKind, Trigger, TriggerKind
from mcp_console.remote.catalog import CatalogFetch, CatalogSnapshot, Operation, Resource

logger = logging.getLogger(__name__)


class ViewKind(Enum):
    BROWSING = "browsing"
    ARGUMENT_ENTRY = "argument_entry"
    RESULT_DISPLAY = "result_display"
    RESOURCE_DETAIL = "resource_detail"


@dataclass(frozen=True)
class ViewState:
    kind: ViewKind
    list_kind: ListKind | None = None  # only for BROWSING

    @property
    def label(self) -> str:
        if self.kind == ViewKind.BROWSING:
            return "Browsing({})".format(self.list_kind.value.capitalize())
        return "".join(part.capitalize() for part in self.kind.value.split("_"))


BROWSE_TOOLS = ViewState(ViewKind.BROWSING, ListKind.TOOL)
BROWSE_RESOURCES = ViewState(ViewKind.BROWSING, ListKind.RESOURCE)
BROWSE_PROMPTS = ViewState(ViewKind.BROWSING, ListKind.PROMPT)
ARGUMENT_ENTRY = ViewState(ViewKind.ARGUMENT_ENTRY)
RESULT_DISPLAY = ViewState(ViewKind.RESULT_DISPLAY)
RESOURCE_DETAIL = ViewState(ViewKind.RESOURCE_DETAIL)

_BROWSE_VIEWS = {
    ListKind.TOOL: BROWSE_TOOLS,
    ListKind.RESOURCE: BROWSE_RESOURCES,
    ListKind.PROMPT: BROWSE_PROMPTS,
}


class FocusTarget(Enum):
    MAIN = "main"
    DEBUG = "debug"


# ─── Effects ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Dispatch:
    job: Job


@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class DumpFrame:
    pass


Effect = Dispatch | Quit | DumpFrame

PAGE = 10

# [LAW:dataflow-not-control-flow] Literal keys that move a list selection or
# scroll a text view, as (delta, absolute); absolute wins when set.
_NAV_KEYS: dict[str, tuple[int, str | None]] = {
    "up": (-1, None),
    "k": (-1, None),
    "down": (1, None),
    "j": (1, None),
    "pageup": (-PAGE, None),
    "pagedown": (PAGE, None),
    "home": (0, SCROLL_TOP),
    "g": (0, SCROLL_TOP),
    "end": (0, SCROLL_BOTTOM),
    "G": (0, SCROLL_BOTTOM),
}


def _nav_target(key: str, current: int, count: int) -> int | None:
    move = _NAV_KEYS.get(key)
    if move is None or count <= 0:
        return None
    delta, absolute = move
    if absolute == SCROLL_TOP:
        return 0
    if absolute == SCROLL_BOTTOM:
        return count - 1
    return min(max(current + delta, 0), count - 1)


class SessionController:
    """Finite state machine for one console session."""

    def __init__(
        self,
        catalog: CatalogSnapshot | None,
        log: DiagnosticLog,
        fatal_error: str | None = None,
    ):
        if catalog is None and fatal_error is None:
            raise ValueError("a catalog or a fatal error is required")
        self.catalog = catalog or CatalogSnapshot()
        self.log = log
        self.fatal_error = fatal_error

        self.view: ViewState = BROWSE_TOOLS
        self.focus: FocusTarget = FocusTarget.MAIN
        self.selection: dict[ListKind, int] = {kind: 0 for kind in ListKind}

        self.form: ArgumentForm | None = None
        self.selected_operation: Operation | None = None

        self.pending_job_id: int | None = None
        self._pending_kind: str | None = None  # "tool" | "resource"
        self._next_job_id = 1

        self.result: InvocationOutcome | None = None
        self.result_title = ""
        self.result_scroll = 0

        self.width = 0
        self.height = 0

        if fatal_error is not None:
            self.log.record("Error: {}".format(fatal_error))
            logger.error("catalog fetch failed: %s", fatal_error)
        else:
            counts = self.catalog.counts()
            self.log.record(
                "Catalog loaded: {tools} tools, {resources} resources, {prompts} prompts".format(**counts)
            )

    @classmethod
    def from_fetch(cls, fetch: CatalogFetch, log: DiagnosticLog) -> "SessionController":
        return cls(fetch.snapshot, log, fatal_error=fetch.error)

    # ─── Derived state ─────────────────────────────────────────────────

    @property
    def is_fatal(self) -> bool:
        return self.fatal_error is not None

    @property
    def is_pending(self) -> bool:
        return self.pending_job_id is not None

    def items_for(self, kind: ListKind) -> tuple:
        return {
            ListKind.TOOL: self.catalog.operations,
            ListKind.RESOURCE: self.catalog.resources,
            ListKind.PROMPT: self.catalog.prompts,
        }[kind]

    def selected_item(self, kind: ListKind):
        items = self.items_for(kind)
        if not items:
            return None
        return items[min(self.selection[kind], len(items) - 1)]

    def set_viewport(self, width: int, height: int) -> None:
        """Record terminal dimensions; the debug pane loses two border rows."""
        self.width = width
        self.height = height
        self.log.set_viewport(max(height - 2, 0))

    # ─── View transitions ──────────────────────────────────────────────

    def _set_view(self, view: ViewState) -> None:
        if view != self.view:
            self.log.debug("State change: {} -> {}".format(self.view.label, view.label))
        if view != ARGUMENT_ENTRY:
            self.form = None
        self.view = view

    def _next_job(self) -> int:
        job_id = self._next_job_id
        self._next_job_id += 1
        return job_id

    def _clear_pending(self) -> None:
        self.pending_job_id = None
        self._pending_kind = None

    # ─── Trigger handling ──────────────────────────────────────────────

    def handle(self, trigger: Trigger) -> list[Effect]:
        """Process one classified trigger; return effects for the host."""
        kind = trigger.kind
        if kind == TriggerKind.QUIT:
            return [Quit()]
        if self.is_fatal:
            # Interaction is disabled after a failed startup, except quit.
            return []
        if kind == TriggerKind.TOGGLE_FOCUS:
            self._toggle_focus()
            return []
        if kind == TriggerKind.CANCEL:
            self._cancel()
            return []
        if kind == TriggerKind.DUMP:
            return [DumpFrame()]

        if self.focus == FocusTarget.DEBUG:
            self._handle_debug_pane(trigger)
            return []

        # [LAW:dataflow-not-control-flow] Per-view handler table
        handler = {
            ViewKind.BROWSING: self._handle_browsing,
            ViewKind.ARGUMENT_ENTRY: self._handle_argument_entry,
            ViewKind.RESULT_DISPLAY: self._handle_text_view,
            ViewKind.RESOURCE_DETAIL: self._handle_text_view,
        }[self.view.kind]
        return handler(trigger)

    def _toggle_focus(self) -> None:
        self.focus = FocusTarget.DEBUG if self.focus == FocusTarget.MAIN else FocusTarget.MAIN
        self.log.focused = self.focus == FocusTarget.DEBUG
        if not self.log.focused:
            # Leaving the pane drops any scrolled-up position.
            self.log.scroll_to_bottom()

    def _cancel(self) -> None:
        if self.pending_job_id is not None:
            self.log.debug("Abandoned pending job {}".format(self.pending_job_id))
        self._clear_pending()
        if self.view == RESOURCE_DETAIL:
            self._set_view(BROWSE_RESOURCES)
        else:
            self._set_view(BROWSE_TOOLS)

    def _handle_debug_pane(self, trigger: Trigger) -> None:
        if trigger.kind != TriggerKind.SCROLL:
            return
        if trigger.amount == SCROLL_TOP:
            self.log.scroll_to_top()
        elif trigger.amount == SCROLL_BOTTOM:
            self.log.scroll_to_bottom()
        else:
            self.log.scroll(int(trigger.amount))

    # ─── Browsing ──────────────────────────────────────────────────────

    def _handle_browsing(self, trigger: Trigger) -> list[Effect]:
        list_kind = self.view.list_kind
        if trigger.kind == TriggerKind.SWITCH_KIND and trigger.list_kind is not None:
            if trigger.list_kind != list_kind:
                self._clear_pending()
                self._set_view(_BROWSE_VIEWS[trigger.list_kind])
            return []
        if trigger.kind == TriggerKind.LITERAL:
            target = _nav_target(trigger.key, self.selection[list_kind], len(self.items_for(list_kind)))
            if target is not None:
                self.selection[list_kind] = target
            return []
        if trigger.kind == TriggerKind.SELECT:
            return self._select(list_kind)
        return []

    def _select(self, list_kind: ListKind) -> list[Effect]:
        item = self.selected_item(list_kind)
        if item is None or self.is_pending:
            return []
        if list_kind == ListKind.TOOL:
            return self._select_operation(item)
        if list_kind == ListKind.RESOURCE:
            return self._select_resource(item)
        # Prompts are listed only.
        self.log.record("Prompt '{}' selected (prompts are listed, not invoked)".format(item.name))
        return []

    def _select_operation(self, operation: Operation) -> list[Effect]:
        self.selected_operation = operation
        if not operation.has_parameters:
            self.log.debug("No arguments needed, calling tool directly")
            return [self._dispatch_tool(operation, {})]
        self._set_view(ARGUMENT_ENTRY)
        self.form = ArgumentForm(operation)
        return []

    def _select_resource(self, resource: Resource) -> list[Effect]:
        self._set_view(RESOURCE_DETAIL)
        self.result = None
        self.result_title = resource.name
        self.result_scroll = 0
        job = ResourceReadJob(job_id=self._next_job(), resource=resource)
        self.pending_job_id = job.job_id
        self._pending_kind = "resource"
        self.log.record("Reading resource '{}'".format(resource.uri))
        return [Dispatch(job)]

    # ─── Argument entry ────────────────────────────────────────────────

    def _handle_argument_entry(self, trigger: Trigger) -> list[Effect]:
        form = self.form
        if form is None or self.is_pending:
            return []
        if trigger.kind == TriggerKind.ADVANCE_FIELD:
            if form.advance():
                return []
            self.log.debug("Last argument input, calling tool")
            return self._submit_form(form)
        if trigger.kind == TriggerKind.CYCLE_FIELD:
            form.cycle()
            return []
        if trigger.kind == TriggerKind.LITERAL:
            form.handle_key(trigger.key, trigger.character)
        return []

    def _submit_form(self, form: ArgumentForm) -> list[Effect]:
        coerced = form.coerce()
        for warning in coerced.warnings:
            self.log.record(warning)
            logger.warning("%s", warning)
        return [self._dispatch_tool(form.operation, coerced.values)]

    def _dispatch_tool(self, operation: Operation, arguments: dict) -> Dispatch:
        job = ToolCallJob(job_id=self._next_job(), operation=operation, arguments=arguments)
        self.pending_job_id = job.job_id
        self._pending_kind = "tool"
        self.result = None
        self.result_title = operation.name
        self.result_scroll = 0
        self.log.record(
            "========\nCalling tool '{}' with args:\n{}".format(
                operation.name, _outcome.pretty_json(arguments)
            )
        )
        return Dispatch(job)

    # ─── Result / resource text views ──────────────────────────────────

    def _handle_text_view(self, trigger: Trigger) -> list[Effect]:
        if trigger.kind != TriggerKind.LITERAL or self.result is None:
            return []
        line_count = len(self.result.rendered_text.split("\n"))
        target = _nav_target(trigger.key, self.result_scroll, line_count)
        if target is not None:
            self.result_scroll = target
        return []

    # ─── Outcomes ──────────────────────────────────────────────────────

    def apply_outcome(self, outcome: InvocationOutcome) -> None:
        """Merge a finished job's outcome.

        Outcomes for jobs the current view is no longer waiting on are
        recorded in the log but never change the view.
        """
        if outcome.success:
            self.log.record("Result:\n========\n{}".format(outcome.rendered_text))
        else:
            self.log.record(outcome.rendered_text)
            if outcome.error_detail and outcome.error_detail not in outcome.rendered_text:
                self.log.record("Error: {}".format(outcome.error_detail))

        if outcome.job_id != self.pending_job_id:
            self.log.record("Discarded stale result for job {}".format(outcome.job_id))
            return

        pending_kind = self._pending_kind
        self._clear_pending()
        self.result = outcome
        self.result_scroll = 0
        if pending_kind == "tool":
            self.log.debug("Tool result received")
            self._set_view(RESULT_DISPLAY)
        else:
            self.log.debug("Resource result received")
