"""Pure state -> frame rendering.

render() reads the controller and returns a rich renderable sized to the
terminal; render_text() returns the same frame as plain text. Neither
mutates anything.

Layout: main pane (width - width // 3) | debug pane (width // 3). The pane
holding focus gets a heavy yellow border, the other a rounded dim one.

# [LAW:one-way-deps] Reads core state, never writes it.
"""

from __future__ import annotations

import io

from rich import box
from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from mcp_console.core.arguments import ArgumentForm, FieldState
from mcp_console.core.controller import FocusTarget, SessionController, ViewKind
from mcp_console.core.triggers import ListKind
from mcp_console.tui import input_modes

FOCUSED_BORDER = "bold yellow"
UNFOCUSED_BORDER = "dim"
MIN_WIDTH = 24
MIN_HEIGHT = 5

QUIT_HINT = "Press ctrl+c to quit."

_LIST_TITLES = {
    ListKind.TOOL: "Tools",
    ListKind.RESOURCE: "Resources",
    ListKind.PROMPT: "Prompts",
}

_EMPTY_LIST = {
    ListKind.TOOL: "(no tools)",
    ListKind.RESOURCE: "(no resources)",
    ListKind.PROMPT: "(no prompts)",
}


def split_widths(width: int) -> tuple[int, int]:
    """(main, debug) pane widths for a terminal width."""
    debug = width // 3
    return width - debug, debug


def _window(count: int, anchor: int, size: int) -> tuple[int, int]:
    """Start/end indices of a window of `size` rows keeping `anchor` visible."""
    if size <= 0 or count <= 0:
        return 0, 0
    start = min(max(anchor - size // 2, 0), max(count - size, 0))
    return start, min(start + size, count)


def _join(lines: list[Text]) -> Text:
    return Text("\n", no_wrap=True, overflow="ellipsis").join(lines)


# ─── Main pane bodies ────────────────────────────────────────────────────────


def _item_line(item, selected: bool) -> Text:
    line = Text(no_wrap=True, overflow="ellipsis")
    line.append("> " if selected else "  ", style="bold yellow" if selected else "")
    line.append(item.name, style="bold" if selected else "")
    detail = getattr(item, "description", "") or getattr(item, "uri", "")
    if detail:
        line.append("  ")
        line.append(detail.splitlines()[0], style="dim")
    return line


def _list_body(controller: SessionController, list_kind: ListKind, rows: int) -> Text:
    items = controller.items_for(list_kind)
    if not items:
        return Text(_EMPTY_LIST[list_kind], style="dim italic")
    selected = min(controller.selection[list_kind], len(items) - 1)
    status: list[Text] = []
    if controller.is_pending and controller.selected_operation is not None and list_kind == ListKind.TOOL:
        status.append(Text("Calling '{}'...".format(controller.selected_operation.name), style="italic"))
    start, end = _window(len(items), selected, max(rows - len(status), 1))
    lines = [_item_line(items[i], i == selected) for i in range(start, end)]
    return _join(lines + status)


def _field_lines(field: FieldState) -> list[Text]:
    label = Text("  ")
    label.append(field.name, style="bold" if field.focused else "dim bold")
    label.append(" ({})".format(field.type or "string"), style="dim")
    if field.required:
        label.append(" *", style="bold red")

    value = Text("  ")
    if field.focused:
        pos = field.cursor_pos
        text = field.text
        value.append(text[:pos], style="bold")
        value.append(text[pos] if pos < len(text) else " ", style="reverse bold")
        value.append(text[pos + 1:] if pos < len(text) else "", style="bold")
    else:
        value.append(field.text or "", style="dim")

    lines = [label, value]
    if field.description:
        lines.append(Text("  " + field.description.splitlines()[0], style="dim italic", no_wrap=True, overflow="ellipsis"))
    return lines


def _form_body(controller: SessionController, form: ArgumentForm, rows: int) -> Text:
    lines: list[Text] = []
    if form.operation.description:
        lines.append(Text(form.operation.description.splitlines()[0], style="italic", no_wrap=True, overflow="ellipsis"))
        lines.append(Text(""))
    blocks = [_field_lines(f) for f in form.fields]
    block_rows = max(len(b) for b in blocks) + 1
    visible = max((rows - len(lines)) // block_rows, 1)
    start, end = _window(len(blocks), form.focus_index, visible)
    for block in blocks[start:end]:
        lines.extend(block)
        lines.append(Text(""))
    if controller.is_pending:
        lines.append(Text("Calling '{}'...".format(form.operation.name), style="italic"))
    return _join(lines)


def _text_body(controller: SessionController, rows: int, waiting: str) -> Text:
    result = controller.result
    if result is None:
        return Text(waiting, style="italic")
    lines = result.rendered_text.split("\n")
    start = min(controller.result_scroll, max(len(lines) - 1, 0))
    body = Text("\n".join(lines[start:start + max(rows, 1)]))
    if not result.success:
        body.stylize("red")
    return body


def _main_title(controller: SessionController) -> str:
    view = controller.view
    if view.kind == ViewKind.BROWSING:
        items = controller.items_for(view.list_kind)
        return "{} ({})".format(_LIST_TITLES[view.list_kind], len(items))
    if view.kind == ViewKind.ARGUMENT_ENTRY and controller.form is not None:
        return "Arguments: {}".format(controller.form.operation.name)
    if view.kind == ViewKind.RESOURCE_DETAIL:
        return "Resource: {}".format(controller.result_title)
    return "Result: {}".format(controller.result_title)


def _main_body(controller: SessionController, rows: int) -> Text:
    view = controller.view
    if view.kind == ViewKind.BROWSING:
        return _list_body(controller, view.list_kind, rows)
    if view.kind == ViewKind.ARGUMENT_ENTRY and controller.form is not None:
        return _form_body(controller, controller.form, rows)
    if view.kind == ViewKind.RESOURCE_DETAIL:
        return _text_body(controller, rows, "Reading resource...")
    return _text_body(controller, rows, "Waiting for result...")


# ─── Frame ───────────────────────────────────────────────────────────────────


def _pane(body: RenderableType, title: str, focused: bool, width: int, height: int) -> Panel:
    return Panel(
        body,
        title=Text(title),
        title_align="left",
        box=box.HEAVY if focused else box.ROUNDED,
        border_style=FOCUSED_BORDER if focused else UNFOCUSED_BORDER,
        width=width,
        height=height,
    )


def _fatal_frame(controller: SessionController, width: int, height: int) -> Panel:
    body = Text("Error: {}\n\n{}".format(controller.fatal_error, QUIT_HINT), style="red")
    return Panel(body, box=box.ROUNDED, border_style="red", width=width, height=height)


def render(controller: SessionController, width: int, height: int) -> RenderableType:
    """Build the frame for the given terminal size."""
    width = max(width, MIN_WIDTH)
    height = max(height, MIN_HEIGHT)
    if controller.is_fatal:
        return _fatal_frame(controller, width, height)

    main_width, debug_width = split_widths(width)
    inner_rows = height - 2
    main_focused = controller.focus == FocusTarget.MAIN

    hint = Text(
        input_modes.footer_text(controller.view, controller.focus),
        style="dim",
        no_wrap=True,
        overflow="ellipsis",
    )
    body = _main_body(controller, inner_rows - 1)
    # Pad the body so the hint sits on the last row.
    body_lines = body.split("\n", allow_blank=True)[: inner_rows - 1]
    for line in body_lines:
        line.no_wrap = body.no_wrap
    body_lines += [Text("")] * (inner_rows - 1 - len(body_lines))
    main = _pane(Group(*body_lines, hint), _main_title(controller), main_focused, main_width, height)

    log_text = Text("\n".join(controller.log.visible_lines(inner_rows)), no_wrap=True, overflow="ellipsis")
    debug = _pane(log_text, "Debug", not main_focused, debug_width, height)

    grid = Table.grid(padding=0)
    grid.add_column(width=main_width)
    grid.add_column(width=debug_width)
    grid.add_row(main, debug)
    return grid


def render_text(controller: SessionController, width: int, height: int) -> str:
    """The frame as plain text, one terminal row per line."""
    buffer = io.StringIO()
    console = Console(
        file=buffer,
        width=max(width, MIN_WIDTH),
        height=max(height, MIN_HEIGHT),
        color_system=None,
        force_terminal=False,
        legacy_windows=False,
    )
    console.print(render(controller, width, height))
    return buffer.getvalue()
