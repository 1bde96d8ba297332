"""Pure mode system for key dispatch.

All keyboard input routes through on_key, which calls classify() and hands
the resulting trigger to the session controller. classify() is total: any
key that is not bound in the current mode comes back as a literal trigger.
"""

from enum import Enum, auto

from mcp_console.core import triggers
from mcp_console.core.controller import FocusTarget, ViewKind, ViewState
from mcp_console.core.triggers import ListKind, Trigger


class InputMode(Enum):
    """Input modes derived from view and focus."""

    BROWSE = auto()
    ENTRY = auto()
    TEXT = auto()  # result display / resource detail
    DEBUG = auto()  # debug pane focused, any view


def input_mode(view: ViewState, focus: FocusTarget) -> InputMode:
    if focus == FocusTarget.DEBUG:
        return InputMode.DEBUG
    return {
        ViewKind.BROWSING: InputMode.BROWSE,
        ViewKind.ARGUMENT_ENTRY: InputMode.ENTRY,
        ViewKind.RESULT_DISPLAY: InputMode.TEXT,
        ViewKind.RESOURCE_DETAIL: InputMode.TEXT,
    }[view.kind]


# Bound in every mode, checked before the per-mode map.
GLOBAL_KEYS: dict[str, Trigger] = {
    "ctrl+c": triggers.quit_(),
    "ctrl+q": triggers.quit_(),
    "escape": triggers.cancel(),
    "ctrl+o": triggers.toggle_focus(),
    "f2": triggers.dump(),
}

# [LAW:one-source-of-truth] Key -> trigger mapping per mode.
# ENTRY: tab cycles fields, every unbound key is text for the focused field.
# TEXT: navigation keys arrive as literals and scroll the result.
MODE_KEYMAP: dict[InputMode, dict[str, Trigger]] = {
    InputMode.BROWSE: {
        "enter": triggers.select(),
        "t": triggers.switch_kind(ListKind.TOOL),
        "r": triggers.switch_kind(ListKind.RESOURCE),
        "p": triggers.switch_kind(ListKind.PROMPT),
        "tab": triggers.toggle_focus(),
    },
    InputMode.ENTRY: {
        "enter": triggers.advance_field(),
        "tab": triggers.cycle_field(),
    },
    InputMode.TEXT: {
        "tab": triggers.toggle_focus(),
    },
    InputMode.DEBUG: {
        "tab": triggers.toggle_focus(),
        "up": triggers.scroll(-1),
        "k": triggers.scroll(-1),
        "down": triggers.scroll(1),
        "j": triggers.scroll(1),
        "pageup": triggers.scroll(-10),
        "pagedown": triggers.scroll(10),
        "home": triggers.scroll(triggers.SCROLL_TOP),
        "g": triggers.scroll(triggers.SCROLL_TOP),
        "end": triggers.scroll(triggers.SCROLL_BOTTOM),
        "G": triggers.scroll(triggers.SCROLL_BOTTOM),
    },
}


def classify(key: str, character: str | None, view: ViewState, focus: FocusTarget) -> Trigger:
    """Map one key event to exactly one trigger."""
    bound = GLOBAL_KEYS.get(key)
    if bound is not None:
        return bound
    bound = MODE_KEYMAP[input_mode(view, focus)].get(key)
    if bound is not None:
        return bound
    return triggers.literal(key, character)


# [LAW:one-source-of-truth] Key hint line per mode, shown under the main pane.
FOOTER_KEYS: dict[InputMode, list[tuple[str, str]]] = {
    InputMode.BROWSE: [
        ("↑↓", "move"),
        ("enter", "select"),
        ("t/r/p", "tools/resources/prompts"),
        ("tab", "debug pane"),
        ("^C", "quit"),
    ],
    InputMode.ENTRY: [
        ("enter", "next/call"),
        ("tab", "next field"),
        ("^O", "debug pane"),
        ("esc", "back"),
        ("^C", "quit"),
    ],
    InputMode.TEXT: [
        ("↑↓", "scroll"),
        ("esc", "back"),
        ("tab", "debug pane"),
        ("^C", "quit"),
    ],
    InputMode.DEBUG: [
        ("j/k", "scroll"),
        ("g/G", "top/bottom"),
        ("tab", "main pane"),
        ("^C", "quit"),
    ],
}


def footer_text(view: ViewState, focus: FocusTarget) -> str:
    return "  ".join("{} {}".format(key, desc) for key, desc in FOOTER_KEYS[input_mode(view, focus)])
