"""Abstract input triggers consumed by the session controller.

Raw key events are classified into these by tui.input_modes.classify().
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ListKind(Enum):
    TOOL = "tool"
    RESOURCE = "resource"
    PROMPT = "prompt"


class TriggerKind(Enum):
    SELECT = "select"
    ADVANCE_FIELD = "advance_field"
    CYCLE_FIELD = "cycle_field"
    SWITCH_KIND = "switch_kind"
    CANCEL = "cancel"
    QUIT = "quit"
    TOGGLE_FOCUS = "toggle_focus"
    SCROLL = "scroll"
    DUMP = "dump"
    LITERAL = "literal"


# Scroll amounts that mean "jump to an end" rather than a line count.
SCROLL_TOP = "top"
SCROLL_BOTTOM = "bottom"


@dataclass(frozen=True)
class Trigger:
    kind: TriggerKind
    list_kind: ListKind | None = None  # SWITCH_KIND target
    amount: int | str = 0  # SCROLL lines, or SCROLL_TOP / SCROLL_BOTTOM
    key: str = ""  # LITERAL
    character: str | None = None  # LITERAL


def select() -> Trigger:
    return Trigger(TriggerKind.SELECT)


def advance_field() -> Trigger:
    return Trigger(TriggerKind.ADVANCE_FIELD)


def cycle_field() -> Trigger:
    return Trigger(TriggerKind.CYCLE_FIELD)


def switch_kind(kind: ListKind) -> Trigger:
    return Trigger(TriggerKind.SWITCH_KIND, list_kind=kind)


def cancel() -> Trigger:
    return Trigger(TriggerKind.CANCEL)


def quit_() -> Trigger:
    return Trigger(TriggerKind.QUIT)


def toggle_focus() -> Trigger:
    return Trigger(TriggerKind.TOGGLE_FOCUS)


def scroll(amount: int | str) -> Trigger:
    return Trigger(TriggerKind.SCROLL, amount=amount)


def dump() -> Trigger:
    return Trigger(TriggerKind.DUMP)


def literal(key: str, character: str | None = None) -> Trigger:
    return Trigger(TriggerKind.LITERAL, key=key, character=character)
