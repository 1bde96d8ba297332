"""Argument form for the selected operation, and typed coercion on dispatch.

Fields are always free-form text. Types only matter when the form is
submitted: each field is coerced by the function registered for its
declared type. Coercion never blocks a call; a value that does not parse is
replaced by the type's zero value and reported as a warning.

// [LAW:one-source-of-truth] _COERCERS maps declared type -> coercion.
// [LAW:dataflow-not-control-flow] Parse failures are values (warnings), not exceptions.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable

from mcp_console.remote.catalog import Operation


@dataclass
class FieldState:
    name: str
    type: str | None
    text: str = ""
    focused: bool = False
    cursor_pos: int = 0
    description: str = ""
    required: bool = False

    def handle_key(self, key: str, character: str | None) -> bool:
        """Apply an editing key. Returns True if the key was consumed."""
        pos = self.cursor_pos
        value = self.text

        # [LAW:dataflow-not-control-flow] Lookup table for cursor-only mutations
        _CURSOR_MOVES = {
            "left": lambda v, p: max(0, p - 1),
            "right": lambda v, p: min(len(v), p + 1),
            "home": lambda v, p: 0,
            "end": lambda v, p: len(v),
            "ctrl+a": lambda v, p: 0,
            "ctrl+e": lambda v, p: len(v),
        }
        if key in _CURSOR_MOVES:
            self.cursor_pos = _CURSOR_MOVES[key](value, pos)
            return True

        if key == "backspace":
            if pos > 0:
                self.text = value[:pos - 1] + value[pos:]
                self.cursor_pos = pos - 1
            return True

        if key == "delete":
            if pos < len(value):
                self.text = value[:pos] + value[pos + 1:]
            return True

        if key == "ctrl+u":
            self.text = value[pos:]
            self.cursor_pos = 0
            return True

        if character and character.isprintable():
            self.text = value[:pos] + character + value[pos:]
            self.cursor_pos = pos + len(character)
            return True
        return False


# ─── Coercion ────────────────────────────────────────────────────────────────

_TRUE_WORDS = frozenset({"1", "t", "true"})
_FALSE_WORDS = frozenset({"0", "f", "false"})


class CoercionError(ValueError):
    pass


def _parse_number(text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise CoercionError("not a number: {!r}".format(text)) from None
    if not math.isfinite(value):
        raise CoercionError("not a finite number: {!r}".format(text))
    return value


def _parse_integer(text: str) -> int:
    try:
        return int(text, 10)
    except ValueError:
        raise CoercionError("not an integer: {!r}".format(text)) from None


def _parse_boolean(text: str) -> bool:
    lowered = text.lower()
    if lowered in _TRUE_WORDS:
        return True
    if lowered in _FALSE_WORDS:
        return False
    raise CoercionError("not a boolean: {!r}".format(text))


@dataclass(frozen=True)
class _Coercer:
    empty: Any
    parse: Callable[[str], Any]


# [LAW:one-source-of-truth] Declared type -> (value for empty input, parser).
# Parse failures fall back to the empty value.
_COERCERS: dict[str, _Coercer] = {
    "number": _Coercer(empty=0.0, parse=_parse_number),
    "integer": _Coercer(empty=0, parse=_parse_integer),
    "boolean": _Coercer(empty=False, parse=_parse_boolean),
}


@dataclass
class Coerced:
    values: dict[str, Any] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)


def coerce_value(declared_type: str | None, text: str) -> tuple[Any, str | None]:
    """Coerce one raw field value. Returns (value, warning or None)."""
    coercer = _COERCERS.get(declared_type or "")
    if coercer is None:
        return text, None
    stripped = text.strip()
    if not stripped:
        return coercer.empty, None
    try:
        return coercer.parse(stripped), None
    except CoercionError as exc:
        return coercer.empty, str(exc)


def coerce_fields(fields) -> Coerced:
    result = Coerced()
    for f in fields:
        value, problem = coerce_value(f.type, f.text)
        result.values[f.name] = value
        if problem is not None:
            result.warnings.append(
                "Error converting arg '{}' to {}: {}; sending {!r}".format(
                    f.name, f.type, problem, value
                )
            )
    return result


# ─── Form ────────────────────────────────────────────────────────────────────


class ArgumentForm:
    """Typed fields for one operation, ordered by parameter name.

    The order is fixed for the form's lifetime; exactly one field is
    focused at a time.
    """

    def __init__(self, operation: Operation):
        if not operation.parameters:
            raise ValueError("operation {!r} takes no arguments".format(operation.name))
        self.operation = operation
        self.fields: list[FieldState] = [
            FieldState(
                name=p.name,
                type=p.type,
                description=p.description,
                required=p.required,
            )
            for p in sorted(operation.parameters, key=lambda p: p.name)
        ]
        self.focus_index = 0
        self._sync_focus()

    def __len__(self) -> int:
        return len(self.fields)

    @property
    def focused_field(self) -> FieldState:
        return self.fields[self.focus_index]

    @property
    def on_last_field(self) -> bool:
        return self.focus_index == len(self.fields) - 1

    def _sync_focus(self) -> None:
        for i, f in enumerate(self.fields):
            f.focused = i == self.focus_index

    def advance(self) -> bool:
        """Move to the next field without wrapping.

        Returns False when already on the last field (the caller submits).
        """
        if self.on_last_field:
            return False
        self.focus_index += 1
        self._sync_focus()
        return True

    def cycle(self) -> None:
        self.focus_index = (self.focus_index + 1) % len(self.fields)
        self._sync_focus()

    def handle_key(self, key: str, character: str | None) -> bool:
        return self.focused_field.handle_key(key, character)

    def coerce(self) -> Coerced:
        return coerce_fields(self.fields)
