"""Invocation outcomes and result-content rendering.

Result content is a tagged variant: TextItem | StructuredItem. Each tag has
exactly one rendering function, looked up from _RENDERERS.

// [LAW:one-type-per-behavior] One renderer per content tag, no isinstance chains.
// [LAW:dataflow-not-control-flow] Rendering failures become a labeled marker value.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Union

ERROR_PREFIX = "Error:"


@dataclass(frozen=True)
class TextItem:
    text: str
    tag: str = "text"


@dataclass(frozen=True)
class StructuredItem:
    """Non-text content (image, audio, embedded resource, blob...).

    kind names the original content type for the fallback marker.
    """

    kind: str
    payload: Any
    tag: str = "structured"


ContentItem = Union[TextItem, StructuredItem]


@dataclass(frozen=True)
class CallResult:
    """A tool call's reply as seen by the UI."""

    items: tuple[ContentItem, ...] = ()
    is_error: bool = False


@dataclass(frozen=True)
class InvocationOutcome:
    """One-shot result of a job. Produced once, consumed once."""

    job_id: int
    success: bool
    rendered_text: str
    error_detail: str | None = None


def pretty_json(value: Any) -> str:
    """Stable indented JSON (sorted keys, 2 spaces)."""
    return json.dumps(value, indent=2, sort_keys=True, ensure_ascii=False)


def render_text_item(item: TextItem) -> str:
    """Pretty-print text that parses as JSON; otherwise return it raw."""
    try:
        parsed = json.loads(item.text)
    except (json.JSONDecodeError, TypeError, ValueError):
        return item.text
    # Bare JSON scalars ("42", "true") read better as the original text.
    if not isinstance(parsed, (dict, list)):
        return item.text
    return pretty_json(parsed)


def render_structured_item(item: StructuredItem) -> str:
    try:
        return pretty_json(item.payload)
    except (TypeError, ValueError):
        return "Unsupported content type: {}".format(item.kind)


_RENDERERS: dict[str, Callable[[Any], str]] = {
    "text": render_text_item,
    "structured": render_structured_item,
}


def render_item(item: ContentItem) -> str:
    renderer = _RENDERERS.get(item.tag)
    if renderer is None:
        return "Unsupported content type: {}".format(item.tag)
    return renderer(item)


def render_items(items) -> str:
    return "\n".join(render_item(item) for item in items)


def render_call_result(result: CallResult) -> str:
    body = render_items(result.items)
    if result.is_error:
        return "{}\n{}".format(ERROR_PREFIX, body) if body else ERROR_PREFIX
    return body


def failed(job_id: int, detail: str) -> InvocationOutcome:
    """Outcome for a job that raised or whose transport failed."""
    detail = detail or "unknown error"
    return InvocationOutcome(
        job_id=job_id,
        success=False,
        rendered_text="{} {}".format(ERROR_PREFIX, detail),
        error_detail=detail,
    )
