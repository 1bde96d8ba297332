"""Catalog data model: immutable listings fetched once at session start.

// [LAW:one-source-of-truth] CatalogSnapshot is the only copy of the server's
//   listings. Nothing rebuilds it after startup.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from mcp_console.remote.errors import RemoteError

# Declared parameter types the argument form knows how to coerce.
KNOWN_TYPES = ("string", "number", "integer", "boolean")


@dataclass(frozen=True)
class Parameter:
    name: str
    type: str | None = None  # None = undeclared, passed through as text
    description: str = ""
    required: bool = False


@dataclass(frozen=True)
class Operation:
    """A remote tool: name, description and its declared parameter schema."""

    name: str
    description: str = ""
    parameters: tuple[Parameter, ...] = ()

    @property
    def has_parameters(self) -> bool:
        return bool(self.parameters)


@dataclass(frozen=True)
class Resource:
    name: str
    uri: str
    description: str = ""
    mime_type: str | None = None


@dataclass(frozen=True)
class PromptDescriptor:
    name: str
    description: str = ""
    arguments: tuple[str, ...] = ()


@dataclass(frozen=True)
class CatalogSnapshot:
    operations: tuple[Operation, ...] = ()
    resources: tuple[Resource, ...] = ()
    prompts: tuple[PromptDescriptor, ...] = ()

    def counts(self) -> dict[str, int]:
        return {
            "tools": len(self.operations),
            "resources": len(self.resources),
            "prompts": len(self.prompts),
        }


def _declared_type(prop: Mapping[str, Any]) -> str | None:
    raw = prop.get("type")
    # Union types ("type": ["string", "null"]) are not coerced.
    if isinstance(raw, str) and raw in KNOWN_TYPES:
        return raw
    return None


def parameters_from_schema(schema: Mapping[str, Any] | None) -> tuple[Parameter, ...]:
    """Build parameters from a JSON-schema object, keeping declaration order."""
    if not isinstance(schema, Mapping):
        return ()
    properties = schema.get("properties") or {}
    if not isinstance(properties, Mapping):
        return ()
    raw_required = schema.get("required")
    if isinstance(raw_required, (list, tuple)):
        required = {r for r in raw_required if isinstance(r, str)}
    else:
        required = set()
    params = []
    for name, prop in properties.items():
        prop = prop if isinstance(prop, Mapping) else {}
        params.append(
            Parameter(
                name=str(name),
                type=_declared_type(prop),
                description=str(prop.get("description") or ""),
                required=name in required,
            )
        )
    return tuple(params)


def operation_from_tool(tool: Any) -> Operation:
    """Convert an ``mcp.types.Tool`` (or anything shaped like one)."""
    return Operation(
        name=tool.name,
        description=tool.description or "",
        parameters=parameters_from_schema(getattr(tool, "inputSchema", None)),
    )


def resource_from_mcp(resource: Any) -> Resource:
    return Resource(
        name=resource.name,
        uri=str(resource.uri),
        description=resource.description or "",
        mime_type=getattr(resource, "mimeType", None),
    )


def prompt_from_mcp(prompt: Any) -> PromptDescriptor:
    arguments = getattr(prompt, "arguments", None) or ()
    return PromptDescriptor(
        name=prompt.name,
        description=prompt.description or "",
        arguments=tuple(arg.name for arg in arguments),
    )


@dataclass
class CatalogFetch:
    """Result of the one-time startup fetch: a snapshot or the fatal error."""

    snapshot: CatalogSnapshot | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.snapshot is not None


def fetch_catalog(remote) -> CatalogFetch:
    """Fetch operations, resources and prompts once.

    Any failure is fatal for the session; it is reported, never retried.
    """
    try:
        operations = tuple(remote.list_operations())
        resources = tuple(remote.list_resources())
        prompts = tuple(remote.list_prompts())
    except RemoteError as exc:
        return CatalogFetch(error=str(exc))
    return CatalogFetch(
        snapshot=CatalogSnapshot(
            operations=operations, resources=resources, prompts=prompts
        )
    )
