"""MCP implementation of the remote-service handle.

The SDK is asyncio-native; the console is not. McpRemote owns a private
event loop on a daemon thread, keeps one ClientSession open inside a single
long-lived task (anyio requires the transport context to be entered and
exited in the same task) and exposes blocking methods that worker threads
call through asyncio.run_coroutine_threadsafe.

// [LAW:single-enforcer] Every SDK/transport exception is converted to
//   RemoteError in _run(); nothing above this module sees SDK types.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import threading
from contextlib import AsyncExitStack
from datetime import timedelta
from typing import Any, Callable

from mcp import ClientSession, StdioServerParameters
from mcp import types
from mcp.client.sse import sse_client
from mcp.client.stdio import stdio_client
from mcp.client.streamable_http import streamablehttp_client

from mcp_console.core.outcome import CallResult, ContentItem, StructuredItem, TextItem
from mcp_console.remote.catalog import (
    Operation,
    PromptDescriptor,
    Resource,
    operation_from_tool,
    prompt_from_mcp,
    resource_from_mcp,
)
from mcp_console.remote.errors import ConnectionFailed, RemoteError
from mcp_console.remote.transport import HttpTarget, SseTarget, StdioTarget, Target

logger = logging.getLogger(__name__)

# Base64 payloads are summarized rather than dumped into the result pane.
_DATA_PREVIEW = 48


# ─── Content conversion ──────────────────────────────────────────────────────


def _summarize_data(payload: dict[str, Any], key: str) -> dict[str, Any]:
    data = payload.get(key)
    if isinstance(data, str) and len(data) > _DATA_PREVIEW:
        payload[key] = "{}... ({} base64 chars)".format(data[:_DATA_PREVIEW], len(data))
    return payload


def _dump(model: Any) -> Any:
    if hasattr(model, "model_dump"):
        return model.model_dump(mode="json", exclude_none=True)
    return model


def _structured(model: Any) -> StructuredItem:
    payload = _dump(model)
    if isinstance(payload, dict):
        payload = _summarize_data(payload, "data")
        payload = _summarize_data(payload, "blob")
    return StructuredItem(kind=type(model).__name__, payload=payload)


def _embedded_resource_item(content: Any) -> ContentItem:
    resource = getattr(content, "resource", None)
    text = getattr(resource, "text", None)
    if isinstance(text, str):
        return TextItem(text)
    return _structured(content)


# [LAW:dataflow-not-control-flow] Tool content type tag -> converter.
_CONTENT_CONVERTERS: dict[str, Callable[[Any], ContentItem]] = {
    "text": lambda content: TextItem(content.text),
    "resource": _embedded_resource_item,
}


def content_item(content: Any) -> ContentItem:
    """Convert one tool-result content block to a ContentItem."""
    converter = _CONTENT_CONVERTERS.get(getattr(content, "type", ""), _structured)
    return converter(content)


def resource_content_item(contents: Any) -> ContentItem:
    """Convert one entry of a read_resource reply."""
    text = getattr(contents, "text", None)
    if isinstance(text, str):
        return TextItem(text)
    return _structured(contents)


def call_result_from_mcp(result: Any) -> CallResult:
    items = tuple(content_item(c) for c in (result.content or ()))
    structured = getattr(result, "structuredContent", None)
    if not items and structured is not None:
        items = (StructuredItem(kind="structuredContent", payload=structured),)
    return CallResult(items=items, is_error=bool(result.isError))


def _describe_exception(exc: BaseException) -> str:
    # anyio task groups wrap the real failure.
    while isinstance(exc, BaseExceptionGroup) and exc.exceptions:
        exc = exc.exceptions[0]
    text = str(exc).strip()
    return "{}: {}".format(type(exc).__name__, text) if text else type(exc).__name__


# ─── Remote handle ───────────────────────────────────────────────────────────


class McpRemote:
    """Blocking facade over an MCP ClientSession for one target."""

    def __init__(
        self,
        target: Target,
        timeout: float = 30.0,
        client_name: str = "mcp-console",
        client_version: str = "0.0.0",
    ):
        self.target = target
        self.timeout = timeout
        self._client_info = types.Implementation(name=client_name, version=client_version)
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._lifecycle_future: concurrent.futures.Future | None = None
        self._ready: concurrent.futures.Future = concurrent.futures.Future()
        self._stop: asyncio.Event | None = None
        self._session: ClientSession | None = None
        self._capabilities: types.ServerCapabilities | None = None
        self.server_name = ""

    # ─── Lifecycle ─────────────────────────────────────────────────────

    def connect(self) -> None:
        """Open the transport and run the initialize handshake.

        Raises ConnectionFailed if the server cannot be reached in time.
        """
        if self._loop is not None:
            return
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run_loop, name="mcp-loop", daemon=True)
        self._thread.start()
        self._lifecycle_future = asyncio.run_coroutine_threadsafe(self._lifecycle(), self._loop)
        logger.info("connecting %s", self.target.describe())
        try:
            init = self._ready.result(timeout=self.timeout)
        except concurrent.futures.TimeoutError:
            self.close()
            raise ConnectionFailed(
                "timed out after {:g}s connecting to {}".format(self.timeout, self.target.describe())
            ) from None
        except Exception as exc:
            self.close()
            raise ConnectionFailed(
                "could not connect to {}: {}".format(self.target.describe(), _describe_exception(exc))
            ) from exc
        info = getattr(init, "serverInfo", None)
        self.server_name = getattr(info, "name", "") or ""
        logger.info("connected server=%s protocol=%s", self.server_name, init.protocolVersion)

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self._loop)
        try:
            self._loop.run_forever()
        finally:
            self._loop.close()

    def _open_transport(self):
        target = self.target
        if isinstance(target, StdioTarget):
            params = StdioServerParameters(
                command=target.command,
                args=list(target.args),
                env=target.process_env(),
            )
            return stdio_client(params)
        if isinstance(target, SseTarget):
            return sse_client(target.url, headers=dict(target.headers), timeout=self.timeout)
        if isinstance(target, HttpTarget):
            return streamablehttp_client(
                target.url,
                headers=dict(target.headers),
                timeout=timedelta(seconds=self.timeout),
            )
        raise ConnectionFailed("unsupported target {!r}".format(target))

    async def _lifecycle(self) -> None:
        self._stop = asyncio.Event()
        try:
            async with AsyncExitStack() as stack:
                streams = await stack.enter_async_context(self._open_transport())
                read, write = streams[0], streams[1]
                session = await stack.enter_async_context(
                    ClientSession(
                        read,
                        write,
                        read_timeout_seconds=timedelta(seconds=self.timeout),
                        client_info=self._client_info,
                    )
                )
                init = await session.initialize()
                self._session = session
                self._capabilities = init.capabilities
                self._ready.set_result(init)
                await self._stop.wait()
        except Exception as exc:
            if not self._ready.done():
                self._ready.set_exception(exc)
            else:
                logger.error("session ended: %s", _describe_exception(exc))
        finally:
            self._session = None

    def close(self) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        if self._stop is not None:
            loop.call_soon_threadsafe(self._stop.set)
        if self._lifecycle_future is not None:
            try:
                self._lifecycle_future.result(timeout=5)
            except Exception as exc:
                logger.warning("session shutdown incomplete: %s", _describe_exception(exc))
        loop.call_soon_threadsafe(loop.stop)
        if self._thread is not None:
            self._thread.join(timeout=5)
        logger.info("closed %s", self.target.describe())

    # ─── Facade plumbing ───────────────────────────────────────────────

    def _run(self, make_coro: Callable[[ClientSession], Any], what: str) -> Any:
        session = self._session
        if self._loop is None or session is None:
            raise RemoteError("not connected ({})".format(what))
        future = asyncio.run_coroutine_threadsafe(make_coro(session), self._loop)
        try:
            return future.result(timeout=self.timeout + 5)
        except concurrent.futures.TimeoutError:
            future.cancel()
            raise RemoteError("{} timed out after {:g}s".format(what, self.timeout)) from None
        except RemoteError:
            raise
        except Exception as exc:
            raise RemoteError("{} failed: {}".format(what, _describe_exception(exc))) from exc

    def _advertises(self, capability: str) -> bool:
        caps = self._capabilities
        return caps is not None and getattr(caps, capability, None) is not None

    @staticmethod
    async def _paginate(fetch_page, attribute: str) -> list:
        items: list = []
        cursor = None
        while True:
            page = await fetch_page(cursor)
            items.extend(getattr(page, attribute) or ())
            cursor = page.nextCursor
            if not cursor:
                return items

    # ─── Remote service ────────────────────────────────────────────────

    def list_operations(self) -> tuple[Operation, ...]:
        if not self._advertises("tools"):
            logger.info("server does not advertise tools")
            return ()
        tools = self._run(
            lambda s: self._paginate(lambda c: s.list_tools(cursor=c), "tools"),
            "list tools",
        )
        return tuple(operation_from_tool(t) for t in tools)

    def list_resources(self) -> tuple[Resource, ...]:
        if not self._advertises("resources"):
            logger.info("server does not advertise resources")
            return ()
        resources = self._run(
            lambda s: self._paginate(lambda c: s.list_resources(cursor=c), "resources"),
            "list resources",
        )
        return tuple(resource_from_mcp(r) for r in resources)

    def list_prompts(self) -> tuple[PromptDescriptor, ...]:
        if not self._advertises("prompts"):
            logger.info("server does not advertise prompts")
            return ()
        prompts = self._run(
            lambda s: self._paginate(lambda c: s.list_prompts(cursor=c), "prompts"),
            "list prompts",
        )
        return tuple(prompt_from_mcp(p) for p in prompts)

    def call_tool(self, name: str, arguments: dict[str, Any]) -> CallResult:
        result = self._run(
            lambda s: s.call_tool(name, arguments=arguments),
            "call tool '{}'".format(name),
        )
        return call_result_from_mcp(result)

    def read_resource(self, uri: str) -> tuple[ContentItem, ...]:
        result = self._run(
            lambda s: s.read_resource(uri),
            "read resource '{}'".format(uri),
        )
        return tuple(resource_content_item(c) for c in result.contents)
