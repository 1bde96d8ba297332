"""Connection targets for the three ways of reaching a server.

A target is plain data; remote.client turns it into an open MCP session.
"""

from __future__ import annotations

import logging
import os
import shlex
from dataclasses import dataclass, field
from typing import Iterable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StdioTarget:
    """Spawn a local process and talk to it over stdin/stdout."""

    command: str
    args: tuple[str, ...] = ()
    env: dict[str, str] = field(default_factory=dict)  # overrides only

    @classmethod
    def from_command_line(cls, command_line: str, env: dict[str, str] | None = None) -> "StdioTarget":
        parts = shlex.split(command_line)
        if not parts:
            raise ValueError("empty command line")
        return cls(command=parts[0], args=tuple(parts[1:]), env=dict(env or {}))

    def process_env(self) -> dict[str, str]:
        """Current environment with the overrides applied on top."""
        merged = dict(os.environ)
        merged.update(self.env)
        return merged

    def describe(self) -> str:
        return "stdio: " + shlex.join((self.command,) + self.args)


@dataclass(frozen=True)
class SseTarget:
    """Server-sent events endpoint."""

    url: str
    headers: dict[str, str] = field(default_factory=dict)

    def describe(self) -> str:
        return "sse: " + self.url


@dataclass(frozen=True)
class HttpTarget:
    """Streamable HTTP endpoint."""

    url: str
    headers: dict[str, str] = field(default_factory=dict)

    def describe(self) -> str:
        return "http: " + self.url


Target = StdioTarget | SseTarget | HttpTarget


def parse_headers(raw: Iterable[str]) -> dict[str, str]:
    """Parse "Name: value" strings. Entries without a colon are ignored."""
    headers: dict[str, str] = {}
    for item in raw:
        name, sep, value = item.partition(":")
        if not sep:
            logger.warning("ignoring header without a colon: %r", item)
            continue
        name = name.strip()
        if not name:
            logger.warning("ignoring header with an empty name: %r", item)
            continue
        headers[name] = value.strip()
    return headers


def parse_env(raw: Iterable[str]) -> dict[str, str]:
    """Parse KEY=VALUE strings. Entries without '=' are ignored."""
    env: dict[str, str] = {}
    for item in raw:
        key, sep, value = item.partition("=")
        key = key.strip()
        if not sep or not key:
            logger.warning("ignoring environment override without KEY=VALUE form: %r", item)
            continue
        env[key] = value
    return env
