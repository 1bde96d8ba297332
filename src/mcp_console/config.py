"""Session configuration resolved once at startup.

// [LAW:one-source-of-truth] SessionConfig is the only place verbosity,
//   transcript path and timeout live; everything else receives it explicitly.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from importlib.metadata import PackageNotFoundError, version

logger = logging.getLogger(__name__)

DEFAULT_TRANSCRIPT = "debug.log"
DEFAULT_TIMEOUT = 30.0
CLIENT_NAME = "mcp-console"

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def _package_version() -> str:
    try:
        return version(CLIENT_NAME)
    except PackageNotFoundError:
        return "0.0.0"


def _env_flag(name: str) -> bool:
    return str(os.environ.get(name, "") or "").strip().lower() in _TRUTHY


def _env_timeout(name: str) -> float:
    """Read a positive timeout from env with safe fallback."""
    raw = str(os.environ.get(name, "") or "").strip()
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        parsed = float(raw)
    except ValueError:
        logger.warning("ignoring %s=%r: not a number", name, raw)
        return DEFAULT_TIMEOUT
    if parsed <= 0:
        logger.warning("ignoring %s=%r: must be positive", name, raw)
        return DEFAULT_TIMEOUT
    return parsed


@dataclass(frozen=True)
class SessionConfig:
    verbose: bool = False
    transcript_path: str = DEFAULT_TRANSCRIPT
    timeout: float = DEFAULT_TIMEOUT
    client_name: str = CLIENT_NAME
    client_version: str = "0.0.0"

    @classmethod
    def resolve(
        cls,
        verbose: bool | None = None,
        transcript_path: str | None = None,
        timeout: float | None = None,
    ) -> "SessionConfig":
        """Command-line values win; unset ones fall back to the environment."""
        if timeout is not None and timeout <= 0:
            raise ValueError("timeout must be positive")
        return cls(
            verbose=verbose if verbose else _env_flag("MCP_CONSOLE_VERBOSE"),
            transcript_path=transcript_path
            or os.environ.get("MCP_CONSOLE_TRANSCRIPT")
            or DEFAULT_TRANSCRIPT,
            timeout=timeout if timeout is not None else _env_timeout("MCP_CONSOLE_TIMEOUT"),
            client_version=_package_version(),
        )
