"""CLI entry point for mcp-console."""

import argparse
import logging
import sys

from mcp_console.config import DEFAULT_TRANSCRIPT, SessionConfig
from mcp_console.core.controller import SessionController
from mcp_console.core.diagnostic_log import DiagnosticLog
from mcp_console.io.transcript import TranscriptWriter
from mcp_console.remote.catalog import fetch_catalog
from mcp_console.remote.client import McpRemote
from mcp_console.remote.errors import ConnectionFailed
from mcp_console.remote.transport import (
    HttpTarget,
    SseTarget,
    StdioTarget,
    Target,
    parse_env,
    parse_headers,
)
from mcp_console.tui.app import McpConsoleApp
import mcp_console.io.logging_setup

logger = logging.getLogger(__name__)


def _add_session_options(parser: argparse.ArgumentParser, default) -> None:
    """Options accepted both before and after the connection mode."""
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=default if default is argparse.SUPPRESS else False,
        help="Log key presses and state changes, and keep a transcript file",
    )
    parser.add_argument(
        "--transcript",
        type=str,
        default=default if default is argparse.SUPPRESS else None,
        help=f"Transcript path for verbose mode (default: {DEFAULT_TRANSCRIPT}). Env: MCP_CONSOLE_TRANSCRIPT",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=default if default is argparse.SUPPRESS else None,
        help="Per-request timeout in seconds (default: 30). Env: MCP_CONSOLE_TIMEOUT",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcp-console",
        description="Interactive terminal console for Model Context Protocol servers",
    )
    _add_session_options(parser, None)

    modes = parser.add_subparsers(dest="mode", metavar="MODE", required=True)

    stdio = modes.add_parser("stdio", help="Spawn a local server process and talk over stdin/stdout")
    stdio.add_argument("command_line", help='Server command line, e.g. "npx -y @modelcontextprotocol/server-everything"')
    stdio.add_argument(
        "-e",
        "--env",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Environment override for the server process (repeatable)",
    )
    _add_session_options(stdio, argparse.SUPPRESS)

    for name, help_text in (
        ("sse", "Connect to a server-sent events endpoint"),
        ("http", "Connect to a streamable HTTP endpoint"),
    ):
        sub = modes.add_parser(name, help=help_text)
        sub.add_argument("url", help="Endpoint URL")
        sub.add_argument(
            "-H",
            "--header",
            action="append",
            default=[],
            metavar='"Name: value"',
            help="Extra HTTP header (repeatable)",
        )
        _add_session_options(sub, argparse.SUPPRESS)

    return parser


def build_target(args: argparse.Namespace) -> Target:
    if args.mode == "stdio":
        return StdioTarget.from_command_line(args.command_line, env=parse_env(args.env))
    if args.mode == "sse":
        return SseTarget(url=args.url, headers=parse_headers(args.header))
    return HttpTarget(url=args.url, headers=parse_headers(args.header))


def build_log(config: SessionConfig) -> DiagnosticLog:
    transcript = TranscriptWriter(config.transcript_path) if config.verbose else None
    return DiagnosticLog(verbose=config.verbose, transcript=transcript)


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = SessionConfig.resolve(
            verbose=args.verbose, transcript_path=args.transcript, timeout=args.timeout
        )
        target = build_target(args)
    except ValueError as e:
        parser.error(str(e))

    runtime = mcp_console.io.logging_setup.configure(session_name=args.mode)
    logger.info("log file: %s (level %s)", runtime.file_path, runtime.level_name)

    try:
        log = build_log(config)
    except OSError as e:
        print(f"Error: cannot open transcript {config.transcript_path}: {e}", file=sys.stderr)
        return 1

    remote = McpRemote(
        target,
        timeout=config.timeout,
        client_name=config.client_name,
        client_version=config.client_version,
    )
    try:
        remote.connect()
    except ConnectionFailed as e:
        print(f"Error: {e}", file=sys.stderr)
        log.close()
        return 1

    try:
        log.record(f"Connected to {remote.server_name or 'server'} ({target.describe()})")
        fetch = fetch_catalog(remote)
        controller = SessionController.from_fetch(fetch, log)
        app = McpConsoleApp(controller, remote)
        with mcp_console.io.logging_setup.stream_suspended():
            app.run()
        # Dump buffered errors to stderr (TUI is gone, terminal is restored)
        if app._error_log:
            logger.error("[mcp-console] Errors during session:")
            for line in app._error_log:
                logger.error("  %s", line)
    finally:
        remote.close()
        log.close()
    return 0
