"""Pytest configuration and shared fixtures for mcp-console tests."""

import pytest

from mcp_console.core.diagnostic_log import DiagnosticLog
from mcp_console.core.outcome import CallResult, TextItem
from mcp_console.remote.catalog import CatalogSnapshot
from mcp_console.remote.errors import RemoteError
from tests.harness.fakes import ADD, BROKEN, GREETING, PING, README, FakeRemote


@pytest.fixture
def add_ping_catalog():
    return CatalogSnapshot(
        operations=(ADD, PING),
        resources=(README, BROKEN),
        prompts=(GREETING,),
    )


@pytest.fixture
def fake_remote(add_ping_catalog):
    return FakeRemote(
        operations=add_ping_catalog.operations,
        resources=add_ping_catalog.resources,
        prompts=add_ping_catalog.prompts,
        tool_results={
            "ping": CallResult(items=(TextItem("pong"),)),
            "add": lambda args: CallResult(items=(TextItem(str(args["a"] + args["b"])),)),
        },
        resource_contents={
            README.uri: (TextItem("# Readme"),),
            BROKEN.uri: RemoteError("read resource 'file:///broken' failed: connection reset"),
        },
    )


@pytest.fixture
def log():
    return DiagnosticLog(verbose=True)
