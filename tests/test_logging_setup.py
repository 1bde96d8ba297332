"""Tests for the logging bootstrap."""

import logging

import pytest

import mcp_console.io.logging_setup as logging_setup


@pytest.fixture
def fresh_logging(monkeypatch, tmp_path):
    monkeypatch.setattr(logging_setup, "_RUNTIME", None)
    monkeypatch.setattr(logging_setup, "_STREAM_HANDLER", None)
    monkeypatch.setenv("MCP_CONSOLE_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.delenv("MCP_CONSOLE_LOG_FILE", raising=False)
    monkeypatch.delenv("MCP_CONSOLE_LOG_LEVEL", raising=False)

    logger = logging.getLogger(logging_setup.ROOT_LOGGER)
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield tmp_path
    for handler in logger.handlers:
        if handler not in saved[0]:
            handler.close()
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]
    logging.captureWarnings(False)


def test_configure_writes_to_session_file(fresh_logging):
    runtime = logging_setup.configure(session_name="stdio")
    assert runtime.level_name == "INFO"
    assert runtime.file_path.startswith(str(fresh_logging / "logs" / "stdio-"))

    logging.getLogger("mcp_console.test").info("hello file")
    for handler in logging.getLogger(logging_setup.ROOT_LOGGER).handlers:
        handler.flush()
    with open(runtime.file_path, encoding="utf-8") as f:
        assert "hello file" in f.read()


def test_configure_is_idempotent(fresh_logging):
    first = logging_setup.configure(session_name="a")
    second = logging_setup.configure(session_name="b")
    assert first is second
    assert logging_setup.get_runtime() is first
    assert len(logging.getLogger(logging_setup.ROOT_LOGGER).handlers) == 2


def test_level_and_file_from_env(fresh_logging, monkeypatch):
    path = fresh_logging / "explicit" / "run.log"
    monkeypatch.setenv("MCP_CONSOLE_LOG_LEVEL", "debug")
    monkeypatch.setenv("MCP_CONSOLE_LOG_FILE", str(path))
    runtime = logging_setup.configure()
    assert runtime.level == logging.DEBUG
    assert runtime.file_path == str(path)
    assert path.parent.is_dir()


def test_unknown_level_falls_back_to_info(fresh_logging, monkeypatch):
    monkeypatch.setenv("MCP_CONSOLE_LOG_LEVEL", "chatty")
    assert logging_setup.configure().level == logging.INFO


def test_third_party_loggers_quieted(fresh_logging):
    logging_setup.configure()
    for name in logging_setup.QUIET_LOGGERS:
        assert logging.getLogger(name).level == logging.WARNING


def test_stream_suspended_restores_handler(fresh_logging):
    logging_setup.configure()
    logger = logging.getLogger(logging_setup.ROOT_LOGGER)
    stream = logging_setup._STREAM_HANDLER
    assert stream in logger.handlers

    with logging_setup.stream_suspended():
        assert stream not in logger.handlers
        assert len(logger.handlers) == 1
    assert stream in logger.handlers


def test_safe_name():
    assert logging_setup._safe_name("http://h/mcp") == "http---h-mcp"
    assert logging_setup._safe_name("///") == "session"
