"""Tests for logging setup."""

import io
import logging

import pytest

from mcp_bridge.log import LOGGER_NAME, TRACE, configure_logging, to_python_level, trace


@pytest.fixture(autouse=True)
def restore_logger():
    logger = logging.getLogger(LOGGER_NAME)
    handlers, level, propagate = logger.handlers[:], logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


@pytest.mark.parametrize(
    "name, level",
    [
        ("trace", TRACE),
        ("debug", logging.DEBUG),
        ("info", logging.INFO),
        ("warn", logging.WARNING),
        ("error", logging.ERROR),
        ("fatal", logging.CRITICAL),
        ("WARN", logging.WARNING),
    ],
)
def test_level_mapping(name, level):
    assert to_python_level(name) == level


def test_unknown_level():
    with pytest.raises(ValueError, match="Unknown log level"):
        to_python_level("verbose")


def test_configure_writes_tagged_lines_to_stream():
    stream = io.StringIO()
    configure_logging("warn", stream=stream)

    child = logging.getLogger(f"{LOGGER_NAME}.bridge")
    child.info("hidden")
    child.warning("shown")

    output = stream.getvalue()
    assert "hidden" not in output
    assert "[MCP-Bridge]" in output
    assert "shown" in output


def test_configure_twice_keeps_one_handler():
    configure_logging("info", stream=io.StringIO())
    logger = configure_logging("debug", stream=io.StringIO())
    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG


def test_trace_level():
    stream = io.StringIO()
    logger = configure_logging("trace", stream=stream)
    trace(logger, "wire dump")
    assert "TRACE" in stream.getvalue()
    assert "wire dump" in stream.getvalue()
