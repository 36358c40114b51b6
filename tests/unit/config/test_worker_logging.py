"""Tests for worker logging configuration."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from mcp_worker.config.logging import JsonLineFormatter, configure_logging


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def test_configure_logging_writes_stdout_and_appends_to_file(
    tmp_path, restore_root_logging
) -> None:
    log_file = tmp_path / "worker.log"
    log_file.write_text("previous run\n", encoding="utf-8")

    configure_logging(level="INFO", log_file=str(log_file), structured=False)
    logging.getLogger("mcp_worker.test").info(">>> RECEIVED: payload")
    for handler in logging.getLogger().handlers:
        handler.flush()

    root_handlers = logging.getLogger().handlers
    assert any(
        isinstance(handler, logging.StreamHandler) and handler.stream is sys.stdout
        for handler in root_handlers
    )
    contents = log_file.read_text(encoding="utf-8")
    assert contents.startswith("previous run\n")
    assert ">>> RECEIVED: payload" in contents


def test_configure_logging_without_file_uses_stdout_only(restore_root_logging) -> None:
    configure_logging(level="DEBUG", log_file=None, structured=False)

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert not any(isinstance(h, logging.FileHandler) for h in root.handlers)


def _flush_root() -> None:
    for handler in logging.getLogger().handlers:
        handler.flush()


def test_structured_logging_writes_json_lines(tmp_path, restore_root_logging) -> None:
    log_file = tmp_path / "worker.log"

    configure_logging(level="INFO", log_file=str(log_file), structured=True)
    logging.getLogger("mcp_worker.worker").error("Dropping payload from %s", "q::shell")
    _flush_root()

    lines = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    assert lines[-1]["message"] == "Dropping payload from q::shell"
    assert lines[-1]["level"] == "ERROR"
    assert lines[-1]["logger"] == "mcp_worker.worker"


def test_plain_logging_ignores_unrelated_environment(
    tmp_path, monkeypatch, restore_root_logging
) -> None:
    monkeypatch.setenv("STRUCTURED_LOGS", "true")
    log_file = tmp_path / "worker.log"

    configure_logging(level="INFO", log_file=str(log_file), structured=False)
    logging.getLogger("mcp_worker.worker").info("plain line")
    _flush_root()

    last_line = log_file.read_text(encoding="utf-8").splitlines()[-1]
    assert last_line.endswith(" - INFO - mcp_worker.worker - plain line")


def test_json_formatter_includes_exception_text() -> None:
    try:
        raise RuntimeError("executor exploded")
    except RuntimeError:
        record = logging.LogRecord(
            name="mcp_worker.worker",
            level=logging.ERROR,
            pathname=__file__,
            lineno=1,
            msg="Unhandled exception",
            args=(),
            exc_info=sys.exc_info(),
        )

    payload = json.loads(JsonLineFormatter().format(record))

    assert payload["message"] == "Unhandled exception"
    assert "executor exploded" in payload["exception"]
