"""Tests for repodoc.logging."""

from __future__ import annotations

import logging
from pathlib import Path

from repodoc.logging import configure_logging, get_logger


def test_get_logger_names_children_under_repodoc() -> None:
    assert get_logger().name == "repodoc"
    assert get_logger("git.history").name == "repodoc.git.history"


def test_configure_logging_replaces_handlers(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "run.log"

    configure_logging(verbose=True, log_file=log_file)
    logger = configure_logging(verbose=False)

    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert logger.propagate is False


def test_configure_logging_writes_file(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "run.log"

    logger = configure_logging(verbose=True, log_file=log_file)
    get_logger("tests").debug("collected %d files", 3)
    for handler in logger.handlers:
        handler.flush()

    assert "DEBUG repodoc.tests: collected 3 files" in log_file.read_text(encoding="utf-8")
    configure_logging()
