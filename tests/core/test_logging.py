"""Tests for :mod:`symbolmap.core.logging`."""

from __future__ import annotations

import gzip
import io
import json
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest
from rich.console import Console
from rich.logging import RichHandler

from symbolmap.core.logging import configure_logging, get_logger


def _build_console() -> tuple[Console, io.StringIO]:
    """Return a console that writes to an in-memory buffer for tests."""

    buffer = io.StringIO()
    return Console(file=buffer, width=120), buffer


def _flush_all() -> None:
    for handler in logging.getLogger().handlers:
        handler.flush()


def test_configure_logging_installs_console_and_file_handlers(
    tmp_path: Path,
) -> None:
    log_file = tmp_path / "logs" / "symbolmap.log"
    console, _ = _build_console()

    configure_logging(level="debug", log_file=log_file, console=console)

    root = logging.getLogger()
    rich_handlers = [h for h in root.handlers if isinstance(h, RichHandler)]
    file_handlers = [
        h for h in root.handlers if isinstance(h, RotatingFileHandler)
    ]
    assert len(rich_handlers) == 1, "Expected a single Rich console handler"
    assert len(file_handlers) == 1, "Expected a file handler for --log-file"

    logger = get_logger(__name__, command="scan")
    logger.info("symbol-scan-complete", scanned=2)
    _flush_all()

    payload = json.loads(log_file.read_text(encoding="utf-8").strip())
    assert payload["event"] == "symbol-scan-complete"
    assert payload["command"] == "scan"
    assert payload["scanned"] == 2
    assert payload["level"] == "info"


def test_console_handler_respects_level() -> None:
    console, buffer = _build_console()
    configure_logging(level="warning", console=console)

    logger = get_logger("levels")
    logger.info("hidden-event")
    logger.warning("shown-event", path="/x.php")
    _flush_all()

    output = buffer.getvalue()
    assert "shown-event" in output
    assert "hidden-event" not in output


def test_configure_logging_without_log_file_omits_file_handler() -> None:
    console, _ = _build_console()
    configure_logging(level="info", console=console)

    root = logging.getLogger()
    assert any(isinstance(h, RichHandler) for h in root.handlers)
    assert all(
        not isinstance(h, RotatingFileHandler) for h in root.handlers
    ), "No file handler should be registered without a log file"


def test_configure_logging_replaces_previous_handlers() -> None:
    console, _ = _build_console()
    configure_logging(level="info", console=console)
    configure_logging(level="info", console=console)

    assert len(logging.getLogger().handlers) == 1


def test_configure_logging_rejects_unknown_level(tmp_path: Path) -> None:
    console, _ = _build_console()
    with pytest.raises(ValueError):
        configure_logging(
            level="invalid",
            log_file=tmp_path / "symbolmap.log",
            console=console,
        )


def test_configure_logging_rotates_with_compression(tmp_path: Path) -> None:
    log_file = tmp_path / "symbolmap.log"
    console, _ = _build_console()

    configure_logging(level="warning", log_file=log_file, console=console)
    file_handler = next(
        h
        for h in logging.getLogger().handlers
        if isinstance(h, RotatingFileHandler)
    )

    logger = get_logger("rotate", task="rotation")
    logger.warning("pre-rotation", sample=True)
    _flush_all()

    file_handler.doRollover()

    archive = tmp_path / "symbolmap.log.1.gz"
    assert archive.exists(), "Expected a compressed log archive after rollover"
    with gzip.open(archive, "rt", encoding="utf-8") as fh:
        archived = fh.read()

    assert "pre-rotation" in archived
    assert "task" in archived
