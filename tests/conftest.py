"""Shared pytest fixtures for the symbolmap test-suite."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
import structlog

from symbolmap.extraction import available_strategies

from php_corpus import PHP_CORPUS, php


def pytest_generate_tests(metafunc: pytest.Metafunc) -> None:
    if "corpus_case" in metafunc.fixturenames:
        metafunc.parametrize(
            "corpus_case",
            PHP_CORPUS,
            ids=[case.id for case in PHP_CORPUS],
        )
    if "strategy_name" in metafunc.fixturenames:
        metafunc.parametrize("strategy_name", available_strategies())


def _clear_root_handlers() -> None:
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()


@pytest.fixture(autouse=True)
def reset_logging_state() -> Iterator[None]:
    """Ensure each test runs with a clean logging configuration."""

    _clear_root_handlers()
    yield
    _clear_root_handlers()
    structlog.reset_defaults()


@pytest.fixture
def write_php(tmp_path: Path) -> Callable[[str, str], Path]:
    """Return a helper writing dedented PHP ``source`` under ``tmp_path``."""

    def _write(relative: str, source: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(php(source), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def php_project(write_php: Callable[[str, str], Path], tmp_path: Path) -> Path:
    """Create a small project tree with duplicated declarations."""

    write_php(
        "src/Model/User.php",
        r"""
        <?php
        namespace App\Model;

        class User {}
        """,
    )
    write_php(
        "src/Model/Role.php",
        r"""
        <?php
        namespace App\Model;

        interface Role {}
        enum Level: int { case Low = 1; }
        """,
    )
    write_php(
        "src/helpers.php",
        r"""
        <?php
        namespace App;

        function format_name() {}
        """,
    )
    write_php(
        "legacy/User.php",
        r"""
        <?php
        namespace App\Model;

        class User {}
        """,
    )
    write_php(
        "tests/Fixtures/User.php",
        r"""
        <?php
        namespace App\Model;

        class User {}
        """,
    )
    write_php("src/README.txt", "class NotPhp {}")
    return tmp_path
