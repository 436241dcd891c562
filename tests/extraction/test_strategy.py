"""Tests for :mod:`symbolmap.extraction.strategy`."""

from __future__ import annotations

from pathlib import Path

import pytest

from symbolmap.extraction import (
    DEFAULT_STRATEGY,
    ExtractionOutcome,
    TextScanStrategy,
    TokenStreamStrategy,
    UnterminatedBodyError,
    available_strategies,
    create_strategy,
    extract_outcome,
    read_source,
)


def test_registry_lists_both_strategies() -> None:
    assert available_strategies() == ("text", "token")
    assert DEFAULT_STRATEGY == "text"


def test_create_strategy_normalizes_names() -> None:
    assert isinstance(create_strategy(" TEXT "), TextScanStrategy)
    assert isinstance(create_strategy("token"), TokenStreamStrategy)


def test_create_strategy_rejects_unknown_names() -> None:
    with pytest.raises(ValueError, match="expected one of: text, token"):
        create_strategy("ast")


def test_extract_outcome_success(strategy_name: str) -> None:
    outcome = extract_outcome(
        create_strategy(strategy_name),
        "<?php class Ok {}",
        "/src/Ok.php",
    )

    assert outcome.ok
    assert outcome.path == "/src/Ok.php"
    assert outcome.unwrap().get("class") == ["Ok"]


def test_extract_outcome_captures_structural_failure(strategy_name: str) -> None:
    outcome = extract_outcome(
        create_strategy(strategy_name),
        "<?php class Broken {",
        "/src/Broken.php",
    )

    assert not outcome.ok
    assert outcome.symbols is None
    assert isinstance(outcome.error, UnterminatedBodyError)
    with pytest.raises(UnterminatedBodyError):
        outcome.unwrap()


def test_outcome_is_immutable() -> None:
    outcome = ExtractionOutcome(path="/x.php")

    with pytest.raises(AttributeError):
        outcome.path = "/y.php"  # type: ignore[misc]


def test_outcome_without_symbols_unwraps_to_empty_set() -> None:
    outcome = ExtractionOutcome(path="/x.php")

    assert outcome.ok
    assert len(outcome.unwrap()) == 0


def test_read_source_tolerates_invalid_utf8(tmp_path: Path) -> None:
    path = tmp_path / "bytes.php"
    path.write_bytes(b"<?php // \xff\xfe\n")

    assert read_source(path) == "<?php // \udcff\udcfe\n"
    assert read_source(str(path)).startswith("<?php")
