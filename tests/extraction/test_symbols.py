"""Tests for :mod:`symbolmap.extraction.symbols`."""

from __future__ import annotations

import pytest

from symbolmap.extraction import DeclarationKind, SymbolSet


def test_add_is_idempotent_and_ordered() -> None:
    symbols = SymbolSet()
    symbols.add("class", "B")
    symbols.add(DeclarationKind.CLASS, "A")
    symbols.add("class", "B")

    assert symbols.get("class") == ["B", "A"]
    assert len(symbols) == 2


def test_get_all_returns_every_bucket() -> None:
    symbols = SymbolSet()
    symbols.add("function", "f")

    assert symbols.get_all() == {
        "class": [],
        "interface": [],
        "trait": [],
        "enum": [],
        "function": ["f"],
    }


def test_class_like_concatenates_type_buckets() -> None:
    symbols = SymbolSet()
    symbols.add("enum", "E")
    symbols.add("trait", "T")
    symbols.add("class", "C")
    symbols.add("interface", "I")
    symbols.add("function", "f")

    assert symbols.class_like() == ["C", "I", "T", "E"]
    assert symbols.functions() == ["f"]
    assert list(symbols)[0] == (DeclarationKind.CLASS, "C")


def test_empty_set_is_falsy_and_equality_compares_buckets() -> None:
    left, right = SymbolSet(), SymbolSet()
    assert not left
    assert left == right

    left.add("trait", "T")
    assert left
    assert left != right
    assert "trait" in repr(left)


def test_unknown_kind_is_rejected() -> None:
    with pytest.raises(ValueError):
        SymbolSet().add("namespace", "Foo")
