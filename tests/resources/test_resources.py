"""Tests for :mod:`symbolmap.resources`."""

from __future__ import annotations

import tomllib

import pytest

from symbolmap.resources import get_resource


def test_get_resource_missing_file_raises() -> None:
    with pytest.raises(FileNotFoundError):
        get_resource("does-not-exist.toml")


def test_packaged_defaults_are_valid_toml() -> None:
    resource = get_resource("symbolmap.defaults.toml")

    defaults = tomllib.loads(resource.read_text(encoding="utf-8"))

    assert defaults["extraction"]["strategy"] == "text"
    assert defaults["scan"]["extensions"] == ["php", "inc"]
