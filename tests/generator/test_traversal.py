"""Tests for :mod:`symbolmap.generator.traversal`."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from symbolmap.generator import iter_glob_files, iter_source_files
from symbolmap.generator.traversal import has_extension


def _touch(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("<?php\n", encoding="utf-8")


def _relative(root: Path, paths) -> list[str]:
    return [path.relative_to(root).as_posix() for path in paths]


def test_walk_is_sorted_and_filters_extensions(tmp_path: Path) -> None:
    for name in ("b/Two.php", "a/One.inc", "a/skip.txt", "Zero.php", "noext"):
        _touch(tmp_path / name)

    files = iter_source_files(tmp_path, extensions=("php", "inc"))

    assert _relative(tmp_path, files) == ["Zero.php", "a/One.inc", "b/Two.php"]


def test_exclude_dirs_use_gitwildmatch_patterns(tmp_path: Path) -> None:
    for name in (
        "src/Keep.php",
        "src/cache/Drop.php",
        "vendor/pkg/Drop.php",
        "lib/vendor/Keep.php",
    ):
        _touch(tmp_path / name)

    files = iter_source_files(
        tmp_path,
        extensions=("php",),
        exclude_dirs=("/vendor", "cache"),
    )

    assert _relative(tmp_path, files) == ["lib/vendor/Keep.php", "src/Keep.php"]


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
def test_symlink_cycles_terminate(tmp_path: Path) -> None:
    _touch(tmp_path / "pkg" / "A.php")
    try:
        (tmp_path / "pkg" / "loop").symlink_to(tmp_path / "pkg")
    except OSError:  # pragma: no cover - platform without symlink rights
        pytest.skip("cannot create symlinks")

    files = _relative(
        tmp_path,
        iter_source_files(tmp_path, extensions=("php",)),
    )

    assert files == ["pkg/A.php"]


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
def test_symlinked_directories_can_be_ignored(tmp_path: Path) -> None:
    _touch(tmp_path / "real" / "A.php")
    root = tmp_path / "root"
    root.mkdir()
    try:
        (root / "linked").symlink_to(tmp_path / "real")
    except OSError:  # pragma: no cover - platform without symlink rights
        pytest.skip("cannot create symlinks")

    followed = _relative(root, iter_source_files(root, extensions=("php",)))
    ignored = _relative(
        root,
        iter_source_files(root, extensions=("php",), follow_symlinks=False),
    )

    assert followed == ["linked/A.php"]
    assert ignored == []


def test_glob_expansion_walks_matched_folders(tmp_path: Path) -> None:
    _touch(tmp_path / "mod-a" / "src" / "A.php")
    _touch(tmp_path / "mod-b" / "B.php")
    _touch(tmp_path / "mod-c.php")
    _touch(tmp_path / "other" / "C.php")

    files = iter_glob_files(str(tmp_path / "mod-*"), extensions=("php",))

    assert _relative(tmp_path, files) == [
        "mod-a/src/A.php",
        "mod-b/B.php",
        "mod-c.php",
    ]


def test_has_extension_uses_final_suffix() -> None:
    assert has_extension("a/Foo.php", ["php"])
    assert has_extension("Foo.class.inc", ["inc"])
    assert not has_extension("Foo.php.bak", ["php"])
    assert not has_extension("Makefile", ["php"])
