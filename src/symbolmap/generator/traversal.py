"""Deterministic discovery of candidate source files."""

from __future__ import annotations

import glob
import os
from pathlib import Path
from typing import Iterable, Iterator, Sequence

try:  # pragma: no cover - exercised via traversal tests
    from pathspec import PathSpec
except ImportError as exc:  # pragma: no cover - dependency guard
    raise RuntimeError(
        "The 'pathspec' package is required for source discovery."
    ) from exc

__all__ = ["has_extension", "iter_glob_files", "iter_source_files"]


def has_extension(path: str | Path, extensions: Iterable[str]) -> bool:
    """Return whether the final suffix of ``path`` is one of ``extensions``."""

    name = os.path.basename(str(path))
    if "." not in name:
        return False
    return name.rsplit(".", 1)[1] in set(extensions)


def _build_spec(patterns: Sequence[str]) -> PathSpec | None:
    if not patterns:
        return None
    return PathSpec.from_lines("gitwildmatch", patterns)


def iter_source_files(
    root: Path,
    *,
    extensions: Sequence[str],
    exclude_dirs: Sequence[str] = (),
    follow_symlinks: bool = True,
) -> Iterator[Path]:
    """Yield files under ``root`` with a matching extension in sorted order.

    Directories matching ``exclude_dirs`` (gitwildmatch patterns relative to
    ``root``) are pruned. Symlinked directories are followed at most once per
    resolved target so cyclic links terminate.
    """

    spec = _build_spec(exclude_dirs)
    visited: set[str] = set()

    for current, dirnames, filenames in os.walk(
        root, followlinks=follow_symlinks
    ):
        real = os.path.realpath(current)
        if real in visited:
            dirnames[:] = []
            continue
        visited.add(real)

        relative = os.path.relpath(current, root)
        kept: list[str] = []
        for dirname in sorted(dirnames):
            candidate = dirname if relative == "." else f"{relative}/{dirname}"
            candidate = candidate.replace(os.sep, "/")
            if spec is not None and spec.match_file(f"{candidate}/"):
                continue
            kept.append(dirname)
        dirnames[:] = kept

        for filename in sorted(filenames):
            if has_extension(filename, extensions):
                yield Path(current) / filename


def iter_glob_files(
    pattern: str,
    *,
    extensions: Sequence[str],
    exclude_dirs: Sequence[str] = (),
    follow_symlinks: bool = True,
) -> Iterator[Path]:
    """Expand ``pattern`` and yield matching files, walking matched folders."""

    for match in sorted(glob.glob(pattern)):
        path = Path(match)
        if path.is_dir():
            yield from iter_source_files(
                path,
                extensions=extensions,
                exclude_dirs=exclude_dirs,
                follow_symlinks=follow_symlinks,
            )
        elif path.is_file() and has_extension(path, extensions):
            yield path
