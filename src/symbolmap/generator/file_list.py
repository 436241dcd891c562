"""Membership set of files already folded into a symbol map."""

from __future__ import annotations

from typing import Iterator


class FileList:
    """Remember scanned paths so overlapping scans skip repeated files.

    Example:
        >>> scanned = FileList()
        >>> scanned.add("/src/Foo.php")
        >>> scanned.contains("/src/Foo.php")
        True
    """

    def __init__(self) -> None:
        self._files: set[str] = set()

    def add(self, path: str) -> None:
        self._files.add(path)

    def contains(self, path: str) -> bool:
        return path in self._files

    def __contains__(self, path: object) -> bool:
        return path in self._files

    def __len__(self) -> int:
        return len(self._files)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._files))


__all__ = ["FileList"]
