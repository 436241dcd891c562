"""Per-file accumulator of declared symbol names."""

from __future__ import annotations

from typing import Iterator

from .keywords import DeclarationKind

__all__ = ["SymbolSet"]


class SymbolSet:
    """Insertion-ordered, de-duplicated buckets of qualified names.

    Example:
        >>> symbols = SymbolSet()
        >>> symbols.add(DeclarationKind.CLASS, "Foo\\\\Bar")
        >>> symbols.add("class", "Foo\\\\Bar")
        >>> symbols.get_all()["class"]
        ['Foo\\\\Bar']
    """

    __slots__ = ("_buckets",)

    def __init__(self) -> None:
        # dict keys keep first-insertion order and collapse duplicates
        self._buckets: dict[DeclarationKind, dict[str, None]] = {
            kind: {} for kind in DeclarationKind
        }

    def add(self, kind: DeclarationKind | str, name: str) -> None:
        """Record ``name`` under ``kind``; repeated inserts are no-ops."""

        self._buckets[DeclarationKind(kind)].setdefault(name, None)

    def get(self, kind: DeclarationKind | str) -> list[str]:
        """Return the names recorded for ``kind``."""

        return list(self._buckets[DeclarationKind(kind)])

    def get_all(self) -> dict[str, list[str]]:
        """Return every bucket keyed by kind name."""

        return {kind.value: list(names) for kind, names in self._buckets.items()}

    def class_like(self) -> list[str]:
        """Return class, interface, trait and enum names in bucket order."""

        names: list[str] = []
        for kind, bucket in self._buckets.items():
            if kind.is_class_like:
                names.extend(bucket)
        return names

    def functions(self) -> list[str]:
        return list(self._buckets[DeclarationKind.FUNCTION])

    def __iter__(self) -> Iterator[tuple[DeclarationKind, str]]:
        for kind, bucket in self._buckets.items():
            for name in bucket:
                yield kind, name

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._buckets.values())

    def __bool__(self) -> bool:
        return any(self._buckets.values())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SymbolSet):
            return NotImplemented
        return self.get_all() == other.get_all()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        populated = {
            kind: names for kind, names in self.get_all().items() if names
        }
        return f"SymbolSet({populated!r})"
