"""Cross-file symbol map with an ambiguous-paths ledger."""

from __future__ import annotations

import re
from typing import Iterable, Iterator, Literal

from .errors import SymbolNotFoundError

__all__ = ["DEFAULT_DUPLICATES_FILTER", "SymbolMap"]

# Test and fixture trees routinely redeclare dummy symbols.
DEFAULT_DUPLICATES_FILTER = r"(?i)/(test|fixture|example|stub)s?/"


class SymbolMap:
    """Map symbol names to the first path that declared them.

    Later paths declaring an already mapped name are kept in an ordered
    ledger of ambiguous paths. Keys are case-sensitive, so ``Foo`` and
    ``FOO`` are tracked as distinct symbols.

    Example:
        >>> symbol_map = SymbolMap()
        >>> symbol_map.record("A", "/x")
        >>> symbol_map.record("A", "/y")
        >>> symbol_map.get_symbol_path("A")
        '/x'
        >>> symbol_map.get_ambiguous_symbols(False)
        {'A': ['/y']}
    """

    def __init__(self) -> None:
        self._map: dict[str, str] = {}
        self._ambiguous: dict[str, list[str]] = {}

    def get_map(self) -> dict[str, str]:
        """Return a copy of the name to canonical path mapping."""

        return dict(self._map)

    def add_symbol(self, name: str, path: str) -> None:
        """Set ``path`` as the canonical path for ``name``."""

        self._map[name] = path

    def has_symbol(self, name: str) -> bool:
        return name in self._map

    def get_symbol_path(self, name: str) -> str:
        """Return the canonical path for ``name``.

        Raises:
            SymbolNotFoundError: If ``name`` is not in the map.
        """

        try:
            return self._map[name]
        except KeyError:
            raise SymbolNotFoundError(
                f"Symbol {name} is not present in the map"
            ) from None

    def add_ambiguous_symbol(self, name: str, path: str) -> None:
        """Append ``path`` to the ledger of extra paths for ``name``.

        The canonical path and paths already in the ledger are ignored.
        """

        if self._map.get(name) == path:
            return
        paths = self._ambiguous.setdefault(name, [])
        if path not in paths:
            paths.append(path)

    def record(self, name: str, path: str) -> None:
        """Fold one ``(name, path)`` observation into the map."""

        canonical = self._map.get(name)
        if canonical is None:
            self.add_symbol(name, path)
        elif canonical != path:
            self.add_ambiguous_symbol(name, path)

    def record_all(self, names: Iterable[str], path: str) -> None:
        """Fold every name declared by ``path``."""

        for name in names:
            self.record(name, path)

    def get_ambiguous_symbols(
        self,
        duplicates_filter: str | re.Pattern[str] | Literal[False] = (
            DEFAULT_DUPLICATES_FILTER
        ),
    ) -> dict[str, list[str]]:
        """Return names declared in more than one path.

        Args:
            duplicates_filter: Pattern matched against each ambiguous path
                (with backslashes turned into slashes); matching paths are
                dropped. Pass ``False`` to return the unfiltered ledger.

        Raises:
            ValueError: If ``duplicates_filter`` is ``True``.
        """

        if duplicates_filter is False:
            return {name: list(paths) for name, paths in self._ambiguous.items()}
        if duplicates_filter is True:
            raise ValueError(
                "duplicates_filter should be False or a regular expression, "
                "got True."
            )

        pattern = (
            duplicates_filter
            if isinstance(duplicates_filter, re.Pattern)
            else re.compile(duplicates_filter)
        )
        filtered: dict[str, list[str]] = {}
        for name, paths in self._ambiguous.items():
            kept = [
                path
                for path in paths
                if pattern.search(path.replace("\\", "/")) is None
            ]
            if kept:
                filtered[name] = kept
        return filtered

    def sort(self) -> None:
        """Order the canonical map by symbol name."""

        self._map = dict(sorted(self._map.items()))

    def count(self) -> int:
        return len(self._map)

    def __len__(self) -> int:
        return len(self._map)

    def __contains__(self, name: object) -> bool:
        return name in self._map

    def __iter__(self) -> Iterator[str]:
        return iter(self._map)
