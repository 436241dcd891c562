"""Strategy protocol, registry and result wrapper for symbol extraction."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping, Protocol

from symbolmap.core.logging import Logger

from .errors import ExtractionError
from .symbols import SymbolSet
from .text_scan import TextScanStrategy
from .token_stream import TokenStreamStrategy

__all__ = [
    "DEFAULT_STRATEGY",
    "ExtractionOutcome",
    "StrategyFactory",
    "SymbolExtractionStrategy",
    "available_strategies",
    "create_strategy",
    "extract_outcome",
    "read_source",
]

DEFAULT_STRATEGY = "text"


class SymbolExtractionStrategy(Protocol):
    """Capability shared by every extraction strategy."""

    name: str

    def extract(self, source: str) -> SymbolSet:
        """Return the namespace-scope declarations found in ``source``."""


StrategyFactory = Callable[..., SymbolExtractionStrategy]

_STRATEGIES: Mapping[str, StrategyFactory] = {
    TextScanStrategy.name: TextScanStrategy,
    TokenStreamStrategy.name: TokenStreamStrategy,
}


def available_strategies() -> tuple[str, ...]:
    """Return the registered strategy names."""

    return tuple(_STRATEGIES)


def create_strategy(
    name: str = DEFAULT_STRATEGY,
    *,
    logger: Logger | None = None,
) -> SymbolExtractionStrategy:
    """Instantiate the strategy registered under ``name``.

    Raises:
        ValueError: If ``name`` is not a registered strategy.

    Example:
        >>> create_strategy("token").name
        'token'
    """

    key = name.strip().lower()
    try:
        factory = _STRATEGIES[key]
    except KeyError as exc:
        known = ", ".join(available_strategies())
        raise ValueError(
            f"Unknown extraction strategy {name!r} (expected one of: {known})"
        ) from exc
    return factory(logger=logger)


def read_source(path: str | Path) -> str:
    """Read ``path`` as text without failing on undecodable bytes."""

    raw = Path(path).read_bytes()
    return raw.decode("utf-8", errors="surrogateescape")


@dataclass(frozen=True, slots=True)
class ExtractionOutcome:
    """Result of extracting one file: symbols on success, error otherwise."""

    path: str
    symbols: SymbolSet | None = None
    error: ExtractionError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> SymbolSet:
        """Return the symbols or re-raise the captured error.

        An outcome carrying neither unwraps to an empty set.
        """

        if self.error is not None:
            raise self.error
        if self.symbols is None:
            return SymbolSet()
        return self.symbols


def extract_outcome(
    strategy: SymbolExtractionStrategy,
    source: str,
    path: str,
) -> ExtractionOutcome:
    """Run ``strategy`` over ``source`` capturing structural failures."""

    try:
        symbols = strategy.extract(source)
    except ExtractionError as exc:
        return ExtractionOutcome(path=path, error=exc)
    return ExtractionOutcome(path=path, symbols=symbols)
