"""Symbol extraction engine for PHP sources.

Two interchangeable strategies implement one contract: the text-scan strategy
walks raw characters while the token-stream strategy walks lexed tokens. Both
return a :class:`SymbolSet` holding the namespace-scope declarations of a
file.

Example:
    >>> from symbolmap.extraction import extract
    >>> extract("<?php namespace Foo; class Bar {} function baz() {}")["class"]
    ['Foo\\\\Bar']
"""

from __future__ import annotations

from pathlib import Path

from .errors import (
    ExtractionError,
    StructuralDelimiterNotFoundError,
    SymbolNotFoundError,
    UnterminatedBodyError,
)
from .keywords import (
    DEFAULT_KEYWORD_TABLE,
    DeclarationKind,
    KeywordRule,
    KeywordTable,
    qualify,
)
from .lexer import Token, TokenKind, TreeSitterUnavailableError, tokenize
from .strategy import (
    DEFAULT_STRATEGY,
    ExtractionOutcome,
    SymbolExtractionStrategy,
    available_strategies,
    create_strategy,
    extract_outcome,
    read_source,
)
from .symbol_map import DEFAULT_DUPLICATES_FILTER, SymbolMap
from .symbols import SymbolSet
from .text_scan import TextScanResult, TextScanStrategy
from .token_stream import TokenStreamStrategy


def extract(
    source: str,
    *,
    strategy: str = DEFAULT_STRATEGY,
) -> dict[str, list[str]]:
    """Return the declarations of ``source`` bucketed by kind.

    Raises:
        UnterminatedBodyError: If a declaration body never closes.
        StructuralDelimiterNotFoundError: If a declaration has no body.
    """

    return create_strategy(strategy).extract(source).get_all()


def extract_file(
    path: str | Path,
    *,
    strategy: str = DEFAULT_STRATEGY,
) -> dict[str, list[str]]:
    """Read ``path`` and return its declarations bucketed by kind."""

    return extract(read_source(path), strategy=strategy)


__all__ = [
    "DEFAULT_DUPLICATES_FILTER",
    "DEFAULT_KEYWORD_TABLE",
    "DEFAULT_STRATEGY",
    "DeclarationKind",
    "ExtractionError",
    "ExtractionOutcome",
    "KeywordRule",
    "KeywordTable",
    "StructuralDelimiterNotFoundError",
    "SymbolExtractionStrategy",
    "SymbolMap",
    "SymbolNotFoundError",
    "SymbolSet",
    "TextScanResult",
    "TextScanStrategy",
    "Token",
    "TokenKind",
    "TokenStreamStrategy",
    "TreeSitterUnavailableError",
    "UnterminatedBodyError",
    "available_strategies",
    "create_strategy",
    "extract",
    "extract_file",
    "extract_outcome",
    "qualify",
    "read_source",
    "tokenize",
]
