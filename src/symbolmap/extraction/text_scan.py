"""Character-level scanning strategy working directly on raw PHP text."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from symbolmap.core.logging import Logger, get_logger

from .delimiters import STRING_PLACEHOLDER, SourceCursor
from .keywords import (
    CLASS_MODIFIERS,
    DEFAULT_KEYWORD_TABLE,
    DeclarationKind,
    KeywordRule,
    KeywordTable,
    is_identifier_char,
    qualify,
)
from .symbols import SymbolSet

__all__ = [
    "TextScanResult",
    "TextScanStrategy",
    "in_group_use",
    "is_anonymous_class",
    "preceding_word",
]


@dataclass(slots=True)
class TextScanResult:
    """Clean text and symbols produced by one text scan."""

    clean: str
    symbols: SymbolSet = field(default_factory=SymbolSet)
    first_match: str | None = None


class _Step(Enum):
    SKIPPED = "skipped"
    HANDLED = "handled"
    MATCHED = "matched"


def preceding_word(source: str, index: int) -> str:
    """Return the lower-cased identifier before ``index`` skipping whitespace.

    Example:
        >>> preceding_word("$x = new  class {}", 10)
        'new'
    """

    position = _skip_space_back(source, index)
    end = position + 1
    while position >= 0 and is_identifier_char(source[position]):
        position -= 1
    return source[position + 1 : end].lower()


def _skip_space_back(source: str, index: int) -> int:
    position = index - 1
    while position >= 0 and source[position].isspace():
        position -= 1
    return position


def _attribute_start(source: str, close: int) -> int | None:
    """Return the index of ``#[`` opening the group closed at ``close``."""

    depth = 0
    position = close
    while position >= 0:
        char = source[position]
        if char == "]":
            depth += 1
        elif char == "[":
            depth -= 1
            if depth == 0:
                if position > 0 and source[position - 1] == "#":
                    return position - 1
                return None
        position -= 1
    return None


def is_anonymous_class(source: str, index: int) -> bool:
    """Return whether the ``class`` keyword at ``index`` follows ``new``.

    Modifiers and attribute groups between the two are passed over.

    Example:
        >>> is_anonymous_class("new #[A] readonly class {}", 18)
        True
    """

    while True:
        word = preceding_word(source, index)
        if word in CLASS_MODIFIERS:
            index = _skip_space_back(source, index) + 1 - len(word)
            continue
        if word:
            return word == "new"
        position = _skip_space_back(source, index)
        if position < 0 or source[position] != "]":
            return False
        opener = _attribute_start(source, position)
        if opener is None:
            return False
        index = opener


def in_group_use(source: str, index: int) -> bool:
    """Return whether ``index`` sits inside a ``use Foo\\{...}`` group.

    Example:
        >>> in_group_use("use Foo\\\\{Bar, function baz};", 14)
        True
    """

    position = _skip_space_back(source, index)
    if position < 0 or source[position] not in "{,":
        return False
    while position >= 0:
        char = source[position]
        if char == "{":
            before = _skip_space_back(source, position)
            return before >= 0 and source[before] == "\\"
        if not (char in ",\\" or char.isspace() or is_identifier_char(char)):
            return False
        position -= 1
    return False


class _TextScan:
    """Single-use scanner state for one source buffer."""

    def __init__(
        self,
        source: str,
        keywords: KeywordTable,
        max_matches: int | None,
    ) -> None:
        self._cursor = SourceCursor(source)
        self._keywords = keywords
        self._single = max_matches == 1
        self._parts: list[str] = []
        self._namespace = ""
        self._symbols = SymbolSet()

    def run(self) -> TextScanResult:
        cursor = self._cursor
        while not cursor.at_end:
            tag = cursor.skip_language_region_start()
            if not tag:
                break
            self._parts.append(tag)
            first_match = self._scan_region()
            if first_match is not None:
                self._parts.append(first_match)
                return TextScanResult(
                    clean="".join(self._parts),
                    symbols=self._symbols,
                    first_match=first_match,
                )
        return TextScanResult(clean="".join(self._parts), symbols=self._symbols)

    def _scan_region(self) -> str | None:
        cursor = self._cursor
        source = cursor.source
        parts = self._parts
        rest_pattern = self._keywords.rest_pattern

        while not cursor.at_end:
            char = source[cursor.index]
            if char == "?" and cursor.peek(">"):
                parts.append("?>")
                cursor.index += 2
                return None

            if cursor.skip_any_string():
                parts.append(STRING_PLACEHOLDER)
                continue

            if cursor.skip_any_comment():
                continue

            rule = self._keywords.rule_for(char)
            if rule is not None and rule.starts_at(source, cursor.index):
                step, matched = self._handle_keyword(rule)
                if step is _Step.MATCHED:
                    return matched
                if step is _Step.HANDLED:
                    continue

            cursor.index += 1
            run = rest_pattern.match(source, cursor.index)
            if run is None:
                parts.append(char)
            else:
                parts.append(char + run.group(0))
                cursor.index = run.end()
        return None

    def _handle_keyword(self, rule: KeywordRule) -> tuple[_Step, str | None]:
        cursor = self._cursor
        source = cursor.source
        start = cursor.index
        match = rule.match(source, start)

        kind = rule.kind
        if kind is None:
            if match is None:
                return _Step.SKIPPED, None
            cursor.index = start + rule.length
            self._consume_namespace()
            return _Step.HANDLED, None

        if kind is DeclarationKind.CLASS:
            if rule.match_bare(source, start) is not None and (
                is_anonymous_class(source, start)
            ):
                self._skip_declaration()
                return _Step.HANDLED, None
        elif kind is DeclarationKind.FUNCTION:
            if match is not None and (
                preceding_word(source, start) == "use"
                or in_group_use(source, start)
            ):
                return _Step.SKIPPED, None
            if match is None and rule.match_bare(source, start) is not None:
                self._skip_declaration()
                return _Step.HANDLED, None

        if match is None:
            return _Step.SKIPPED, None

        name = qualify(self._namespace, match.group("name"))
        self._symbols.add(kind, name)

        if self._single and kind.is_class_like:
            return _Step.MATCHED, match.group(0)

        self._skip_declaration()
        return _Step.HANDLED, None

    def _skip_declaration(self) -> None:
        cursor = self._cursor
        self._parts.append(cursor.skip_to("{"))
        cursor.skip_balanced_body()
        self._parts.append("{}")

    def _consume_namespace(self) -> None:
        cursor = self._cursor
        source = cursor.source
        name: list[str] = []
        while not cursor.at_end:
            if cursor.skip_any_comment():
                continue
            char = source[cursor.index]
            if char.isspace():
                cursor.index += 1
                continue
            if char == "\\" or is_identifier_char(char):
                name.append(char)
                cursor.index += 1
                continue
            # ``;`` and ``{`` end the name and are copied by the caller
            break
        self._namespace = "".join(name)
        self._parts.append(
            f"namespace {self._namespace}" if self._namespace else "namespace"
        )


class TextScanStrategy:
    """Extract declarations by scanning raw source text.

    The scan also produces a *clean* rendition of the source where strings
    become ``null``, comments disappear and declaration bodies collapse to
    ``{}``.

    Example:
        >>> strategy = TextScanStrategy()
        >>> strategy.extract("<?php namespace Foo; class Bar {}").get("class")
        ['Foo\\\\Bar']
    """

    name = "text"

    def __init__(
        self,
        *,
        keywords: KeywordTable = DEFAULT_KEYWORD_TABLE,
        logger: Logger | None = None,
    ) -> None:
        self._keywords = keywords
        self._logger = logger or get_logger(__name__, strategy=self.name)

    @property
    def keywords(self) -> KeywordTable:
        return self._keywords

    def scan(
        self,
        source: str,
        *,
        max_matches: int | None = None,
    ) -> TextScanResult:
        """Scan ``source`` returning clean text alongside the symbols.

        Args:
            source: Raw PHP source text.
            max_matches: When ``1``, stop at the first class-like declaration
                and return the clean text up to and including its match.

        Raises:
            UnterminatedBodyError: If a declaration body never closes.
            StructuralDelimiterNotFoundError: If a declaration has no body.
        """

        result = _TextScan(source, self._keywords, max_matches).run()
        self._logger.debug(
            "text-scan-complete",
            symbols=len(result.symbols),
            single_match=max_matches == 1,
        )
        return result

    def extract(self, source: str) -> SymbolSet:
        """Return the namespace-scope declarations found in ``source``."""

        return self.scan(source).symbols

    def clean(self, source: str) -> str:
        """Return the cleaned rendition of ``source``."""

        return self.scan(source).clean

    def first_match(self, source: str) -> str | None:
        """Return the clean prefix ending with the first class-like match."""

        result = self.scan(source, max_matches=1)
        if result.first_match is None:
            return None
        return result.clean
