"""Token stream for PHP sources derived from the tree-sitter parse tree.

Leaves of the ``php`` grammar become :class:`Token` values, while string,
heredoc, comment and variable nodes are kept whole. Text the grammar left
between leaves (whitespace, or bytes skipped during error recovery) is split
into tokens as well, so the stream always covers the source exactly.
"""

from __future__ import annotations

import re
import threading
from bisect import bisect_left
from dataclasses import dataclass
from enum import StrEnum
from itertools import accumulate
from typing import Any, Iterator

from .keywords import IDENT_CHAR, IDENT_START

__all__ = [
    "KEYWORD_KINDS",
    "Token",
    "TokenKind",
    "TreeSitterUnavailableError",
    "iter_tokens",
    "tokenize",
]


class TreeSitterUnavailableError(RuntimeError):
    """Raised when the tree-sitter PHP grammar cannot be loaded."""


class TokenKind(StrEnum):
    """Token classification used by :func:`tokenize`."""

    INLINE_HTML = "inline_html"
    OPEN_TAG = "open_tag"
    CLOSE_TAG = "close_tag"
    WHITESPACE = "whitespace"
    COMMENT = "comment"
    STRING = "string"
    HEREDOC = "heredoc"
    VARIABLE = "variable"
    NUMBER = "number"
    NAME = "name"
    NAME_RELATIVE = "name_relative"
    NS_SEPARATOR = "ns_separator"
    CLASS = "class"
    INTERFACE = "interface"
    TRAIT = "trait"
    ENUM = "enum"
    FUNCTION = "function"
    NAMESPACE = "namespace"
    NEW = "new"
    USE = "use"
    DOUBLE_COLON = "double_colon"
    OBJECT_OPERATOR = "object_operator"
    ATTRIBUTE = "attribute"
    PUNCTUATION = "punctuation"


KEYWORD_KINDS: dict[str, TokenKind] = {
    "class": TokenKind.CLASS,
    "interface": TokenKind.INTERFACE,
    "trait": TokenKind.TRAIT,
    "enum": TokenKind.ENUM,
    "function": TokenKind.FUNCTION,
    "namespace": TokenKind.NAMESPACE,
    "new": TokenKind.NEW,
    "use": TokenKind.USE,
}

# Grammar node types mapped straight to a token kind.
_NODE_KINDS: dict[str, TokenKind] = {
    "comment": TokenKind.COMMENT,
    "php_tag": TokenKind.OPEN_TAG,
    "text": TokenKind.INLINE_HTML,
    "string": TokenKind.STRING,
    "encapsed_string": TokenKind.STRING,
    "shell_command_expression": TokenKind.STRING,
    "heredoc": TokenKind.HEREDOC,
    "nowdoc": TokenKind.HEREDOC,
    "variable_name": TokenKind.VARIABLE,
    "integer": TokenKind.NUMBER,
    "float": TokenKind.NUMBER,
}
# Nodes emitted as one token without descending into their children.
_OPAQUE = frozenset(_NODE_KINDS)

_OPERATOR_KINDS: dict[str, TokenKind] = {
    "?>": TokenKind.CLOSE_TAG,
    "::": TokenKind.DOUBLE_COLON,
    "->": TokenKind.OBJECT_OPERATOR,
    "?->": TokenKind.OBJECT_OPERATOR,
    "#[": TokenKind.ATTRIBUTE,
    "\\": TokenKind.NS_SEPARATOR,
}

_IGNORABLE = frozenset(
    {TokenKind.WHITESPACE, TokenKind.COMMENT, TokenKind.OPEN_TAG}
)
_NAME_KINDS = frozenset({TokenKind.NAME, TokenKind.NAME_RELATIVE})
_QUOTES = frozenset("'\"`")

_LABEL = rf"[{IDENT_START}][{IDENT_CHAR}]*+"
_IDENTIFIER = re.compile(_LABEL)
_UNPARSED = re.compile(
    rf"\s+|\$+{_LABEL}|{_LABEL}|<\?(?:php|=)?|\?->|->|::|\?>|#\[|.",
    re.DOTALL | re.IGNORECASE,
)
# ``enum`` only opens a declaration when a name other than extends/implements
# follows it.
_ENUM_FOLLOWER = re.compile(
    rf"\s++(?!(?:extends|implements)(?![{IDENT_CHAR}])){_LABEL}",
    re.IGNORECASE,
)
# Undecodable bytes survive reading as lone surrogates.
_SURROGATE = re.compile("[\ud800-\udfff]")

_PARSERS = threading.local()


@dataclass(frozen=True, slots=True)
class Token:
    """Single token with its character offset in the source."""

    kind: TokenKind
    text: str
    offset: int

    @property
    def is_ignorable(self) -> bool:
        return self.kind in _IGNORABLE

    @property
    def is_name(self) -> bool:
        return self.kind in _NAME_KINDS

    def matches(self, *candidates: TokenKind | str) -> bool:
        """Return whether the token matches any kind or literal text given."""

        for candidate in candidates:
            if isinstance(candidate, TokenKind):
                if self.kind is candidate:
                    return True
            elif self.kind is TokenKind.PUNCTUATION and self.text == candidate:
                return True
        return False


def _php_parser() -> Any:
    """Return this thread's tree-sitter parser for the ``php`` grammar."""

    parser = getattr(_PARSERS, "parser", None)
    if parser is not None:
        return parser

    try:
        from tree_sitter_languages import get_parser  # type: ignore[import]
    except ImportError as exc:  # pragma: no cover - dependency missing
        raise TreeSitterUnavailableError(
            "The token strategy requires tree_sitter_languages."
        ) from exc

    try:
        parser = get_parser("php")
    except Exception as exc:  # pragma: no cover - broken grammar bundle
        raise TreeSitterUnavailableError(
            f"tree-sitter parser for 'php' is unavailable: {exc}"
        ) from exc

    _PARSERS.parser = parser
    return parser


def _utf8_width(char: str) -> int:
    code = ord(char)
    if code < 0x80:
        return 1
    if code < 0x800:
        return 2
    if code < 0x10000:
        return 3
    return 4


class _CharOffsets:
    """Translate tree-sitter byte offsets into ``str`` indexes."""

    def __init__(self, text: str) -> None:
        self._starts: list[int] | None = None
        if not text.isascii():
            self._starts = list(accumulate(map(_utf8_width, text), initial=0))

    def __call__(self, byte_offset: int) -> int:
        if self._starts is None:
            return byte_offset
        return bisect_left(self._starts, byte_offset)


def _iter_leaves(tree: Any) -> Iterator[tuple[Any, bool]]:
    """Yield ``(node, inside_error)`` for every leaf in document order."""

    cursor = tree.walk()
    # One entry per depth: whether the parent sits inside an ERROR node.
    in_error = [False]
    while True:
        node = cursor.node
        node_in_error = in_error[-1] or node.type == "ERROR"
        if node.child_count == 0 or node.type in _OPAQUE:
            yield node, node_in_error
        elif cursor.goto_first_child():
            in_error.append(node_in_error)
            continue
        while not cursor.goto_next_sibling():
            if not cursor.goto_parent():
                return
            in_error.pop()


class _TokenBuilder:
    """Turn one parse tree into a covering token stream."""

    def __init__(self, source: str) -> None:
        self._source = source
        self._length = len(source)
        parse_text = _SURROGATE.sub("\ufffd", source)
        self._tree = _php_parser().parse(parse_text.encode("utf-8"))
        self._char_index = _CharOffsets(parse_text)
        self._position = 0

    def __iter__(self) -> Iterator[Token]:
        for node, in_error in _iter_leaves(self._tree):
            start = self._char_index(node.start_byte)
            end = self._char_index(node.end_byte)
            # Zero-width MISSING nodes and anything already consumed.
            if end <= start or start < self._position:
                continue
            if start > self._position:
                yield from self._unparsed(self._position, start)
                if start < self._position:
                    continue

            if node.type == "ERROR":
                yield from self._unparsed(start, end)
                continue

            text = self._source[start:end]
            if not node.is_named and text in _QUOTES:
                # A quote outside a literal opens a string that never closes.
                yield self._emit(TokenKind.STRING, start, self._length)
                continue

            kind = self._classify(node, text, end, in_error)
            yield self._emit(kind, start, end)

        if self._position < self._length:
            yield from self._unparsed(self._position, self._length)

    def _emit(self, kind: TokenKind, start: int, end: int) -> Token:
        self._position = end
        return Token(kind, self._source[start:end], start)

    def _unparsed(self, start: int, end: int) -> Iterator[Token]:
        for match in _UNPARSED.finditer(self._source, start, end):
            piece = match.group(0)
            if piece in _QUOTES:
                yield self._emit(TokenKind.STRING, match.start(), self._length)
                return
            kind = self._classify_text(piece, match.end(), keyword=True)
            yield self._emit(kind, match.start(), match.end())

    def _classify(
        self, node: Any, text: str, end: int, in_error: bool
    ) -> TokenKind:
        kind = _NODE_KINDS.get(node.type)
        if kind is not None:
            return kind
        keyword = (not node.is_named and node.type == text.lower()) or (
            in_error and node.type == "name"
        )
        return self._classify_text(text, end, keyword=keyword)

    def _classify_text(
        self, text: str, end: int, *, keyword: bool
    ) -> TokenKind:
        kind = _OPERATOR_KINDS.get(text)
        if kind is not None:
            return kind
        if text.startswith("<?"):
            return TokenKind.OPEN_TAG
        if text.startswith("?>"):
            return TokenKind.CLOSE_TAG
        if text.isspace():
            return TokenKind.WHITESPACE
        if text.startswith("$") and len(text) > 1:
            return TokenKind.VARIABLE
        if text[0].isdigit():
            return TokenKind.NUMBER
        if _IDENTIFIER.fullmatch(text) is None:
            return TokenKind.PUNCTUATION

        lowered = text.lower()
        if lowered == "namespace" and self._source.startswith("\\", end):
            return TokenKind.NAME_RELATIVE
        word = KEYWORD_KINDS.get(lowered) if keyword else None
        if word is None:
            return TokenKind.NAME
        if word is TokenKind.ENUM and (
            _ENUM_FOLLOWER.match(self._source, end) is None
        ):
            return TokenKind.NAME
        return word


def iter_tokens(source: str) -> Iterator[Token]:
    """Parse ``source`` and lazily yield its tokens.

    Raises:
        TreeSitterUnavailableError: If ``tree_sitter_languages`` is missing.
    """

    return iter(_TokenBuilder(source))


def tokenize(source: str) -> list[Token]:
    """Return the full token list for ``source``.

    Example:
        >>> tokens = tokenize("<?php class Foo {}")
        >>> [token.kind.value for token in tokens if not token.is_ignorable]
        ['class', 'name', 'punctuation', 'punctuation']
    """

    return list(_TokenBuilder(source))
