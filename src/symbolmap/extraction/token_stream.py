"""Token-stream strategy walking the tree-sitter tokens of a PHP source."""

from __future__ import annotations

from typing import Sequence

from symbolmap.core.logging import Logger, get_logger

from .errors import StructuralDelimiterNotFoundError, UnterminatedBodyError
from .keywords import CLASS_MODIFIERS, DeclarationKind, qualify
from .lexer import Token, TokenKind, tokenize
from .symbols import SymbolSet

__all__ = ["TokenStreamStrategy"]

_DECLARATIONS = (
    TokenKind.CLASS,
    TokenKind.ENUM,
    TokenKind.FUNCTION,
    TokenKind.INTERFACE,
    TokenKind.TRAIT,
    TokenKind.NAMESPACE,
)
_MEMBER_ACCESS = frozenset({TokenKind.DOUBLE_COLON, TokenKind.OBJECT_OPERATOR})


class _TokenWalk:
    """Cursor over a token list for a single extraction."""

    def __init__(self, tokens: Sequence[Token]) -> None:
        self._tokens = tokens
        self._count = len(tokens)
        self._pos = 0

    def run(self) -> SymbolSet:
        symbols = SymbolSet()
        namespace = ""
        tokens = self._tokens

        while self._pos < self._count:
            if not self._advance_to_first(*_DECLARATIONS):
                break

            token = tokens[self._pos]
            if token.kind is TokenKind.NAMESPACE:
                namespace = self._consume_namespace()
                continue

            previous = self._previous_significant()
            if previous is not None and previous.kind in _MEMBER_ACCESS:
                # Foo::class and friends
                self._pos += 1
                continue

            if token.kind is TokenKind.CLASS and self._is_anonymous_class():
                self._skip_body()
                continue

            if token.kind is TokenKind.FUNCTION:
                following = self._next_significant()
                if (
                    _is(previous, TokenKind.USE)
                    or self._in_group_use()
                    or _is_text(following, ":")
                ):
                    # imports and named arguments
                    self._pos += 1
                    continue
                if _is_text(following, "("):
                    self._skip_body()
                    continue

            name = self._declared_name()
            if name is None:
                if token.kind is TokenKind.FUNCTION:
                    self._skip_body()
                else:
                    self._pos += 1
                continue

            kind = DeclarationKind(token.kind.value)
            symbols.add(kind, qualify(namespace, name.text))
            self._skip_body()

        return symbols

    def _advance_to_first(self, *kinds: TokenKind | str) -> bool:
        tokens = self._tokens
        while self._pos < self._count:
            if tokens[self._pos].matches(*kinds):
                return True
            self._pos += 1
        return False

    def _significant_before(self, index: int) -> int | None:
        pos = index - 1
        while pos >= 0:
            if not self._tokens[pos].is_ignorable:
                return pos
            pos -= 1
        return None

    def _previous_significant(self) -> Token | None:
        index = self._significant_before(self._pos)
        return None if index is None else self._tokens[index]

    def _is_anonymous_class(self) -> bool:
        """Return whether ``new`` precedes the class keyword.

        Class modifiers and ``#[...]`` attribute groups in between are
        passed over.
        """

        tokens = self._tokens
        index = self._significant_before(self._pos)
        while index is not None:
            token = tokens[index]
            if token.kind is TokenKind.NAME and (
                token.text.lower() in CLASS_MODIFIERS
            ):
                index = self._significant_before(index)
            elif token.matches("]"):
                opener = self._attribute_opener(index)
                if opener is None:
                    return False
                index = self._significant_before(opener)
            else:
                return token.kind is TokenKind.NEW
        return False

    def _attribute_opener(self, index: int) -> int | None:
        """Return the ``#[`` index matching the ``]`` at ``index``."""

        depth = 0
        while index >= 0:
            token = self._tokens[index]
            if token.matches("]"):
                depth += 1
            elif token.matches("[", TokenKind.ATTRIBUTE):
                depth -= 1
                if depth == 0:
                    if token.kind is TokenKind.ATTRIBUTE:
                        return index
                    return None
            index -= 1
        return None

    def _in_group_use(self) -> bool:
        """Return whether the keyword sits inside ``use Foo\\{...}``."""

        tokens = self._tokens
        index = self._significant_before(self._pos)
        if index is None or not tokens[index].matches("{", ","):
            return False
        while index is not None:
            token = tokens[index]
            if token.matches("{"):
                before = self._significant_before(index)
                return before is not None and (
                    tokens[before].kind is TokenKind.NS_SEPARATOR
                )
            if not (
                token.is_name
                or token.matches(
                    ",", TokenKind.NS_SEPARATOR, TokenKind.FUNCTION
                )
            ):
                return False
            index = self._significant_before(index)
        return False

    def _significant_index(self, start: int) -> int | None:
        pos = start
        while pos < self._count:
            if not self._tokens[pos].is_ignorable:
                return pos
            pos += 1
        return None

    def _next_significant(self) -> Token | None:
        index = self._significant_index(self._pos + 1)
        return None if index is None else self._tokens[index]

    def _declared_name(self) -> Token | None:
        """Return the name token directly following the keyword, if any."""

        keyword = self._tokens[self._pos]
        index = self._significant_index(self._pos + 1)
        if (
            index is not None
            and keyword.kind is TokenKind.FUNCTION
            and self._tokens[index].matches("&")
        ):
            index = self._significant_index(index + 1)
        if index is not None and self._tokens[index].kind is TokenKind.NAME:
            return self._tokens[index]
        return None

    def _consume_namespace(self) -> str:
        tokens = self._tokens
        parts: list[str] = []
        self._pos += 1
        while self._pos < self._count:
            token = tokens[self._pos]
            if token.is_ignorable:
                self._pos += 1
                continue
            if token.is_name or token.kind is TokenKind.NS_SEPARATOR:
                parts.append(token.text)
                self._pos += 1
                continue
            break
        return "".join(parts)

    def _skip_body(self) -> None:
        start = self._tokens[self._pos].offset
        if not self._advance_to_first("{"):
            raise StructuralDelimiterNotFoundError(
                f"Expected '{{' after offset {start} before end of input",
                offset=start,
            )

        opened_at = self._tokens[self._pos].offset
        tokens = self._tokens
        self._pos += 1
        depth = 1
        while self._pos < self._count:
            token = tokens[self._pos]
            self._pos += 1
            if token.matches("{"):
                depth += 1
            elif token.matches("}"):
                depth -= 1
                if depth == 0:
                    return

        raise UnterminatedBodyError(
            f"Body opened at offset {opened_at} is never closed (depth {depth})",
            offset=opened_at,
        )


def _is(token: Token | None, kind: TokenKind) -> bool:
    return token is not None and token.kind is kind


def _is_text(token: Token | None, text: str) -> bool:
    return token is not None and token.matches(text)


class TokenStreamStrategy:
    """Extract declarations from the tree-sitter token stream of a PHP source.

    Example:
        >>> strategy = TokenStreamStrategy()
        >>> strategy.extract("<?php function foo() {}").get("function")
        ['foo']
    """

    name = "token"

    def __init__(self, *, logger: Logger | None = None) -> None:
        self._logger = logger or get_logger(__name__, strategy=self.name)

    def extract(self, source: str) -> SymbolSet:
        """Return the namespace-scope declarations found in ``source``.

        Raises:
            UnterminatedBodyError: If a declaration body never closes.
            StructuralDelimiterNotFoundError: If a declaration has no body.
            TreeSitterUnavailableError: If the PHP grammar cannot be loaded.
        """

        return self.extract_tokens(tokenize(source))

    def extract_tokens(self, tokens: Sequence[Token]) -> SymbolSet:
        """Walk an already tokenized sequence."""

        symbols = _TokenWalk(tokens).run()
        self._logger.debug(
            "token-scan-complete",
            tokens=len(tokens),
            symbols=len(symbols),
        )
        return symbols
