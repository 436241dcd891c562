"""Declaration keyword table shared by the extraction strategies."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Iterable, Mapping

NAMESPACE_SEPARATOR = "\\"
NAMESPACE_KEYWORD = "namespace"
# Modifiers allowed between ``new`` and an anonymous ``class``.
CLASS_MODIFIERS = frozenset({"abstract", "final", "readonly"})

IDENT_START = r"a-zA-Z_\x80-\U0010ffff"
IDENT_CHAR = r"a-zA-Z0-9_\x80-\U0010ffff"
IDENTIFIER = rf"[{IDENT_START}][{IDENT_CHAR}]*+"

_IDENT_CHAR_RE = re.compile(rf"[{IDENT_CHAR}]")

# Characters that disqualify a keyword when found immediately before it.
_LOOKBEHIND = r"(?<![\w$:>\\])"


class DeclarationKind(StrEnum):
    """Buckets a declaration can be recorded into."""

    CLASS = "class"
    INTERFACE = "interface"
    TRAIT = "trait"
    ENUM = "enum"
    FUNCTION = "function"

    @property
    def is_class_like(self) -> bool:
        return self is not DeclarationKind.FUNCTION


DEFAULT_KEYWORDS: tuple[str, ...] = (
    "class",
    "interface",
    "trait",
    "enum",
    "function",
    NAMESPACE_KEYWORD,
)


def is_identifier_char(char: str) -> bool:
    """Return whether ``char`` may appear inside an identifier."""

    return bool(char) and _IDENT_CHAR_RE.match(char) is not None


def _declaration_pattern(keyword: str) -> re.Pattern[str]:
    if keyword == NAMESPACE_KEYWORD:
        # ``namespace\foo()`` is a relative name, not a declaration.
        body = rf"{keyword}(?![{IDENT_CHAR}\\])"
    elif keyword == DeclarationKind.FUNCTION:
        body = (
            rf"{keyword}(?=[\s&])\s*+&?\s*+(?P<name>{IDENTIFIER})"
        )
    elif keyword == DeclarationKind.ENUM:
        body = (
            rf"{keyword}\s++(?!(?:extends|implements)(?![{IDENT_CHAR}]))"
            rf"(?P<name>{IDENTIFIER})"
        )
    else:
        body = rf"{keyword}\s++(?P<name>{IDENTIFIER})"
    return re.compile(_LOOKBEHIND + body, re.IGNORECASE)


def _bare_keyword_pattern(keyword: str) -> re.Pattern[str]:
    body = rf"{keyword}(?![{IDENT_CHAR}\\])"
    if keyword == DeclarationKind.FUNCTION:
        # ``function: 1`` is a named argument.
        body += r"(?!\s*+:(?!:))"
    return re.compile(_LOOKBEHIND + body, re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class KeywordRule:
    """Recognizer for a single declaration keyword."""

    keyword: str
    length: int
    pattern: re.Pattern[str]
    bare: re.Pattern[str]

    @property
    def kind(self) -> DeclarationKind | None:
        """Return the bucket for this keyword, ``None`` for namespaces."""

        if self.keyword == NAMESPACE_KEYWORD:
            return None
        return DeclarationKind(self.keyword)

    def starts_at(self, source: str, index: int) -> bool:
        """Cheap prefix test before running the full recognizer."""

        candidate = source[index : index + self.length]
        return candidate.lower() == self.keyword

    def match(self, source: str, index: int) -> re.Match[str] | None:
        """Return the declaration match for the keyword at ``index``."""

        return self.pattern.match(source, index)

    def match_bare(self, source: str, index: int) -> re.Match[str] | None:
        """Match the keyword as a standalone word without a name."""

        return self.bare.match(source, index)


@dataclass(frozen=True, slots=True)
class KeywordTable:
    """Immutable keyword configuration keyed by lower-cased first letter.

    Example:
        >>> table = KeywordTable.build()
        >>> table.rule_for("C").keyword
        'class'
        >>> table.rule_for("x") is None
        True
    """

    rules: Mapping[str, KeywordRule]
    rest_pattern: re.Pattern[str] = field(repr=False)

    @classmethod
    def build(cls, keywords: Iterable[str] = DEFAULT_KEYWORDS) -> "KeywordTable":
        """Compile recognizers for ``keywords``.

        Raises:
            ValueError: If two keywords share a first character or a keyword
                is not one of the supported declaration keywords.
        """

        rules: dict[str, KeywordRule] = {}
        for raw in keywords:
            keyword = raw.strip().lower()
            if keyword not in DEFAULT_KEYWORDS:
                raise ValueError(f"Unsupported declaration keyword: {raw!r}")
            first = keyword[0]
            if first in rules:
                raise ValueError(
                    "Keywords must have distinct first characters: "
                    f"{rules[first].keyword!r} and {keyword!r}"
                )
            rules[first] = KeywordRule(
                keyword=keyword,
                length=len(keyword),
                pattern=_declaration_pattern(keyword),
                bare=_bare_keyword_pattern(keyword),
            )

        firsts = "".join(sorted(rules))
        rest_pattern = re.compile(
            rf"[^?\"'`</#{re.escape(firsts)}]+", re.IGNORECASE
        )
        return cls(rules=MappingProxyType(rules), rest_pattern=rest_pattern)

    def rule_for(self, char: str) -> KeywordRule | None:
        """Return the rule whose keyword starts with ``char``."""

        return self.rules.get(char.lower())

    def __contains__(self, keyword: object) -> bool:
        return isinstance(keyword, str) and any(
            rule.keyword == keyword.lower() for rule in self.rules.values()
        )


DEFAULT_KEYWORD_TABLE = KeywordTable.build()


def qualify(namespace: str, name: str) -> str:
    """Join ``name`` onto ``namespace`` with the namespace separator.

    Example:
        >>> qualify("Foo\\\\Bar", "Baz")
        'Foo\\\\Bar\\\\Baz'
        >>> qualify("", "baz")
        'baz'
    """

    if not namespace:
        return name
    return f"{namespace}{NAMESPACE_SEPARATOR}{name}"


__all__ = [
    "CLASS_MODIFIERS",
    "DEFAULT_KEYWORDS",
    "DEFAULT_KEYWORD_TABLE",
    "DeclarationKind",
    "IDENTIFIER",
    "KeywordRule",
    "KeywordTable",
    "NAMESPACE_KEYWORD",
    "NAMESPACE_SEPARATOR",
    "is_identifier_char",
    "qualify",
]
