"""Cursor primitives for skipping strings, heredocs, comments and bodies.

The :class:`SourceCursor` wraps an immutable source buffer and a forward-only
offset. Every ``skip_*`` helper advances the cursor past the construct it
recognizes and consumes any braces that appear inside it, so callers counting
structural braces never observe them.
"""

from __future__ import annotations

import re

from .errors import StructuralDelimiterNotFoundError, UnterminatedBodyError
from .keywords import IDENT_CHAR, IDENT_START

__all__ = [
    "STRING_PLACEHOLDER",
    "SourceCursor",
]

STRING_PLACEHOLDER = "null"

_QUOTES = frozenset("'\"`")
_NEWLINES = frozenset("\r\n")
_HORIZONTAL_SPACE = frozenset(" \t")

_OPEN_TAG = re.compile(r"<\?(?:php(?![a-zA-Z0-9_])|=)?", re.IGNORECASE)
_HEREDOC_START = re.compile(
    rf"<<<[ \t]*+(['\"]?)([{IDENT_START}][{IDENT_CHAR}]*+)\1(?:\r\n|\n|\r)"
)
_LINE_COMMENT_END = re.compile(r"\r|\n|\?>")


class SourceCursor:
    """Forward-only cursor over a PHP source buffer."""

    __slots__ = ("source", "length", "index")

    def __init__(self, source: str, index: int = 0) -> None:
        self.source = source
        self.length = len(source)
        self.index = index

    @property
    def at_end(self) -> bool:
        return self.index >= self.length

    @property
    def current(self) -> str:
        return self.source[self.index]

    def peek(self, char: str) -> bool:
        """Return whether the character after the cursor equals ``char``."""

        return (
            self.index + 1 < self.length
            and self.source[self.index + 1] == char
        )

    def match(self, pattern: re.Pattern[str]) -> re.Match[str] | None:
        """Anchor ``pattern`` at the cursor without moving it."""

        return pattern.match(self.source, self.index)

    def at_close_tag(self) -> bool:
        return self.source.startswith("?>", self.index)

    # ------------------------------------------------------------------
    # Language regions
    # ------------------------------------------------------------------
    def skip_language_region_start(self) -> str:
        """Advance past the next opening tag and return its text.

        When no further tag exists the cursor moves to end-of-input and an
        empty string is returned.
        """

        position = self.source.find("<?", self.index)
        if position == -1:
            self.index = self.length
            return ""
        match = _OPEN_TAG.match(self.source, position)
        end = position + 2 if match is None else match.end()
        self.index = end
        return self.source[position:end]

    def skip_inline_text(self) -> None:
        """Skip a ``?>`` closing tag and the inert text up to the next region."""

        self.index += 2
        self.skip_language_region_start()

    # ------------------------------------------------------------------
    # Strings
    # ------------------------------------------------------------------
    def skip_string(self, quote: str) -> None:
        """Advance past a quoted literal starting at the cursor.

        A backslash escapes only the quote character and itself; anything
        else, raw newlines included, is literal content.
        """

        source = self.source
        index = self.index + 1
        while index < self.length:
            char = source[index]
            if char == "\\" and index + 1 < self.length:
                following = source[index + 1]
                if following == "\\" or following == quote:
                    index += 2
                    continue
            if char == quote:
                index += 1
                break
            index += 1
        self.index = min(index, self.length)

    def skip_heredoc_or_nowdoc(self) -> bool:
        """Skip a heredoc/nowdoc literal if one opens at the cursor."""

        match = self.match(_HEREDOC_START)
        if match is None:
            return False
        self.index = match.end()
        self._skip_heredoc_body(match.group(2))
        return True

    def _skip_heredoc_body(self, delimiter: str) -> None:
        closing = re.compile(re.escape(delimiter) + rf"(?![{IDENT_CHAR}])")
        source = self.source
        first = delimiter[0]

        while self.index < self.length:
            char = source[self.index]
            if char in _HORIZONTAL_SPACE:
                self.index += 1
                continue
            if char == first and self.match(closing) is not None:
                self.index += len(delimiter)
                return

            self._skip_to_newline()
            while self.index < self.length and source[self.index] in _NEWLINES:
                self.index += 1

    def skip_any_string(self) -> bool:
        """Skip a quoted string or heredoc at the cursor if present."""

        char = self.source[self.index]
        if char in _QUOTES:
            self.skip_string(char)
            return True
        if char == "<" and self.source.startswith("<<<", self.index):
            return self.skip_heredoc_or_nowdoc()
        return False

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------
    def skip_line_comment(self) -> None:
        """Advance to the end of a ``//`` or ``#`` comment.

        The terminating newline and any ``?>`` closing tag are left in place.
        """

        match = _LINE_COMMENT_END.search(self.source, self.index)
        self.index = self.length if match is None else match.start()

    def skip_block_comment(self) -> None:
        """Advance past a ``/* ... */`` comment (not nested)."""

        end = self.source.find("*/", self.index + 2)
        self.index = self.length if end == -1 else end + 2

    def _skip_to_newline(self) -> None:
        source = self.source
        while self.index < self.length and source[self.index] not in _NEWLINES:
            self.index += 1

    def skip_any_comment(self) -> bool:
        """Skip a comment at the cursor if present."""

        char = self.source[self.index]
        if char == "/":
            if self.peek("/"):
                self.skip_line_comment()
                return True
            if self.peek("*"):
                self.skip_block_comment()
                return True
        elif char == "#" and not self.peek("["):
            self.skip_line_comment()
            return True
        return False

    # ------------------------------------------------------------------
    # Structural scanning
    # ------------------------------------------------------------------
    def skip_to(self, target: str) -> str:
        """Advance to the next structural ``target`` character.

        Returns the text consumed on the way with strings replaced by a
        placeholder and comments removed. The cursor is left on ``target``.

        Raises:
            StructuralDelimiterNotFoundError: If end-of-input is reached.
        """

        start = self.index
        parts: list[str] = []
        source = self.source
        while self.index < self.length:
            if self.skip_any_string():
                parts.append(STRING_PLACEHOLDER)
                continue
            if self.skip_any_comment():
                continue
            char = source[self.index]
            if char == target:
                return "".join(parts)
            if char == "?" and self.at_close_tag():
                self.skip_inline_text()
                continue
            parts.append(char)
            self.index += 1

        raise StructuralDelimiterNotFoundError(
            f"Expected {target!r} after offset {start} before end of input",
            offset=start,
        )

    def skip_balanced_body(self) -> None:
        """Advance past the braced body opening at the cursor.

        Raises:
            UnterminatedBodyError: If the closing brace is never found.
        """

        start = self.index
        source = self.source
        self.index += 1
        depth = 1
        while self.index < self.length:
            if self.skip_any_string() or self.skip_any_comment():
                continue
            char = source[self.index]
            if char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    self.index += 1
                    return
            elif char == "?" and self.at_close_tag():
                self.skip_inline_text()
                continue
            self.index += 1

        raise UnterminatedBodyError(
            f"Body opened at offset {start} is never closed (depth {depth})",
            offset=start,
        )
