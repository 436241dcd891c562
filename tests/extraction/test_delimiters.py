"""Tests for :mod:`symbolmap.extraction.delimiters`."""

from __future__ import annotations

import pytest

from symbolmap.extraction import (
    StructuralDelimiterNotFoundError,
    UnterminatedBodyError,
)
from symbolmap.extraction.delimiters import STRING_PLACEHOLDER, SourceCursor


@pytest.mark.parametrize(
    ("source", "tag"),
    [
        ("text <?php x", "<?php"),
        ("text <?PHP x", "<?PHP"),
        ("text <?= x", "<?="),
        ("text <? x", "<?"),
        ("text <?phpx", "<?"),
    ],
)
def test_skip_language_region_start_returns_tag(source: str, tag: str) -> None:
    cursor = SourceCursor(source)

    assert cursor.skip_language_region_start() == tag
    assert cursor.index == source.index("<?") + len(tag)


def test_skip_language_region_start_without_tag_reaches_end() -> None:
    cursor = SourceCursor("plain text")

    assert cursor.skip_language_region_start() == ""
    assert cursor.at_end


@pytest.mark.parametrize(
    ("source", "end"),
    [
        ("'abc' rest", 5),
        (r"'a\'b' rest", 6),
        (r"'a\\' rest", 5),
        (r'"a\nb" rest', 6),
        ("'multi\nline' rest", 12),
        ("`cmd` rest", 5),
        ("'unterminated", 13),
    ],
)
def test_skip_string(source: str, end: int) -> None:
    cursor = SourceCursor(source)

    cursor.skip_string(source[0])

    assert cursor.index == end


def test_heredoc_closing_delimiter_must_not_continue_identifier() -> None:
    source = "<<<EOT\nbody {\nEOTX\n  EOT_1\n    EOT;\nafter"
    cursor = SourceCursor(source)

    assert cursor.skip_heredoc_or_nowdoc()
    assert source[cursor.index :] == ";\nafter"


def test_nowdoc_and_quoted_heredoc_openers() -> None:
    for opener in ("<<<'END'", '<<<"END"', "<<< END"):
        source = f"{opener}\nx\nEND;"
        cursor = SourceCursor(source)

        assert cursor.skip_heredoc_or_nowdoc()
        assert source[cursor.index :] == ";"


def test_heredoc_requires_line_break_after_delimiter() -> None:
    cursor = SourceCursor("<<<EOT x")

    assert not cursor.skip_heredoc_or_nowdoc()
    assert cursor.index == 0


def test_unclosed_heredoc_consumes_to_end() -> None:
    cursor = SourceCursor("<<<EOT\nclass A {}\n")

    assert cursor.skip_heredoc_or_nowdoc()
    assert cursor.at_end


def test_line_comment_stops_before_newline_and_close_tag() -> None:
    cursor = SourceCursor("// note\nnext")
    assert cursor.skip_any_comment()
    assert cursor.current == "\n"

    cursor = SourceCursor("# note ?> html")
    assert cursor.skip_any_comment()
    assert cursor.at_close_tag()


def test_block_comment_and_attribute() -> None:
    cursor = SourceCursor("/* a } */x")
    assert cursor.skip_any_comment()
    assert cursor.current == "x"

    cursor = SourceCursor("#[Attr]")
    assert not cursor.skip_any_comment()
    assert cursor.index == 0


def test_skip_to_returns_cleaned_text() -> None:
    cursor = SourceCursor("class A extends B /* c */ implements 'x' {}")

    consumed = cursor.skip_to("{")

    assert consumed == f"class A extends B  implements {STRING_PLACEHOLDER} "
    assert cursor.current == "{"


def test_skip_to_raises_at_end_of_input() -> None:
    with pytest.raises(StructuralDelimiterNotFoundError):
        SourceCursor("class A extends B").skip_to("{")


def test_skip_balanced_body_ignores_literal_braces() -> None:
    source = "{ '}' \"{\" /* } */ // }\n <<<EOT\n}\nEOT;\n { } } tail"
    cursor = SourceCursor(source)

    cursor.skip_balanced_body()

    assert source[cursor.index :] == " tail"


def test_skip_balanced_body_skips_inline_text() -> None:
    source = "{ ?> <b>}</b> <?php } tail"
    cursor = SourceCursor(source)

    cursor.skip_balanced_body()

    assert source[cursor.index :] == " tail"


def test_skip_balanced_body_raises_when_unterminated() -> None:
    with pytest.raises(UnterminatedBodyError) as excinfo:
        SourceCursor("x { { }", index=2).skip_balanced_body()

    assert excinfo.value.offset == 2
