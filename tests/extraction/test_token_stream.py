"""Tests for :mod:`symbolmap.extraction.token_stream`."""

from __future__ import annotations

import pytest

from symbolmap.extraction import (
    StructuralDelimiterNotFoundError,
    TokenStreamStrategy,
    UnterminatedBodyError,
    tokenize,
)


def test_extract_tokens_accepts_prelexed_stream() -> None:
    tokens = tokenize("<?php namespace App; trait Loggable {}")

    symbols = TokenStreamStrategy().extract_tokens(tokens)

    assert symbols.get("trait") == ["App\\Loggable"]


def test_comments_between_keyword_and_name_are_ignored() -> None:
    symbols = TokenStreamStrategy().extract(
        "<?php class /* doc */ Commented {}"
    )

    assert symbols.get("class") == ["Commented"]


def test_new_with_comment_before_class_is_still_anonymous() -> None:
    symbols = TokenStreamStrategy().extract(
        "<?php $x = new /* anon */ class {}; class Named {}"
    )

    assert symbols.get("class") == ["Named"]


def test_namespace_name_ignores_comments() -> None:
    symbols = TokenStreamStrategy().extract(
        "<?php namespace Foo /* x */ ; function bar() {}"
    )

    assert symbols.get("function") == ["Foo\\bar"]


def test_keyword_without_name_is_passed_over() -> None:
    symbols = TokenStreamStrategy().extract(
        "<?php foo(class: 1); interface; class Real {}"
    )

    assert symbols.get("class") == ["Real"]
    assert symbols.get("interface") == []


def test_unclosed_body_reports_opening_offset() -> None:
    source = "<?php class A { if (true) {"

    with pytest.raises(UnterminatedBodyError) as excinfo:
        TokenStreamStrategy().extract(source)

    assert excinfo.value.offset == source.index("{")


def test_missing_body_reports_keyword_offset() -> None:
    source = "<?php interface Lonely"

    with pytest.raises(StructuralDelimiterNotFoundError) as excinfo:
        TokenStreamStrategy().extract(source)

    assert excinfo.value.offset == source.index("interface")


def test_anonymous_class_after_modifiers_and_attributes_is_skipped() -> None:
    symbols = TokenStreamStrategy().extract(
        "<?php $a = new readonly class { function leak() {} };"
        " $b = new #[Foo([1])] class { function hidden() {} };"
        " final class Kept {}"
    )

    assert symbols.get("class") == ["Kept"]
    assert symbols.get("function") == []


def test_attributed_class_is_not_anonymous() -> None:
    symbols = TokenStreamStrategy().extract(
        "<?php $list[0] = 1; #[Marker] final class Tagged {}"
    )

    assert symbols.get("class") == ["Tagged"]


def test_group_use_function_is_an_import() -> None:
    symbols = TokenStreamStrategy().extract(
        "<?php use A\\{B, function c};\nuse A\\{function d};\n"
        "class After {} function e() {}"
    )

    assert symbols.get("class") == ["After"]
    assert symbols.get("function") == ["e"]


def test_named_argument_called_function_is_not_a_closure() -> None:
    symbols = TokenStreamStrategy().extract(
        "<?php #[Attr(function: 1)] class After {}"
    )

    assert symbols.get("class") == ["After"]
