"""Tests for expression parsing: paths, calls, literals and brace templates."""

from __future__ import annotations

import pytest
from hypothesis import given

from strata.expression import (
    Argument,
    Call,
    Key,
    Token,
    find_and_replace,
    has_expressions,
    infer_literal,
    is_call,
    is_standalone_expression,
    parse_argument,
    parse_call,
    parse_expression,
    parse_number,
    split_args,
    split_path,
    tokenize,
)

from .strategies import brace_expression, concatenated_expressions, path_with_parts, plain_text


class TestSplitPath:
    """Dot, bracket and call-aware path splitting."""

    def test_dotted(self):
        assert split_path("item.title.toUppercase()") == ("item", "title", "toUppercase()")

    def test_bracket_key(self):
        assert split_path("item.user['full-name']") == ("item", "user", "full-name")

    def test_bracket_index_then_key(self):
        assert split_path("item.user[0]['name']") == ("item", "user", "0", "name")

    def test_double_quoted_bracket(self):
        assert split_path('item["a b"].c') == ("item", "a b", "c")

    def test_dots_inside_call_args(self):
        assert split_path("item.date.format('Y.m.d')") == ("item", "date", "format('Y.m.d')")

    def test_brackets_inside_call_args(self):
        assert split_path("props.items.at(props['index'])") == ("props", "items", "at(props['index'])")

    def test_bracket_glued_to_call(self):
        assert split_path("props['loop']($count: 2).at(0)") == ("props", "loop($count: 2)", "at(0)")

    def test_escaped_dot_kept(self):
        assert split_path("item.a\\.b") == ("item", "a\\.b")

    def test_empty(self):
        assert split_path("") == ()

    @given(path_with_parts())
    def test_generated_paths(self, case):
        text, parts = case
        assert list(split_path(text)) == parts


class TestCalls:
    """Call segment recognition and argument splitting."""

    @pytest.mark.parametrize(
        ("part", "expected"),
        [
            ("toInt()", True),
            ("slice(1, 3)", True),
            ("format('Y\n')", True),
            ("title", False),
            ("(x)", False),
            ("a.b()", False),
        ],
    )
    def test_is_call(self, part, expected):
        assert is_call(part) is expected

    def test_parse_call(self):
        assert parse_call("slice(1, 3)") == ("slice", "1, 3")
        assert parse_call("toInt()") == ("toInt", "")
        assert parse_call("title") == ("", "")

    def test_split_args_respects_quotes_and_nesting(self):
        assert split_args("1, 'a, b', props.at(0, 2)") == ("1", "'a, b'", "props.at(0, 2)")
        assert split_args('[1, 2], {"a": 1}') == ("[1, 2]", '{"a": 1}')

    def test_split_args_empty(self):
        assert split_args("  ") == ()

    def test_keyword_argument(self):
        assert parse_argument("$count: 2") == Argument("2", keyword="$count")

    def test_keyword_normalized_with_dollar(self):
        assert parse_argument("count: props.count") == Argument("props.count", keyword="$count")

    def test_quoted_colon_is_positional(self):
        assert parse_argument("'a: b'") == Argument("'a: b'")


class TestLiterals:
    """Literal inference never consults sources."""

    @pytest.mark.parametrize(
        ("text", "value"),
        [
            ("", ""),
            ("'hello'", "hello"),
            ('"with space"', "with space"),
            ("3", 3),
            ("-4", -4),
            ("3.5", 3.5),
            ("1e3", 1000),
            ("TRUE", True),
            ("false", False),
            ("[1, 2]", [1, 2]),
            ('{"a": 1}', {"a": 1}),
        ],
    )
    def test_resolved(self, text, value):
        literal = infer_literal(text)
        assert literal.resolved
        assert literal.value == value
        assert type(literal.value) is type(value)

    @pytest.mark.parametrize("text", ["item.title", "{bad", "props.count.toInt()", "'unbalanced"])
    def test_unresolved(self, text):
        assert not infer_literal(text).resolved

    def test_parse_number(self):
        assert parse_number("42") == 42
        assert parse_number("2.0") == 2.0
        assert parse_number("abc") is None
        assert parse_number("1e400") == float("inf")


class TestTemplates:
    """Standalone detection and tokenization."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("{a}", True),
            ("{item.date.format('{Y}')}", True),
            ("{a}{b}", False),
            ("{{a}", False),
            ("a}", False),
            ("{}", False),
            ("x{a}", False),
        ],
    )
    def test_is_standalone_expression(self, text, expected):
        assert is_standalone_expression(text) is expected

    @given(brace_expression)
    def test_single_expression_is_standalone(self, text):
        assert is_standalone_expression(text)

    @given(concatenated_expressions)
    def test_concatenation_is_not_standalone(self, text):
        assert not is_standalone_expression(text)

    @given(plain_text)
    def test_plain_text_is_one_literal_token(self, text):
        assert tokenize(text) == (Token(text),)

    def test_tokenize(self):
        assert tokenize("Hi {name}!") == (Token("Hi "), Token("name", is_expression=True), Token("!"))

    def test_empty_braces_are_literal(self):
        assert tokenize("a{}b") == (Token("a{}b"),)
        assert not has_expressions("a{ }b")

    def test_unterminated_brace_is_literal(self):
        assert tokenize("a {b") == (Token("a {b"),)

    def test_find_and_replace(self):
        assert find_and_replace("{a}-{b}", str.upper) == "A-B"
        assert find_and_replace("no braces", str.upper) == "no braces"


class TestParseExpression:
    """Expression nodes."""

    def test_root_path_modifiers(self):
        expr = parse_expression("{item.title.toUppercase()}")
        assert expr.root == "item"
        assert expr.path == ("title",)
        assert [m.name for m in expr.modifiers] == ["toUppercase"]
        assert expr.root_call is None

    def test_path_stops_at_first_call(self):
        assert parse_expression("a.b.c().d").path == ("b",)

    def test_root_call(self):
        expr = parse_expression("posts($count: 2).slice(1)")
        assert expr.root_call == Call("posts", (Argument("2", keyword="$count"),))
        assert expr.modifiers == (Call("slice", (Argument("1"),)),)

    def test_bracket_loop_call(self):
        expr = parse_expression("props['loop']($count: props['count'].toInt()).at(0)")
        assert expr.segments[0] == Key("props")
        loop_call = expr.segments[1]
        assert isinstance(loop_call, Call)
        assert loop_call.name == "loop"
        assert loop_call.keywords == [Argument("props['count'].toInt()", keyword="$count")]

    def test_positional_and_keywords(self):
        call = parse_expression("x.f(1, $a: 2)").segments[1]
        assert [a.source for a in call.positional] == ["1"]
        assert [a.keyword for a in call.keywords] == ["$a"]

    def test_empty_is_falsy(self):
        assert not parse_expression("")
        assert parse_expression("").root == ""
