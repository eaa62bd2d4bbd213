## stacklang — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import pytest

from stacklang import parser
from stacklang.types import Number, Symbol, Operator, Block
from stacklang.formatting import format_value
from stacklang.errors import StackLangParseError


def test_tokenize_splits_lines_then_single_spaces():
    assert parser.tokenize("1 2\n3 +") == ['1', '2', '3', '+']


def test_tokenize_keeps_empty_tokens():
    assert parser.tokenize("1  2") == ['1', '', '2']
    assert parser.tokenize("1\n\n2") == ['1', '', '2']
    assert parser.tokenize("") == ['']


def test_tokenize_strips_carriage_returns():
    assert parser.tokenize("1 2\r\n+") == ['1', '2', '+']


def test_iter_tokens_reports_line_numbers():
    assert list(parser.iter_tokens("a\nb c")) == [(1, 'a'), (2, 'b'), (2, 'c')]


@pytest.mark.parametrize("token, value", [
    ("3", Number(3)),
    ("-2.5", Number(-2.5)),
    (".5", Number(0.5)),
    ("1.", Number(1)),
    ("1e3", Number(1000)),
    ("+4", Number(4)),
    ("/x", Symbol('x')),
    ("/3", Symbol('3')),
    ("/", Operator('/')),
    ("+", Operator('+')),
    ("inf", Operator('inf')),
    ("nan", Operator('nan')),
    ("3abc", Operator('3abc')),
    ("1_000", Operator('1_000')),
])
def test_read_token_classification(token, value):
    assert parser.read_token(token) == value


def test_parse_values_reads_display_text():
    values = parser.parse_values("1 /x foo { 2 { } }")
    assert values == [Number(1), Symbol('x'), Operator('foo'), Block((Number(2), Block(())))]


def test_parse_values_allows_braces_inside_words():
    assert parser.parse_values("a{b }c") == [Operator('a{b'), Operator('}c')]


def test_parse_values_empty_text():
    assert parser.parse_values("") == []
    assert parser.parse_values("  \n ") == []


def test_parse_block_multiline():
    block = parser.parse_block("{\n  x y +\n}")
    assert block == Block((Operator('x'), Operator('y'), Operator('+')))


@pytest.mark.parametrize("text", ["{ 1", "}", "1 } 2", "{ 1 } }"])
def test_parse_values_unbalanced_braces(text):
    with pytest.raises(StackLangParseError):
        parser.parse_values(text)


def test_native_display_text_reads_back_as_operator():
    # An operator token may look like a displayed native; it must stay an operator.
    block = Block((Operator('<native:+>'), Number(1)))
    assert parser.parse_block(format_value(block)) == block


def test_parse_block_requires_exactly_one_block():
    with pytest.raises(StackLangParseError):
        parser.parse_block("1 2")
    with pytest.raises(StackLangParseError):
        parser.parse_block("{ 1 } { 2 }")
