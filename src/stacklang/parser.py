## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import re
import functools
from typing import Iterator

import lark

from .types import Value, Number, Symbol, Operator, Block
from .errors import StackLangParseError


# Whole-token decimal floats only, e.g. `3`, `-2.5`, `.5`, `1e-3`; never `inf` or `nan`.
NUMBER_RE = re.compile(r'[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?')

BLOCK_OPEN, BLOCK_CLOSE = '{', '}'


def iter_tokens(source: str) -> Iterator[tuple[int, str]]:
    """Split source on line breaks, then each line on single spaces.  Empty tokens are kept,
    since the machine observes them as steps too.  Yields `(line_number, token)` pairs.
    """
    for lineno, line in enumerate(source.split('\n'), start=1):
        for token in line.removesuffix('\r').split(' '):
            yield lineno, token

def tokenize(source: str) -> list[str]:
    return [token for _, token in iter_tokens(source)]


def read_token(token: str) -> Value:
    """Classify a single non-brace token as a Number, Symbol or Operator."""
    if NUMBER_RE.fullmatch(token):
        return Number(float(token))
    # A lone `/` is the division operator, not an empty symbol.
    if token.startswith('/') and len(token) > 1:
        return Symbol(token[1:])
    return Operator(token)


# Reads back the display form written by `formatting.format_value`.
GRAMMAR = r"""?start: values
values: _value*
_value: block | WORD
block: LBRACE _value* RBRACE

LBRACE: /\{(?!\S)/
RBRACE: /\}(?!\S)/
WORD: /(?![{}](?!\S))\S+/

%import common.WS
%ignore WS
"""


@functools.cache
def _get_parser() -> lark.Lark:
    return lark.Lark(GRAMMAR, start='start', parser="lalr", lexer="contextual")


def parse_values(text: str) -> list[Value]:
    """Parse displayed values separated by whitespace, with nested `{ ... }` blocks.  Natives
    never appear inside blocks or on the stack, so their display form is read as an operator.
    """

    def _traverse(node) -> Value:
        if isinstance(node, lark.Token):
            assert node.type == 'WORD'
            return read_token(node.value)
        assert isinstance(node, lark.Tree) and node.data == 'block'
        children = [ch for ch in node.children if not (isinstance(ch, lark.Token) and ch.type in ('LBRACE', 'RBRACE'))]
        return Block(tuple(_traverse(ch) for ch in children))

    try:
        tree = _get_parser().parse(text)
    except (lark.exceptions.ParseError, lark.exceptions.UnexpectedCharacters) as exc:
        def attr(k): return getattr(exc, k, None)
        token_val = getattr(token, 'value', '') if (token := attr('token')) is not None else ''
        raise StackLangParseError(str(exc), line=attr('line'), column=attr('column'), token=token_val) from None

    return [_traverse(ch) for ch in tree.children]


def parse_block(text: str) -> Block:
    match parse_values(text):
        case [Block() as block]:
            return block
        case values:
            raise StackLangParseError(f"Expected a single `{{ ... }}` block, found {len(values)} value(s).")
