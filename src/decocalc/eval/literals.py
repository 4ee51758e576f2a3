from __future__ import annotations

import re
from typing import TYPE_CHECKING, Dict, List

from ..errors import CalcOverflowError, ValueParsingError
from ..tree import OutputFormat, Token
from ..types import (
    INT_MAX, Array, Boolean, Float, Identifier, Integer, Object, String, Value, int_in_range,
)

if TYPE_CHECKING:
    from ..runtime import ParserState

_ESCAPES = {
    '\\': '\\',
    "'": "'",
    '"': '"',
    'n': '\n',
    'r': '\r',
    't': '\t',
}

_ESCAPE_RE = re.compile(r'\\(.)', re.DOTALL)

def unescape(text: str) -> str:
    return _ESCAPE_RE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(0)), text)

def _strip_commas(node: Token) -> str:
    return node.input.replace(',', '')

def eval_int(node: Token, _state: ParserState) -> Value:
    n = int(_strip_commas(node))
    if not int_in_range(n):
        raise CalcOverflowError(node)
    return Integer(n)

def eval_float(node: Token, _state: ParserState) -> Value:
    text = _strip_commas(node)
    try:
        return Float(float(text))
    except ValueError as e:
        raise ValueParsingError(node, text, "float") from e

def _eval_radix(node: Token, base: int) -> Value:
    text = node.input
    # 0o17 and 0x1F carry a two character prefix, legacy octal 017 only the zero
    digits = text[2:] if len(text) > 1 and text[1].isalpha() else text[1:]
    n = int(digits, base)

    if n >= 1 << 64:
        raise CalcOverflowError(node)
    if n > INT_MAX:
        n -= 1 << 64

    return Integer(n)

def eval_hex(node: Token, _state: ParserState) -> Value:
    return _eval_radix(node, 16)

def eval_bin(node: Token, _state: ParserState) -> Value:
    return _eval_radix(node, 2)

def eval_oct(node: Token, _state: ParserState) -> Value:
    return _eval_radix(node, 8)

def eval_boolean(node: Token, _state: ParserState) -> Value:
    return Boolean(node.input.lower() == "true")

def eval_string(node: Token, _state: ParserState) -> Value:
    return String(unescape(node.input[1:-1]))

def eval_identifier(node: Token, state: ParserState) -> Value:
    value = state.get_variable(node.input)
    if value is None:
        return Identifier(node.input)
    return value

def eval_currency(node: Token, _state: ParserState) -> Value:
    symbol, amount = node.children[0], node.children[1]
    node.format = OutputFormat.from_symbol(symbol.input)
    return amount.value

def eval_term(node: Token, _state: ParserState) -> Value:
    return node.children[1].value

def list_items(node: Token) -> List[Value]:
    """Values of an argument or element slot, which may be a single expression."""
    if node.rule == 'expression_list':
        return [ch.value for ch in node.children[::2]]
    return [node.value]

def eval_array(node: Token, _state: ParserState) -> Value:
    if len(node.children) < 3:
        return Array([])
    return Array(list_items(node.children[1]))

def eval_object(node: Token, _state: ParserState) -> Value:
    entries: Dict[Value, Value] = {}

    for entry in node.children[1:-1:2]:
        key, value = entry.children[0].value, entry.children[2].value
        entries[key] = value

    return Object(entries)