"""Operator nodes: binary folds, comparisons, unary operators and indexing."""
from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Dict, List

from ..errors import CalcIndexError, InternalError, ValueTypeError
from ..tree import OutputFormat, Token
from ..types import Array, Boolean, ExpectedTypes, Integer, NoneValue, Object, String, Value
from . import arithmetic

if TYPE_CHECKING:
    from ..runtime import ParserState

BinaryOp = Callable[[Token, Value, Value], Value]

BINARY_OPERATORS: Dict[str, BinaryOp] = {
    'plus': arithmetic.add,
    'minus': arithmetic.subtract,
    'star': arithmetic.multiply,
    'slash': arithmetic.divide,
    'percent': arithmetic.remainder,
    'pow': arithmetic.power,
    'lshift': arithmetic.shift_left,
    'rshift': arithmetic.shift_right,
    'amp': arithmetic.bitwise_and,
    'pipe': arithmetic.bitwise_or,
    'caret': arithmetic.bitwise_xor,
}

def fold_binary(node: Token, _state: ParserState) -> Value:
    """Left fold over ``[operand, op, operand, ...]``."""
    children = node.children
    result = children[0].value

    for i in range(1, len(children) - 1, 2):
        op = BINARY_OPERATORS.get(children[i].rule)
        if op is None:
            raise InternalError(children[i], f"unknown operator {children[i].input!r}")
        result = op(node, result, children[i + 1].value)

    return result

def eval_implied_mul(node: Token, _state: ParserState) -> Value:
    result = node.children[0].value
    for ch in node.children[1:]:
        result = arithmetic.multiply(node, result, ch.value)
    return result

# ---------------- Comparison ----------------

def _comparable(node: Token, value: Value) -> float:
    if value.is_compound() or isinstance(value, NoneValue):
        raise ValueTypeError(node, ExpectedTypes.INT_OR_FLOAT)
    n = value.as_float()
    if n is None:
        raise ValueTypeError(node, ExpectedTypes.INT_OR_FLOAT)
    return n

def compare(node: Token, op: str, left: Value, right: Value) -> bool:
    if op == 'eq':
        return left == right
    if op == 'ne':
        return left != right

    if isinstance(left, String) or isinstance(right, String):
        a, b = left.as_string(), right.as_string()
    else:
        a, b = _comparable(node, left), _comparable(node, right)

    match op:
        case 'lt':
            return a < b
        case 'gt':
            return a > b
        case 'le':
            return a <= b
        case 'ge':
            return a >= b

    raise InternalError(node, f"unknown comparison {op!r}")

def eval_bool_cmp(node: Token, _state: ParserState) -> Value:
    children = node.children
    result = children[0].value

    for i in range(1, len(children) - 1, 2):
        result = Boolean(compare(node, children[i].rule, result, children[i + 1].value))

    node.format = OutputFormat.DEFAULT
    return result

def eval_bool_and(node: Token, _state: ParserState) -> Value:
    node.format = OutputFormat.DEFAULT
    return Boolean(all(ch.value.as_bool() for ch in node.children[::2]))

def eval_bool_or(node: Token, _state: ParserState) -> Value:
    node.format = OutputFormat.DEFAULT
    return Boolean(any(ch.value.as_bool() for ch in node.children[::2]))

# ---------------- Unary ----------------

_PREFIX_OPERATORS = {
    'minus': arithmetic.negate,
    'tilde': arithmetic.bitwise_not,
}

def eval_prefix_unary(node: Token, _state: ParserState) -> Value:
    *operators, operand = node.children
    value = operand.value

    for op in reversed(operators):
        value = _PREFIX_OPERATORS[op.rule](node, value)

    return value

def eval_postfix_unary(node: Token, _state: ParserState) -> Value:
    value = node.children[0].value
    for _ in node.children[1:]:
        value = arithmetic.factorial(node, value)
    return value

# ---------------- Indexing ----------------

def index_value(node: Token, target: Value, index: Value) -> Value:
    match target:
        case Array(items):
            if not isinstance(index, Integer):
                raise ValueTypeError(node, ExpectedTypes.INT)
            i = index.value
            if not -len(items) <= i < len(items):
                raise CalcIndexError(node, index)
            return items[i]
        case Object(entries):
            if index not in entries:
                raise CalcIndexError(node, index)
            return entries[index]
        case String(text):
            if not isinstance(index, Integer):
                raise ValueTypeError(node, ExpectedTypes.INT)
            i = index.value
            if not -len(text) <= i < len(text):
                raise CalcIndexError(node, index)
            return String(text[i])
        case _:
            raise ValueTypeError(node, ExpectedTypes.ARRAY)

def eval_index(node: Token, _state: ParserState) -> Value:
    value = node.children[0].value
    indexes: List[Token] = node.children[2::3]

    for idx in indexes:
        value = index_value(node, value, idx.value)

    return value
