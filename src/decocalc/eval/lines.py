"""Script and line nodes: value selection and output decoration."""
from __future__ import annotations

from typing import TYPE_CHECKING

from ..tree import OutputFormat, Token
from ..types import NoneValue, Value

if TYPE_CHECKING:
    from ..runtime import ParserState

_CURRENCY_DECORATOR = {
    OutputFormat.DOLLARS: "dollars",
    OutputFormat.EUROS: "euros",
    OutputFormat.POUNDS: "pounds",
    OutputFormat.YEN: "yen",
}

_SKIP = frozenset({'decorator', 'newline'})

def decorator_name(node: Token) -> str:
    decorator = node.child_by_rule('decorator')
    if decorator is not None:
        return decorator.children[1].input
    return _CURRENCY_DECORATOR.get(node.format, "default")

def eval_line(node: Token, state: ParserState) -> Value:
    value: Value = NoneValue()
    for ch in node.children:
        if ch.rule not in _SKIP:
            value = ch.value
            break

    node.value = value
    name = decorator_name(node)
    builtin = name == "default" or name in _CURRENCY_DECORATOR.values()

    if not builtin and state.extensions is not None and state.extensions.has_decorator(name):
        node.text = state.extensions.call_decorator(name, node, state.variables)
    else:
        node.text = state.decorators.call(name, node, value)

    return value

def eval_script(node: Token, _state: ParserState) -> Value:
    parts = []
    for line in node.lines():
        parts.append(line.text)
        newline = line.child_by_rule('newline')
        if newline is not None:
            parts.append(newline.input)

    node.text = "".join(parts)

    lines = node.lines()
    return lines[-1].value if lines else NoneValue()
