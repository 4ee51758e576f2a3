"""Function calls and user-defined functions."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List

from ..errors import FunctionArgumentsError, FunctionNameError, StackOverflowError
from ..runtime import UserFunction
from ..tree import Token
from ..types import String, Value
from .literals import list_items

if TYPE_CHECKING:
    from ..runtime import ParserState

logger = logging.getLogger(__name__)

def call_arguments(node: Token) -> List[Value]:
    slot = node.children[2]
    if slot.rule == 'rpar':
        return []
    return list_items(slot)

def define_function(node: Token, state: ParserState) -> None:
    """Store ``name(a, b) = body`` without evaluating the body."""
    name = node.children[0].input
    params: List[str] = []

    for ch in node.children[2:]:
        if ch.rule == 'rpar':
            break
        if ch.rule == 'identifier':
            params.append(ch.input)

    body = node.children[-1].input
    function = UserFunction(name, params, body)
    state.user_functions[name] = function
    logger.debug("Defined %s", function.signature())

    node.text = body
    node.value = String(body)

def call_user_function(node: Token, state: ParserState, function: UserFunction, args: List[Value]) -> Value:
    from ..evaluator import evaluate

    if len(args) != len(function.arguments):
        raise FunctionArgumentsError(node, len(function.arguments), len(function.arguments),
                                     function.signature())

    inner = state.spawn_inner()
    if inner is None:
        raise StackOverflowError(node)

    for name, value in zip(function.arguments, args):
        inner.variables[name] = value

    logger.debug("Calling %s at depth %d", function.name, inner.depth)
    return evaluate(function.definition, inner).value

def eval_call(node: Token, state: ParserState) -> Value:
    name = node.children[0].input
    args = call_arguments(node)

    if state.extensions is not None and state.extensions.has_function(name):
        return state.extensions.call_function(name, node, args, state.variables)

    if state.functions.has(name):
        return state.functions.call(name, node, state, args)

    function = state.user_functions.get(name)
    if function is not None:
        return call_user_function(node, state, function, args)

    raise FunctionNameError(node, name)
