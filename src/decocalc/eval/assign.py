from __future__ import annotations

import copy
from typing import TYPE_CHECKING

from ..errors import CalcIndexError, ConstantValueError, ValueTypeError, VariableNameError
from ..tree import Token
from ..types import Array, ExpectedTypes, Integer, Object, Value

if TYPE_CHECKING:
    from ..runtime import ParserState

def _stored(value: Value) -> Value:
    # containers are copied so later writes through one name don't alias another
    return copy.deepcopy(value) if value.is_compound() else value

def assign_indexed(node: Token, state: ParserState, target: Token, value: Value) -> None:
    name = target.children[0].input
    index = target.children[2].value

    if name in state.constants:
        raise ConstantValueError(node, name)
    if name not in state.variables:
        raise VariableNameError(node, name)

    match state.variables[name]:
        case Object(entries):
            updated = dict(entries)
            updated[index] = value
            state.variables[name] = Object(updated)
        case Array(items):
            if not isinstance(index, Integer):
                raise ValueTypeError(node, ExpectedTypes.INT)
            i = index.value
            if i < 0 or i > len(items):
                raise CalcIndexError(node, index)
            updated = list(items)
            if i == len(items):
                updated.append(value)
            else:
                updated[i] = value
            state.variables[name] = Array(updated)
        case _:
            raise ValueTypeError(node, ExpectedTypes.ARRAY)

def eval_assignment(node: Token, state: ParserState) -> Value:
    target, value = node.children[0], node.children[2].value
    stored = _stored(value)

    if target.rule == 'index_assignment_prefix':
        assign_indexed(node, state, target, stored)
        return value

    name = target.input
    if name in state.constants:
        raise ConstantValueError(node, name)

    state.variables[name] = stored
    return value
