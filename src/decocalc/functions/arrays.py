"""Array and object builtins.

Every builtin returns a new value; the arrays bound to variables are never
modified in place.
"""
from __future__ import annotations

from typing import List

from ..errors import ArrayEmptyError, CalcIndexError, ValueTypeError
from ..types import Array, Boolean, ExpectedTypes, Integer, Object, Value
from .table import FunctionArgument, register_function

CATEGORY = "arrays"

def _length(value: Value) -> int:
    match value:
        case Object(entries):
            return len(entries)
        case _:
            return len(value.as_array())

def _position(node, items: List[Value], index: Value) -> int:
    if not isinstance(index, Integer):
        raise ValueTypeError(node, ExpectedTypes.INT)
    i = index.value
    if i < 0:
        i += len(items)
    if not 0 <= i < len(items):
        raise CalcIndexError(node, index)
    return i

@register_function("len", category=CATEGORY,
                   description="Returns the length of the given array or object",
                   arguments=[FunctionArgument("input", ExpectedTypes.ARRAY)])
def std_len(_fn, _node, _state, args):
    return Integer(_length(args.required("input")))

@register_function("is_empty", category=CATEGORY,
                   description="Returns true if the given array or object is empty",
                   arguments=[FunctionArgument("input", ExpectedTypes.ARRAY)])
def std_is_empty(_fn, _node, _state, args):
    return Boolean(_length(args.required("input")) == 0)

@register_function("pop", category=CATEGORY,
                   description="Returns the array without its last element",
                   arguments=[FunctionArgument("input", ExpectedTypes.ARRAY)])
def std_pop(_fn, node, _state, args):
    items = args.required("input").as_array()
    if not items:
        raise ArrayEmptyError(node)
    return Array(items[:-1])

@register_function("push", category=CATEGORY,
                   description="Returns the array with element appended",
                   arguments=[
                       FunctionArgument("input", ExpectedTypes.ARRAY),
                       FunctionArgument("element"),
                   ])
def std_push(_fn, _node, _state, args):
    return Array(args.required("input").as_array() + [args.required("element")])

@register_function("dequeue", category=CATEGORY,
                   description="Returns the array without its first element",
                   arguments=[FunctionArgument("input", ExpectedTypes.ARRAY)])
def std_dequeue(_fn, node, _state, args):
    items = args.required("input").as_array()
    if not items:
        raise ArrayEmptyError(node)
    return Array(items[1:])

@register_function("enqueue", category=CATEGORY,
                   description="Returns the array with element appended",
                   arguments=[
                       FunctionArgument("input", ExpectedTypes.ARRAY),
                       FunctionArgument("element"),
                   ])
def std_enqueue(_fn, _node, _state, args):
    return Array(args.required("input").as_array() + [args.required("element")])

@register_function("remove", category=CATEGORY,
                   description="Removes an element from an array by index, or from an object by key",
                   arguments=[
                       FunctionArgument("input", ExpectedTypes.ARRAY),
                       FunctionArgument("index"),
                   ])
def std_remove(_fn, node, _state, args):
    container = args.required("input")
    index = args.required("index")

    if isinstance(container, Object):
        if index not in container.entries:
            raise CalcIndexError(node, index)
        entries = dict(container.entries)
        del entries[index]
        return Object(entries)

    items = container.as_array()
    del items[_position(node, items, index)]
    return Array(items)

@register_function("element", category=CATEGORY,
                   description="Returns an element from an array by index, or from an object by key",
                   arguments=[
                       FunctionArgument("input", ExpectedTypes.ARRAY),
                       FunctionArgument("index"),
                   ])
def std_element(_fn, node, _state, args):
    container = args.required("input")
    index = args.required("index")

    if isinstance(container, Object):
        if index not in container.entries:
            raise CalcIndexError(node, index)
        return container.entries[index]

    items = container.as_array()
    return items[_position(node, items, index)]

@register_function("merge", category=CATEGORY,
                   description="Merges arrays into one array, or objects into one object",
                   arguments=[FunctionArgument("input", ExpectedTypes.ARRAY, plural=True)])
def std_merge(_fn, _node, _state, args):
    inputs = args.plural("input")

    if all(isinstance(v, Object) for v in inputs):
        merged = {}
        for v in inputs:
            merged.update(v.entries)
        return Object(merged)

    items: List[Value] = []
    for v in inputs:
        items.extend(v.as_array())
    return Array(items)

@register_function("keys", category=CATEGORY,
                   description="Returns the keys of an object, or the indices of an array",
                   arguments=[FunctionArgument("input", ExpectedTypes.OBJECT)])
def std_keys(_fn, _node, _state, args):
    return Array(list(args.required("input").as_object().keys()))

@register_function("values", category=CATEGORY,
                   description="Returns the values of an object, or the elements of an array",
                   arguments=[FunctionArgument("input", ExpectedTypes.OBJECT)])
def std_values(_fn, _node, _state, args):
    return Array(args.required("input").as_array())
