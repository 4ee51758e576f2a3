"""Numeric builtins: conversions, rounding, logarithms and roots."""
from __future__ import annotations

import math
from typing import List

from ..errors import CalcOverflowError, FunctionArgumentOverflowError, ValueParsingError, ValueTypeError
from ..types import Array, Boolean, ExpectedTypes, Float, Integer, Value, round_half_away
from .helpers import float_to_integer, map_float, map_numeric
from .table import FunctionArgument, register_function

CATEGORY = "math"

U32_MAX = (1 << 32) - 1

def _flatten(values: List[Value]) -> List[Value]:
    out: List[Value] = []
    for v in values:
        if v.is_compound():
            out.extend(_flatten(v.as_array()))
        else:
            out.append(v)
    return out

def _extreme(node, values: List[Value], pick) -> Value:
    numbers = [v for v in _flatten(values) if not (isinstance(v, Float) and math.isnan(v.value))]
    for v in numbers:
        if not v.is_numeric():
            raise ValueTypeError(node, ExpectedTypes.INT_OR_FLOAT)
    if not numbers:
        return Float(math.nan)
    return pick(numbers, key=lambda v: v.value)

@register_function("bool", category=CATEGORY,
                   description="Returns a value as a boolean",
                   arguments=[FunctionArgument("input")])
def std_bool(_fn, _node, _state, args):
    return Boolean(args.required("input").as_bool())

@register_function("array", category=CATEGORY,
                   description="Returns a value as an array",
                   arguments=[FunctionArgument("input")])
def std_array(_fn, _node, _state, args):
    return Array(args.required("input").as_array())

@register_function("int", category=CATEGORY,
                   description="Returns a value as an integer",
                   arguments=[FunctionArgument("input")])
def std_int(_fn, node, _state, args):
    value = args.required("input")
    n = value.as_int()
    if n is None:
        raise ValueParsingError(node, value.as_string(), str(ExpectedTypes.INT))
    return Integer(n)

@register_function("float", category=CATEGORY,
                   description="Returns a value as a float",
                   arguments=[FunctionArgument("input")])
def std_float(_fn, node, _state, args):
    value = args.required("input")
    n = value.as_float()
    if n is None:
        raise ValueParsingError(node, value.as_string(), str(ExpectedTypes.FLOAT))
    return Float(n)

@register_function("min", category=CATEGORY,
                   description="Returns the smallest numeric value from the supplied arguments",
                   arguments=[FunctionArgument("n", ExpectedTypes.INT_OR_FLOAT, plural=True)])
def std_min(_fn, node, _state, args):
    return _extreme(node, args.plural("n"), min)

@register_function("max", category=CATEGORY,
                   description="Returns the largest numeric value from the supplied arguments",
                   arguments=[FunctionArgument("n", ExpectedTypes.INT_OR_FLOAT, plural=True)])
def std_max(_fn, node, _state, args):
    return _extreme(node, args.plural("n"), max)

@register_function("ceil", category=CATEGORY,
                   description="Returns the nearest whole integer larger than n",
                   arguments=[FunctionArgument("n", ExpectedTypes.INT_OR_FLOAT)])
def std_ceil(_fn, node, _state, args):
    return map_numeric(node, args.required("n"), lambda v: float_to_integer(node, math.ceil(v.value)) if isinstance(v, Float) else v)

@register_function("floor", category=CATEGORY,
                   description="Returns the nearest whole integer smaller than n",
                   arguments=[FunctionArgument("n", ExpectedTypes.INT_OR_FLOAT)])
def std_floor(_fn, node, _state, args):
    return map_numeric(node, args.required("n"), lambda v: float_to_integer(node, math.floor(v.value)) if isinstance(v, Float) else v)

@register_function("round", category=CATEGORY,
                   description="Rounds n to the nearest integer, or to [precision] decimal places",
                   arguments=[
                       FunctionArgument("n", ExpectedTypes.INT_OR_FLOAT),
                       FunctionArgument("precision", ExpectedTypes.INT, optional=True),
                   ])
def std_round(fn, node, _state, args):
    precision = args.optional_or("precision", Integer(0)).as_int()
    if precision is None or precision > U32_MAX:
        raise FunctionArgumentOverflowError(node, 2, fn.signature())

    def _round(v: Value) -> Value:
        n = float(v.value)
        # beyond float's decimal range rounding is a no-op
        if not math.isfinite(n) or precision > 300:
            return Float(n)
        if precision < -300:
            return Float(0.0)
        scale = 10.0 ** precision
        if math.isinf(n * scale):
            return Float(n)
        return Float(round_half_away(n * scale) / scale)

    return map_numeric(node, args.required("n"), _round)

@register_function("abs", category=CATEGORY,
                   description="Returns the absolute value of n",
                   arguments=[FunctionArgument("n", ExpectedTypes.INT_OR_FLOAT)])
def std_abs(_fn, node, _state, args):
    def _abs(v: Value) -> Value:
        if isinstance(v, Integer):
            if v.value == -(1 << 63):
                raise CalcOverflowError(node)
            return Integer(abs(v.value))
        return Float(abs(v.value))

    return map_numeric(node, args.required("n"), _abs)

@register_function("log10", category=CATEGORY,
                   description="Returns the base 10 logarithm of n",
                   arguments=[FunctionArgument("n", ExpectedTypes.INT_OR_FLOAT)])
def std_log10(_fn, node, _state, args):
    return map_float(node, args.required("n"), math.log10)

@register_function("ln", category=CATEGORY,
                   description="Returns the natural logarithm of n",
                   arguments=[FunctionArgument("n", ExpectedTypes.INT_OR_FLOAT)])
def std_ln(_fn, node, _state, args):
    return map_float(node, args.required("n"), math.log)

@register_function("log", category=CATEGORY,
                   description="Returns the logarithm of n in any base",
                   arguments=[
                       FunctionArgument("n", ExpectedTypes.INT_OR_FLOAT),
                       FunctionArgument("base", ExpectedTypes.INT_OR_FLOAT),
                   ])
def std_log(_fn, node, _state, args):
    base = args.required("base")
    if base.is_compound():
        raise ValueTypeError(node, ExpectedTypes.INT_OR_FLOAT)
    b = float(base.value)
    return map_float(node, args.required("n"), lambda n: math.log(n, b))

@register_function("sqrt", category=CATEGORY,
                   description="Returns the square root of n",
                   arguments=[FunctionArgument("n", ExpectedTypes.INT_OR_FLOAT)])
def std_sqrt(_fn, node, _state, args):
    return map_float(node, args.required("n"), math.sqrt)

@register_function("root", category=CATEGORY,
                   description="Returns a root of n of any base",
                   arguments=[
                       FunctionArgument("n", ExpectedTypes.INT_OR_FLOAT),
                       FunctionArgument("base", ExpectedTypes.INT_OR_FLOAT),
                   ])
def std_root(_fn, node, _state, args):
    base = args.required("base")
    if base.is_compound():
        raise ValueTypeError(node, ExpectedTypes.INT_OR_FLOAT)
    b = float(base.value)
    return map_float(node, args.required("n"), lambda n: math.pow(n, 1.0 / b))
