from __future__ import annotations

import math
from typing import TYPE_CHECKING, Callable

from ..errors import CalcOverflowError, ValueTypeError
from ..types import INT_MAX, INT_MIN, Array, ExpectedTypes, Float, Integer, Object, Value

if TYPE_CHECKING:
    from ..tree import Token

def map_numeric(node: Token, value: Value, fn: Callable[[Value], Value]) -> Value:
    """Apply ``fn`` to a number, or to every number inside a compound value."""
    match value:
        case Array(items):
            return Array([map_numeric(node, x, fn) for x in items])
        case Object(entries):
            return Object({k: map_numeric(node, v, fn) for k, v in entries.items()})
        case Integer() | Float():
            return fn(value)
        case _:
            raise ValueTypeError(node, ExpectedTypes.INT_OR_FLOAT)

def map_float(node: Token, value: Value, fn: Callable[[float], float]) -> Value:
    return map_numeric(node, value, lambda v: Float(safe_float(fn, float(v.value))))

def safe_float(fn: Callable[..., float], *args: float) -> float:
    """Call a ``math`` function, returning NaN or infinity instead of raising."""
    try:
        return fn(*args)
    except ZeroDivisionError:
        return math.inf
    except OverflowError:
        return math.inf
    except ValueError:
        # log(0) style domain edges resolve to -inf, the rest to NaN
        if any(a == 0 for a in args):
            return -math.inf
        return math.nan

def float_to_integer(node: Token, n: float) -> Integer:
    if not math.isfinite(n):
        raise CalcOverflowError(node)
    result = int(n)
    if not INT_MIN <= result <= INT_MAX:
        raise CalcOverflowError(node)
    return Integer(result)
