"""Checked integer and float arithmetic with array/object broadcasting."""
from __future__ import annotations

import math
from typing import TYPE_CHECKING, Callable, Optional

from ..errors import (
    ArrayLengthsError, CalcOverflowError, CalcUnderflowError, ValueTypeError, VariableNameError,
)
from ..types import (
    INT_MAX, INT_MIN, Array, Boolean, ExpectedTypes, Float, Identifier, Integer, Object, String, Value,
)

if TYPE_CHECKING:
    from ..tree import Token

IntOp = Callable[[int, int], Optional[int]]
FloatOp = Callable[[float, float], float]
ScalarOp = Callable[['Token', Value, Value], Value]

U32_MAX = (1 << 32) - 1
_MASK64 = (1 << 64) - 1

def checked(n: int) -> Optional[int]:
    return n if INT_MIN <= n <= INT_MAX else None

def wrap64(n: int) -> int:
    n &= _MASK64
    return n - (1 << 64) if n > INT_MAX else n

# ---------------- Integer primitives ----------------

def int_add(a: int, b: int) -> Optional[int]:
    return checked(a + b)

def int_sub(a: int, b: int) -> Optional[int]:
    return checked(a - b)

def int_mul(a: int, b: int) -> Optional[int]:
    return checked(a * b)

def int_div(a: int, b: int) -> Optional[int]:
    if b == 0:
        return None
    q = abs(a) // abs(b)
    return checked(-q if (a < 0) != (b < 0) else q)

def int_rem(a: int, b: int) -> Optional[int]:
    if b == 0:
        return None
    return a % abs(b)

def int_pow(a: int, b: int) -> Optional[int]:
    if abs(b) > U32_MAX:
        return None
    if b < 0:
        if a == 0:
            return None
        if abs(a) == 1:
            return a ** -b
        return 0
    if abs(a) > 1 and b > 64:
        return None
    return checked(a ** b)

def int_shl(a: int, b: int) -> Optional[int]:
    return wrap64(a << (b & 63))

def int_shr(a: int, b: int) -> Optional[int]:
    return a >> (b & 63)

def int_and(a: int, b: int) -> Optional[int]:
    return a & b

def int_or(a: int, b: int) -> Optional[int]:
    return a | b

def int_xor(a: int, b: int) -> Optional[int]:
    return a ^ b

# ---------------- Float primitives ----------------

def float_add(a: float, b: float) -> float:
    return a + b

def float_sub(a: float, b: float) -> float:
    return a - b

def float_mul(a: float, b: float) -> float:
    return a * b

def float_div(a: float, b: float) -> float:
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b

def float_rem(a: float, b: float) -> float:
    if b == 0 or not math.isfinite(a):
        return math.nan
    r = math.fmod(a, b)
    return r + abs(b) if r < 0 else r

def float_pow(a: float, b: float) -> float:
    if a == 0 and b < 0:
        return math.inf
    try:
        return math.pow(a, b)
    except ValueError:
        return math.nan
    except OverflowError:
        negative = a < 0 and b.is_integer() and int(b) % 2 == 1
        return -math.inf if negative else math.inf

# ---------------- Broadcasting ----------------

def contains_float(value: Value) -> bool:
    match value:
        case Float():
            return True
        case Array(items):
            return any(contains_float(x) for x in items)
        case Object(entries):
            return any(contains_float(x) for x in entries.values())
        case _:
            return False

def broadcast(node: Token, left: Value, right: Value, scalar: ScalarOp) -> Value:
    """Apply ``scalar`` element-wise across arrays and object values."""
    for operand in (left, right):
        if isinstance(operand, Identifier):
            raise VariableNameError(node, operand.name)

    match left, right:
        case Array(xs), Array(ys):
            if len(xs) != len(ys):
                raise ArrayLengthsError(node)
            return Array([broadcast(node, x, y, scalar) for x, y in zip(xs, ys)])
        case Array(xs), Object():
            raise ValueTypeError(node, ExpectedTypes.ARRAY)
        case Object(), Array(ys):
            raise ValueTypeError(node, ExpectedTypes.OBJECT)
        case Object(), Object():
            raise ValueTypeError(node, ExpectedTypes.INT_OR_FLOAT)
        case Array(xs), _:
            return Array([broadcast(node, x, right, scalar) for x in xs])
        case _, Array(ys):
            return Array([broadcast(node, left, y, scalar) for y in ys])
        case Object(entries), _:
            return Object({k: broadcast(node, v, right, scalar) for k, v in entries.items()})
        case _, Object(entries):
            return Object({k: broadcast(node, left, v, scalar) for k, v in entries.items()})

    return scalar(node, left, right)

def perform_int_calculation(node: Token, left: Value, right: Value, int_op: IntOp,
                            expected: ExpectedTypes = ExpectedTypes.INT_OR_FLOAT) -> Value:
    def scalar(node: Token, l: Value, r: Value) -> Value:
        if not isinstance(l, Integer) or not isinstance(r, Integer):
            raise ValueTypeError(node, expected)
        result = int_op(l.value, r.value)
        if result is None:
            raise CalcOverflowError(node)
        return Integer(result)

    return broadcast(node, left, right, scalar)

def perform_float_calculation(node: Token, left: Value, right: Value, float_op: FloatOp) -> Value:
    def scalar(node: Token, l: Value, r: Value) -> Value:
        if not l.is_numeric() or not r.is_numeric():
            raise ValueTypeError(node, ExpectedTypes.INT_OR_FLOAT)
        result = float_op(float(l.value), float(r.value))
        if result == math.inf:
            raise CalcOverflowError(node)
        if result == -math.inf:
            raise CalcUnderflowError(node)
        return Float(result)

    return broadcast(node, left, right, scalar)

def perform_calculation(node: Token, left: Value, right: Value, int_op: IntOp, float_op: FloatOp) -> Value:
    if contains_float(left) or contains_float(right):
        return perform_float_calculation(node, left, right, float_op)
    return perform_int_calculation(node, left, right, int_op)

# ---------------- Operators ----------------

def add(node: Token, left: Value, right: Value) -> Value:
    if isinstance(left, String) or isinstance(right, String):
        return String(left.as_string() + right.as_string())
    return perform_calculation(node, left, right, int_add, float_add)

def subtract(node: Token, left: Value, right: Value) -> Value:
    return perform_calculation(node, left, right, int_sub, float_sub)

def multiply(node: Token, left: Value, right: Value) -> Value:
    return perform_calculation(node, left, right, int_mul, float_mul)

def divide(node: Token, left: Value, right: Value) -> Value:
    return perform_calculation(node, left, right, int_div, float_div)

def remainder(node: Token, left: Value, right: Value) -> Value:
    return perform_calculation(node, left, right, int_rem, float_rem)

def power(node: Token, left: Value, right: Value) -> Value:
    return perform_calculation(node, left, right, int_pow, float_pow)

def _integer_only(int_op: IntOp) -> ScalarOp:
    def op(node: Token, left: Value, right: Value) -> Value:
        return perform_int_calculation(node, left, right, int_op, expected=ExpectedTypes.INT)
    return op

shift_left = _integer_only(int_shl)
shift_right = _integer_only(int_shr)
bitwise_and = _integer_only(int_and)
bitwise_or = _integer_only(int_or)
bitwise_xor = _integer_only(int_xor)

# ---------------- Unary operators ----------------

def negate(node: Token, value: Value) -> Value:
    match value:
        case Integer(n):
            result = checked(-n)
            if result is None:
                raise CalcOverflowError(node)
            return Integer(result)
        case Float(n):
            return Float(-n)
        case Boolean(b):
            return Boolean(not b)
        case Array(items):
            return Array([negate(node, x) for x in items])
        case Identifier(name):
            raise VariableNameError(node, name)
        case _:
            raise ValueTypeError(node, ExpectedTypes.INT_OR_FLOAT)

def trim_binary(n: int, base: int) -> int:
    """Mask ``n`` to the bit width of ``base``; zero and negatives are unmasked."""
    if base <= 0:
        return n
    return n & ((1 << base.bit_length()) - 1)

def bitwise_not(node: Token, value: Value) -> Value:
    match value:
        case Integer(n):
            return Integer(trim_binary(~n, n))
        case Boolean(b):
            return Boolean(not b)
        case Array(items):
            return Array([bitwise_not(node, x) for x in items])
        case Identifier(name):
            raise VariableNameError(node, name)
        case _:
            raise ValueTypeError(node, ExpectedTypes.INT)

def factorial(node: Token, value: Value) -> Value:
    match value:
        case Integer(n):
            pass
        case Float(f):
            if not math.isfinite(f):
                raise CalcOverflowError(node)
            n = int(f)
        case Array(items):
            return Array([factorial(node, x) for x in items])
        case Identifier(name):
            raise VariableNameError(node, name)
        case _:
            raise ValueTypeError(node, ExpectedTypes.INT_OR_FLOAT)

    if n < 0:
        raise CalcUnderflowError(node)

    result = 1
    for i in range(2, n + 1):
        result *= i
        if result > INT_MAX:
            raise CalcOverflowError(node)

    return Integer(result)
