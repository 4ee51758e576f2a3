from __future__ import annotations

import hashlib
import random
from typing import Optional

from ..errors import FunctionArgumentTypeError
from ..types import ExpectedTypes, Float, Integer, String
from .table import FunctionArgument, register_function

CATEGORY = "cryptography"

def _digest(algorithm: str, args) -> str:
    h = hashlib.new(algorithm)
    for value in args.plural("input"):
        h.update(value.as_string().encode("utf-8"))
    return h.hexdigest().upper()

@register_function("choose", category=CATEGORY,
                   description="Returns any one of the provided arguments at random",
                   arguments=[FunctionArgument("option", plural=True)])
def std_choose(_fn, _node, _state, args):
    return random.choice(args.plural("option"))

def _bound(fn, node, args, name: str, position: int) -> Optional[int]:
    value = args.optional(name)
    if value is None:
        return None
    n = value.as_int()
    if n is None:
        raise FunctionArgumentTypeError(node, position, ExpectedTypes.INT, fn.signature())
    return n

@register_function("rand", category=CATEGORY,
                   description="Returns a number from 0 to 1, or an integer from 0 to [m], or from [m] to [n]",
                   arguments=[
                       FunctionArgument("m", ExpectedTypes.INT, optional=True),
                       FunctionArgument("n", ExpectedTypes.INT, optional=True),
                   ])
def std_rand(fn, node, _state, args):
    m = _bound(fn, node, args, "m", 1)
    n = _bound(fn, node, args, "n", 2)

    if m is None:
        return Float(random.random())

    low, high = (0, m) if n is None else (m, n)
    if low > high:
        low, high = high, low
    return Integer(random.randint(low, high))

@register_function("md5", category=CATEGORY,
                   description="Returns the MD5 hash of a given string",
                   arguments=[FunctionArgument("input", ExpectedTypes.STRING, plural=True)])
def std_md5(_fn, _node, _state, args):
    return String(_digest("md5", args))

@register_function("sha256", category=CATEGORY,
                   description="Returns the SHA256 hash of a given string",
                   arguments=[FunctionArgument("input", ExpectedTypes.STRING, plural=True)])
def std_sha256(_fn, _node, _state, args):
    return String(_digest("sha256", args))
