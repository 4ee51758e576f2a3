from __future__ import annotations

import math

from ..types import ExpectedTypes
from .helpers import map_float
from .table import FunctionArgument, register_function

CATEGORY = "trigonometry"

def _register_unary(name: str, fn, description: str) -> None:
    def handler(_definition, node, _state, args):
        return map_float(node, args.required("n"), fn)

    handler.__name__ = f"std_{name}"
    register_function(
        name,
        category=CATEGORY,
        description=description,
        arguments=[FunctionArgument("n", ExpectedTypes.INT_OR_FLOAT)],
    )(handler)

for _name, _fn, _description in (
    ("sin", math.sin, "Calculate the sine of n"),
    ("cos", math.cos, "Calculate the cosine of n"),
    ("tan", math.tan, "Calculate the tangent of n"),
    ("asin", math.asin, "Calculate the arcsine of n"),
    ("acos", math.acos, "Calculate the arccosine of n"),
    ("atan", math.atan, "Calculate the arctangent of n"),
    ("sinh", math.sinh, "Calculate the hyperbolic sine of n"),
    ("cosh", math.cosh, "Calculate the hyperbolic cosine of n"),
    ("tanh", math.tanh, "Calculate the hyperbolic tangent of n"),
    ("to_radians", math.radians, "Convert the given degree value into radians"),
    ("to_degrees", math.degrees, "Convert the given radian value into degrees"),
):
    _register_unary(_name, _fn, _description)
