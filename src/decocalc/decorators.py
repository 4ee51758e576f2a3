"""Output decorators: the ``@name`` formatters applied at the end of a line."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Tuple
from typing_extensions import TypeAlias

from .errors import CalcOverflowError, DecoratorNameError, RangeError, ValueTypeError
from .types import (
    Array, Boolean, ExpectedTypes, Float, Identifier, Integer, NoneValue, Object, String, Value,
    float_display, float_to_string,
)

if TYPE_CHECKING:
    from .tree import Token

logger = logging.getLogger(__name__)

DecoratorHandler: TypeAlias = Callable[['DecoratorDefinition', 'Token', Value], str]

MASK64 = (1 << 64) - 1
MAX_ROMAN = 3999

CURRENCY_DECORATORS = frozenset({
    'dollar', 'dollars', 'usd', 'aud', 'cad',
    'euro', 'euros',
    'pound', 'pounds',
    'yen',
})


@dataclass
class DecoratorDefinition:
    names: Tuple[str, ...]
    description: str
    expected: ExpectedTypes
    handler: DecoratorHandler

    @property
    def name(self) -> str:
        return self.names[0]

    def signature(self) -> str:
        return "/".join(f"@{n}" for n in self.names)

    def help(self) -> str:
        return f"{self.signature()}: {self.description}"

    def validate(self, node: Token, value: Value) -> None:
        if not self.expected.matches(value):
            raise ValueTypeError(node, self.expected)

    def call(self, node: Token, value: Value) -> str:
        self.validate(node, value)
        return self.handler(self, node, value)


BUILTIN_DECORATORS: List[DecoratorDefinition] = []

def register_decorator(*names: str, description: str, expected: ExpectedTypes = ExpectedTypes.ANY,
                       plural: bool = True):
    """Register a builtin decorator.

    The decorated function renders one value of the expected type. With
    ``plural`` set, arrays and objects are rendered element by element.
    """
    def dec(render: Callable[[Token, Value], str]):
        if plural:
            def handler(definition: DecoratorDefinition, node: Token, value: Value) -> str:
                return pluralized_decorator(definition, node, value, render)
        else:
            def handler(definition: DecoratorDefinition, node: Token, value: Value) -> str:
                return render(node, value)

        BUILTIN_DECORATORS.append(DecoratorDefinition(names, description, expected, handler))
        return render

    return dec

def pluralized_decorator(definition: DecoratorDefinition, node: Token, value: Value,
                         render: Callable[[Token, Value], str]) -> str:
    if definition.expected.strict_matches(value):
        return render(node, value)

    match value:
        case Array(items):
            return Array([String(definition.call(node, v)) for v in items]).as_string()
        case Object(entries):
            return Object({k: String(definition.call(node, v)) for k, v in entries.items()}).as_string()
        case _:
            return default_decorator(node, value)


class DecoratorTable:
    def __init__(self, include_builtins: bool = True):
        self._decorators: Dict[str, DecoratorDefinition] = {}

        if include_builtins:
            for definition in BUILTIN_DECORATORS:
                self.register(definition)

    def register(self, definition: DecoratorDefinition) -> None:
        for name in definition.names:
            if name in self._decorators:
                logger.debug("Overwriting decorator @%s", name)
            self._decorators[name] = definition

    def has(self, name: str) -> bool:
        return name in self._decorators

    def get(self, name: str) -> Optional[DecoratorDefinition]:
        return self._decorators.get(name)

    def all(self) -> List[DecoratorDefinition]:
        unique = {id(d): d for d in self._decorators.values()}
        return sorted(unique.values(), key=lambda d: d.name)

    def call(self, name: str, node: Token, value: Value) -> str:
        definition = self.get(name)
        if definition is None:
            raise DecoratorNameError(node, name)
        return definition.call(node, value)


# ---------------- Builtin decorators ----------------

def _as_int(node: Token, value: Value) -> int:
    n = value.as_int()
    if n is None:
        raise ValueTypeError(node, ExpectedTypes.INT_OR_FLOAT)
    return n

def _as_float(node: Token, value: Value) -> float:
    n = value.as_float()
    if n is None:
        raise ValueTypeError(node, ExpectedTypes.INT_OR_FLOAT)
    return n

@register_decorator("default", description="Default formatter, type dependent", plural=False)
def default_decorator(_node: Token, value: Value) -> str:
    match value:
        case NoneValue() | Identifier():
            return ""
        case Float(n):
            return float_to_string(n)
        case Boolean() | Integer() | String() | Array() | Object():
            return value.as_string()
        case _:
            return ""

@register_decorator("hex", description="Base 16 number formatting, such as 0xFF",
                    expected=ExpectedTypes.INT_OR_FLOAT)
def hex_decorator(node: Token, value: Value) -> str:
    return f"0x{_as_int(node, value) & MASK64:x}"

@register_decorator("oct", description="Base 8 number formatting, such as 0o77",
                    expected=ExpectedTypes.INT_OR_FLOAT)
def oct_decorator(node: Token, value: Value) -> str:
    return f"0o{_as_int(node, value) & MASK64:o}"

@register_decorator("bin", description="Base 2 number formatting, such as 0b11",
                    expected=ExpectedTypes.INT_OR_FLOAT)
def bin_decorator(node: Token, value: Value) -> str:
    return f"0b{_as_int(node, value) & MASK64:b}"

def scientific(n: float) -> str:
    text = float_display(n)
    if text in ("NaN", "inf", "-inf"):
        return text
    if n == 0:
        return "0e0"

    d = Decimal(repr(abs(n))).normalize()
    digits = "".join(str(x) for x in d.as_tuple().digits)
    mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
    sign = "-" if n < 0 else ""
    return f"{sign}{mantissa}e{d.adjusted()}"

@register_decorator("sci", description="Scientific number formatting, such as 1.2e-5",
                    expected=ExpectedTypes.INT_OR_FLOAT)
def sci_decorator(node: Token, value: Value) -> str:
    return scientific(_as_float(node, value))

@register_decorator("utc", description="Interprets an integer as a timestamp, and formats it in UTC standard",
                    expected=ExpectedTypes.INT)
def utc_decorator(node: Token, value: Value) -> str:
    n = _as_int(node, value)
    try:
        moment = datetime.fromtimestamp(n, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise RangeError(node, str(n)) from e
    return moment.strftime("%Y-%m-%d %H:%M:%S")

def _currency(symbol: str):
    def render(node: Token, value: Value) -> str:
        return f"{symbol}{_as_float(node, value):,.2f}"
    return render

register_decorator("dollar", "dollars", "usd", "aud", "cad",
                   description="Format a number as a dollar amount",
                   expected=ExpectedTypes.INT_OR_FLOAT)(_currency("$"))
register_decorator("euro", "euros",
                   description="Format a number as a euro amount",
                   expected=ExpectedTypes.INT_OR_FLOAT)(_currency("€"))
register_decorator("pound", "pounds",
                   description="Format a number as a pound amount",
                   expected=ExpectedTypes.INT_OR_FLOAT)(_currency("£"))
register_decorator("yen",
                   description="Format a number as a yen amount",
                   expected=ExpectedTypes.INT_OR_FLOAT)(_currency("¥"))

@register_decorator("float", description="Format a number as floating point",
                    expected=ExpectedTypes.INT_OR_FLOAT)
def float_decorator(node: Token, value: Value) -> str:
    return float_to_string(_as_float(node, value))

@register_decorator("int", "integer", description="Format a number as an integer",
                    expected=ExpectedTypes.INT_OR_FLOAT)
def int_decorator(node: Token, value: Value) -> str:
    return str(_as_int(node, value))

@register_decorator("bool", "boolean", description="Format a value as a boolean")
def bool_decorator(_node: Token, value: Value) -> str:
    return Boolean(value.as_bool()).as_string()

@register_decorator("array", description="Format a value as an array")
def array_decorator(_node: Token, value: Value) -> str:
    return Array(value.as_array()).as_string()

@register_decorator("object", description="Format a value as an object")
def object_decorator(_node: Token, value: Value) -> str:
    return Object(value.as_object()).as_string()

@register_decorator("percentage", "percent", description="Format a floating point number as a percentage",
                    expected=ExpectedTypes.INT_OR_FLOAT)
def percentage_decorator(node: Token, value: Value) -> str:
    return f"{float_display(_as_float(node, value) * 100.0)}%"

@register_decorator("ordinal", description="Format an integer as an ordinal (1st, 22nd, etc)",
                    expected=ExpectedTypes.INT_OR_FLOAT)
def ordinal_decorator(node: Token, value: Value) -> str:
    n = _as_int(node, value)
    last_two = abs(n) % 100
    if 11 <= last_two <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(abs(n) % 10, "th")
    return f"{n}{suffix}"

_ROMAN_NUMERALS = (
    (1000, "M"), (900, "CM"), (500, "D"), (400, "CD"),
    (100, "C"), (90, "XC"), (50, "L"), (40, "XL"),
    (10, "X"), (9, "IX"), (5, "V"), (4, "IV"), (1, "I"),
)

@register_decorator("roman", description="Format an integer as a roman numeral",
                    expected=ExpectedTypes.INT_OR_FLOAT)
def roman_decorator(node: Token, value: Value) -> str:
    n = _as_int(node, value)
    if n > MAX_ROMAN:
        raise CalcOverflowError(node)
    if n < 1:
        raise RangeError(node, str(n))

    parts: List[str] = []
    for amount, numeral in _ROMAN_NUMERALS:
        count, n = divmod(n, amount)
        parts.append(numeral * count)
    return "".join(parts)
