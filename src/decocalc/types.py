from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

INT_MIN = -(1 << 63)
INT_MAX = (1 << 63) - 1
FLOAT_PRECISION = 8

# ---------- Float rendering ----------

def float_display(n: float) -> str:
    """Shortest round-trip rendering of ``n``, never in exponent form."""
    if math.isnan(n):
        return "NaN"
    if math.isinf(n):
        return "inf" if n > 0 else "-inf"

    text = repr(n)
    if 'e' in text or 'E' in text:
        text = format(Decimal(text), 'f')
    if text.endswith('.0'):
        text = text[:-2]

    return text

def round_half_away(n: float) -> float:
    return math.copysign(math.floor(abs(n) + 0.5), n)

def float_to_string(n: float, precision: int = FLOAT_PRECISION) -> str:
    if not math.isfinite(n):
        return float_display(n)

    # past 1e15 there is no fractional part left to round
    if abs(n) < 1e15:
        scale = 10 ** precision
        n = round_half_away(n * scale) / scale
    if n == 0:
        n = 0.0

    text = float_display(n)
    if '.' not in text:
        text += '.0'

    return text

def int_in_range(n: int) -> bool:
    return INT_MIN <= n <= INT_MAX

def _parse_int_text(text: str) -> Optional[int]:
    text = text.replace(',', '').strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        f = float(text)
    except ValueError:
        return None
    return _float_to_int(f)

def _float_to_int(f: float) -> Optional[int]:
    if not math.isfinite(f):
        return None
    n = int(f)
    return n if int_in_range(n) else None

def _numeric_hash(nonzero: bool) -> int:
    # true == 1 and true == 3, so every nonzero number shares one bucket
    return hash(("numeric", nonzero))

# ---------- Value Model ----------

class Value:
    """Base class of every engine value.

    Equality is structural and crosses numeric kinds, so ``Integer(1) ==
    Float(1.0)`` and ``Boolean(True) == Integer(3)``.
    """

    type_name = "value"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return values_equal(self, other)

    def __hash__(self) -> int:
        return hash(self.type_name)

    def is_compound(self) -> bool:
        return isinstance(self, (Array, Object))

    def is_numeric(self) -> bool:
        return isinstance(self, (Integer, Float))

    def as_bool(self) -> bool:
        return False

    def as_int(self) -> Optional[int]:
        return None

    def as_float(self) -> Optional[float]:
        return None

    def as_string(self) -> str:
        return ""

    def as_array(self) -> List[Value]:
        return [self]

    def as_object(self) -> Dict[Value, Value]:
        return {Integer(i): v for i, v in enumerate(self.as_array())}

    def to_python(self) -> Any:
        return None

    @staticmethod
    def from_python(obj: Any) -> Value:
        match obj:
            case Value():
                return obj
            case None:
                return NoneValue()
            case bool():
                return Boolean(obj)
            case int():
                return Integer(obj)
            case float():
                return Float(obj)
            case str():
                return String(obj)
            case list() | tuple():
                return Array([Value.from_python(x) for x in obj])
            case dict():
                return Object({Value.from_python(k): Value.from_python(v) for k, v in obj.items()})
            case _:
                raise TypeError(f"cannot convert {type(obj).__name__} to a value")

@dataclass(eq=False)
class NoneValue(Value):
    type_name = "none"

    def __hash__(self) -> int:
        return hash(None)

    def as_array(self) -> List[Value]:
        return []

@dataclass(eq=False)
class Boolean(Value):
    value: bool
    type_name = "boolean"

    def __hash__(self) -> int:
        return _numeric_hash(self.value)

    def as_bool(self) -> bool:
        return self.value

    def as_int(self) -> Optional[int]:
        return int(self.value)

    def as_float(self) -> Optional[float]:
        return float(self.value)

    def as_string(self) -> str:
        return "true" if self.value else "false"

    def to_python(self) -> Any:
        return self.value

@dataclass(eq=False)
class Integer(Value):
    value: int
    type_name = "integer"

    def __hash__(self) -> int:
        return _numeric_hash(self.value != 0)

    def as_bool(self) -> bool:
        return self.value != 0

    def as_int(self) -> Optional[int]:
        return self.value

    def as_float(self) -> Optional[float]:
        return float(self.value)

    def as_string(self) -> str:
        return str(self.value)

    def to_python(self) -> Any:
        return self.value

@dataclass(eq=False)
class Float(Value):
    value: float
    type_name = "float"

    def __hash__(self) -> int:
        return _numeric_hash(self.value != 0.0)

    def as_bool(self) -> bool:
        return self.value != 0.0

    def as_int(self) -> Optional[int]:
        return _float_to_int(self.value)

    def as_float(self) -> Optional[float]:
        return self.value

    def as_string(self) -> str:
        return float_to_string(self.value)

    def to_python(self) -> Any:
        return self.value

@dataclass(eq=False)
class String(Value):
    value: str
    type_name = "string"

    def __hash__(self) -> int:
        return hash(self.value)

    def as_bool(self) -> bool:
        return self.value != ""

    def as_int(self) -> Optional[int]:
        return _parse_int_text(self.value)

    def as_float(self) -> Optional[float]:
        try:
            return float(self.value.replace(',', '').strip())
        except ValueError:
            return None

    def as_string(self) -> str:
        return self.value

    def to_python(self) -> Any:
        return self.value

@dataclass(eq=False)
class Array(Value):
    items: List[Value] = field(default_factory=list)
    type_name = "array"

    def __hash__(self) -> int:
        return hash(tuple(self.items))

    def as_bool(self) -> bool:
        return bool(self.items)

    def as_int(self) -> Optional[int]:
        return self.items[0].as_int() if len(self.items) == 1 else None

    def as_float(self) -> Optional[float]:
        return self.items[0].as_float() if len(self.items) == 1 else None

    def as_string(self) -> str:
        return "[" + ", ".join(x.as_string() for x in self.items) + "]"

    def as_array(self) -> List[Value]:
        return list(self.items)

    def to_python(self) -> Any:
        return [x.to_python() for x in self.items]

@dataclass(eq=False)
class Object(Value):
    entries: Dict[Value, Value] = field(default_factory=dict)
    type_name = "object"

    def __hash__(self) -> int:
        return hash(len(self.entries))

    def as_bool(self) -> bool:
        return bool(self.entries)

    def as_string(self) -> str:
        pairs = [f"{k.as_string()}: {v.as_string()}" for k, v in self.entries.items()]
        return "{" + ", ".join(pairs) + "}"

    def as_array(self) -> List[Value]:
        return list(self.entries.values())

    def as_object(self) -> Dict[Value, Value]:
        return dict(self.entries)

    def to_python(self) -> Any:
        return {k.to_python(): v.to_python() for k, v in self.entries.items()}

@dataclass(eq=False)
class Identifier(Value):
    """A name that did not resolve; lives only until its line finishes."""
    name: str
    type_name = "identifier"

    def __hash__(self) -> int:
        return hash(("identifier", self.name))

    def as_string(self) -> str:
        return self.name

def values_equal(a: Value, b: Value) -> bool:
    match a, b:
        case Integer(x), Integer(y):
            return x == y
        case (Integer() | Float()), (Integer() | Float()):
            return float(a.value) == float(b.value)
        case Boolean(x), (Integer() | Float()):
            return x == (b.value != 0)
        case (Integer() | Float()), Boolean(y):
            return (a.value != 0) == y
        case Boolean(x), Boolean(y):
            return x == y
        case String(x), String(y):
            return x == y
        case Array(xs), Array(ys):
            return len(xs) == len(ys) and all(values_equal(x, y) for x, y in zip(xs, ys))
        case Object(xs), Object(ys):
            if len(xs) != len(ys):
                return False
            for k, v in xs.items():
                if k not in ys or not values_equal(v, ys[k]):
                    return False
            return True
        case NoneValue(), NoneValue():
            return True
        case Identifier(x), Identifier(y):
            return x == y
        case _:
            return False

# ---------- Expected argument types ----------

class ExpectedTypes(Enum):
    INT = "integer"
    FLOAT = "float"
    INT_OR_FLOAT = "integer or float"
    STRING = "string"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    ANY = "any"

    def __str__(self) -> str:
        return self.value

    def matches(self, value: Value) -> bool:
        """Compound values always pass; handlers deal with their elements."""
        if value.is_compound():
            return True
        return self.strict_matches(value)

    def strict_matches(self, value: Value) -> bool:
        match self:
            case ExpectedTypes.INT:
                return isinstance(value, Integer)
            case ExpectedTypes.FLOAT:
                return isinstance(value, Float)
            case ExpectedTypes.INT_OR_FLOAT:
                return value.is_numeric()
            case _:
                return True
