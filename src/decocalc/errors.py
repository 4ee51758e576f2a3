"""Evaluation errors.

Each error kind is one exception class carrying the CST node that caused it.
``str(err)`` renders the message followed by the node location, e.g.
``arithmetic overflow at 999! (col 0)``.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .tree import Token
    from .types import ExpectedTypes, Value


class CalcError(Exception):
    kind = "Internal"

    def __init__(self, node: Optional[Token], message: str):
        super().__init__(message)
        self.node = node
        self.message = message

    def location(self) -> str:
        if self.node is None:
            return ""
        snippet = self.node.input[:8].strip()
        return f" at {snippet} (col {self.node.index})"

    def __str__(self) -> str:
        return f"{self.message}{self.location()}"


class InternalError(CalcError):
    kind = "Internal"


# ---------------- Parsing ----------------

class CalcSyntaxError(CalcError):
    kind = "Syntax"


class CalcParseError(CalcSyntaxError):
    """The grammar rejected the input."""
    kind = "Pest"


class UnterminatedLiteralError(CalcSyntaxError):
    kind = "UnterminatedLiteral"

    def __init__(self, node: Optional[Token]):
        super().__init__(node, "unterminated string literal")


class UnterminatedLinebreakError(CalcSyntaxError):
    kind = "UnterminatedLinebreak"

    def __init__(self, node: Optional[Token]):
        super().__init__(node, "line continuation at end of input")


class UnterminatedArrayError(CalcSyntaxError):
    kind = "UnterminatedArray"

    def __init__(self, node: Optional[Token]):
        super().__init__(node, "unterminated array, missing ']'")


class UnterminatedObjectError(CalcSyntaxError):
    kind = "UnterminatedObject"

    def __init__(self, node: Optional[Token]):
        super().__init__(node, "unterminated object, missing '}'")


class UnterminatedParenError(CalcSyntaxError):
    kind = "UnterminatedParen"

    def __init__(self, node: Optional[Token]):
        super().__init__(node, "unterminated parentheses, missing ')'")


class UnexpectedDecoratorError(CalcSyntaxError):
    kind = "UnexpectedDecorator"

    def __init__(self, node: Optional[Token]):
        super().__init__(node, "decorators may only appear at the end of a line")


class UnexpectedPostfixError(CalcSyntaxError):
    kind = "UnexpectedPostfix"

    def __init__(self, node: Optional[Token]):
        super().__init__(node, "postfix operator without an operand")


# ---------------- Values ----------------

class CalcValueError(CalcError):
    kind = "Value"


class ValueTypeError(CalcValueError):
    kind = "ValueType"

    def __init__(self, node: Optional[Token], expected: ExpectedTypes):
        super().__init__(node, f"invalid type for value, expected {expected}")
        self.expected = expected


class ValueParsingError(CalcValueError):
    kind = "ValueParsing"

    def __init__(self, node: Optional[Token], input: str, expected: str):
        super().__init__(node, f"could not parse '{input}' as {expected}")
        self.input = input
        self.expected = expected


class RangeError(CalcValueError):
    kind = "Range"

    def __init__(self, node: Optional[Token], value: str):
        super().__init__(node, f"value out of range: {value}")
        self.value = value


class CalcOverflowError(CalcValueError):
    kind = "Overflow"

    def __init__(self, node: Optional[Token]):
        super().__init__(node, "arithmetic overflow")


class CalcUnderflowError(CalcValueError):
    kind = "Underflow"

    def __init__(self, node: Optional[Token]):
        super().__init__(node, "arithmetic underflow")


class ConstantValueError(CalcValueError):
    kind = "ConstantValue"

    def __init__(self, node: Optional[Token], name: str):
        super().__init__(node, f"cannot assign to constant '{name}'")
        self.name = name


class VariableNameError(CalcValueError):
    kind = "VariableName"

    def __init__(self, node: Optional[Token], name: str):
        super().__init__(node, f"uninitialized variable '{name}' referenced")
        self.name = name


class CalcIndexError(CalcValueError):
    kind = "Index"

    def __init__(self, node: Optional[Token], key: Value):
        super().__init__(node, f"key or index {key.as_string()} is out of range")
        self.key = key


class ArrayEmptyError(CalcValueError):
    kind = "ArrayEmpty"

    def __init__(self, node: Optional[Token]):
        super().__init__(node, "array is empty")


class ArrayLengthsError(CalcValueError):
    kind = "ArrayLengths"

    def __init__(self, node: Optional[Token]):
        super().__init__(node, "array lengths do not match")


# ---------------- Calls ----------------

class CalcCallError(CalcError):
    kind = "Call"


class FunctionNameError(CalcCallError):
    kind = "FunctionName"

    def __init__(self, node: Optional[Token], name: str):
        super().__init__(node, f"undefined function '{name}'")
        self.name = name


class DecoratorNameError(CalcCallError):
    kind = "DecoratorName"

    def __init__(self, node: Optional[Token], name: str):
        super().__init__(node, f"undefined decorator '@{name}'")
        self.name = name


class FunctionArgumentsError(CalcCallError):
    kind = "FunctionArguments"

    def __init__(self, node: Optional[Token], min: int, max: Optional[int], signature: str):
        if max is None:
            expected = f"at least {min}"
        elif min == max:
            expected = str(min)
        else:
            expected = f"{min} to {max}"
        super().__init__(node, f"{signature} expects {expected} argument(s)")
        self.min = min
        self.max = max
        self.signature = signature


class FunctionArgumentTypeError(CalcCallError):
    kind = "FunctionArgumentType"

    def __init__(self, node: Optional[Token], arg: int, expected: ExpectedTypes, signature: str):
        super().__init__(node, f"argument {arg} of {signature} must be {expected}")
        self.arg = arg
        self.expected = expected
        self.signature = signature


class FunctionArgumentOverflowError(CalcCallError):
    kind = "FunctionArgumentOverflow"

    def __init__(self, node: Optional[Token], arg: int, signature: str):
        super().__init__(node, f"argument {arg} of {signature} is out of range")
        self.arg = arg
        self.signature = signature


class AmbiguousFunctionDefinitionError(CalcCallError):
    kind = "AmbiguousFunctionDefinition"

    def __init__(self, node: Optional[Token], signature: str):
        super().__init__(node, f"{signature} has an ambiguous plural argument")
        self.signature = signature


class StackOverflowError(CalcCallError):
    kind = "StackOverflow"

    def __init__(self, node: Optional[Token]):
        super().__init__(node, "function recursion limit reached")


# ---------------- External ----------------

class CalcExternalError(CalcError):
    kind = "External"


class CalcIOError(CalcExternalError):
    kind = "Io"


class CalcNetworkError(CalcExternalError):
    kind = "Network"


class ScriptError(CalcExternalError):
    """Raised when an extension callable fails."""
    kind = "Script"
