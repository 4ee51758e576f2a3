"""Function definitions, argument binding and the function table."""
from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, Iterator, List, Optional, Sequence, Tuple
from typing_extensions import TypeAlias

from ..errors import (
    AmbiguousFunctionDefinitionError, FunctionArgumentsError, FunctionArgumentTypeError,
    FunctionNameError, InternalError,
)
from ..types import ExpectedTypes, Value

if TYPE_CHECKING:
    from ..runtime import ParserState
    from ..tree import Token

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "misc"

FunctionHandler: TypeAlias = Callable[['FunctionDefinition', 'Token', 'ParserState', 'ArgumentCollection'], Value]


@dataclass(frozen=True)
class FunctionArgument:
    name: str
    expected: ExpectedTypes = ExpectedTypes.ANY
    optional: bool = False
    plural: bool = False

    def __str__(self) -> str:
        text = f"{self.name}1, {self.name}2" if self.plural else self.name
        return f"[{text}]" if self.optional else text

    def validate_value(self, value: Value) -> bool:
        return self.expected.matches(value)


class ArgumentCollection:
    """Actual arguments keyed by parameter name.

    Every parameter maps to a list: empty when an optional argument was left
    out, several values for a plural parameter.
    """

    def __init__(self) -> None:
        self._bound: Dict[str, List[Value]] = {}
        self._ordered: List[Value] = []

    def bind(self, name: str, value: Optional[Value] = None) -> None:
        slot = self._bound.setdefault(name, [])
        if value is not None:
            slot.append(value)
            self._ordered.append(value)

    def required(self, name: str) -> Value:
        values = self._bound.get(name)
        if not values:
            raise InternalError(None, f"missing required argument '{name}'")
        return values[0]

    def optional(self, name: str) -> Optional[Value]:
        values = self._bound.get(name)
        return values[0] if values else None

    def optional_or(self, name: str, default: Value) -> Value:
        value = self.optional(name)
        return default if value is None else value

    def plural(self, name: str) -> List[Value]:
        return list(self._bound.get(name, []))

    def values(self) -> List[Value]:
        return list(self._ordered)

    def __len__(self) -> int:
        return len(self._ordered)

    def __iter__(self) -> Iterator[Value]:
        return iter(self._ordered)


@dataclass
class FunctionDefinition:
    name: str
    description: str
    arguments: Tuple[FunctionArgument, ...]
    handler: FunctionHandler
    category: Optional[str] = None

    def args(self) -> List[FunctionArgument]:
        return list(self.arguments)

    def signature(self) -> str:
        return f"{self.name}({', '.join(str(a) for a in self.arguments)})"

    def help(self) -> str:
        return f"{self.signature()}: {self.description}"

    def collect(self, node: Token, args: Sequence[Value]) -> ArgumentCollection:
        slots = self.arguments
        plural = [i for i, slot in enumerate(slots) if slot.plural]

        if len(plural) > 1 or (plural and plural[0] != len(slots) - 1):
            raise AmbiguousFunctionDefinitionError(node, self.signature())

        minimum = sum(1 for slot in slots if not slot.optional)
        maximum = None if plural else len(slots)
        if len(args) < minimum or (maximum is not None and len(args) > maximum):
            raise FunctionArgumentsError(node, minimum, maximum, self.signature())

        collection = ArgumentCollection()
        for slot in slots:
            collection.bind(slot.name)

        for i, value in enumerate(args):
            slot = slots[min(i, len(slots) - 1)]
            if not slot.validate_value(value):
                raise FunctionArgumentTypeError(node, i + 1, slot.expected, self.signature())
            collection.bind(slot.name, value)

        return collection

    def call(self, node: Token, state: ParserState, args: Sequence[Value]) -> Value:
        return self.handler(self, node, state, self.collect(node, args))


# ---------------- Builtin registry ----------------

BUILTIN_FUNCTIONS: Dict[str, FunctionDefinition] = {}

_BUILTIN_MODULES = (
    'decocalc.functions.numeric',
    'decocalc.functions.trig',
    'decocalc.functions.arrays',
    'decocalc.functions.strings',
    'decocalc.functions.meta',
    'decocalc.functions.crypto',
    'decocalc.functions.system',
)

_STDLIB_INITIALIZED = False

def init_stdlib() -> None:
    """Import the builtin modules (idempotent) so their registrations run."""
    global _STDLIB_INITIALIZED

    if _STDLIB_INITIALIZED:
        return

    for module_name in _BUILTIN_MODULES:
        importlib.import_module(module_name)

    _STDLIB_INITIALIZED = True

def register_function(name: str, *, description: str, arguments: Sequence[FunctionArgument] = (),
                      category: Optional[str] = None):
    def dec(fn: FunctionHandler) -> FunctionHandler:
        BUILTIN_FUNCTIONS[name] = FunctionDefinition(
            name=name,
            description=description,
            arguments=tuple(arguments),
            handler=fn,
            category=category,
        )
        return fn

    return dec


class FunctionTable:
    def __init__(self, include_builtins: bool = True):
        self._functions: Dict[str, FunctionDefinition] = {}

        if include_builtins:
            init_stdlib()
            for definition in BUILTIN_FUNCTIONS.values():
                self.register(definition)

    def register(self, definition: FunctionDefinition) -> None:
        if definition.name in self._functions:
            logger.debug("Overwriting function %s", definition.name)
        self._functions[definition.name] = definition

    def has(self, name: str) -> bool:
        return name in self._functions

    def get(self, name: str) -> Optional[FunctionDefinition]:
        return self._functions.get(name)

    def all(self) -> List[FunctionDefinition]:
        return sorted(self._functions.values(), key=lambda d: d.name)

    def all_categories(self) -> List[str]:
        return sorted({d.category or DEFAULT_CATEGORY for d in self._functions.values()})

    def all_by_category(self) -> Dict[str, List[FunctionDefinition]]:
        grouped: Dict[str, List[FunctionDefinition]] = {c: [] for c in self.all_categories()}
        for definition in self.all():
            grouped[definition.category or DEFAULT_CATEGORY].append(definition)
        return grouped

    def call(self, name: str, node: Token, state: ParserState, args: Sequence[Value]) -> Value:
        definition = self.get(name)
        if definition is None:
            raise FunctionNameError(node, name)
        return definition.call(node, state, args)
