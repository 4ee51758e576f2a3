from __future__ import annotations

import copy
import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .config import DEFAULT_CONFIG, EngineConfig
from .decorators import DecoratorTable
from .extensions import ExtensionHost
from .functions import FunctionTable
from .types import Float, Value

logger = logging.getLogger(__name__)


@dataclass
class UserFunction:
    """A function defined by a script as ``name(args) = definition``."""
    name: str
    arguments: List[str] = field(default_factory=list)
    definition: str = ""

    def signature(self) -> str:
        return f"{self.name}({', '.join(self.arguments)}) = {self.definition}"


def default_constants() -> Dict[str, Value]:
    return {
        'pi': Float(math.pi),
        'e': Float(math.e),
        'tau': Float(math.tau),
        'π': Float(math.pi),
        'τ': Float(math.tau),
    }


class ParserState:
    """Everything a script can see: symbols, tables and the recursion depth.

    A state is owned by one caller and survives between evaluations so later
    scripts see variables and functions defined by earlier ones.
    """

    def __init__(self, config: Optional[EngineConfig] = None, extensions: Optional[ExtensionHost] = None):
        self.config = config or DEFAULT_CONFIG
        self.variables: Dict[str, Value] = {}
        self.constants: Dict[str, Value] = default_constants()
        self.functions = FunctionTable()
        self.decorators = DecoratorTable()
        self.user_functions: Dict[str, UserFunction] = {}
        self.extensions = extensions
        self.depth = 0

    def spawn_inner(self) -> Optional[ParserState]:
        """Clone for a user-function call, or None once the depth limit is met."""
        depth = self.depth + 1
        if depth >= self.config.max_depth:
            logger.debug("Recursion limit %d reached", self.config.max_depth)
            return None

        inner = copy.copy(self)
        inner.variables = dict(self.variables)
        inner.user_functions = dict(self.user_functions)
        inner.depth = depth

        return inner

    def get_variable(self, name: str) -> Optional[Value]:
        if name in self.constants:
            return self.constants[name]
        return self.variables.get(name)

    def reset(self) -> None:
        self.variables.clear()
        self.user_functions.clear()
        self.depth = 0
