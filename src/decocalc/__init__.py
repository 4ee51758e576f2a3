"""decocalc: an embeddable calculator language with output decorators."""
import logging

from .config import EngineConfig
from .errors import CalcError
from .evaluator import evaluate
from .extensions import Extension, ExtensionTable
from .runner import make_state, run
from .runtime import ParserState
from .tree import OutputFormat, Token
from .types import Array, Boolean, Float, Integer, NoneValue, Object, String, Value

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Array",
    "Boolean",
    "CalcError",
    "EngineConfig",
    "Extension",
    "ExtensionTable",
    "Float",
    "Integer",
    "NoneValue",
    "Object",
    "OutputFormat",
    "ParserState",
    "String",
    "Token",
    "Value",
    "evaluate",
    "make_state",
    "run",
]
