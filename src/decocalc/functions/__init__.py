from .table import (
    BUILTIN_FUNCTIONS, DEFAULT_CATEGORY, ArgumentCollection, FunctionArgument,
    FunctionDefinition, FunctionHandler, FunctionTable, init_stdlib, register_function,
)

__all__ = [
    'BUILTIN_FUNCTIONS', 'DEFAULT_CATEGORY', 'ArgumentCollection', 'FunctionArgument',
    'FunctionDefinition', 'FunctionHandler', 'FunctionTable', 'init_stdlib', 'register_function',
]
