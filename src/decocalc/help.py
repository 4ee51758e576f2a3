"""Text produced by the ``help`` builtin."""
from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Sequence

from .functions.table import DEFAULT_CATEGORY

if TYPE_CHECKING:
    from .runtime import ParserState

SYNTAX_EXAMPLES = (
    "x = 5 + 3x",
    "f(x, y) = x**2 + y",
    "0xFF & 0b1010 @bin",
    "[1, 2, 3] * 2",
    "{'a': 1}['a']",
    "x > 2 ? 'big' : 'small'",
    "$4.50 * 3",
    "sqrt(2) @sci",
)

OPERATORS = (
    "+ - * / % **: arithmetic, applied element-wise to arrays",
    "5x, 2(3): implied multiplication",
    "& | ^ << >> ~: bitwise operators (integers only)",
    "!: factorial",
    "== != < > <= >=: comparison",
    "&& ||: boolean and, boolean or",
    "a ? b : c: conditional",
    "a[i]: indexing into arrays, objects and strings",
    "= : assignment to a variable or to a[i]",
)

DATA_TYPES = (
    "integer: 5, 1,000, 0xFF, 0b101, 0o17, 017",
    "float: 1.5, .5, 3e8",
    "boolean: true, false",
    "string: 'text' or \"text\"",
    "array: [1, 2, 3]",
    "object: {'key': value}",
    "currency: $1.00, €1.00, £1.00, ¥100",
)

def block(title: str, entries: Sequence[str]) -> str:
    return "\n".join([title, "=" * len(title), *entries])

def help_text(state: ParserState) -> str:
    blocks: List[str] = [
        block("Syntax Examples", SYNTAX_EXAMPLES),
        block("Operators", OPERATORS),
        block("Data Types", DATA_TYPES),
    ]

    for category, definitions in state.functions.all_by_category().items():
        if category == DEFAULT_CATEGORY:
            title = "Miscellaneous Functions"
        else:
            title = f"{category.title()} Functions"
        blocks.append(block(title, [d.help() for d in definitions]))

    blocks.append(block("Built-in Decorators", [d.help() for d in state.decorators.all()]))

    if state.extensions is not None:
        entries = []
        for extension in state.extensions.all():
            entries.append(extension.describe())
            entries.extend(f"  {name}(...)" for name in sorted(extension.functions))
            entries.extend(f"  @{name}" for name in sorted(extension.decorators))
        if entries:
            blocks.append(block("Extensions", entries))

    if state.user_functions:
        functions = [f.signature() for f in sorted(state.user_functions.values(), key=lambda f: f.name)]
        blocks.append(block("User-defined Functions", functions))

    if state.variables:
        variables = [f"{name} = {value.as_string()}" for name, value in sorted(state.variables.items())]
        blocks.append(block("Defined Variables", variables))

    return "\n\n".join(blocks)

def describe(state: ParserState, name: str) -> Optional[str]:
    """One-line description of a function or decorator, or None if unknown."""
    if name.startswith('@'):
        definition = state.decorators.get(name[1:])
        if definition is not None:
            return definition.help()
        if state.extensions is not None and state.extensions.has_decorator(name[1:]):
            return name
        return None

    if state.extensions is not None and state.extensions.has_function(name):
        return f"{name}(...)"

    function = state.functions.get(name)
    if function is not None:
        return function.help()

    user_function = state.user_functions.get(name)
    if user_function is not None:
        return user_function.signature()

    decorator = state.decorators.get(name)
    if decorator is not None:
        return decorator.help()

    return None
