"""Builtins that inspect or drive the engine itself."""
from __future__ import annotations

from pathlib import Path

from ..errors import CalcIOError, FunctionNameError, StackOverflowError
from ..types import ExpectedTypes, String
from .table import FunctionArgument, register_function

def _evaluate_nested(node, state, source: str):
    """Evaluate ``source`` on ``state`` itself, counting it against the depth limit."""
    from ..evaluator import evaluate

    if state.depth + 1 >= state.config.max_depth:
        raise StackOverflowError(node)

    state.depth += 1
    try:
        return evaluate(source, state).value
    finally:
        state.depth -= 1

@register_function("help",
                   description="Display a help message, or describe one function or decorator",
                   arguments=[FunctionArgument("function_name", ExpectedTypes.STRING, optional=True)])
def std_help(_fn, node, state, args):
    from ..help import describe, help_text

    target = args.optional("function_name")
    if target is None:
        return String(help_text(state))

    name = target.as_string()
    text = describe(state, name)
    if text is None:
        raise FunctionNameError(node, name)
    return String(text)

@register_function("run",
                   description="Run a string as an expression",
                   arguments=[FunctionArgument("expression", ExpectedTypes.STRING)])
def std_run(_fn, node, state, args):
    return _evaluate_nested(node, state, args.required("expression").as_string())

@register_function("call",
                   description="Run the contents of a file as a script",
                   arguments=[FunctionArgument("filename", ExpectedTypes.STRING)])
def std_call(_fn, node, state, args):
    path = Path(args.required("filename").as_string())
    try:
        source = path.read_text(encoding="utf-8")
    except OSError as e:
        raise CalcIOError(node, f"could not read {path}: {e.strerror or e}") from e

    return _evaluate_nested(node, state, source)
