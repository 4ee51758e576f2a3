from __future__ import annotations

import dataclasses
import logging
import sys
import traceback
from pathlib import Path
from typing import List, Optional

from .config import EngineConfig, debug_py_trace_enabled
from .errors import CalcError
from .evaluator import evaluate
from .extensions import ExtensionTable
from .runtime import ParserState
from .types import Value

__all__ = ["evaluate", "run", "make_state", "main"]

def make_state(config: Optional[EngineConfig] = None, extension_paths: Optional[List[str]] = None) -> ParserState:
    config = config or EngineConfig.from_env()
    extensions = ExtensionTable(timeout=config.extension_timeout)

    for path in extension_paths or []:
        extensions.load(path)

    return ParserState(config=config, extensions=extensions)

def run(source: str, state: Optional[ParserState] = None) -> Value:
    """Evaluate ``source`` and return the value of its last line."""
    state = state or make_state()
    return evaluate(source, state).value

def _load_source(arg: Optional[str]) -> str:
    """
    Resolve CLI input into source text.
    - None or "-" => read stdin.
    - Existing path => read file contents.
    - Otherwise treat the argument as literal source.
    """

    if arg is None or arg == "-":
        data = sys.stdin.read()
        if not data:
            raise SystemExit("No input provided on stdin")
        return data

    candidate = Path(arg)
    if candidate.is_file():
        return candidate.read_text(encoding="utf-8")

    return arg

def _report(exc: CalcError) -> None:
    print(f"Error: {exc}", file=sys.stderr)
    if debug_py_trace_enabled():
        print("\nPython traceback:", file=sys.stderr)
        print("".join(traceback.format_tb(exc.__traceback__)), file=sys.stderr, end="")

def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    extension_paths: List[str] = []
    max_depth: Optional[int] = None
    interactive = False
    arg = None
    it = iter(args)

    for token in it:
        if token in ("-e", "--extension"):
            try:
                extension_paths.append(next(it))
            except StopIteration:
                raise SystemExit(f"{token} flag requires a path") from None
            continue

        if token.startswith("--extension="):
            extension_paths.append(token.split("=", 1)[1])
            continue

        if token.startswith("--max-depth"):
            raw = token.split("=", 1)[1] if "=" in token else next(it, None)
            if raw is None or not raw.isdigit():
                raise SystemExit("--max-depth requires a positive integer")
            max_depth = int(raw)
            continue

        if token in ("-v", "--verbose"):
            logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
            continue

        if token == "--repl":
            interactive = True
            continue

        if arg is None:
            arg = token
        else:
            raise SystemExit(f"Unexpected argument: {token}")

    try:
        config = EngineConfig.from_env()
        if max_depth is not None:
            config = dataclasses.replace(config, max_depth=max_depth)
    except ValueError as e:
        raise SystemExit(str(e)) from None

    try:
        state = make_state(config, extension_paths)
    except CalcError as e:
        _report(e)
        return 1

    extensions = state.extensions
    try:
        if interactive:
            from .repl import repl

            repl(state)
            return 0

        source = _load_source(arg)
        try:
            tree = evaluate(source, state)
        except CalcError as e:
            _report(e)
            return 1

        print(tree.text)
        return 0
    finally:
        if isinstance(extensions, ExtensionTable):
            extensions.close()

if __name__ == "__main__":
    sys.exit(main())
