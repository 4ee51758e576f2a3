"""Interactive REPL for decocalc, powered by prompt_toolkit."""

from __future__ import annotations

import os
import re
import sys
import traceback
from typing import Iterable, List, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.shortcuts import clear

from .config import ENV_DEBUG_PY_TRACE, debug_py_trace_enabled
from .errors import CalcError
from .evaluator import evaluate
from .help import help_text
from .runtime import ParserState

# Zero-width and invisible characters to strip from input.
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\ufeff\u00a0\r]")

_WORD_RE = re.compile(r"[@\w]+$")

# Slash commands: name => (description, argument_hint).
_SLASH_CMDS = {
    "/clear": ("Clear the terminal screen", ""),
    "/help": ("Show functions, decorators and variables", ""),
    "/py-traceback": ("Toggle Python traceback on errors", "[on|off]"),
    "/reset": ("Forget variables and user-defined functions", ""),
}


class _CalcCompleter(Completer):
    """Complete slash commands, function names and @decorators."""

    def __init__(self, state_box: List[ParserState]):
        self.state_box = state_box

    def _words(self) -> Iterable[tuple[str, str]]:
        state = self.state_box[0]
        for definition in state.functions.all():
            yield definition.name + "(", definition.description
        for name, function in state.user_functions.items():
            yield name + "(", function.signature()
        for definition in state.decorators.all():
            for name in definition.names:
                yield "@" + name, definition.description
        for name in state.variables:
            yield name, "variable"

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor

        if text.startswith("/"):
            for cmd, (desc, _hint) in _SLASH_CMDS.items():
                if cmd.startswith(text):
                    yield Completion(cmd, start_position=-len(text), display_meta=desc)
            return

        match = _WORD_RE.search(text)
        if match is None:
            return

        word = match.group(0)
        for candidate, meta in self._words():
            if candidate.startswith(word) and candidate != word:
                yield Completion(candidate, start_position=-len(word), display_meta=meta)


def _handle_slash(line: str, state_box: List[ParserState]) -> bool:
    """Handle slash commands. Returns True if the line was a command."""
    stripped = line.strip()
    if not stripped.startswith("/"):
        return False

    parts = stripped.split(None, 1)
    cmd = parts[0]
    arg = parts[1] if len(parts) > 1 else ""

    if cmd == "/clear":
        clear()
        return True

    if cmd == "/help":
        print(help_text(state_box[0]))
        return True

    if cmd == "/py-traceback":
        if arg.lower() in ("on", "1", "true", "yes"):
            os.environ[ENV_DEBUG_PY_TRACE] = "1"
        elif arg.lower() in ("off", "0", "false", "no"):
            os.environ.pop(ENV_DEBUG_PY_TRACE, None)
        elif arg == "":
            if debug_py_trace_enabled():
                os.environ.pop(ENV_DEBUG_PY_TRACE, None)
            else:
                os.environ[ENV_DEBUG_PY_TRACE] = "1"
        else:
            print("Usage: /py-traceback [on|off]", file=sys.stderr)
            return True

        status = "on" if debug_py_trace_enabled() else "off"
        print(f"Python traceback: {status}")
        return True

    if cmd == "/reset":
        state_box[0].reset()
        print("Environment reset.")
        return True

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return True


def _normalize(text: str) -> str:
    """Strip invisible characters from input."""
    return _INVISIBLE_RE.sub("", text)


def repl(state: Optional[ParserState] = None) -> None:
    """Interactive read-eval-print loop with prompt_toolkit."""
    # Use a mutable box so commands can reach the live state.
    state_box: List[ParserState] = [state or ParserState()]

    bindings = KeyBindings()

    @bindings.add("enter")
    def _enter(event):
        buf = event.app.current_buffer
        # a trailing backslash continues the expression on the next line
        if buf.text.rstrip().endswith("\\"):
            buf.insert_text("\n")
            return
        buf.validate_and_handle()

    session: PromptSession[str] = PromptSession(
        history=InMemoryHistory(),
        completer=_CalcCompleter(state_box),
        complete_while_typing=True,
        key_bindings=bindings,
        multiline=True,
        prompt_continuation="... ",
    )

    print("decocalc repl — Ctrl-D to exit, / for commands")

    while True:
        try:
            text = session.prompt(">>> ")
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("KeyboardInterrupt")
            continue

        text = _normalize(text)
        if not text.strip():
            continue

        if _handle_slash(text, state_box):
            continue

        try:
            tree = evaluate(text, state_box[0])
        except CalcError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            if debug_py_trace_enabled():
                print("\nPython traceback:", file=sys.stderr)
                print("".join(traceback.format_tb(exc.__traceback__)), file=sys.stderr, end="")
            continue

        if tree.text:
            print(tree.text)
