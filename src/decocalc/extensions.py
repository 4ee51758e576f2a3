"""Extensions: externally supplied functions and decorators.

An extension is a Python file exposing a module-level ``extension`` object::

    from decocalc.extensions import Extension

    extension = Extension("colours", author="me", version="1.0.0")

    @extension.function("complement")
    def complement(args, variables):
        return 0xFFFFFF - args[0].as_int()

Functions receive the argument values and the live variables dict; they may
return a ``Value`` or a plain Python value. Decorators receive the value to
render and the variables dict and return a string.
"""
from __future__ import annotations

import importlib.util
import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, List, MutableMapping, Optional, Sequence
from typing_extensions import Protocol, TypeAlias

from .errors import CalcError, ScriptError
from .types import Value

if TYPE_CHECKING:
    from .tree import Token

logger = logging.getLogger(__name__)

Variables: TypeAlias = MutableMapping[str, Value]
ExtensionFunction: TypeAlias = Callable[[List[Value], Variables], Any]
ExtensionDecorator: TypeAlias = Callable[[Value, Variables], Any]


class ExtensionHost(Protocol):
    def all(self) -> List[Extension]: ...

    def has_function(self, name: str) -> bool: ...

    def call_function(self, name: str, node: Token, args: Sequence[Value], variables: Variables) -> Value: ...

    def has_decorator(self, name: str) -> bool: ...

    def call_decorator(self, name: str, node: Token, variables: Variables) -> str: ...


@dataclass
class Extension:
    name: str
    author: str = ""
    version: str = ""
    functions: Dict[str, ExtensionFunction] = field(default_factory=dict)
    decorators: Dict[str, ExtensionDecorator] = field(default_factory=dict)
    source: Optional[str] = None

    def function(self, name: str):
        def dec(fn: ExtensionFunction) -> ExtensionFunction:
            self.functions[name] = fn
            return fn
        return dec

    def decorator(self, name: str):
        def dec(fn: ExtensionDecorator) -> ExtensionDecorator:
            self.decorators[name] = fn
            return fn
        return dec

    def describe(self) -> str:
        author = f" by {self.author}" if self.author else ""
        version = f" v{self.version}" if self.version else ""
        return f"{self.name}{version}{author}"


def load_extension(path: str) -> Extension:
    """Import the Python file at ``path`` and return its ``extension``."""
    file_path = Path(path)
    module_name = f"decocalc_extension_{file_path.stem}"

    spec = importlib.util.spec_from_file_location(module_name, file_path)
    if spec is None or spec.loader is None:
        raise ScriptError(None, f"cannot load extension from {file_path}")

    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        raise ScriptError(None, f"error loading extension {file_path}: {e}") from e

    extension = getattr(module, 'extension', None)
    if not isinstance(extension, Extension):
        raise ScriptError(None, f"{file_path} does not define an 'extension'")

    extension.source = str(file_path)
    logger.debug("Loaded extension %s from %s", extension.describe(), file_path)
    return extension


class ExtensionTable:
    """Extension host over a set of in-process extensions.

    With a ``timeout``, calls run on the table's worker thread against a copy of
    the variables, which is written back only when the call finishes in time. A
    call that overruns is reported as a script error; its thread is not killed,
    so the worker is abandoned and the next call starts a fresh one.
    """

    def __init__(self, extensions: Sequence[Extension] = (), timeout: Optional[float] = None):
        self.extensions: List[Extension] = list(extensions)
        self.timeout = timeout
        self._pool: Optional[ThreadPoolExecutor] = None

    def add(self, extension: Extension) -> None:
        self.extensions.append(extension)

    def load(self, path: str) -> Extension:
        extension = load_extension(path)
        self.add(extension)
        return extension

    def all(self) -> List[Extension]:
        return list(self.extensions)

    def _find_function(self, name: str) -> Optional[ExtensionFunction]:
        for extension in self.extensions:
            if name in extension.functions:
                return extension.functions[name]
        return None

    def _find_decorator(self, name: str) -> Optional[ExtensionDecorator]:
        for extension in self.extensions:
            if name in extension.decorators:
                return extension.decorators[name]
        return None

    def has_function(self, name: str) -> bool:
        return self._find_function(name) is not None

    def has_decorator(self, name: str) -> bool:
        return self._find_decorator(name) is not None

    def call_function(self, name: str, node: Token, args: Sequence[Value], variables: Variables) -> Value:
        fn = self._find_function(name)
        if fn is None:
            raise ScriptError(node, f"no extension provides {name}()")
        result = self._run(node, name, fn, list(args), variables)
        try:
            return Value.from_python(result)
        except TypeError as e:
            raise ScriptError(node, f"{name}() returned an unsupported value: {e}") from e

    def call_decorator(self, name: str, node: Token, variables: Variables) -> str:
        fn = self._find_decorator(name)
        if fn is None:
            raise ScriptError(node, f"no extension provides @{name}")
        result = self._run(node, f"@{name}", fn, node.value, variables)
        return result.as_string() if isinstance(result, Value) else str(result)

    def _worker(self) -> ThreadPoolExecutor:
        if self._pool is None:
            self._pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="decocalc-extension")
        return self._pool

    def _abandon_worker(self) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=False)
            self._pool = None

    def close(self) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=True)
            self._pool = None

    def _run(self, node: Token, label: str, fn: Callable[..., Any], arg: Any, variables: Variables) -> Any:
        try:
            if self.timeout is None:
                return fn(arg, variables)

            scratch = dict(variables)
            future = self._worker().submit(fn, arg, scratch)
            try:
                result = future.result(timeout=self.timeout)
            except FutureTimeout:
                self._abandon_worker()
                raise

            variables.clear()
            variables.update(scratch)
            return result
        except CalcError:
            raise
        except FutureTimeout as e:
            raise ScriptError(node, f"{label} timed out after {self.timeout}s") from e
        except Exception as e:
            raise ScriptError(node, f"{label} failed: {e}") from e
