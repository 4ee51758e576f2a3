from __future__ import annotations

import threading
import time

import pytest

from decocalc.errors import CalcOverflowError, ScriptError
from decocalc.extensions import Extension, ExtensionTable, load_extension
from decocalc.types import Integer, String
from tests.support.harness import fresh_state, run_source


def _colour_extension() -> Extension:
    extension = Extension("colours", author="tests", version="0.2")

    @extension.function("complement")
    def complement(args, variables):
        return 0xFFFFFF - args[0].as_int()

    @extension.function("shade")
    def shade(args, variables):
        return {"base": args[0].as_int(), "names": ["dark", "light"]}

    @extension.function("sqrt")
    def fake_sqrt(args, variables):
        return "shadowed"

    @extension.function("remember")
    def remember(args, variables):
        variables["remembered"] = args[0]
        return None

    @extension.decorator("colour")
    def colour(value, variables):
        return f"#{value.as_int():06X}"

    @extension.decorator("hex")
    def not_builtin_hex(value, variables):
        return "extension hex"

    return extension


def test_extension_function_result_is_converted() -> None:
    state = fresh_state(_colour_extension())

    assert run_source("complement(0xFF0000)", state).value == Integer(0x00FFFF)
    assert run_source("shade(3)", state).value.to_python() == {"base": 3, "names": ["dark", "light"]}


def test_extension_functions_shadow_builtins() -> None:
    state = fresh_state(_colour_extension())
    assert run_source("sqrt(4)", state).value == String("shadowed")


def test_extension_sees_variables() -> None:
    state = fresh_state(_colour_extension())
    run_source("remember(5)", state)

    assert state.variables["remembered"] == Integer(5)


def test_extension_decorator_renders_line() -> None:
    state = fresh_state(_colour_extension())
    assert run_source("255 @colour", state).text == "#0000FF"


def test_extension_decorator_shadows_builtin_decorator() -> None:
    state = fresh_state(_colour_extension())
    assert run_source("255 @hex", state).text == "extension hex"


def test_extension_failure_becomes_script_error() -> None:
    extension = Extension("broken")

    @extension.function("explode")
    def explode(args, variables):
        raise RuntimeError("kaboom")

    with pytest.raises(ScriptError, match="kaboom"):
        run_source("explode()", fresh_state(extension))


def test_extension_calc_errors_propagate() -> None:
    extension = Extension("strict")

    @extension.function("overflowing")
    def overflowing(args, variables):
        raise CalcOverflowError(None)

    with pytest.raises(CalcOverflowError):
        run_source("overflowing()", fresh_state(extension))


def test_extension_timeout() -> None:
    extension = Extension("slow")

    @extension.function("sleepy")
    def sleepy(args, variables):
        time.sleep(0.5)
        return 1

    with pytest.raises(ScriptError, match="timed out"):
        run_source("sleepy()", fresh_state(extension, timeout=0.05))


def test_unsupported_return_value() -> None:
    extension = Extension("odd")

    @extension.function("weird")
    def weird(args, variables):
        return object()

    with pytest.raises(ScriptError):
        run_source("weird()", fresh_state(extension))


def test_load_extension_from_file(tmp_path) -> None:
    path = tmp_path / "greeter.py"
    path.write_text(
        "from decocalc.extensions import Extension\n"
        "extension = Extension('greeter')\n"
        "@extension.function('greet')\n"
        "def greet(args, variables):\n"
        "    return 'hello ' + args[0].as_string()\n",
        encoding="utf-8",
    )

    table = ExtensionTable()
    loaded = table.load(str(path))

    assert loaded.source == str(path)
    assert table.has_function("greet")
    assert not table.has_decorator("greet")


def test_load_extension_without_extension_object(tmp_path) -> None:
    path = tmp_path / "empty.py"
    path.write_text("value = 1\n", encoding="utf-8")

    with pytest.raises(ScriptError, match="does not define"):
        load_extension(str(path))


def test_describe() -> None:
    assert _colour_extension().describe() == "colours v0.2 by tests"


def test_timed_out_call_cannot_touch_variables() -> None:
    extension = Extension("late")
    finished = threading.Event()

    @extension.function("late_write")
    def late_write(args, variables):
        time.sleep(0.2)
        variables["late"] = Integer(1)
        finished.set()
        return 0

    state = fresh_state(extension, timeout=0.05)
    with pytest.raises(ScriptError, match="timed out"):
        run_source("late_write()", state)

    assert finished.wait(2.0)
    assert "late" not in state.variables


def test_bounded_calls_share_one_worker_and_write_back() -> None:
    extension = Extension("threads")

    @extension.function("worker_name")
    def worker_name(args, variables):
        variables["seen"] = Integer(len(variables))
        return threading.current_thread().name

    state = fresh_state(extension, timeout=1.0)
    first = run_source("worker_name()", state).value
    second = run_source("worker_name()", state).value

    assert first == second
    assert first.as_string().startswith("decocalc-extension")
    assert "seen" in state.variables
    state.extensions.close()
