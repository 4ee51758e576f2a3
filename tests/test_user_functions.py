from __future__ import annotations

from textwrap import dedent

import pytest

from decocalc.errors import FunctionArgumentsError, StackOverflowError
from decocalc.types import Integer
from tests.support.harness import fresh_state, run_output_case, run_runtime_case, run_source

SCENARIOS = [
    pytest.param(
        "fn(x, y) = 5x + 10(x * y)\nfn(2, 3)",
        ("int", 70),
        None,
        id="two-parameters",
    ),
    pytest.param("answer() = 42\nanswer()", ("int", 42), None, id="no-parameters"),
    pytest.param(
        dedent("""\
            sum(n) = n == 0 ? 0 : n + sum(n - 1)
            sum(5)"""),
        ("int", 15),
        None,
        id="recursion",
    ),
    pytest.param(
        dedent("""\
            fib(n) = n <= 1 ? n : fib(n - 1) + fib(n - 2)
            fib(10)"""),
        ("int", 55),
        None,
        id="double-recursion",
    ),
    pytest.param("double(x) = x * 2\ndouble([1, 2])", ("array", [2, 4]), None, id="array-argument"),
    pytest.param("k = 10\nadd_k(x) = x + k\nadd_k(1)", ("int", 11), None, id="reads-outer-variable"),
    pytest.param("f(x) = x\nf(1, 2)", None, FunctionArgumentsError, id="too-many-arguments"),
    pytest.param("f(x) = f(x)\nf(1)", None, StackOverflowError, id="infinite-recursion"),
    pytest.param("f(x) = undefined_thing + x\n1", ("int", 1), None, id="body-not-evaluated-at-definition"),
]


@pytest.mark.parametrize("source, expectation, expected_exc", SCENARIOS)
def test_user_functions(source, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


def test_definition_line_renders_body() -> None:
    run_output_case("fn(x, y) = 5x + 10(x * y)\nfn(2, 3)", "5x + 10(x * y)\n70", None)


def test_parameters_do_not_leak() -> None:
    state = fresh_state()
    run_source("f(x) = x + 1\nf(5)", state)

    assert "x" not in state.variables
    assert state.user_functions["f"].arguments == ["x"]
    assert state.user_functions["f"].signature() == "f(x) = x + 1"


def test_assignments_inside_calls_do_not_leak() -> None:
    state = fresh_state()
    run_source("set_it(v) = leaked = v\nset_it(3)", state)

    assert "leaked" not in state.variables


def test_redefinition_replaces_function() -> None:
    state = fresh_state()
    run_source("f(x) = x\nf(x) = x * 3", state)

    assert run_source("f(2)", state).value == Integer(6)


def test_builtins_win_over_user_functions() -> None:
    state = fresh_state()
    run_source("sqrt(x) = 99", state)

    assert run_source("sqrt(4)", state).value.to_python() == 2.0


def test_depth_limit_is_configurable() -> None:
    source = "sum(n) = n == 0 ? 0 : n + sum(n - 1)\nsum(10)"

    with pytest.raises(StackOverflowError):
        run_source(source, fresh_state(max_depth=5))

    assert run_source(source, fresh_state(max_depth=20)).value == Integer(55)
