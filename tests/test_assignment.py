from __future__ import annotations

import pytest

from decocalc.errors import CalcIndexError, ConstantValueError, ValueTypeError, VariableNameError
from decocalc.types import Array, Integer
from tests.support.harness import fresh_state, run_output_case, run_runtime_case, run_source

SCENARIOS = [
    pytest.param("x = 5\nx * 2", ("int", 10), None, id="assign-then-read"),
    pytest.param("x = y = 3\nx + y", ("int", 6), None, id="chained"),
    pytest.param("a = [1, 2]\na[0] = 5\na", ("array", [5, 2]), None, id="index-replace"),
    pytest.param("a = [1]\na[1] = 2\na", ("array", [1, 2]), None, id="index-append"),
    pytest.param("a = [1]\na[3] = 2", None, CalcIndexError, id="index-past-end"),
    pytest.param("a = [1]\na[-1] = 2", None, CalcIndexError, id="index-negative"),
    pytest.param("a = [1]\na['x'] = 2", None, ValueTypeError, id="index-not-int"),
    pytest.param("o = {'a': 1}\no['b'] = 2\no", ("object", {"a": 1, "b": 2}), None, id="object-insert"),
    pytest.param("o = {'a': 1}\no['a'] = 3\no['a']", ("int", 3), None, id="object-replace"),
    pytest.param("a = [1, 2, 3]\ni = 1\na[i + 1] = 9\na", ("array", [1, 2, 9]), None, id="index-computed"),
    pytest.param("o = {}\nk = 'key'\no[k] = 5\no", ("object", {"key": 5}), None, id="object-computed-key"),
    pytest.param("a = [1]\na[missing] = 2", None, VariableNameError, id="index-undefined-name"),
    pytest.param("n = 5\nn[0] = 1", None, ValueTypeError, id="index-scalar"),
    pytest.param("missing[0] = 1", None, VariableNameError, id="index-undefined"),
    pytest.param("pi = 3", None, ConstantValueError, id="constant"),
    pytest.param("pi[0] = 3", None, ConstantValueError, id="constant-indexed"),
    pytest.param("a = [1]\nb = a\nb[0] = 2\na", ("array", [1]), None, id="no-aliasing"),
    pytest.param("x = 2\nx = x + 1\nx", ("int", 3), None, id="reassign"),
]


@pytest.mark.parametrize("source, expectation, expected_exc", SCENARIOS)
def test_assignment(source, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


def test_assignment_renders_value() -> None:
    run_output_case("x = 4\nx ** 2", "4\n16", None)


def test_indexed_assignment_renders_assigned_value() -> None:
    run_output_case("a = [1, 2]\na[1] = 9", "[1, 2]\n9", None)


def test_variables_persist_across_evaluations() -> None:
    state = fresh_state()
    run_source("total = 10", state)
    run_source("total = total + 5", state)

    assert state.variables["total"] == Integer(15)


def test_reset_forgets_symbols() -> None:
    state = fresh_state()
    run_source("x = [1]\nf(n) = n", state)
    state.reset()

    assert state.variables == {}
    assert state.user_functions == {}
    assert state.constants["pi"].to_python() == pytest.approx(3.14159265)


def test_stored_arrays_are_copies() -> None:
    state = fresh_state()
    run_source("a = [1, 2]", state)

    stored = state.variables["a"]
    assert stored == Array([Integer(1), Integer(2)])
    run_source("b = a\nb[0] = 7", state)
    assert state.variables["a"] is stored
