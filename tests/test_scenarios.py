from __future__ import annotations

import math

import pytest

from decocalc.errors import (
    CalcIndexError,
    CalcOverflowError,
    CalcUnderflowError,
    ConstantValueError,
    StackOverflowError,
)
from decocalc.tree import OutputFormat
from decocalc.types import Array, Boolean, Float, Integer, String
from tests.support.harness import fresh_state, run_source

INT_PAIRS = [(7, 3), (-7, 3), (7, -3), (-7, -3), (0, 5), (9223372036854775807, 1), (123456, 789)]


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


@pytest.mark.parametrize("a, b", INT_PAIRS)
def test_integer_operators(a, b) -> None:
    expected = {
        "+": a + b,
        "-": a - b,
        "*": a * b,
        "/": _trunc_div(a, b),
        "%": a % abs(b),
    }
    for op, result in expected.items():
        source = f"({a}) {op} ({b})"
        if not -(2 ** 63) <= result < 2 ** 63:
            with pytest.raises(CalcOverflowError):
                run_source(source)
            continue

        value = run_source(source).value
        assert isinstance(value, Integer), source
        assert value.value == result, source


@pytest.mark.parametrize("op", ["+", "-", "*", "/"])
def test_broadcasting_matches_elementwise(op) -> None:
    state = fresh_state()
    run_source("A = [8, 12, -3]\nB = [2, 4, 1]\ns = 2", state)

    pairwise = run_source(f"A {op} B", state).value
    for i, element in enumerate(pairwise.items):
        assert element == run_source(f"A[{i}] {op} B[{i}]", state).value

    left = run_source(f"A {op} s", state).value
    right = run_source(f"s {op} A", state).value
    for i in range(3):
        assert left.items[i] == run_source(f"A[{i}] {op} s", state).value
        assert right.items[i] == run_source(f"s {op} A[{i}]", state).value


@pytest.mark.parametrize("n", [0, 1, 5, 12, 20, 21, 30])
def test_factorial_is_product_or_overflow(n) -> None:
    product = math.prod(range(1, n + 1))
    if product >= 2 ** 63:
        with pytest.raises(CalcOverflowError):
            run_source(f"({n}!)")
        return

    assert run_source(f"({n}!)").value == Integer(product)


@pytest.mark.parametrize(
    "source",
    ["0", "3", "-2.5", "0.0", "'text'", "''", "[]", "[0]", "{}", "{'a': 1}", "true", "false"],
)
def test_bool_matches_as_bool(source) -> None:
    state = fresh_state()
    value = run_source(source, state).value
    assert run_source(f"bool({source})", state).value == Boolean(value.as_bool())


@pytest.mark.parametrize("source", ["5", "-17", "2.9", "'42'", "true", "[3]"])
def test_int_float_int_is_stable(source) -> None:
    once = run_source(f"int({source})").value
    twice = run_source(f"int(float(int({source})))").value

    assert isinstance(twice, Integer)
    assert twice == once


@pytest.mark.parametrize("other", ["4", "2.5", "true", "[1, 2]", "{'k': 'v'}", "'b'"])
def test_string_concatenation(other) -> None:
    state = fresh_state()
    rendered = run_source(other, state).value.as_string()

    assert run_source(f"'a' + {other}", state).value == String("a" + rendered)
    assert run_source(f"{other} + 'a'", state).value == String(rendered + "a")


@pytest.mark.parametrize(
    "source, n",
    [
        ("0", 0),
        ("255", 255),
        ("48879", 48879),
        ("-1", -1),
        ("-4096", -4096),
        ("9223372036854775807", 9223372036854775807),
        ("-9223372036854775807 - 1", -9223372036854775808),
    ],
)
def test_hex_output_parses_back(source, n) -> None:
    state = fresh_state()
    rendered = run_source(f"{source} @hex", state).text

    assert rendered.startswith("0x")
    assert run_source(rendered, state).value == Integer(n)


def test_ternary_skips_untaken_branch() -> None:
    assert run_source("false ? (1/0) : 2").value == Integer(2)
    assert run_source("true ? 3 : missing").value == Integer(3)


@pytest.mark.parametrize("argument", ["0", "1", "'x'", "[1, 2]"])
def test_unbounded_recursion_overflows_stack(argument) -> None:
    with pytest.raises(StackOverflowError):
        run_source(f"f(x) = f(x)\nf({argument})")


@pytest.mark.parametrize("length", [0, 1, 4])
def test_indexed_assignment_extends_by_one(length) -> None:
    state = fresh_state()
    run_source(f"a = [{', '.join('0' * length)}]", state)

    run_source(f"a[{length}] = 9", state)
    assert len(state.variables["a"].items) == length + 1
    assert state.variables["a"].items[-1] == Integer(9)

    with pytest.raises(CalcIndexError):
        run_source(f"a[{length + 2}] = 9", state)


def test_constants_are_immutable() -> None:
    state = fresh_state()
    with pytest.raises(ConstantValueError):
        run_source("pi = 3", state)

    assert run_source("pi", state).value == Float(math.pi)
    assert "pi" not in state.variables


def test_assignment_then_decorated_call() -> None:
    tree = run_source("x=9\nsqrt(x) @bin")

    assert tree.text == "9\n0b11"
    assert tree.lines()[1].value == Float(3.0)
    assert isinstance(tree.lines()[1].value, Float)


def test_recursive_user_function() -> None:
    tree = run_source("factorial(x) = x==0 ? 1 : (x * factorial(x - 1))\nx = factorial(5)\nx == 5!")
    lines = tree.lines()

    assert lines[-1].text == "true"
    assert lines[-1].value == Boolean(True)
    assert isinstance(lines[1].value, Integer)
    assert lines[1].value.value == 120


def test_currency_operand_sets_format() -> None:
    tree = run_source("2 * $2")

    assert tree.text == "$4.00"
    assert isinstance(tree.value, Integer)
    assert tree.value.value == 4
    assert tree.lines()[0].format == OutputFormat.DOLLARS


def test_mixed_array_addition() -> None:
    value = run_source("[10, 12] + [1.2, 1.3]").value

    assert isinstance(value, Array)
    assert all(isinstance(element, Float) for element in value.items)
    assert value.to_python() == pytest.approx([11.2, 13.3])


def test_string_concatenation_chain() -> None:
    assert run_source("'foo' + 4 + false").value == String("foo4false")


def test_factorial_range_errors() -> None:
    with pytest.raises(CalcOverflowError):
        run_source("999!")
    with pytest.raises(CalcUnderflowError):
        run_source("(-1)!")
