from __future__ import annotations

import math

import pytest

from decocalc.errors import (
    AmbiguousFunctionDefinitionError,
    ArrayEmptyError,
    CalcIndexError,
    CalcIOError,
    FunctionArgumentOverflowError,
    FunctionArgumentsError,
    FunctionArgumentTypeError,
    FunctionNameError,
    StackOverflowError,
    ValueParsingError,
)
from decocalc.functions import FunctionArgument, FunctionDefinition, FunctionTable
from decocalc.types import ExpectedTypes, Integer
from tests.support.harness import fresh_state, run_runtime_case, run_source

SCENARIOS = [
    # math
    pytest.param("sqrt(16)", ("float", 4.0), None, id="sqrt"),
    pytest.param("sqrt([4, 9])", ("array", [2.0, 3.0]), None, id="sqrt-array"),
    pytest.param("root(27, 3)", ("float", 3.0), None, id="root"),
    pytest.param("ln(e)", ("float", 1.0), None, id="ln"),
    pytest.param("log10(1000)", ("float", 3.0), None, id="log10"),
    pytest.param("log(8, 2)", ("float", 3.0), None, id="log"),
    pytest.param("abs(-3)", ("int", 3), None, id="abs-int"),
    pytest.param("abs(-2.5)", ("float", 2.5), None, id="abs-float"),
    pytest.param("ceil(1.2)", ("int", 2), None, id="ceil"),
    pytest.param("floor(-1.2)", ("int", -2), None, id="floor"),
    pytest.param("round(3.14159, 2)", ("float", 3.14), None, id="round-precision"),
    pytest.param("round(2.5)", ("float", 3.0), None, id="round-half-away"),
    pytest.param("round(1.5, 5000000000)", None, FunctionArgumentOverflowError, id="round-precision-overflow"),
    pytest.param("max(1, 5, 3)", ("int", 5), None, id="max"),
    pytest.param("min([3, 1], 2)", ("int", 1), None, id="min-flattens"),
    pytest.param("int('12')", ("int", 12), None, id="int-from-string"),
    pytest.param("int(3.9)", ("int", 3), None, id="int-truncates"),
    pytest.param("int('abc')", None, ValueParsingError, id="int-unparseable"),
    pytest.param("float('1.5')", ("float", 1.5), None, id="float-from-string"),
    pytest.param("bool([])", ("bool", False), None, id="bool-empty-array"),
    pytest.param("array(5)", ("array", [5]), None, id="array-wraps"),
    pytest.param("sqrt('a')", None, FunctionArgumentTypeError, id="argument-type"),
    pytest.param("sqrt()", None, FunctionArgumentsError, id="too-few"),
    pytest.param("sqrt(1, 2)", None, FunctionArgumentsError, id="too-many"),
    pytest.param("nope(1)", None, FunctionNameError, id="unknown-function"),

    # trigonometry
    pytest.param("sin(0)", ("float", 0.0), None, id="sin"),
    pytest.param("cos(pi)", ("float", -1.0), None, id="cos"),
    pytest.param("atan(1) * 4", ("float", math.pi), None, id="atan"),

    # arrays
    pytest.param("len([1, 2, 3])", ("int", 3), None, id="len"),
    pytest.param("len({'a': 1})", ("int", 1), None, id="len-object"),
    pytest.param("is_empty([])", ("bool", True), None, id="is-empty"),
    pytest.param("push([1], 2)", ("array", [1, 2]), None, id="push"),
    pytest.param("pop([1, 2])", ("array", [1]), None, id="pop"),
    pytest.param("dequeue([1, 2])", ("array", [2]), None, id="dequeue"),
    pytest.param("pop([])", None, ArrayEmptyError, id="pop-empty"),
    pytest.param("element([1, 2], -1)", ("int", 2), None, id="element-negative"),
    pytest.param("element([1, 2], 2)", None, CalcIndexError, id="element-out-of-range"),
    pytest.param("element({'a': 1}, 'a')", ("int", 1), None, id="element-object"),
    pytest.param("remove([1, 2, 3], 1)", ("array", [1, 3]), None, id="remove"),
    pytest.param("merge([1], [2, 3])", ("array", [1, 2, 3]), None, id="merge-arrays"),
    pytest.param("merge({'a': 1}, {'b': 2})", ("object", {"a": 1, "b": 2}), None, id="merge-objects"),
    pytest.param("keys({'a': 1})", ("array", ["a"]), None, id="keys"),
    pytest.param("values({'a': 1})", ("array", [1]), None, id="values"),

    # strings
    pytest.param("strlen('hello')", ("int", 5), None, id="strlen"),
    pytest.param("uppercase('abc')", ("string", "ABC"), None, id="uppercase"),
    pytest.param("lowercase('ABC')", ("string", "abc"), None, id="lowercase"),
    pytest.param("trim('  a  ')", ("string", "a"), None, id="trim"),
    pytest.param("concat('a', 'b', 'c')", ("string", "abc"), None, id="concat"),
    pytest.param("contains('hello', 'ell')", ("bool", True), None, id="contains-string"),
    pytest.param("contains([1, 2], 2)", ("bool", True), None, id="contains-array"),
    pytest.param("substr('hello', 1, 3)", ("string", "ell"), None, id="substr"),
    pytest.param("substr('hello', 2)", ("string", "llo"), None, id="substr-to-end"),
    pytest.param("substr('hello', 9)", None, FunctionArgumentOverflowError, id="substr-start-overflow"),
    pytest.param("regex('a(b)', 'xab', 1)", ("string", "b"), None, id="regex-group"),
    pytest.param("regex('z', 'xab')", ("bool", False), None, id="regex-no-match"),
    pytest.param("regex('(', 'x')", None, ValueParsingError, id="regex-invalid"),
    pytest.param("urlencode('a b&c/d')", ("string", "a%20b%26c%2Fd"), None, id="urlencode"),
    pytest.param("urldecode('a%20b%26c')", ("string", "a b&c"), None, id="urldecode"),
    pytest.param("urldecode('%FF')", None, ValueParsingError, id="urldecode-invalid"),
    pytest.param("atob('hello')", ("string", "aGVsbG8="), None, id="atob"),
    pytest.param("btoa('aGVsbG8=')", ("string", "hello"), None, id="btoa"),
    pytest.param("btoa('not base64!')", None, ValueParsingError, id="btoa-invalid"),

    # crypto and misc
    pytest.param(
        "sha256('abc')",
        ("string", "BA7816BF8F01CFEA414140DE5DAE2223B00361A396177A9CB410FF61F20015AD"),
        None,
        id="sha256",
    ),
    pytest.param("md5('')", ("string", "D41D8CD98F00B204E9800998ECF8427E"), None, id="md5-empty"),
    pytest.param("rand(3, 3)", ("int", 3), None, id="rand-degenerate-range"),
    pytest.param("rand([1, 2])", None, FunctionArgumentTypeError, id="rand-array-bound"),
    pytest.param("choose(7)", ("int", 7), None, id="choose-single"),
    pytest.param("run('1 + 2')", ("int", 3), None, id="run"),
    pytest.param("call('/definitely/not/here.calc')", None, CalcIOError, id="call-missing-file"),
]


@pytest.mark.parametrize("source, expectation, expected_exc", SCENARIOS)
def test_builtins(source, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


def test_rand_without_arguments_is_unit_interval() -> None:
    value = run_source("rand()").value.value
    assert 0.0 <= value < 1.0


def test_rand_accepts_singleton_array_bound() -> None:
    value = run_source("rand([5])").value

    assert isinstance(value, Integer)
    assert 0 <= value.value <= 5


def test_time_is_positive() -> None:
    assert run_source("time()").value.value > 0


def test_run_shares_state() -> None:
    state = fresh_state()
    run_source("run('x = 4')", state)
    assert run_source("x * 2", state).value == Integer(8)


def test_call_runs_file(tmp_path) -> None:
    script = tmp_path / "script.calc"
    script.write_text("y = 3\ny ** 2\n", encoding="utf-8")

    state = fresh_state()
    tree = run_source(f"call('{script.as_posix()}')", state)

    assert state.variables["y"] == Integer(3)
    assert tree.value == Integer(9)


def test_tail_reads_last_lines(tmp_path) -> None:
    log = tmp_path / "log.txt"
    log.write_text("a\nb\nc\n", encoding="utf-8")

    tree = run_source(f"tail('{log.as_posix()}', 2)")
    assert tree.value.to_python() == "b\nc"


def test_registered_function_is_callable(state) -> None:
    def handler(_fn, _node, _state, args):
        return Integer(args.required("n").value * 10)

    state.functions.register(FunctionDefinition(
        name="tenfold",
        description="Multiply by ten",
        arguments=(FunctionArgument("n", ExpectedTypes.INT),),
        handler=handler,
    ))

    assert run_source("tenfold(4)", state).value == Integer(40)


def test_ambiguous_plural_definition(state) -> None:
    state.functions.register(FunctionDefinition(
        name="broken",
        description="Plural argument not in last position",
        arguments=(
            FunctionArgument("xs", plural=True),
            FunctionArgument("y"),
        ),
        handler=lambda *_: Integer(0),
    ))

    with pytest.raises(AmbiguousFunctionDefinitionError):
        run_source("broken(1, 2)", state)


def test_table_groups_by_category() -> None:
    table = FunctionTable()
    grouped = table.all_by_category()

    assert "sqrt" in [d.name for d in grouped["math"]]
    assert "sin" in [d.name for d in grouped["trigonometry"]]
    assert "help" in [d.name for d in grouped["misc"]]


def test_run_recursion_hits_depth_limit() -> None:
    state = fresh_state(max_depth=10)
    with pytest.raises(StackOverflowError):
        run_source("x = 'run(x)'\nrun(x)", state)

    assert state.depth == 0


def test_call_recursion_hits_depth_limit(tmp_path) -> None:
    script = tmp_path / "again.calc"
    script.write_text(f"call('{script.as_posix()}')\n", encoding="utf-8")

    with pytest.raises(StackOverflowError):
        run_source(f"call('{script.as_posix()}')")


def test_nested_run_within_depth_limit() -> None:
    assert run_source("run('run(\"2 * 3\")')").value == Integer(6)
