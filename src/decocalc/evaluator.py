from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Dict, FrozenSet, Type

from .errors import (
    CalcSyntaxError, UnexpectedDecoratorError, UnexpectedPostfixError, UnterminatedArrayError,
    UnterminatedLinebreakError, UnterminatedLiteralError, UnterminatedObjectError, UnterminatedParenError,
    VariableNameError,
)
from .parser import parse
from .tree import Token, bubble_format
from .types import Identifier, Value

from .eval.assign import eval_assignment
from .eval.calls import define_function, eval_call
from .eval.expr import (
    eval_bool_and, eval_bool_cmp, eval_bool_or, eval_implied_mul, eval_index, eval_postfix_unary,
    eval_prefix_unary, fold_binary,
)
from .eval.lines import eval_line, eval_script
from .eval.literals import (
    eval_array, eval_bin, eval_boolean, eval_currency, eval_float, eval_hex, eval_identifier, eval_int,
    eval_object, eval_oct, eval_string, eval_term,
)

if TYPE_CHECKING:
    from .runtime import ParserState

Handler = Callable[[Token, 'ParserState'], Value]

RULE_HANDLERS: Dict[str, Handler] = {
    # leaves
    'int': eval_int,
    'float': eval_float,
    'sci': eval_float,
    'hex': eval_hex,
    'bin': eval_bin,
    'oct': eval_oct,
    'boolean': eval_boolean,
    'string': eval_string,
    'identifier': eval_identifier,

    # literals
    'currency': eval_currency,
    'term': eval_term,
    'array': eval_array,
    'object': eval_object,

    # operators
    'as_expression': fold_binary,
    'md_expression': fold_binary,
    'power_expression': fold_binary,
    'sh_expression': fold_binary,
    'and_expression': fold_binary,
    'xor_expression': fold_binary,
    'or_expression': fold_binary,
    'implied_mul_expression': eval_implied_mul,
    'bool_cmp_expression': eval_bool_cmp,
    'bool_and_expression': eval_bool_and,
    'bool_or_expression': eval_bool_or,
    'prefix_unary_expression': eval_prefix_unary,
    'postfix_unary_expression': eval_postfix_unary,
    'index_expression': eval_index,

    # statements
    'assignment_expression': eval_assignment,
    'call_expression': eval_call,
    'line': eval_line,
    'script': eval_script,
}

ERROR_RULES: Dict[str, Type[CalcSyntaxError]] = {
    'error_unterminated_literal': UnterminatedLiteralError,
    'error_unterminated_linebreak': UnterminatedLinebreakError,
    'error_unterminated_array': UnterminatedArrayError,
    'error_unterminated_object': UnterminatedObjectError,
    'error_unterminated_paren': UnterminatedParenError,
    'error_unexpected_decorator': UnexpectedDecoratorError,
    'error_unexpected_postfix': UnexpectedPostfixError,
}

# child positions holding a bare name rather than an expression
_NAME_SLOTS: Dict[str, FrozenSet[int]] = {
    'call_expression': frozenset({0}),
    'assignment_expression': frozenset({0}),
    'index_assignment_prefix': frozenset({0}),
}

def _name_slots(node: Token) -> FrozenSet[int]:
    slots = _NAME_SLOTS.get(node.rule, frozenset())
    # a[i] = v still needs its index evaluated
    return frozenset(i for i in slots if node.children[i].rule == 'identifier')

def _eval_ternary(node: Token, state: ParserState) -> None:
    condition = node.children[0]
    handle_tree(condition, state)
    if isinstance(condition.value, Identifier):
        raise VariableNameError(condition, condition.value.name)

    branch = node.children[2] if condition.value.as_bool() else node.children[4]
    handle_tree(branch, state)

    node.value = branch.value
    node.text = branch.text
    node.format = branch.format

def handle_tree(node: Token, state: ParserState) -> None:
    """Evaluate ``node`` in place, filling in its value, text and format."""
    error = ERROR_RULES.get(node.rule)
    if error is not None:
        raise error(node)

    match node.rule:
        case 'ternary_expression':
            _eval_ternary(node, state)
            return
        case 'function_assignment':
            define_function(node, state)
            return
        case 'decorator':
            return

    skip = _name_slots(node)
    for i, ch in enumerate(node.children):
        if i not in skip:
            handle_tree(ch, state)

    if not (node.rule == 'call_expression' and node.children[0].input == 'help'):
        for i, ch in enumerate(node.children):
            if i not in skip and isinstance(ch.value, Identifier):
                raise VariableNameError(ch, ch.value.name)

    node.format = bubble_format(node)

    handler = RULE_HANDLERS.get(node.rule)
    if handler is not None:
        node.value = handler(node, state)

def evaluate(source: str, state: ParserState) -> Token:
    """Parse and evaluate ``source``; return the evaluated script node."""
    tree = parse(source)
    handle_tree(tree, state)
    return tree
