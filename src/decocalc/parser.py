"""Grammar loading and CST construction.

The lark parse tree is rebuilt into ``Token`` nodes. Nodes with a single
child collapse into that child, except ``script``, ``line`` and the
``error_*`` rules whose presence is what the walker reports.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional, Union

from lark import Lark, Token as LarkToken, Tree as LarkTree
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken

from .errors import CalcParseError
from .tree import Token

GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")

_NEVER_COLLAPSE = frozenset({'script', 'line'})

def read_grammar(grammar_path: Optional[str] = None) -> str:
    path = Path(grammar_path) if grammar_path else GRAMMAR_PATH
    return path.read_text(encoding="utf-8")

@lru_cache(maxsize=None)
def make_parser(grammar_path: Optional[str] = None) -> Lark:
    return Lark(
        read_grammar(grammar_path),
        start="script",
        parser="earley",
        lexer="basic",
        keep_all_tokens=True,
        propagate_positions=True,
        maybe_placeholders=False,
    )

def parse(source: str) -> Token:
    """Parse ``source`` into a collapsed, unevaluated CST."""
    try:
        tree = make_parser().parse(source)
    except UnexpectedInput as exc:
        pos = getattr(exc, 'pos_in_stream', None)
        if pos is None or pos < 0:
            pos = len(source)
        node = Token('script', source[pos:], pos)
        raise CalcParseError(node, _describe(exc)) from exc

    return build_tree(tree, source)

def _describe(exc: UnexpectedInput) -> str:
    if isinstance(exc, UnexpectedCharacters):
        return f"unexpected character {exc.char!r}"
    if isinstance(exc, UnexpectedEOF):
        return "unexpected end of input"
    if isinstance(exc, UnexpectedToken):
        if exc.token.type == '$END':
            return "unexpected end of input"
        return f"unexpected {exc.token.type.lower()} {str(exc.token)!r}"
    return "invalid syntax"

def build_tree(node: Union[LarkTree, LarkToken], source: str) -> Token:
    if isinstance(node, LarkToken):
        return Token(node.type.lower(), str(node), node.start_pos or 0)

    rule = str(node.data)
    children = [build_tree(ch, source) for ch in node.children]

    if len(children) == 1 and rule not in _NEVER_COLLAPSE and not rule.startswith('error_'):
        return children[0]

    meta = node.meta
    if getattr(meta, 'empty', True):
        start = children[0].index if children else 0
        text = "".join(ch.input for ch in children)
    else:
        start = meta.start_pos
        text = source[start:meta.end_pos]

    return Token(rule, text, start, children)
