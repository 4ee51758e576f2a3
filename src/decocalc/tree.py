"""Concrete syntax tree node shared by the parser, the walker and errors.

A ``Token`` starts life as a slice of the source and is filled in during
evaluation: ``value`` receives the computed Value, ``text`` the rendered
output and ``format`` the output format bubbled up from the children.
"""
from __future__ import annotations

from enum import IntEnum
from typing import List, Optional

from .types import NoneValue, Value


class OutputFormat(IntEnum):
    """Per-node output format; compared by decade when bubbling."""
    UNKNOWN = 0
    DEFAULT = 10
    DOLLARS = 20
    EUROS = 21
    POUNDS = 22
    YEN = 23

    @property
    def is_currency(self) -> bool:
        return self // 10 == 2

    @classmethod
    def from_symbol(cls, symbol: str) -> OutputFormat:
        return _CURRENCY_SYMBOLS.get(symbol, cls.DEFAULT)


_CURRENCY_SYMBOLS = {
    "$": OutputFormat.DOLLARS,
    "€": OutputFormat.EUROS,
    "£": OutputFormat.POUNDS,
    "¥": OutputFormat.YEN,
}


class Token:
    __slots__ = ('rule', 'input', 'text', 'index', 'format', 'value', 'children')

    def __init__(self, rule: str, input: str, index: int = 0, children: Optional[List[Token]] = None):
        self.rule = rule
        self.input = input
        self.text = input
        self.index = index
        self.format = OutputFormat.UNKNOWN
        self.value: Value = NoneValue()
        self.children: List[Token] = children if children is not None else []

    def child_by_rule(self, rule: str) -> Optional[Token]:
        for ch in self.children:
            if ch.rule == rule:
                return ch
        return None

    def lines(self) -> List[Token]:
        """Line children of a script node."""
        return [ch for ch in self.children if ch.rule == 'line']

    def __repr__(self) -> str:
        return f'Token({self.rule!r}, {self.input!r}, index={self.index})'


def bubble_format(node: Token) -> OutputFormat:
    """Highest-decade format among the node's children, at least DEFAULT."""
    fmt = OutputFormat.DEFAULT

    for ch in node.children:
        if ch.format // 10 > fmt // 10:
            fmt = ch.format

    return fmt
