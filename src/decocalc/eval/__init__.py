"""Evaluator helper modules for the decocalc walker."""

__all__ = [
    "arithmetic",
    "literals",
    "expr",
    "assign",
    "calls",
    "lines",
]
