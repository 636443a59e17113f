"""Evaluator helper modules for the naive runtime."""

__all__ = [
    "bind",
    "blocks",
    "common",
    "expr",
    "fn",
    "helpers",
    "literals",
    "loops",
]
