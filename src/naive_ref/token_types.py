"""
Token Types for the naive lexer and parser

Shared between lexer and parser to avoid circular dependencies.
"""

from typing import Dict, Optional
from dataclasses import dataclass
from enum import Enum, auto


class TT(Enum):
    """Token Types"""

    # Special
    INVALID = auto()
    EOF = auto()
    COMMENT = auto()

    # Literals
    INT = auto()
    FLOAT = auto()
    CHAR = auto()
    STRING = auto()
    IDENT = auto()

    # Operators
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()
    MOD = auto()

    # Punctuation
    LPAR = auto()
    RPAR = auto()
    LBRACE = auto()
    RBRACE = auto()
    SEMI = auto()
    COMMA = auto()

    # Comparison
    EQ = auto()  # ==
    NEQ = auto()  # /=
    GT = auto()
    GTE = auto()
    LT = auto()
    LTE = auto()

    # Assignment
    ASSIGN = auto()  # =
    ARROW = auto()  # =>

    # Keywords
    LET = auto()
    IF = auto()
    ELSE = auto()
    WHILE = auto()
    FN = auto()
    RETURN = auto()
    PRINT = auto()

    # Keyword literals
    TRUE = auto()
    FALSE = auto()
    NIL = auto()

    # Logical
    AND = auto()
    OR = auto()
    NOT = auto()

    @property
    def is_literal(self) -> bool:
        return self in _LITERAL_KINDS

    @property
    def is_operator(self) -> bool:
        return self in _OPERATOR_KINDS

    @property
    def is_keyword(self) -> bool:
        return self in KEYWORDS.values()


KEYWORDS: Dict[str, TT] = {
    'let': TT.LET,
    'if': TT.IF,
    'else': TT.ELSE,
    'while': TT.WHILE,
    'fn': TT.FN,
    'return': TT.RETURN,
    'print': TT.PRINT,
    'true': TT.TRUE,
    'false': TT.FALSE,
    'nil': TT.NIL,
    'and': TT.AND,
    'or': TT.OR,
    'not': TT.NOT,
}

_LITERAL_KINDS = frozenset({TT.INT, TT.FLOAT, TT.CHAR, TT.STRING, TT.IDENT})

_OPERATOR_KINDS = frozenset({
    TT.PLUS, TT.MINUS, TT.STAR, TT.SLASH, TT.MOD,
    TT.LPAR, TT.RPAR, TT.LBRACE, TT.RBRACE, TT.SEMI, TT.COMMA,
    TT.EQ, TT.NEQ, TT.GT, TT.GTE, TT.LT, TT.LTE,
    TT.ASSIGN, TT.ARROW,
})


def lookup(ident: str) -> TT:
    """Resolve identifier text to its keyword kind, or IDENT."""
    return KEYWORDS.get(ident, TT.IDENT)


@dataclass(frozen=True)
class Location:
    """Source position used in diagnostics."""

    file: Optional[str]
    line: int
    column: int

    def __str__(self) -> str:
        name = self.file if self.file else "<unknown>"
        return f"{name}:{self.line}:{self.column}"


@dataclass
class Tok:
    """Token with position info"""

    type: TT
    value: str
    line: int = 0
    column: int = 0
    file: Optional[str] = None

    @property
    def location(self) -> Location:
        return Location(self.file, self.line, self.column)

    def __repr__(self):
        return f"Tok({self.type.name}, {self.value!r}, {self.line}:{self.column})"
