"""AST for naive: a closed set of labelled `lark.Tree` nodes.

Every node is built through one of the constructors below so the label set
and child layout stay fixed:

    int        [value: int]
    float      [value: Decimal]
    char       [value: str]                  one code point
    string     [value: str]                  raw text between the quotes
    true / false / nil  []
    var        [IDENT]
    unary      [op: Token, operand]
    binary     [lhs, op: Token, rhs]
    group      [expr]
    call       [IDENT, args]
    lambda     [params, body]

    let        [IDENT, init]
    assign     [IDENT, expr]
    exprstmt   [expr]
    if         [cond, then, otherwise]
    while      [cond, body]
    fndef      [IDENT, params, body]
    return     [expr]
    print      [format: str, args]
    empty      []
    block      [stmt, ...]                   statement and expression

Operator tokens carry the token kind name (`TT.name`) as their type.
Trees are never mutated after the parser hands them out.
"""
from __future__ import annotations

from decimal import Decimal
from typing import List, Optional, Sequence

from lark import Token, Tree
from lark.tree import Meta

from .token_types import TT, Tok
from .tree import Node, is_tree, tree_label

EXPR_LABELS = frozenset({
    'int', 'float', 'char', 'string', 'true', 'false', 'nil',
    'var', 'unary', 'binary', 'group', 'call', 'lambda', 'block',
})

STMT_LABELS = frozenset({
    'let', 'assign', 'exprstmt', 'if', 'while', 'fndef',
    'return', 'print', 'empty', 'block',
})

UNARY_OPS = frozenset({TT.MINUS, TT.NOT})

BINARY_OPS = frozenset({
    TT.PLUS, TT.MINUS, TT.STAR, TT.SLASH, TT.MOD,
    TT.EQ, TT.NEQ, TT.LT, TT.GT, TT.LTE, TT.GTE,
    TT.AND, TT.OR,
})


def _meta(tok: Optional[Tok]) -> Optional[Meta]:
    if tok is None:
        return None
    meta = Meta()
    meta.empty = False
    meta.line = tok.line
    meta.column = tok.column
    return meta


def _node(label: str, children: List, at: Optional[Tok]) -> Tree:
    return Tree(label, children, _meta(at))


def ident(name: str) -> Token:
    return Token('IDENT', name)


def op_token(kind: TT, text: str) -> Token:
    return Token(kind.name, text)


# ---------------- Expressions ----------------

def int_literal(value: int, at: Optional[Tok] = None) -> Tree:
    return _node('int', [value], at)

def float_literal(value: Decimal, at: Optional[Tok] = None) -> Tree:
    return _node('float', [value], at)

def char_literal(value: str, at: Optional[Tok] = None) -> Tree:
    return _node('char', [value], at)

def string_literal(value: str, at: Optional[Tok] = None) -> Tree:
    return _node('string', [value], at)

def true_literal(at: Optional[Tok] = None) -> Tree:
    return _node('true', [], at)

def false_literal(at: Optional[Tok] = None) -> Tree:
    return _node('false', [], at)

def nil_literal(at: Optional[Tok] = None) -> Tree:
    return _node('nil', [], at)

def variable(name: str, at: Optional[Tok] = None) -> Tree:
    return _node('var', [ident(name)], at)

def unary(op: Tok, operand: Tree) -> Tree:
    if op.type not in UNARY_OPS:
        raise ValueError(f"not a unary operator: {op.type.name}")
    return _node('unary', [op_token(op.type, op.value), operand], op)

def binary(lhs: Tree, op: Tok, rhs: Tree) -> Tree:
    if op.type not in BINARY_OPS:
        raise ValueError(f"not a binary operator: {op.type.name}")
    return _node('binary', [lhs, op_token(op.type, op.value), rhs], op)

def grouping(expr: Tree, at: Optional[Tok] = None) -> Tree:
    return _node('group', [expr], at)

def call(name: str, args: Sequence[Tree], at: Optional[Tok] = None) -> Tree:
    return _node('call', [ident(name), Tree('args', list(args))], at)

def lambda_expr(params: Sequence[str], body: Tree, at: Optional[Tok] = None) -> Tree:
    return _node('lambda', [param_list(params), body], at)

def param_list(params: Sequence[str]) -> Tree:
    return Tree('params', [ident(p) for p in params])


# ---------------- Statements ----------------

def let_stmt(name: str, init: Optional[Tree] = None, at: Optional[Tok] = None) -> Tree:
    return _node('let', [ident(name), init if init is not None else nil_literal(at)], at)

def assign_stmt(name: str, expr: Tree, at: Optional[Tok] = None) -> Tree:
    return _node('assign', [ident(name), expr], at)

def expr_stmt(expr: Tree) -> Tree:
    return Tree('exprstmt', [expr], expr.meta if is_tree(expr) else None)

def if_stmt(cond: Tree, then: Tree, otherwise: Optional[Tree] = None, at: Optional[Tok] = None) -> Tree:
    return _node('if', [cond, then, otherwise if otherwise is not None else empty_stmt()], at)

def while_stmt(cond: Tree, body: Tree, at: Optional[Tok] = None) -> Tree:
    return _node('while', [cond, body], at)

def fn_def(name: str, params: Sequence[str], body: Tree, at: Optional[Tok] = None) -> Tree:
    return _node('fndef', [ident(name), param_list(params), body], at)

def return_stmt(expr: Tree, at: Optional[Tok] = None) -> Tree:
    return _node('return', [expr], at)

def print_stmt(fmt: str, args: Sequence[Tree], at: Optional[Tok] = None) -> Tree:
    return _node('print', [fmt, Tree('args', list(args))], at)

def empty_stmt(at: Optional[Tok] = None) -> Tree:
    return _node('empty', [], at)

def block(stmts: Sequence[Tree], at: Optional[Tok] = None) -> Tree:
    return _node('block', list(stmts), at)


# ---------------- Queries ----------------

def is_expr(node: Node) -> bool:
    return tree_label(node) in EXPR_LABELS

def is_stmt(node: Node) -> bool:
    return tree_label(node) in STMT_LABELS

def names(params: Tree) -> List[str]:
    """Parameter names of a `params` node, in order."""
    return [str(tok) for tok in params.children]

def op_kind(tok: Token) -> TT:
    return TT[tok.type]
