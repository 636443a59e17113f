from __future__ import annotations

import sys
from typing import Callable, Iterable, Optional

from lark import Tree

from .runtime import (
    Flow,
    Frame,
    NIL,
    NORMAL,
    NvValue,
    NaiveRuntimeError,
    init_stdlib,
)
from .tree import Node, is_tree, node_meta, tree_label
from .utils import raise_host_limits

from .eval.bind import eval_assign_stmt, eval_let_stmt
from .eval.blocks import eval_block, eval_program
from .eval.common import render_format, stringify
from .eval.expr import eval_binary, eval_group, eval_unary
from .eval.fn import eval_args, eval_call, eval_fn_def, eval_lambda, eval_return_stmt
from .eval.literals import eval_char, eval_float, eval_int, eval_keyword_literal, eval_string
from .eval.loops import eval_if_stmt, eval_while_stmt

EvalFunc = Callable[[Node, Frame], NvValue]
ExecFunc = Callable[[Node, Frame], Flow]

def _maybe_attach_location(exc: NaiveRuntimeError, node: Node, frame: Frame) -> None:
    if getattr(exc, "_augmented", False):
        return

    meta = node_meta(node)

    if meta is None or getattr(meta, "line", None) is None:
        return

    exc.nv_meta = meta
    exc.nv_source = frame.source_name
    exc._augmented = True  # type: ignore[attr-defined]

# ---------------- Public API ----------------

class Interpreter:
    """
    Walks statement lists against one persistent root frame.

    The root frame holds the built-ins and every top-level binding; it
    outlives individual `evaluate` calls so a REPL can feed it line by line.
    """

    def __init__(self, name: Optional[str]=None):
        init_stdlib()
        raise_host_limits()
        self.name = name
        self.frame = Frame(source_name=name)

    def reset(self) -> None:
        self.frame = Frame(source_name=self.name)

    def evaluate(self, statements: Iterable[Node], name: Optional[str]=None) -> NvValue:
        """
        Run statements in the root frame. A top-level `return` stops the
        remaining statements of this call and yields its value; otherwise nil.
        """
        if name is not None:
            self.frame.source_name = name

        flow = eval_program(statements, self.frame, exec_stmt)
        return flow.value if flow.returning else NIL

# ---------------- Core evaluator ----------------

def eval_node(n: Node, frame: Frame) -> NvValue:
    try:
        return _eval_node_inner(n, frame)
    except NaiveRuntimeError as e:
        _maybe_attach_location(e, n, frame)
        raise

def _eval_node_inner(n: Node, frame: Frame) -> NvValue:
    if not is_tree(n):
        raise NaiveRuntimeError(f"Unsupported node type: {type(n).__name__}")

    handler = _NODE_DISPATCH.get(n.data)
    if handler is None:
        raise NaiveRuntimeError(f"Unknown expression type: {tree_label(n)}")

    return handler(n, frame)

def exec_stmt(n: Node, frame: Frame) -> Flow:
    try:
        return _exec_stmt_inner(n, frame)
    except NaiveRuntimeError as e:
        _maybe_attach_location(e, n, frame)
        raise

def _exec_stmt_inner(n: Node, frame: Frame) -> Flow:
    if not is_tree(n):
        raise NaiveRuntimeError(f"Unsupported node type: {type(n).__name__}")

    handler = _STMT_DISPATCH.get(n.data)
    if handler is None:
        raise NaiveRuntimeError(f"Unknown statement type: {tree_label(n)}")

    return handler(n, frame)

# ---------------- Statements ----------------

def _eval_expr_stmt(n: Tree, frame: Frame) -> Flow:
    eval_node(n.children[0], frame)
    return NORMAL

def _eval_block_expr(n: Tree, frame: Frame) -> NvValue:
    flow = eval_block(n, frame, exec_stmt)
    return flow.value if flow.returning else NIL

def _eval_var(n: Tree, frame: Frame) -> NvValue:
    return frame.get(str(n.children[0]))

def _eval_print_stmt(n: Tree, frame: Frame) -> Flow:
    """print("fmt {}", args...): placeholders filled in order, newline appended when missing."""
    fmt, args_node = n.children
    args = eval_args(args_node, frame, eval_node)

    if fmt == "":
        text = " ".join(stringify(arg) for arg in args) + "\n"
    else:
        text = render_format(fmt, args, "print")
        if not fmt.endswith("\n"):
            text += "\n"

    sys.stdout.write(text)
    return NORMAL

_NODE_DISPATCH: dict[str, EvalFunc] = {
    'int': eval_int,
    'float': eval_float,
    'char': eval_char,
    'string': eval_string,
    'true': eval_keyword_literal,
    'false': eval_keyword_literal,
    'nil': eval_keyword_literal,
    'var': _eval_var,
    'group': lambda n, frame: eval_group(n, frame, eval_node),
    'unary': lambda n, frame: eval_unary(n, frame, eval_node),
    'binary': lambda n, frame: eval_binary(n, frame, eval_node),
    'call': lambda n, frame: eval_call(n, frame, eval_node),
    'lambda': eval_lambda,
    'block': _eval_block_expr,
}

_STMT_DISPATCH: dict[str, ExecFunc] = {
    'let': lambda n, frame: eval_let_stmt(n, frame, eval_node),
    'assign': lambda n, frame: eval_assign_stmt(n, frame, eval_node),
    'exprstmt': _eval_expr_stmt,
    'if': lambda n, frame: eval_if_stmt(n, frame, eval_node, exec_stmt),
    'while': lambda n, frame: eval_while_stmt(n, frame, eval_node, exec_stmt),
    'fndef': lambda n, frame: eval_fn_def(n, frame),
    'return': lambda n, frame: eval_return_stmt(n, frame, eval_node),
    'print': _eval_print_stmt,
    'empty': lambda _, __: NORMAL,
    'block': lambda n, frame: eval_block(n, frame, exec_stmt),
}

__all__ = [
    "Interpreter",
    "eval_node",
    "exec_stmt",
]
