from __future__ import annotations

from typing import Callable

from lark import Tree

from ..runtime import Flow, Frame, NORMAL, NvValue
from ..tree import Node
from .common import expect_ident_token

EvalFunc = Callable[[Node, Frame], NvValue]

def eval_let_stmt(n: Tree, frame: Frame, eval_func: EvalFunc) -> Flow:
    """`let` always binds in the current frame, shadowing any outer binding."""
    name_tok, init_node = n.children
    name = expect_ident_token(name_tok, "Declaration target")
    frame.define(name, eval_func(init_node, frame))
    return NORMAL

def eval_assign_stmt(n: Tree, frame: Frame, eval_func: EvalFunc) -> Flow:
    """Assignment rebinds the innermost existing binding; it never creates one."""
    name_tok, value_node = n.children
    name = expect_ident_token(name_tok, "Assignment target")
    value = eval_func(value_node, frame)
    frame.set(name, value)
    return NORMAL
