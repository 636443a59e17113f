from __future__ import annotations

from typing import Callable, Iterable

from lark import Tree

from ..runtime import Flow, Frame, NORMAL
from ..tree import Node

ExecFunc = Callable[[Node, Frame], Flow]

def eval_program(stmts: Iterable[Node], frame: Frame, exec_func: ExecFunc) -> Flow:
    """Run statements in order in `frame`, stopping at the first one that returns."""
    for stmt in stmts:
        flow = exec_func(stmt, frame)

        if flow.returning:
            return flow

    return NORMAL

def eval_block(n: Tree, frame: Frame, exec_func: ExecFunc) -> Flow:
    # the child frame is dropped on every exit, normal, returning or raising
    return eval_program(n.children, Frame(parent=frame), exec_func)
