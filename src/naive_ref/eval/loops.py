from __future__ import annotations

from typing import Callable

from lark import Tree

from ..runtime import Flow, Frame, NORMAL, NvValue
from ..tree import Node
from .helpers import is_truthy

EvalFunc = Callable[[Node, Frame], NvValue]
ExecFunc = Callable[[Node, Frame], Flow]

def eval_if_stmt(n: Tree, frame: Frame, eval_func: EvalFunc, exec_func: ExecFunc) -> Flow:
    cond_node, then_node, else_node = n.children

    if is_truthy(eval_func(cond_node, frame)):
        return exec_func(then_node, frame)

    return exec_func(else_node, frame)

def eval_while_stmt(n: Tree, frame: Frame, eval_func: EvalFunc, exec_func: ExecFunc) -> Flow:
    cond_node, body_node = n.children

    while is_truthy(eval_func(cond_node, frame)):
        flow = exec_func(body_node, frame)

        if flow.returning:
            return flow

    return NORMAL
