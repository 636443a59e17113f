from __future__ import annotations

from typing import Callable, List

from lark import Tree

from ..ast import names
from ..runtime import Flow, Frame, NORMAL, NvFn, NvValue, call_function, returning
from ..tree import Node
from .common import expect_ident_token

EvalFunc = Callable[[Node, Frame], NvValue]

def eval_fn_def(n: Tree, frame: Frame) -> Flow:
    """Bind a closure over the declaring frame; the binding is visible to the body for recursion."""
    name_tok, params_node, body = n.children
    name = expect_ident_token(name_tok, "Function name")
    frame.define(name, NvFn(name=name, params=names(params_node), body=body, frame=frame))
    return NORMAL

def eval_lambda(n: Tree, frame: Frame) -> NvValue:
    params_node, body = n.children
    return NvFn(name=None, params=names(params_node), body=body, frame=frame)

def eval_args(args_node: Tree, frame: Frame, eval_func: EvalFunc) -> List[NvValue]:
    return [eval_func(arg, frame) for arg in args_node.children]

def eval_call(n: Tree, frame: Frame, eval_func: EvalFunc) -> NvValue:
    name_tok, args_node = n.children
    callee = frame.get(expect_ident_token(name_tok, "Callee"))
    args = eval_args(args_node, frame, eval_func)
    return call_function(callee, args, frame)

def eval_return_stmt(n: Tree, frame: Frame, eval_func: EvalFunc) -> Flow:
    return returning(eval_func(n.children[0], frame))
