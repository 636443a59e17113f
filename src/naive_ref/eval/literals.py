from __future__ import annotations

from lark import Tree

from ..runtime import (
    Frame,
    NvChar,
    NvFloat,
    NvInt,
    NvString,
    NvValue,
    NIL,
    nv_bool,
)

def eval_int(n: Tree, _frame: Frame) -> NvValue:
    return NvInt(n.children[0])

def eval_float(n: Tree, _frame: Frame) -> NvValue:
    return NvFloat(n.children[0])

def eval_char(n: Tree, _frame: Frame) -> NvValue:
    return NvChar(n.children[0])

def eval_string(n: Tree, _frame: Frame) -> NvValue:
    return NvString(n.children[0])

def eval_keyword_literal(n: Tree, _frame: Frame) -> NvValue:
    match n.data:
        case 'true':
            return nv_bool(True)
        case 'false':
            return nv_bool(False)
        case _:
            return NIL
