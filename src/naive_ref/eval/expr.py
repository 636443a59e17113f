from __future__ import annotations

from decimal import Decimal, DecimalException, Overflow
from typing import Callable, Union

from lark import Tree

from ..ast import op_kind
from ..runtime import (
    Frame,
    NvBool,
    NvChar,
    NvFloat,
    NvInt,
    NvNil,
    NvString,
    NvValue,
    NaiveRuntimeError,
    NaiveTypeError,
    NaiveUnimplementedError,
    NaiveZeroDivisionError,
    nv_bool,
)
from ..token_types import TT
from ..tree import Node
from .helpers import is_truthy

EvalFunc = Callable[[Node, Frame], NvValue]

Number = Union[int, Decimal]

def _kind_name(value: NvValue) -> str:
    match value:
        case NvInt():
            return "int"
        case NvFloat():
            return "float"
        case NvBool():
            return "bool"
        case NvNil():
            return "nil"
        case NvChar():
            return "char"
        case NvString():
            return "string"
        case _:
            return "function"

def _as_number(value: NvValue, op: str) -> Number:
    match value:
        case NvBool(value=b):
            return int(b)
        case NvInt(value=i):
            return i
        case NvFloat(value=d):
            return d
        case _:
            raise NaiveTypeError(f"unsupported operand type {_kind_name(value)} for '{op}'")

def _promote(lhs: Number, rhs: Number) -> tuple[Number, Number]:
    if isinstance(lhs, Decimal) or isinstance(rhs, Decimal):
        return Decimal(lhs), Decimal(rhs)
    return lhs, rhs

def _wrap(num: Number) -> NvValue:
    if isinstance(num, Decimal):
        return NvFloat(num)
    return NvInt(num)

def _float_error(exc: DecimalException, op: str) -> NaiveRuntimeError:
    if isinstance(exc, Overflow):
        return NaiveRuntimeError(f"float overflow in '{op}'")
    return NaiveRuntimeError(f"invalid float operation in '{op}'")

# ---------------- Unary ----------------

def eval_unary(n: Tree, frame: Frame, eval_func: EvalFunc) -> NvValue:
    op, operand_node = n.children
    operand = eval_func(operand_node, frame)

    match op_kind(op):
        case TT.NOT:
            return nv_bool(not is_truthy(operand))
        case TT.MINUS:
            value = _as_number(operand, '-')
            try:
                return _wrap(-value)
            except DecimalException as exc:
                raise _float_error(exc, '-') from None
        case kind:
            raise NaiveRuntimeError(f"unknown unary operator {kind.name}")

# ---------------- Binary ----------------

def eval_binary(n: Tree, frame: Frame, eval_func: EvalFunc) -> NvValue:
    lhs_node, op, rhs_node = n.children
    kind = op_kind(op)

    if kind in (TT.AND, TT.OR):
        return eval_logical(kind, lhs_node, rhs_node, frame, eval_func)

    lhs = eval_func(lhs_node, frame)
    rhs = eval_func(rhs_node, frame)

    if kind in _COMPARE_OPS:
        return eval_compare(kind, lhs, rhs, str(op))

    return apply_arith(kind, lhs, rhs, str(op))

def eval_logical(kind: TT, lhs_node: Node, rhs_node: Node, frame: Frame, eval_func: EvalFunc) -> NvValue:
    """Short-circuit and/or; the result is one of the operand values, never a coerced bool."""
    lhs = eval_func(lhs_node, frame)

    if kind == TT.AND:
        return eval_func(rhs_node, frame) if is_truthy(lhs) else lhs

    return lhs if is_truthy(lhs) else eval_func(rhs_node, frame)

def apply_arith(kind: TT, lhs_val: NvValue, rhs_val: NvValue, op: str) -> NvValue:
    lhs, rhs = _promote(_as_number(lhs_val, op), _as_number(rhs_val, op))

    try:
        return _arith(kind, lhs, rhs)
    except DecimalException as exc:
        raise _float_error(exc, op) from None

def _arith(kind: TT, lhs: Number, rhs: Number) -> NvValue:
    match kind:
        case TT.PLUS:
            return _wrap(lhs + rhs)
        case TT.MINUS:
            return _wrap(lhs - rhs)
        case TT.STAR:
            return _wrap(lhs * rhs)
        case TT.SLASH:
            if rhs == 0:
                raise NaiveZeroDivisionError("division by zero")
            if isinstance(lhs, Decimal):
                return _wrap(lhs / rhs)
            return _wrap(lhs // rhs)
        case TT.MOD:
            if isinstance(lhs, Decimal):
                raise NaiveUnimplementedError("modulo is not implemented for float operands")
            if rhs == 0:
                raise NaiveZeroDivisionError("modulo by zero")
            return _wrap(lhs % rhs)
        case _:
            raise NaiveRuntimeError(f"unknown binary operator {kind.name}")

# ---------------- Comparison ----------------

_COMPARE_OPS = frozenset({TT.EQ, TT.NEQ, TT.LT, TT.GT, TT.LTE, TT.GTE})

_NUMERIC = (NvInt, NvFloat, NvBool)

def _values_equal(lhs: NvValue, rhs: NvValue) -> bool:
    match (lhs, rhs):
        case (NvNil(), NvNil()):
            return True
        case (NvChar(value=a), NvChar(value=b)) | (NvString(value=a), NvString(value=b)):
            return a == b
        case _:
            return lhs is rhs

def eval_compare(kind: TT, lhs_val: NvValue, rhs_val: NvValue, op: str) -> NvValue:
    """Numeric comparison with int/float promotion. Equality also covers nil, chars and strings."""
    numeric = isinstance(lhs_val, _NUMERIC) and isinstance(rhs_val, _NUMERIC)

    if not numeric and kind in (TT.EQ, TT.NEQ):
        same = _values_equal(lhs_val, rhs_val)
        return nv_bool(same if kind == TT.EQ else not same)

    lhs, rhs = _promote(_as_number(lhs_val, op), _as_number(rhs_val, op))

    match kind:
        case TT.EQ:
            return nv_bool(lhs == rhs)
        case TT.NEQ:
            return nv_bool(lhs != rhs)
        case TT.LT:
            return nv_bool(lhs < rhs)
        case TT.GT:
            return nv_bool(lhs > rhs)
        case TT.LTE:
            return nv_bool(lhs <= rhs)
        case TT.GTE:
            return nv_bool(lhs >= rhs)
        case _:
            raise NaiveRuntimeError(f"unknown comparison operator {kind.name}")

def eval_group(n: Tree, frame: Frame, eval_func: EvalFunc) -> NvValue:
    return eval_func(n.children[0], frame)

