from __future__ import annotations

import importlib
from typing import List, Optional
from .types import (
    NvNil, NvInt, NvFloat, NvBool, NvChar, NvString, NvFn, NvBuiltin,
    NvValue, Frame, Flow, NORMAL, NIL, returning, nv_bool,
    NaiveRuntimeError, NaiveNameError, NaiveTypeError, NaiveArityError,
    NaiveZeroDivisionError, NaiveUnimplementedError, NaiveRecursionError,
    Builtins, StdlibFn, is_nv_value,
)

__all__ = [
    "NvNil", "NvInt", "NvFloat", "NvBool", "NvChar", "NvString", "NvFn", "NvBuiltin",
    "NvValue", "Frame", "Flow", "NORMAL", "NIL", "returning", "nv_bool",
    "NaiveRuntimeError", "NaiveNameError", "NaiveTypeError", "NaiveArityError",
    "NaiveZeroDivisionError", "NaiveUnimplementedError", "NaiveRecursionError",
    "Builtins", "StdlibFn", "is_nv_value",
    "init_stdlib", "register_stdlib", "call_function", "call_nvfn",
]

_STDLIB_INITIALIZED = False

def init_stdlib() -> None:
    """Load stdlib modules (idempotent) so register_stdlib hooks run."""
    global _STDLIB_INITIALIZED

    if _STDLIB_INITIALIZED:
        return

    importlib.import_module("naive_ref.stdlib")
    _STDLIB_INITIALIZED = True

def register_stdlib(name: str, *, arity: Optional[int] = None):
    def dec(fn: StdlibFn):
        Builtins.stdlib_functions[name] = NvBuiltin(name=name, fn=fn, arity=arity)
        return fn

    return dec

def call_function(callee: NvValue, args: List[NvValue], caller_frame: Frame) -> NvValue:
    match callee:
        case NvFn():
            return call_nvfn(callee, args)
        case NvBuiltin(name=name, fn=fn, arity=arity):
            if arity is not None and len(args) != arity:
                raise NaiveArityError(f"{name} expects {arity} args; got {len(args)}")
            result = fn(caller_frame, args)
            if not is_nv_value(result):
                raise NaiveTypeError(f"{name} returned a non-naive value: {type(result).__name__}")
            return result
        case _:
            raise NaiveTypeError(f"{callee!r} is not callable")

def call_nvfn(fn: NvFn, args: List[NvValue]) -> NvValue:
    """
    Call semantics:
    - arity must match len(fn.params) exactly
    - params are bound in a fresh child of the captured frame
    - a return unwinding out of the body stops here; falling off the end yields nil
    """
    from .evaluator import exec_stmt  # local import to avoid cycle

    if len(args) != len(fn.params):
        label = fn.name or "lambda"
        raise NaiveArityError(f"{label} expects {len(fn.params)} args; got {len(args)}")

    callee_frame = Frame(parent=fn.frame)

    for name, val in zip(fn.params, args):
        callee_frame.define(name, val)

    try:
        flow = exec_stmt(fn.body, callee_frame)
    except RecursionError:
        raise NaiveRecursionError(f"maximum call depth exceeded in {fn.name or 'lambda'}") from None

    return flow.value if flow.returning else NIL
