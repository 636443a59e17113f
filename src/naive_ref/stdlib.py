"""Built-in functions (write, writeln, format, getline) registered via naive_ref.runtime."""

from __future__ import annotations

import sys
from typing import List

from .runtime import register_stdlib, NvString, NvValue, NIL, NaiveTypeError
from .eval.common import render_format, stringify

@register_stdlib("write")
def std_write(_frame, args: List[NvValue]) -> NvValue:
    sys.stdout.write("".join(stringify(arg) for arg in args))
    return NIL

@register_stdlib("writeln")
def std_writeln(_frame, args: List[NvValue]) -> NvValue:
    sys.stdout.write(" ".join(stringify(arg) for arg in args) + "\n")
    return NIL

@register_stdlib("format")
def std_format(_frame, args: List[NvValue]) -> NvString:
    if not args:
        raise NaiveTypeError("format expects a format string as its first argument")

    fmt, *rest = args

    if not isinstance(fmt, NvString):
        raise NaiveTypeError("format expects a format string as its first argument")

    return NvString(render_format(fmt.value, rest, "format"))

@register_stdlib("getline", arity=0)
def std_getline(_frame, _args: List[NvValue]) -> NvString:
    line = sys.stdin.readline()

    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]

    return NvString(line)
