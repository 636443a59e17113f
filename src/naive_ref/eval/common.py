from __future__ import annotations

from typing import Any, List, Optional

from lark import Token

from ..runtime import (
    NvBool,
    NvBuiltin,
    NvChar,
    NvFloat,
    NvFn,
    NvInt,
    NvNil,
    NvString,
    NvValue,
    NaiveRuntimeError,
)
from ..tree import is_token

PLACEHOLDER = "{}"

def token_kind(node: Any) -> Optional[str]:
    if not is_token(node):
        return None
    tok: Token = node
    return str(tok.type)

def expect_ident_token(node: Any, context: str) -> str:
    if is_token(node) and token_kind(node) == 'IDENT':
        return str(node.value)

    raise NaiveRuntimeError(f"{context} must be an identifier")

def format_float(value) -> str:
    return str(value).replace("E", "e")

def stringify(value: NvValue) -> str:
    """Display form used by print/write/format."""
    match value:
        case NvString(value=s) | NvChar(value=s):
            return s
        case NvInt(value=i):
            return str(i)
        case NvFloat(value=d):
            return format_float(d)
        case NvBool(value=b):
            return "true" if b else "false"
        case NvNil():
            return "nil"
        case NvFn(name=name):
            return f"<fn {name or 'lambda'}>"
        case NvBuiltin(name=name):
            return f"<builtin {name}>"
        case _:
            return str(value)

def render_format(fmt: str, args: List[NvValue], context: str) -> str:
    """Substitute each `{}` in fmt with the next argument's display form; extra args are ignored."""
    pieces = fmt.split(PLACEHOLDER)
    needed = len(pieces) - 1

    if len(args) < needed:
        raise NaiveRuntimeError(f"{context}: format has {needed} placeholder(s) but got {len(args)} argument(s)")

    out = [pieces[0]]

    for piece, arg in zip(pieces[1:], args):
        out.append(stringify(arg))
        out.append(piece)

    return "".join(out)
