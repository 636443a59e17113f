from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Tuple
from typing_extensions import TypeAlias, TypeGuard
from .tree import Node

# ---------- Value Model ----------

@dataclass(frozen=True)
class NvNil:
    def __repr__(self) -> str:
        return "nil"

@dataclass(frozen=True)
class NvInt:
    value: int
    def __repr__(self) -> str:
        return str(self.value)

@dataclass(frozen=True)
class NvFloat:
    value: Decimal
    def __repr__(self) -> str:
        return str(self.value).replace("E", "e")

@dataclass(frozen=True)
class NvBool:
    value: bool
    def __repr__(self) -> str:
        return "true" if self.value else "false"

@dataclass(frozen=True)
class NvChar:
    value: str
    def __repr__(self) -> str:
        return f"'{self.value}'"

@dataclass(frozen=True)
class NvString:
    value: str
    def __repr__(self) -> str:
        return f'"{self.value}"'

@dataclass(eq=False)
class NvFn:
    name: Optional[str]           # None for lambdas
    params: List[str]
    body: Node                    # block statement
    frame: 'Frame'                # captured by reference, never copied
    def __repr__(self) -> str:
        return f"<fn {self.name or 'lambda'}>"

StdlibFn = Callable[['Frame', List['NvValue']], 'NvValue']

@dataclass(frozen=True, eq=False)
class NvBuiltin:
    name: str
    fn: StdlibFn
    arity: Optional[int] = None   # None for variadic
    def __repr__(self) -> str:
        return f"<builtin {self.name}>"

NvValue: TypeAlias = (
    NvNil
    | NvInt
    | NvFloat
    | NvBool
    | NvChar
    | NvString
    | NvFn
    | NvBuiltin
)

NIL = NvNil()
TRUE = NvBool(True)
FALSE = NvBool(False)

def nv_bool(flag: bool) -> NvBool:
    return TRUE if flag else FALSE

_NV_VALUE_TYPES: Tuple[type, ...] = (
    NvNil,
    NvInt,
    NvFloat,
    NvBool,
    NvChar,
    NvString,
    NvFn,
    NvBuiltin,
)

def is_nv_value(value: object) -> TypeGuard[NvValue]:
    return isinstance(value, _NV_VALUE_TYPES)

# ---------- Statement results ----------

@dataclass(frozen=True)
class Flow:
    """Outcome of running a statement: fall through, or unwind with a return value."""
    returning: bool = False
    value: NvValue = NIL

NORMAL = Flow()

def returning(value: NvValue) -> Flow:
    return Flow(returning=True, value=value)

# ---------- Environment ----------

class Frame:
    def __init__(self, parent: Optional['Frame']=None, source_name: Optional[str]=None):
        self.parent = parent
        self.vars: Dict[str, NvValue] = {}
        self.source_name: Optional[str]

        if parent is None and Builtins.stdlib_functions:
            for name, std in Builtins.stdlib_functions.items():
                self.vars[name] = std

        if source_name is not None:
            self.source_name = source_name
        elif parent is not None:
            self.source_name = parent.source_name
        else:
            self.source_name = None

    def define(self, name: str, val: NvValue) -> None:
        self.vars[name] = val

    def lookup(self, name: str) -> Optional['Frame']:
        """Innermost frame on the chain that binds `name`."""
        frame: Optional[Frame] = self

        while frame is not None:
            if name in frame.vars:
                return frame
            frame = frame.parent

        return None

    def get(self, name: str) -> NvValue:
        owner = self.lookup(name)

        if owner is None:
            raise NaiveNameError(f"undefined variable '{name}'", name)

        return owner.vars[name]

    def set(self, name: str, val: NvValue) -> None:
        owner = self.lookup(name)

        if owner is None:
            raise NaiveNameError(f"assignment to undefined variable '{name}'", name)

        owner.vars[name] = val

# ---------- Exceptions ----------

class NaiveRuntimeError(Exception):
    nv_meta: Optional[object]
    nv_source: Optional[str]

    def __init__(self, message: str):
        super().__init__(message)
        self.nv_meta = None
        self.nv_source = None

    @property
    def message(self) -> str:
        return super().__str__()

    def __str__(self) -> str:
        msg = super().__str__()

        meta = self.nv_meta
        if meta is None:
            return msg

        line = getattr(meta, "line", None)
        col = getattr(meta, "column", None)

        if line is None:
            return msg

        name = self.nv_source or "<unknown>"
        if col is None:
            return f"{name}:{line}: {msg}"

        return f"{name}:{line}:{col}: {msg}"

class NaiveNameError(NaiveRuntimeError):
    def __init__(self, message: str, name: str):
        super().__init__(message)
        self.name = name

class NaiveTypeError(NaiveRuntimeError):
    pass

class NaiveArityError(NaiveRuntimeError):
    pass

class NaiveZeroDivisionError(NaiveRuntimeError):
    pass

class NaiveUnimplementedError(NaiveRuntimeError):
    pass

class NaiveRecursionError(NaiveRuntimeError):
    pass

# ---------- Registry ----------

class Builtins:
    stdlib_functions: Dict[str, NvBuiltin] = {}
