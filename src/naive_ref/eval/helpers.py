from __future__ import annotations

from ..runtime import NvBool, NvNil, NvValue

def is_truthy(val: NvValue) -> bool:
    match val:
        case NvBool(value=b):
            return b
        case NvNil():
            return False
        case _:
            return True
