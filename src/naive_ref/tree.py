"""Shared helpers for working with the Tree/Token nodes used across the project."""
from __future__ import annotations
from typing import Any, Optional, Union

from lark import Token, Tree
from typing_extensions import TypeAlias, TypeGuard

Node: TypeAlias = Union[Tree, Token]


def is_tree(node: Any) -> TypeGuard[Tree]:
    return isinstance(node, Tree)

def is_token(node: Any) -> TypeGuard[Token]:
    return isinstance(node, Token)

def tree_label(node: Any) -> Optional[str]:
    return node.data if is_tree(node) else None

def node_meta(node: Any) -> Optional[Any]:
    if not is_tree(node):
        return None

    # lark creates an empty Meta on first access; peek at the slot instead
    return getattr(node, "_meta", None)
