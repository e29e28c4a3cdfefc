"""Content hashing for asset names.

The SVG backend names each file after a digest of the primitive that
produced it, so equal primitives share one file and the name never depends
on the process, the platform or ``PYTHONHASHSEED``.

Example:
    >>> from mdsigil.utils.hashing import subtree_hash
    >>> subtree_hash(("a", 1)) == subtree_hash(("a", 1))
    True
"""

from __future__ import annotations

import hashlib
from collections.abc import Iterator
from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any


def _tokens(value: Any, exclude: frozenset[str]) -> Iterator[bytes]:
    """Canonical byte tokens for a value tree, in a fixed order."""
    match value:
        case None:
            yield b"N;"
        case Enum():
            yield f"E:{type(value).__name__}.{value.name};".encode()
        case tuple() | list():
            yield b"["
            for item in value:
                yield from _tokens(item, exclude)
            yield b"]"
        case dict():
            yield b"{"
            for key in sorted(value):
                yield from _tokens(key, exclude)
                yield from _tokens(value[key], exclude)
            yield b"}"
        case _ if is_dataclass(value) and not isinstance(value, type):
            yield f"D:{type(value).__name__}(".encode()
            for field in fields(value):
                if field.name not in exclude:
                    yield f"{field.name}=".encode()
                    yield from _tokens(getattr(value, field.name), exclude)
            yield b")"
        case _:
            text = repr(value).encode("utf-8")
            yield f"V{len(text)}:".encode() + text


def subtree_hash(value: Any, *, truncate: int = 16, exclude: frozenset[str] = frozenset()) -> str:
    """Structural digest of a dataclass tree such as a primitive.

    Fields are visited in declaration order and dict keys in sorted order,
    so equal trees always give equal digests.

    Args:
        value: Dataclass instance or plain value
        truncate: Number of hex characters to keep
        exclude: Field names skipped at every level
    """
    hasher = hashlib.sha256()
    for token in _tokens(value, exclude):
        hasher.update(token)
    return hasher.hexdigest()[:truncate]


__all__ = ["subtree_hash"]
