"""Renderable definition registry.

Provides:
- Registry: immutable name -> definition lookup, palette, shield styles
- RegistryBuilder: mutable construction with invariant checks
- load / load_json: build a registry from definition records

There is no module-level registry instance; callers load one and pass it
explicitly to the parser, resolver and renderer.
"""

from mdsigil.registry.core import FALLBACK_SHIELD_STYLE, Registry, RegistryBuilder
from mdsigil.registry.loader import load, load_json

__all__ = [
    "FALLBACK_SHIELD_STYLE",
    "Registry",
    "RegistryBuilder",
    "load",
    "load_json",
]
