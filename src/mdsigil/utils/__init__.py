"""Utility modules for mdsigil.

Provides:
- text: edit distance, name suggestion and escaping helpers
- hashing: subtree_hash for asset file names
- logger: get_logger for logging
"""

from mdsigil.utils.hashing import subtree_hash
from mdsigil.utils.logger import get_logger
from mdsigil.utils.text import closest_names, escape_xml, levenshtein, shields_escape

__all__ = [
    "closest_names",
    "escape_xml",
    "get_logger",
    "levenshtein",
    "shields_escape",
    "subtree_hash",
]
