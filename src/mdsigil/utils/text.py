"""Text helpers for mdsigil.

Edit distance for "did you mean" suggestions, plus the escaping rules used by
the SVG and shields.io backends.

Example:
    >>> from mdsigil.utils.text import levenshtein, shields_escape
    >>> levenshtein("mathbold", "mathbodl")
    2
    >>> shields_escape("build-passing")
    'build--passing'
"""

from __future__ import annotations

from collections.abc import Iterable
from urllib.parse import quote


def levenshtein(a: str, b: str) -> int:
    """Classic Levenshtein distance (insert, delete, substitute all cost 1)."""
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)
    if len(a) < len(b):
        a, b = b, a

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, 1):
        current = [i]
        for j, cb in enumerate(b, 1):
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + (ca != cb),
                )
            )
        previous = current
    return previous[-1]


def closest_names(
    name: str,
    candidates: Iterable[str],
    *,
    limit: int = 3,
    max_distance: int | None = None,
) -> list[str]:
    """Return candidates nearest to ``name`` by edit distance.

    Ordering is by distance, ties broken lexically, so results are stable.

    Args:
        name: The unresolved name
        candidates: Names to rank
        limit: Maximum number of results
        max_distance: Reject candidates further than this. Defaults to
            roughly a third of the name's length, minimum 2.

    Returns:
        Up to ``limit`` candidate names
    """
    if limit <= 0:
        return []
    if max_distance is None:
        max_distance = max(2, len(name) // 3)
    scored = sorted(
        (distance, candidate)
        for candidate in set(candidates)
        if (distance := levenshtein(name, candidate)) <= max_distance
    )
    return [candidate for _, candidate in scored[:limit]]


def escape_xml(text: str) -> str:
    """Escape text for use in SVG content and attribute values."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#39;")
    )


def shields_escape(text: str) -> str:
    """Escape a label for a shields.io static badge path segment.

    shields.io treats ``-`` and ``_`` as separators, so literal ones are
    doubled. The result is then percent-encoded, so ``#``, ``?``, ``%`` and
    ``/`` stay inside the segment.

        >>> shields_escape("C# 50%")
        'C%23%2050%25'
    """
    return quote(text.replace("-", "--").replace("_", "__"), safe="")
