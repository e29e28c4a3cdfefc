"""StringBuilder for rendered output.

Collects fragments in a list and joins once, instead of concatenating
strings fragment by fragment.

Thread Safety:
StringBuilder instances are local to each render call.
No shared mutable state.

"""

from __future__ import annotations


class StringBuilder:
    """Fragment accumulator.

    Usage:
        >>> sb = StringBuilder()
        >>> sb.append("<svg>").append("</svg>").build()
        '<svg></svg>'
    """

    __slots__ = ("_parts",)

    def __init__(self) -> None:
        self._parts: list[str] = []

    def append(self, s: str) -> StringBuilder:
        """Append a fragment (empty strings are skipped)."""
        if s:
            self._parts.append(s)
        return self

    def build(self) -> str:
        return "".join(self._parts)
