"""Template tag parser.

Scans markdown for ``{{...}}`` tags and builds a TemplateDocument:

- ``{{name:params/}}`` is a self-closing tag
- ``{{name:params}}...{{/name}}`` is a block tag with a body
- anything else between braces (``{{ x }}``, ``{{}}``) is literal text

Parameters are ``:``-separated. Leading values are positional; ``key=value``
pairs follow. A value runs until the next ``:key=`` or the end of the tag, so
``separator=:`` and ``separator=::`` keep their colons. A tag ends at the
last ``}`` of a run of closing braces (``{{x:sep=}}}`` has value ``}``); the
sequence ``/}}`` always closes a self-closing tag. Tags never span lines.

Structural errors (a closing tag with no opener, a closing tag for the wrong
opener, an opener that is never closed) raise ParseError. When a registry is
supplied, an unclosed opener whose name the registry does not know is kept as
a bare tag instead, so the resolver can pass it through as literal text.

Fenced code blocks and inline code spans are skipped when
``ExpandConfig.preserve_code`` is set (the default).

Thread Safety:
Parser instances are single-use and hold only per-parse state. The module
holds no mutable globals, so concurrent parses in different threads are safe.

"""

from __future__ import annotations

import re
from bisect import bisect_right
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from mdsigil.config import get_expand_config
from mdsigil.definitions import NAMESPACES
from mdsigil.errors import ParseError
from mdsigil.location import SourceSpan
from mdsigil.nodes import Param, Tag, TemplateDocument, TemplateNode, Text

if TYPE_CHECKING:
    from mdsigil.registry import Registry

_NAME = re.compile(r"[A-Za-z0-9][A-Za-z0-9_.\-]*")
_NAMED_BOUNDARY = re.compile(r":(?=[A-Za-z_][A-Za-z0-9_\-]*=)")
_FENCE = re.compile(r" {0,3}(`{3,}|~{3,})")
_BACKTICKS = re.compile(r"`+")


class _TagForm(Enum):
    OPEN = "open"
    CLOSE = "close"
    SELF_CLOSING = "self_closing"


@dataclass(frozen=True, slots=True)
class _Scanned:
    """One tag header as found in the source."""

    form: _TagForm
    name: str
    params: tuple[Param, ...]
    start: int
    end: int


@dataclass(slots=True)
class _Open:
    """An opener waiting for its closing tag."""

    header: _Scanned
    children: list[TemplateNode] = field(default_factory=list)


def split_params(header: str) -> tuple[Param, ...]:
    """Split a ``:``-prefixed parameter header into Params.

    Example:
        >>> split_params(":swatch:accent:style=flat")
        (Param(name=None, value='swatch'), Param(name=None, value='accent'), Param(name='style', value='flat'))
        >>> split_params(":separator=::")
        (Param(name='separator', value='::'),)
    """
    if not header:
        return ()
    boundaries = [m.start() for m in _NAMED_BOUNDARY.finditer(header)]
    first_named = boundaries[0] if boundaries else len(header)

    params: list[Param] = []
    positional = header[:first_named]
    if positional:
        params.extend(Param(None, value) for value in positional[1:].split(":"))

    for index, start in enumerate(boundaries):
        stop = boundaries[index + 1] if index + 1 < len(boundaries) else len(header)
        name, _, value = header[start + 1 : stop].partition("=")
        params.append(Param(name, value))
    return tuple(params)


def code_ranges(source: str) -> list[tuple[int, int]]:
    """Half-open ranges covered by fenced code blocks and inline code spans.

    An unterminated fence runs to the end of the document; an unmatched
    backtick run is ordinary text.
    """
    fences: list[tuple[int, int]] = []
    fence: tuple[str, int, int] | None = None
    offset = 0
    for line in source.splitlines(keepends=True):
        m = _FENCE.match(line)
        if fence is None:
            if m:
                marker = m.group(1)
                fence = (marker[0], len(marker), offset)
        elif m:
            marker = m.group(1)
            char, length, start = fence
            if marker[0] == char and len(marker) >= length and not line[m.end() :].strip():
                fences.append((start, offset + len(line)))
                fence = None
        offset += len(line)
    if fence is not None:
        fences.append((fence[2], len(source)))

    fence_starts = [start for start, _ in fences]

    def in_fence(pos: int) -> bool:
        idx = bisect_right(fence_starts, pos) - 1
        return idx >= 0 and pos < fences[idx][1]

    runs = [(m.start(), m.end()) for m in _BACKTICKS.finditer(source) if not in_fence(m.start())]
    spans: list[tuple[int, int]] = []
    i = 0
    while i < len(runs):
        start, end = runs[i]
        width = end - start
        for j in range(i + 1, len(runs)):
            if runs[j][1] - runs[j][0] == width:
                spans.append((start, runs[j][1]))
                i = j + 1
                break
        else:
            i += 1

    return sorted(fences + spans)


class Parser:
    """Template parser producing a TemplateDocument.

    Reads ``preserve_code`` from the active ExpandConfig.

    Usage:
        >>> parser = Parser("{{mathbold}}Hi{{/mathbold}}")
        >>> doc = parser.parse()
        >>> doc.children[0].name
        'mathbold'
    """

    __slots__ = (
        "_source",
        "_source_file",
        "_registry",
        "_line_starts",
        "_protected",
        "_protected_starts",
        "_root",
        "_stack",
    )

    def __init__(
        self,
        source: str,
        source_file: str | None = None,
        *,
        registry: Registry | None = None,
    ) -> None:
        """Initialize parser with source text.

        Args:
            source: Template source
            source_file: Optional path for error messages
            registry: When given, unclosed tags with unknown names are kept
                as bare tags instead of raising ParseError
        """
        self._source = source
        self._source_file = source_file
        self._registry = registry

        self._line_starts = [0]
        self._line_starts.extend(m.end() for m in re.finditer("\n", source))

        self._protected = code_ranges(source) if get_expand_config().preserve_code else []
        self._protected_starts = [start for start, _ in self._protected]

        self._root: list[TemplateNode] = []
        self._stack: list[_Open] = []

    def parse(self) -> TemplateDocument:
        """Parse the source.

        Returns:
            TemplateDocument with Text and Tag children

        Raises:
            ParseError: Unmatched, mismatched, or unclosed tags
        """
        source = self._source
        pos = 0
        text_start = 0
        while (start := source.find("{{", pos)) >= 0:
            protected_end = self._protected_end(start)
            if protected_end is not None:
                pos = protected_end
                continue

            scanned = self._scan(start)
            if scanned is None:
                pos = start + 1
                continue

            self._add_text(text_start, start)
            match scanned.form:
                case _TagForm.OPEN:
                    self._stack.append(_Open(scanned))
                case _TagForm.SELF_CLOSING:
                    self._append(self._tag(scanned, scanned.end, self_closing=True))
                case _TagForm.CLOSE:
                    self._close(scanned)
            pos = text_start = scanned.end

        self._add_text(text_start, len(source))
        self._finish()
        return TemplateDocument(tuple(self._root), source, self._source_file)

    # -------------------------------------------------------------------------
    # Scanning
    # -------------------------------------------------------------------------

    def _scan(self, start: int) -> _Scanned | None:
        """Scan a tag header at ``start`` (which points at ``{{``)."""
        source = self._source
        pos = start + 2
        closing = source.startswith("/", pos)
        if closing:
            pos += 1

        m = _NAME.match(source, pos)
        if m is None:
            return None
        name = m.group()

        end = self._find_end(m.end())
        if end is None:
            return None
        header = source[m.end() : end]

        if closing:
            if header:
                return None
            return _Scanned(_TagForm.CLOSE, name, (), start, end + 2)

        form = _TagForm.OPEN
        if header.endswith("/"):
            form = _TagForm.SELF_CLOSING
            header = header[:-1]
        if header and not header.startswith(":"):
            return None
        return _Scanned(form, name, split_params(header), start, end + 2)

    def _find_end(self, pos: int) -> int | None:
        """Index of the ``}}`` ending the tag, or None if it never ends."""
        source = self._source
        line_end = source.find("\n", pos)
        if line_end < 0:
            line_end = len(source)
        j = pos
        while (j := source.find("}}", j, line_end)) >= 0:
            if source.startswith("}", j + 2):
                j += 1
                continue
            return j
        return None

    def _protected_end(self, pos: int) -> int | None:
        idx = bisect_right(self._protected_starts, pos) - 1
        if idx >= 0 and pos < self._protected[idx][1]:
            return self._protected[idx][1]
        return None

    # -------------------------------------------------------------------------
    # Tree building
    # -------------------------------------------------------------------------

    def _append(self, node: TemplateNode) -> None:
        (self._stack[-1].children if self._stack else self._root).append(node)

    def _add_text(self, start: int, end: int) -> None:
        if end > start:
            self._append(Text(self._span(start, end), self._source[start:end]))

    def _close(self, closer: _Scanned) -> None:
        stack = self._stack
        while stack and stack[-1].header.name != closer.name and self._can_demote(stack[-1]):
            self._demote()

        if not stack:
            msg = f"Closing tag '{{{{/{closer.name}}}}}' has no matching opening tag"
            raise ParseError(msg, self._span(closer.start, closer.end))

        opener = stack[-1]
        if opener.header.name != closer.name:
            msg = (
                f"Mismatched closing tag '{{{{/{closer.name}}}}}': "
                f"expected '{{{{/{opener.header.name}}}}}' "
                f"(opened at {self._span(opener.header.start, opener.header.end)})"
            )
            raise ParseError(msg, self._span(closer.start, closer.end))

        stack.pop()
        self._append(
            self._tag(
                opener.header,
                closer.end,
                body=tuple(opener.children),
                inner=self._source[opener.header.end : closer.start],
            )
        )

    def _finish(self) -> None:
        while self._stack:
            opener = self._stack[-1]
            if self._can_demote(opener):
                self._demote()
                continue
            header = opener.header
            msg = f"Unclosed tag '{{{{{header.name}}}}}'"
            definition = self._registry.resolve(header.name) if self._registry else None
            if definition is not None and definition.self_closing:
                msg += f"; write '{{{{{header.name}/}}}}' for a self-closing tag"
            else:
                msg += f"; expected '{{{{/{header.name}}}}}'"
            raise ParseError(msg, self._span(header.start, header.end))

    def _can_demote(self, opener: _Open) -> bool:
        """Unknown names degrade to bare tags, but only with a registry."""
        if self._registry is None:
            return False
        header = opener.header
        kind = NAMESPACES.get(header.name)
        if kind is not None:
            first = header.params[0] if header.params else None
            if first is None or first.name is not None:
                return True
            return self._registry.lookup(kind, first.value) is None
        return self._registry.resolve(header.name) is None

    def _demote(self) -> None:
        opener = self._stack.pop()
        self._append(self._tag(opener.header, opener.header.end))
        for child in opener.children:
            self._append(child)

    def _tag(
        self,
        header: _Scanned,
        end: int,
        *,
        body: tuple[TemplateNode, ...] | None = None,
        inner: str | None = None,
        self_closing: bool = False,
    ) -> Tag:
        return Tag(
            span=self._span(header.start, end),
            name=header.name,
            params=header.params,
            body=body,
            raw=self._source[header.start : end],
            inner=inner,
            self_closing=self_closing,
            standalone=self._standalone(header.start, end),
        )

    # -------------------------------------------------------------------------
    # Positions
    # -------------------------------------------------------------------------

    def _standalone(self, start: int, end: int) -> bool:
        source = self._source
        line_start = source.rfind("\n", 0, start) + 1
        line_end = source.find("\n", end)
        if line_end < 0:
            line_end = len(source)
        return not source[line_start:start].strip() and not source[end:line_end].strip()

    def _position(self, offset: int) -> tuple[int, int]:
        line = bisect_right(self._line_starts, offset)
        return line, offset - self._line_starts[line - 1] + 1

    def _span(self, start: int, end: int) -> SourceSpan:
        lineno, col = self._position(start)
        end_lineno, end_col = self._position(end)
        return SourceSpan(
            lineno=lineno,
            col_offset=col,
            offset=start,
            end_offset=end,
            end_lineno=end_lineno,
            end_col_offset=end_col,
            source_file=self._source_file,
        )


def parse(
    source: str,
    *,
    registry: Registry | None = None,
    source_file: str | None = None,
) -> TemplateDocument:
    """Parse template source into a TemplateDocument.

    Args:
        source: Template source
        registry: Optional registry; enables literal fallback for unknown
            unclosed tags
        source_file: Optional path for error messages

    Returns:
        Parsed TemplateDocument

    Raises:
        ParseError: The tag structure is malformed
    """
    return Parser(source, source_file, registry=registry).parse()


__all__ = ["Parser", "code_ranges", "parse", "split_params"]
