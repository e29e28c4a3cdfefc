"""Template AST nodes.

The parser produces a flat TemplateDocument of Text and Tag nodes. Block tags
carry their body as a nested tuple of nodes.

Node Hierarchy:
Node (base)
├── Text
└── Tag

Thread Safety:
All nodes are frozen (immutable). A parsed document can be shared freely and
resolved any number of times.

"""

from __future__ import annotations

from typing import TypeAlias

from collections.abc import Iterator
from dataclasses import dataclass

from mdsigil.location import SourceSpan


@dataclass(frozen=True, slots=True)
class Param:
    """One ``:``-separated tag parameter.

    A ``name`` of None marks a positional value.
    """

    name: str | None
    value: str

    def __str__(self) -> str:
        return self.value if self.name is None else f"{self.name}={self.value}"


@dataclass(frozen=True, slots=True)
class Node:
    """Base class for template nodes; every node knows its source span."""

    span: SourceSpan


@dataclass(frozen=True, slots=True)
class Text(Node):
    """Literal text between tags."""

    content: str


@dataclass(frozen=True, slots=True)
class Tag(Node):
    """A ``{{name:params}}`` tag.

    Attributes:
        name: Tag name as written (an id, an alias, or a namespace)
        params: Parameters in source order
        body: Child nodes for block tags; None for self-closing or bare tags
        raw: Exact source text of the tag, closing tag included
        inner: Raw source text of the body (None when there is no body)
        self_closing: Written as ``{{name/}}``
        standalone: The tag occupies its line(s) alone
    """

    name: str
    params: tuple[Param, ...] = ()
    body: tuple[TemplateNode, ...] | None = None
    raw: str = ""
    inner: str | None = None
    self_closing: bool = False
    standalone: bool = False

    @property
    def positional(self) -> tuple[str, ...]:
        return tuple(p.value for p in self.params if p.name is None)

    @property
    def named(self) -> dict[str, str]:
        """Named parameters; a repeated name keeps its last value."""
        return {p.name: p.value for p in self.params if p.name is not None}

    @property
    def is_bare(self) -> bool:
        """An opener that never found its closing tag."""
        return self.body is None and not self.self_closing

    def body_text(self) -> str:
        """Concatenated text of the body's Text nodes."""
        if not self.body:
            return ""
        return "".join(node.content for node in self.body if isinstance(node, Text))


TemplateNode: TypeAlias = Text | Tag


@dataclass(frozen=True, slots=True)
class TemplateDocument:
    """Root of a parsed template.

    Attributes:
        children: Top-level nodes in source order
        source: The full template source
        source_file: Path the source came from (optional)
    """

    children: tuple[TemplateNode, ...]
    source: str = ""
    source_file: str | None = None

    def tags(self) -> tuple[Tag, ...]:
        return tuple(node for node in self.children if isinstance(node, Tag))

    def __iter__(self) -> Iterator[TemplateNode]:
        return iter(self.children)

    def __len__(self) -> int:
        return len(self.children)


__all__ = ["Node", "Param", "Tag", "TemplateDocument", "TemplateNode", "Text"]
