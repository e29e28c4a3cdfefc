"""Backend protocol and rendered output types.

A backend turns one visual primitive (Swatch, Divider, Tech, Status) into a
markdown fragment, plus any files the fragment refers to. Text-like
primitives never reach a backend; the Renderer writes them directly.

Example:
    from mdsigil.renderers.protocol import Backend

    def badge_for(backend: Backend, swatch: Swatch) -> str:
        return backend.render(swatch).text

"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from mdsigil.diagnostics import Diagnostic
    from mdsigil.location import SourceSpan
    from mdsigil.primitives import VisualPrimitive
    from mdsigil.targets import BackendKind


@dataclass(frozen=True, slots=True)
class Artifact:
    """A generated file.

    Attributes:
        path: POSIX path relative to the output document
        content: File bytes
    """

    path: str
    content: bytes

    def write(self, root: str | Path) -> bool:
        """Write under ``root``, skipping the write when the bytes match.

        Returns:
            True when the file was written
        """
        target = Path(root) / self.path
        if target.is_file() and target.read_bytes() == self.content:
            return False
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(self.content)
        return True


@dataclass(frozen=True, slots=True)
class Fragment:
    """Output of a backend for one primitive."""

    text: str
    artifacts: tuple[Artifact, ...] = ()


@dataclass(frozen=True, slots=True)
class Replacement:
    """Replace the source text at ``span`` with ``text``."""

    span: SourceSpan
    text: str


@dataclass(frozen=True, slots=True)
class RenderedOutput:
    """Result of rendering a document's primitives.

    Attributes:
        replacements: One per top-level tag, in document order
        artifacts: Generated files, de-duplicated by path
        fallbacks: Diagnostics for primitives downgraded to plain text
    """

    replacements: tuple[Replacement, ...]
    artifacts: tuple[Artifact, ...] = ()
    fallbacks: tuple[Diagnostic, ...] = field(default=())

    def apply(self, source: str) -> str:
        """Splice the replacements into ``source``.

        Spans must refer to ``source``; replacements may not overlap.
        """
        parts: list[str] = []
        pos = 0
        for replacement in sorted(self.replacements, key=lambda r: r.span.offset):
            parts.append(source[pos : replacement.span.offset])
            parts.append(replacement.text)
            pos = replacement.span.end_offset
        parts.append(source[pos:])
        return "".join(parts)

    @property
    def texts(self) -> tuple[str, ...]:
        return tuple(r.text for r in self.replacements)


class Backend(Protocol):
    """Protocol for output backends.

    Implementations must be deterministic: the same primitive always yields
    the same fragment, byte for byte.
    """

    @property
    def kind(self) -> BackendKind: ...

    def render(self, primitive: VisualPrimitive) -> Fragment:
        """Render one visual primitive.

        Args:
            primitive: Swatch, Divider, Tech or Status

        Returns:
            Markdown fragment and any files it refers to

        Raises:
            RenderError: The primitive carries data the backend cannot use
        """
        ...


__all__ = ["Artifact", "Backend", "Fragment", "RenderedOutput", "Replacement"]
