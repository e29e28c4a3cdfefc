"""Primitive renderer.

Walks each resolved primitive tree and produces the replacement text for its
tag. Text-like primitives are written directly; visual primitives go to the
backend chosen for the target.

Backend choice, per render:

1. The explicit backend override, if any, else the target's preferred one.
2. If the target does not accept that backend, every visual primitive is
   downgraded to plain text and a ``render-fallback`` diagnostic records it.

Thread Safety:
Renderer holds only configuration. Each render() call keeps its own state,
so one Renderer may serve concurrent documents.

"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, assert_never

from mdsigil.definitions import PostProcess
from mdsigil.diagnostics import Diagnostic, DiagnosticCode, Severity
from mdsigil.location import SourceSpan
from mdsigil.primitives import (
    Badge,
    Divider,
    Frame,
    Glyph,
    Group,
    Primitive,
    Separator,
    Status,
    StyledText,
    Swatch,
    Tech,
    Text,
    VisualPrimitive,
)
from mdsigil.renderers.plaintext import PlainTextBackend
from mdsigil.renderers.protocol import Artifact, Backend, RenderedOutput, Replacement
from mdsigil.renderers.shields import ShieldsBackend
from mdsigil.renderers.svg import SvgBackend
from mdsigil.resolver import Resolution
from mdsigil.stringbuilder import StringBuilder
from mdsigil.targets import BackendKind, Target
from mdsigil.utils.logger import get_logger

if TYPE_CHECKING:
    from mdsigil.config import ExpandConfig
    from mdsigil.resolver import ResolvedItem

logger = get_logger(__name__)


def make_backend(
    kind: BackendKind,
    *,
    asset_dir: str = "assets/mdsigil",
    inline_svg: bool = False,
) -> Backend:
    """Construct the backend for ``kind``."""
    match kind:
        case BackendKind.SHIELDS:
            return ShieldsBackend()
        case BackendKind.SVG:
            return SvgBackend(asset_dir, inline=inline_svg)
        case BackendKind.PLAINTEXT:
            return PlainTextBackend()
        case _:
            assert_never(kind)


def blockquote(text: str) -> str:
    """Prefix every line with ``> ``."""
    return "\n".join(f"> {line}" if line else ">" for line in text.split("\n"))


class Renderer:
    """Render resolved primitives for a target.

    Usage:
        renderer = Renderer(backend="svg")
        output = renderer.render(resolution, get_target("local"))
        text = output.apply(source)
    """

    __slots__ = ("_backend", "_asset_dir", "_inline_svg")

    def __init__(
        self,
        *,
        backend: BackendKind | str | None = None,
        asset_dir: str = "assets/mdsigil",
        inline_svg: bool = False,
    ) -> None:
        """Initialize renderer.

        Args:
            backend: Backend override; None uses the target's preference
            asset_dir: Directory for SVG artifacts
            inline_svg: Embed SVG as data URIs instead of artifacts
        """
        if isinstance(backend, str):
            backend = BackendKind.parse(backend)
        self._backend = backend
        self._asset_dir = asset_dir
        self._inline_svg = inline_svg

    @classmethod
    def from_config(cls, config: ExpandConfig) -> Renderer:
        return cls(
            backend=config.backend,
            asset_dir=config.asset_dir,
            inline_svg=config.inline_svg,
        )

    def backend_for(self, target: Target) -> BackendKind:
        """Backend actually used on ``target`` (after any downgrade)."""
        kind = self._backend or target.preferred_backend
        if target.accepts(kind):
            return kind
        return BackendKind.PLAINTEXT

    def render(self, items: Resolution | Iterable[ResolvedItem], target: Target) -> RenderedOutput:
        """Render every item for ``target``.

        Args:
            items: A Resolution, or (span, primitive) items
            target: Deployment target

        Returns:
            RenderedOutput with one replacement per item

        Raises:
            RenderError: A backend rejected a primitive's data
        """
        requested = self._backend or target.preferred_backend
        kind = self.backend_for(target)
        if kind is not requested:
            logger.debug(
                "Target %s does not display %s output; using plain text",
                target.name,
                requested.value,
            )
        backend = make_backend(kind, asset_dir=self._asset_dir, inline_svg=self._inline_svg)
        render_pass = _RenderPass(backend, target, requested if kind is not requested else None)

        entries = items.items if isinstance(items, Resolution) else items
        replacements = tuple(
            Replacement(item.span, render_pass.render(item.primitive, item.span)) for item in entries
        )
        return RenderedOutput(
            replacements=replacements,
            artifacts=tuple(render_pass.artifacts.values()),
            fallbacks=tuple(render_pass.fallbacks),
        )

    def render_primitive(self, primitive: Primitive, target: Target) -> str:
        """Render a single primitive tree to text (artifacts are discarded)."""
        kind = self.backend_for(target)
        backend = make_backend(kind, asset_dir=self._asset_dir, inline_svg=self._inline_svg)
        return _RenderPass(backend, target, None).render(primitive, SourceSpan.unknown())


class _RenderPass:
    """Per-call rendering state."""

    __slots__ = ("_backend", "_target", "_downgraded_from", "artifacts", "fallbacks")

    def __init__(
        self, backend: Backend, target: Target, downgraded_from: BackendKind | None
    ) -> None:
        self._backend = backend
        self._target = target
        self._downgraded_from = downgraded_from
        self.artifacts: dict[str, Artifact] = {}
        self.fallbacks: list[Diagnostic] = []

    def render(self, primitive: Primitive, span: SourceSpan) -> str:
        sb = StringBuilder()
        self._render(primitive, span, sb)
        return sb.build()

    def _render(self, primitive: Primitive, span: SourceSpan, sb: StringBuilder) -> None:
        match primitive:
            case Text(text=text):
                sb.append(text)
            case StyledText():
                sb.append(primitive.joined if self._target.unicode_styling else primitive.text)
            case Separator(char=char):
                sb.append(char)
            case Glyph(char=char, repeat=repeat):
                sb.append(char * repeat)
            case Badge(glyph=glyph, color=color) if color and self._target.supports_html:
                sb.append(f'<span style="color:#{color}">{glyph}</span>')
            case Badge(glyph=glyph):
                sb.append(glyph)
            case Frame(prefix=prefix, suffix=suffix, children=children):
                self._render(prefix, span, sb)
                for child in children:
                    self._render(child, span, sb)
                self._render(suffix, span, sb)
            case Group(children=children, post_process=PostProcess.BLOCKQUOTE):
                inner = StringBuilder()
                for child in children:
                    self._render(child, span, inner)
                sb.append(blockquote(inner.build()))
            case Group(children=children):
                for child in children:
                    self._render(child, span, sb)
            case Swatch() | Divider() | Tech() | Status():
                sb.append(self._visual(primitive, span))
            case _:
                raise TypeError(f"Unknown primitive type: {type(primitive).__name__}")

    def _visual(self, primitive: VisualPrimitive, span: SourceSpan) -> str:
        if self._downgraded_from is not None:
            self.fallbacks.append(
                Diagnostic(
                    severity=Severity.INFO,
                    code=DiagnosticCode.RENDER_FALLBACK,
                    message=(
                        f"{type(primitive).__name__} rendered as plain text: "
                        f"{self._target.name} does not display "
                        f"{self._downgraded_from.value} output"
                    ),
                    span=span,
                )
            )
        fragment = self._backend.render(primitive)
        for artifact in fragment.artifacts:
            self.artifacts.setdefault(artifact.path, artifact)
        return fragment.text


__all__ = ["Renderer", "blockquote", "make_backend"]
