"""
mdsigil: Markdown tag expansion

Expands ``{{...}}`` tags in markdown into styled Unicode text, decorative
frames, enclosed badges, and image components rendered as shields.io
references, local SVG files, or plain text, depending on where the document
will be published.

Quick Start:
    >>> from mdsigil import process
    >>> process("{{mathbold}}Hello{{/mathbold}}").text
    '𝐇𝐞𝐥𝐥𝐨'

    >>> # Or keep a configured Expander around
    >>> from mdsigil import Expander
    >>> expander = Expander(target="local", asset_dir="docs/assets")
    >>> result = expander.expand("{{ui:swatch:accent/}}")
    >>> result.artifacts[0].path
    'docs/assets/swatch_....svg'

Step by step:
    >>> from mdsigil import load, parse, resolve_document, render
    >>> registry = load()
    >>> doc = parse("{{ui:status:success/}} build", registry=registry)
    >>> resolution = resolve_document(doc, registry)
    >>> render(resolution, "pypi").apply(doc.source)
    '[OK] build'

Installation:
    pip install mdsigil              # zero runtime dependencies
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from mdsigil.config import (
    ExpandConfig,
    expand_config_context,
    get_expand_config,
    reset_expand_config,
    set_expand_config,
)
from mdsigil.context import PROMOTIONS, EvalContext, can_promote, check_context
from mdsigil.definitions import DefinitionKind, DefinitionRef, RenderableDefinition
from mdsigil.diagnostics import Diagnostic, DiagnosticCode, Severity
from mdsigil.errors import (
    ContextError,
    DefinitionError,
    MdsigilError,
    ParseError,
    RenderError,
    ValidationError,
)
from mdsigil.location import SourceSpan
from mdsigil.nodes import Param, Tag, TemplateDocument, Text
from mdsigil.parser import Parser, parse
from mdsigil.registry import Registry, RegistryBuilder, load, load_json
from mdsigil.renderers import (
    Artifact,
    PlainTextBackend,
    RenderedOutput,
    Renderer,
    ShieldsBackend,
    SvgBackend,
)
from mdsigil.resolver import Resolution, Resolver, resolve, resolve_document
from mdsigil.targets import (
    BackendKind,
    Target,
    TargetKind,
    available_targets,
    detect_target_from_path,
    get_target,
)

__version__ = "0.1.0"


@dataclass(frozen=True, slots=True)
class ExpandResult:
    """Expanded document.

    Attributes:
        text: The markdown with every tag replaced
        artifacts: Files the text refers to (SVG backend only)
        diagnostics: Non-fatal problems, in document order
        target: Name of the target the text was rendered for
    """

    text: str
    artifacts: tuple[Artifact, ...] = ()
    diagnostics: tuple[Diagnostic, ...] = ()
    target: str = "github"

    @property
    def has_errors(self) -> bool:
        return any(d.severity is Severity.ERROR for d in self.diagnostics)

    @property
    def has_diagnostics(self) -> bool:
        return bool(self.diagnostics)


def render(
    resolution: Resolution,
    target: str | Target = "github",
    *,
    backend: str | BackendKind | None = None,
    asset_dir: str = "assets/mdsigil",
    inline_svg: bool = False,
) -> RenderedOutput:
    """Render a resolved document for a target.

    Args:
        resolution: Output of ``resolve_document``
        target: Target name or Target
        backend: Backend override (downgraded if the target rejects it)
        asset_dir: Directory for SVG artifacts
        inline_svg: Embed SVG as data URIs

    Returns:
        RenderedOutput; call ``apply(source)`` for the expanded text
    """
    if isinstance(target, str):
        target = get_target(target)
    renderer = Renderer(backend=backend, asset_dir=asset_dir, inline_svg=inline_svg)
    return renderer.render(resolution, target)


class Expander:
    """High-level processor: parse, resolve and render in one call.

    Usage:
        >>> expander = Expander(target="github")
        >>> expander("{{ui:swatch:F41C80/}}")
        '![](https://img.shields.io/badge/-%20-F41C80?style=flat-square)'

        >>> # Share one registry across expanders
        >>> registry = load()
        >>> pypi = Expander(registry, target="pypi")
        >>> github = Expander(registry, target="github")

    Thread Safety:
        The registry is immutable and the config is set through a ContextVar
        for the duration of each call. Safe to use one Expander from several
        threads.

    """

    __slots__ = ("_config", "_registry", "_renderer", "_target")

    def __init__(
        self,
        registry: Registry | None = None,
        *,
        target: str = "github",
        backend: str | None = None,
        asset_dir: str = "assets/mdsigil",
        inline_svg: bool = False,
        preserve_code: bool = True,
        shield_style: str | None = None,
        output_path: str | None = None,
    ) -> None:
        """Initialize expander.

        Args:
            registry: Definitions to expand against (built-ins if None)
            target: Target name, or "auto" to detect from ``output_path``
            backend: Backend override ("shields", "svg", "plaintext")
            asset_dir: Directory for generated SVG files
            inline_svg: Embed SVG as data URIs instead of files
            preserve_code: Leave code blocks and code spans untouched
            shield_style: Default shield style for components
            output_path: Where the output goes (for ``target="auto"``)

        Raises:
            ValueError: Unknown target or backend name
        """
        self._config = ExpandConfig(
            target=target,
            backend=backend,
            asset_dir=asset_dir,
            inline_svg=inline_svg,
            preserve_code=preserve_code,
            shield_style=shield_style,
            output_path=output_path,
        )
        self._registry = registry if registry is not None else load()
        self._target = get_target(target, output_path=output_path)
        self._renderer = Renderer.from_config(self._config)

    @classmethod
    def from_config(cls, config: ExpandConfig, registry: Registry | None = None) -> Expander:
        return cls(
            registry,
            target=config.target,
            backend=config.backend,
            asset_dir=config.asset_dir,
            inline_svg=config.inline_svg,
            preserve_code=config.preserve_code,
            shield_style=config.shield_style,
            output_path=config.output_path,
        )

    @property
    def config(self) -> ExpandConfig:
        return self._config

    @property
    def registry(self) -> Registry:
        return self._registry

    @property
    def target(self) -> Target:
        return self._target

    def __call__(self, source: str) -> str:
        """Expand and return only the text."""
        return self.expand(source).text

    def expand(self, source: str, *, source_file: str | None = None) -> ExpandResult:
        """Expand every tag in ``source``.

        Args:
            source: Markdown with ``{{...}}`` tags
            source_file: Optional path for diagnostics

        Returns:
            ExpandResult with text, artifacts and diagnostics

        Raises:
            ParseError: The tag structure is malformed
            RenderError: A backend rejected a primitive
        """
        with expand_config_context(self._config):
            document = parse(source, registry=self._registry, source_file=source_file)
            resolution = resolve_document(document, self._registry)
            output = self._renderer.render(resolution, self._target)
        return ExpandResult(
            text=self._target.post_process(output.apply(source)),
            artifacts=output.artifacts,
            diagnostics=resolution.diagnostics + output.fallbacks,
            target=self._target.name,
        )

    def expand_many(self, sources: Iterable[str]) -> list[ExpandResult]:
        """Expand several documents with the same settings."""
        return [self.expand(source) for source in sources]


def process(
    source: str,
    registry: Registry | None = None,
    *,
    target: str = "github",
    source_file: str | None = None,
    config: ExpandConfig | None = None,
) -> ExpandResult:
    """Expand a document in one call.

    Args:
        source: Markdown with ``{{...}}`` tags
        registry: Definitions (built-ins if None)
        target: Target name; ignored when ``config`` is given
        source_file: Optional path for diagnostics
        config: Full configuration

    Returns:
        ExpandResult
    """
    if config is None:
        config = ExpandConfig(target=target)
    return Expander.from_config(config, registry).expand(source, source_file=source_file)


__all__ = [
    "PROMOTIONS",
    "Artifact",
    "BackendKind",
    "ContextError",
    "DefinitionError",
    "DefinitionKind",
    "DefinitionRef",
    "Diagnostic",
    "DiagnosticCode",
    "EvalContext",
    "ExpandConfig",
    "ExpandResult",
    "Expander",
    "MdsigilError",
    "Param",
    "ParseError",
    "Parser",
    "PlainTextBackend",
    "Registry",
    "RegistryBuilder",
    "RenderError",
    "RenderableDefinition",
    "RenderedOutput",
    "Renderer",
    "Resolution",
    "Resolver",
    "Severity",
    "ShieldsBackend",
    "SourceSpan",
    "SvgBackend",
    "Tag",
    "Target",
    "TargetKind",
    "TemplateDocument",
    "Text",
    "ValidationError",
    "__version__",
    "available_targets",
    "can_promote",
    "check_context",
    "detect_target_from_path",
    "expand_config_context",
    "get_expand_config",
    "get_target",
    "load",
    "load_json",
    "parse",
    "process",
    "render",
    "reset_expand_config",
    "resolve",
    "resolve_document",
    "set_expand_config",
]
