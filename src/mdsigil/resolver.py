"""Resolve template nodes into render primitives.

The resolver applies, for every tag:

1. Name lookup. ``namespace:name`` tags look in one kind; other names use
   the registry's resolution order. Unknown names become literal text plus
   one ``unknown-tag`` diagnostic.
2. Context check against the promotion table (ContextError).
3. Shape and parameter validation against the kind schema (ValidationError).
4. Kind-specific construction of the primitive. Frame bodies resolve in
   BLOCK context, frame chrome in FRAME_CHROME, component templates in the
   component's body context.

``resolve_document`` resolves every top-level tag, turning per-tag
ValidationError/ContextError into diagnostics so one bad tag never sinks the
document. The same holds for tags inside frame bodies and template
expansions: a failing tag keeps its source text and its siblings still
resolve. Tags standing alone on their line resolve in BLOCK context, all
others in INLINE.

Thread Safety:
A Resolver holds per-pass state (diagnostics, expansion depth). Create one
per document. The Registry it reads is immutable and shared.

"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from mdsigil.config import get_expand_config
from mdsigil.context import EvalContext, check_context
from mdsigil.definitions import (
    NAMESPACES,
    BadgeParams,
    ComponentParams,
    ComponentType,
    DefinitionRef,
    FrameParams,
    GlyphParams,
    PostProcess,
    RenderableDefinition,
    SnippetParams,
    StyleParams,
)
from mdsigil.diagnostics import Diagnostic
from mdsigil.errors import ContextError, ParseError, ValidationError
from mdsigil.nodes import Tag, TemplateDocument, TemplateNode, Text
from mdsigil.params import SeparatorValue, bind_params
from mdsigil.parser import parse
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
)
from mdsigil.primitives import Text as TextPrimitive
from mdsigil.utils.logger import get_logger

if TYPE_CHECKING:
    from mdsigil.location import SourceSpan
    from mdsigil.registry import Registry

logger = get_logger(__name__)

MAX_EXPANSION_DEPTH = 8

_PLACEHOLDER = re.compile(r"\$(\d+|[A-Za-z_][A-Za-z0-9_]*)")

# Used when the palette has no entry named after the status level.
_STATUS_COLORS = {
    "success": "22C55E",
    "warning": "EAB308",
    "error": "EF4444",
    "info": "3B82F6",
}


@dataclass(frozen=True, slots=True)
class ResolvedItem:
    """A top-level tag's span and the primitive that replaces it."""

    span: SourceSpan
    primitive: Primitive


@dataclass(frozen=True, slots=True)
class Resolution:
    """Result of resolving a whole document.

    Attributes:
        items: One entry per top-level tag, in document order
        diagnostics: Problems found, in the order they were met
        source: The document source the spans refer to
    """

    items: tuple[ResolvedItem, ...]
    diagnostics: tuple[Diagnostic, ...]
    source: str = ""

    @property
    def primitives(self) -> tuple[Primitive, ...]:
        return tuple(item.primitive for item in self.items)


class Resolver:
    """Resolve nodes against a registry.

    Usage:
        >>> registry = load()
        >>> resolver = Resolver(registry)
        >>> tag = parse("{{mathbold}}Hi{{/mathbold}}").children[0]
        >>> resolver.resolve(tag, EvalContext.INLINE).rendered
        '𝐇𝐢'
    """

    __slots__ = ("_registry", "_diagnostics", "_depth", "_anchor")

    def __init__(self, registry: Registry) -> None:
        self._registry = registry
        self._diagnostics: list[Diagnostic] = []
        self._depth = 0
        self._anchor: SourceSpan | None = None

    @property
    def diagnostics(self) -> tuple[Diagnostic, ...]:
        return tuple(self._diagnostics)

    def report(self, diagnostic: Diagnostic) -> None:
        self._diagnostics.append(diagnostic)

    def resolve(self, node: TemplateNode, context: EvalContext) -> Primitive:
        """Resolve one node in ``context``.

        Raises:
            ValidationError: Bad parameters or body
            ContextError: The definition is not allowed in ``context``
        """
        match node:
            case Text(content=content):
                return TextPrimitive(None, content)
            case Tag():
                return self._resolve_tag(node, context)

    def resolve_or_keep(self, node: TemplateNode, context: EvalContext) -> Primitive:
        """Resolve ``node``, keeping its source text if the tag is invalid.

        ValidationError and ContextError are recorded as diagnostics instead
        of propagating.
        """
        try:
            return self.resolve(node, context)
        except (ValidationError, ContextError) as exc:
            span = self._anchor or node.span
            self.report(Diagnostic.from_error(exc, span))
            logger.debug("Tag at %s left as literal text: %s", span, exc)
            return TextPrimitive(None, node.raw if isinstance(node, Tag) else node.content)

    def _resolve_each(
        self, nodes: Iterable[TemplateNode], context: EvalContext
    ) -> tuple[Primitive, ...]:
        return tuple(self.resolve_or_keep(node, context) for node in nodes)

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def lookup(self, tag: Tag) -> tuple[RenderableDefinition | None, int]:
        """Find the definition a tag names.

        Returns:
            ``(definition, skip)`` where ``skip`` is the number of positional
            parameters the name consumed (1 for ``frame:gradient``)
        """
        kind = NAMESPACES.get(tag.name)
        if kind is not None:
            first = tag.params[0] if tag.params else None
            if first is None or first.name is not None:
                return None, 0
            return self._registry.lookup(kind, first.value), 1
        return self._registry.resolve(tag.name), 0

    def _display_name(self, tag: Tag, skip: int) -> str:
        if skip:
            return f"{tag.name}:{tag.params[0].value}"
        return tag.name

    def _passthrough(self, tag: Tag) -> Primitive:
        name = tag.name
        wanted = tag.name
        kind = NAMESPACES.get(tag.name)
        if kind is not None and tag.params and tag.params[0].name is None:
            wanted = tag.params[0].value
            name = f"{tag.name}:{wanted}"
        suggestions = self._registry.suggest(wanted, kind=kind)
        span = self._anchor or tag.span
        self.report(Diagnostic.unknown_tag(name, span, suggestions))
        logger.debug("Unknown tag '%s' at %s", name, span)
        return TextPrimitive(None, tag.raw)

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def _resolve_tag(self, tag: Tag, context: EvalContext) -> Primitive:
        definition, skip = self.lookup(tag)
        if definition is None:
            return self._passthrough(tag)

        name = self._display_name(tag, skip)
        span = self._anchor or tag.span
        check_context(definition, context, tag=name, span=span)
        self._check_shape(tag, definition, name, span)
        values = bind_params(
            definition, tag, self._registry, skip=skip, span=span, name=name
        )
        ref = DefinitionRef.of(definition)

        match definition.params:
            case GlyphParams(char=char):
                return Glyph(ref, char, values.get("repeat") or 1)
            case StyleParams() as style:
                return self._style(tag, style, values, ref, name, span)
            case FrameParams() as frame:
                return self._frame(tag, frame, values, ref)
            case BadgeParams() as badge:
                return self._badge(tag, badge, definition, values, ref, name, span)
            case SnippetParams(template=template):
                return self._expand(template, {}, context, ref, PostProcess.NONE, name, span)
            case ComponentParams(component_type=ComponentType.NATIVE):
                return self._native(definition, values, ref, name, span)
            case ComponentParams() as component:
                substitutions = self._substitutions(component, values, tag)
                return self._expand(
                    component.template or "",
                    substitutions,
                    component.body_context or context,
                    ref,
                    component.post_process,
                    name,
                    span,
                )

    def _check_shape(
        self, tag: Tag, definition: RenderableDefinition, name: str, span: SourceSpan
    ) -> None:
        if definition.self_closing and tag.body is not None:
            raise ValidationError(
                name, f"takes no body; write '{{{{{name}/}}}}'", span=span
            )
        if not definition.self_closing and tag.body is None:
            raise ValidationError(
                name, f"needs a body closed by '{{{{/{tag.name}}}}}'", span=span
            )

    # -------------------------------------------------------------------------
    # Kinds
    # -------------------------------------------------------------------------

    def _plain_body(self, tag: Tag, name: str, span: SourceSpan) -> str:
        if tag.body and any(isinstance(node, Tag) for node in tag.body):
            raise ValidationError(name, "body must be plain text, not nested tags", span=span)
        return tag.body_text()

    def _style(
        self,
        tag: Tag,
        style: StyleParams,
        values: dict[str, Any],
        ref: DefinitionRef,
        name: str,
        span: SourceSpan,
    ) -> StyledText:
        text = self._plain_body(tag, name, span)
        separator: Separator | None = None
        sep: SeparatorValue | None = values.get("separator")
        if sep is not None:
            glyph_ref = DefinitionRef.of(sep.glyph) if sep.glyph is not None else None
            separator = Separator(glyph_ref, sep.char)
        spacing = 0 if separator is not None else values.get("spacing") or 0
        return StyledText(ref, text, style.apply(text), separator, spacing)

    def _frame(
        self, tag: Tag, frame: FrameParams, values: dict[str, Any], ref: DefinitionRef
    ) -> Frame:
        prefix = self._chrome(tag, values.get("prefix"), frame.prefix)
        suffix = self._chrome(tag, values.get("suffix"), frame.suffix)
        children = self._resolve_each(tag.body or (), EvalContext.BLOCK)
        return Frame(ref, prefix, suffix, children)

    def _chrome(self, tag: Tag, override: str | None, default: str) -> Primitive:
        """Resolve a frame prefix/suffix slot in FRAME_CHROME context.

        A registry name resolves through the normal pipeline; anything else
        is literal text.
        """
        if override is None:
            return TextPrimitive(None, default)
        if self._registry.resolve(override) is None:
            return TextPrimitive(None, override)
        synthetic = Tag(span=tag.span, name=override, raw=override, self_closing=True)
        return self._resolve_tag(synthetic, EvalContext.FRAME_CHROME)

    def _badge(
        self,
        tag: Tag,
        badge: BadgeParams,
        definition: RenderableDefinition,
        values: dict[str, Any],
        ref: DefinitionRef,
        name: str,
        span: SourceSpan,
    ) -> Badge:
        label = self._plain_body(tag, name, span).strip()
        glyph = badge.mappings.get(label)
        if glyph is None:
            supported = ", ".join(badge.charset)
            raise ValidationError(
                name,
                f"'{label}' has no {definition.id} badge (supported: {supported})",
                span=span,
            )
        return Badge(ref, label, glyph, values.get("color"))

    def _native(
        self,
        definition: RenderableDefinition,
        values: dict[str, Any],
        ref: DefinitionRef,
        name: str,
        span: SourceSpan,
    ) -> Primitive:
        style = values.get("style") or self._default_style()
        match definition.id:
            case "swatch":
                return Swatch(
                    ref,
                    color=values["color"],
                    style=style,
                    label=values.get("label"),
                    icon=values.get("icon"),
                    icon_color=values.get("icon_color"),
                    width=values.get("width"),
                    height=values.get("height"),
                )
            case "divider":
                return Divider(ref, colors=values["colors"], style=style)
            case "tech":
                return Tech(
                    ref,
                    name=values["name"],
                    bg_color=values.get("bg") or self._registry.resolve_color("ui.bg") or "292A2D",
                    logo_color=values.get("logo") or "FFFFFF",
                    style=style,
                    label=values.get("label"),
                )
            case "status":
                level = values["level"]
                color = self._registry.resolve_color(level) or _STATUS_COLORS.get(level, "808080")
                return Status(ref, level=level, color=color, style=style)
            case _:
                raise ValidationError(
                    name, f"no native renderer for component '{definition.id}'", span=span
                )

    def _default_style(self) -> str:
        configured = get_expand_config().shield_style
        if configured:
            resolved = self._registry.resolve_shield_style(configured)
            if resolved is not None:
                return resolved
            logger.warning("Ignoring unknown shield style %r from config", configured)
        return self._registry.default_shield_style

    # -------------------------------------------------------------------------
    # Expansion
    # -------------------------------------------------------------------------

    def _substitutions(
        self, component: ComponentParams, values: dict[str, Any], tag: Tag
    ) -> dict[str, str]:
        substitutions = {key: _as_text(value) for key, value in values.items()}
        for index, arg in enumerate(component.args, 1):
            substitutions[str(index)] = _as_text(values.get(arg))
        substitutions["content"] = tag.inner or ""
        return substitutions

    def _expand(
        self,
        template: str,
        substitutions: dict[str, str],
        context: EvalContext,
        ref: DefinitionRef,
        post_process: PostProcess,
        name: str,
        span: SourceSpan,
    ) -> Group:
        if self._depth >= MAX_EXPANSION_DEPTH:
            raise ValidationError(
                name,
                f"expansion nested deeper than {MAX_EXPANSION_DEPTH} levels",
                span=span,
            )

        text = _PLACEHOLDER.sub(
            lambda m: substitutions.get(m.group(1), m.group(0)), template
        )
        try:
            document = parse(text, registry=self._registry)
        except ParseError as exc:
            raise ValidationError(name, f"expansion does not parse: {exc.message}", span=span) from exc

        previous_anchor = self._anchor
        self._anchor = previous_anchor or span
        self._depth += 1
        try:
            children = self._resolve_each(document.children, context)
        finally:
            self._depth -= 1
            self._anchor = previous_anchor
        return Group(ref, children, post_process)


def _as_text(value: Any) -> str:
    match value:
        case None:
            return ""
        case tuple():
            return "/".join(str(item) for item in value)
        case SeparatorValue(char=char):
            return char
        case _:
            return str(value)


def resolve(
    node: TemplateNode,
    context: EvalContext,
    registry: Registry,
    *,
    diagnostics: list[Diagnostic] | None = None,
) -> Primitive:
    """Resolve a single node in ``context``.

    Args:
        node: Text or Tag node
        context: Evaluation context the node appears in
        registry: Registry to resolve names against
        diagnostics: Optional list that receives non-fatal diagnostics

    Raises:
        ValidationError: Bad parameters or body
        ContextError: Tag not permitted in ``context``
    """
    resolver = Resolver(registry)
    try:
        return resolver.resolve(node, context)
    finally:
        if diagnostics is not None:
            diagnostics.extend(resolver.diagnostics)


def resolve_document(document: TemplateDocument, registry: Registry) -> Resolution:
    """Resolve every top-level tag of a document.

    Per-tag ValidationError and ContextError are recorded as diagnostics and
    the tag's source text is kept verbatim in its place.
    """
    resolver = Resolver(registry)
    items: list[ResolvedItem] = []
    for node in document.children:
        if not isinstance(node, Tag):
            continue
        context = EvalContext.BLOCK if node.standalone else EvalContext.INLINE
        items.append(ResolvedItem(node.span, resolver.resolve_or_keep(node, context)))
    return Resolution(tuple(items), resolver.diagnostics, document.source)


__all__ = [
    "MAX_EXPANSION_DEPTH",
    "Resolution",
    "ResolvedItem",
    "Resolver",
    "resolve",
    "resolve_document",
]
