"""Renderable definition model.

A RenderableDefinition is one entry of the registry: a glyph, snippet,
component, style, frame, or badge set. Each carries its canonical id, its
aliases, the evaluation contexts it may appear in, the contexts it may be
promoted into, a parameter schema, and kind-specific data.

Thread Safety:
All types are frozen dataclasses (mapping fields are read-only proxies).
Safe to share across threads.

"""

from __future__ import annotations

from typing import TypeAlias

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from mdsigil.context import EvalContext


class DefinitionKind(Enum):
    """The six kinds of renderable definition."""

    GLYPH = "glyph"
    SNIPPET = "snippet"
    COMPONENT = "component"
    STYLE = "style"
    FRAME = "frame"
    BADGE = "badge"


# Unqualified names are looked up in this order; first hit wins.
RESOLUTION_ORDER: tuple[DefinitionKind, ...] = (
    DefinitionKind.GLYPH,
    DefinitionKind.SNIPPET,
    DefinitionKind.COMPONENT,
    DefinitionKind.STYLE,
    DefinitionKind.FRAME,
    DefinitionKind.BADGE,
)

# Qualified tag prefixes: `{{frame:gradient}}`, `{{ui:swatch:accent/}}`. The first
# positional parameter names the definition within the kind.
NAMESPACES: Mapping[str, DefinitionKind] = MappingProxyType(
    {
        "glyph": DefinitionKind.GLYPH,
        "snippet": DefinitionKind.SNIPPET,
        "ui": DefinitionKind.COMPONENT,
        "component": DefinitionKind.COMPONENT,
        "style": DefinitionKind.STYLE,
        "frame": DefinitionKind.FRAME,
        "badge": DefinitionKind.BADGE,
    }
)


class ParamType(Enum):
    """Value types understood by the parameter validator."""

    STRING = "string"
    INT = "int"
    BOOL = "bool"
    COLOR = "color"
    COLOR_LIST = "color_list"
    SHIELD_STYLE = "shield_style"
    SEPARATOR = "separator"
    CHOICE = "choice"
    CHROME = "chrome"


@dataclass(frozen=True, slots=True)
class ParamSpec:
    """Schema entry for one named parameter.

    Attributes:
        name: Parameter name as written in tags
        type: Value type
        default: Value used when the parameter is omitted (None = no default)
        required: Whether a value must be supplied
        choices: Permitted values for CHOICE parameters
        minimum: Lower bound for INT parameters
        maximum: Upper bound for INT parameters
    """

    name: str
    type: ParamType = ParamType.STRING
    default: object = None
    required: bool = False
    choices: tuple[str, ...] = ()
    minimum: int | None = None
    maximum: int | None = None


class ComponentType(Enum):
    """How a component produces output."""

    NATIVE = "native"
    EXPAND = "expand"


class PostProcess(Enum):
    """Transform applied to an expand component's rendered text."""

    NONE = "none"
    BLOCKQUOTE = "blockquote"


@dataclass(frozen=True, slots=True)
class GlyphParams:
    char: str


@dataclass(frozen=True, slots=True)
class SnippetParams:
    template: str


@dataclass(frozen=True, slots=True)
class StyleParams:
    """Character transform table for a Unicode text style."""

    mappings: Mapping[str, str]

    def apply(self, text: str) -> tuple[str, ...]:
        """Map each character, passing unmapped ones through unchanged."""
        table = self.mappings
        return tuple(table.get(ch, ch) for ch in text)

    def supports(self, ch: str) -> bool:
        return ch in self.mappings


@dataclass(frozen=True, slots=True)
class FrameParams:
    prefix: str
    suffix: str


@dataclass(frozen=True, slots=True)
class BadgeParams:
    """Enclosed-glyph table keyed by label text (e.g. ``"1" -> "①"``)."""

    mappings: Mapping[str, str]

    @property
    def charset(self) -> tuple[str, ...]:
        return tuple(self.mappings)


@dataclass(frozen=True, slots=True)
class ComponentParams:
    """Component-specific data.

    Attributes:
        component_type: Native (built-in primitive) or expand (template)
        self_closing: Whether the component is written ``{{name/}}``
        args: Names bound to positional parameters, in order
        template: Expansion markup for expand components
        body_context: Context the body slot is resolved in
        post_process: Transform applied after expansion
    """

    component_type: ComponentType
    self_closing: bool = True
    args: tuple[str, ...] = ()
    template: str | None = None
    body_context: EvalContext | None = None
    post_process: PostProcess = PostProcess.NONE


KindParams: TypeAlias = (
    GlyphParams | SnippetParams | ComponentParams | StyleParams | FrameParams | BadgeParams
)

KIND_PARAM_TYPES: Mapping[DefinitionKind, type] = MappingProxyType(
    {
        DefinitionKind.GLYPH: GlyphParams,
        DefinitionKind.SNIPPET: SnippetParams,
        DefinitionKind.COMPONENT: ComponentParams,
        DefinitionKind.STYLE: StyleParams,
        DefinitionKind.FRAME: FrameParams,
        DefinitionKind.BADGE: BadgeParams,
    }
)


@dataclass(frozen=True, slots=True)
class RenderableDefinition:
    """One registry entry.

    Attributes:
        id: Canonical id, unique within its kind
        kind: Definition kind
        params: Kind-specific data (type matches ``kind``)
        aliases: Alternate names, each unique within the kind
        contexts: Contexts the definition is permitted in
        promotions: Contexts it may be promoted into (one table step)
        schema: Named parameters the tag accepts
        description: Human-readable summary
    """

    id: str
    kind: DefinitionKind
    params: KindParams
    aliases: tuple[str, ...] = ()
    contexts: frozenset[EvalContext] = frozenset({EvalContext.INLINE, EvalContext.BLOCK})
    promotions: frozenset[EvalContext] = frozenset()
    schema: tuple[ParamSpec, ...] = ()
    description: str = ""
    _schema_index: Mapping[str, ParamSpec] = field(
        default_factory=lambda: MappingProxyType({}), repr=False, compare=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "_schema_index", MappingProxyType({spec.name: spec for spec in self.schema})
        )

    @property
    def names(self) -> tuple[str, ...]:
        """Canonical id followed by aliases."""
        return (self.id, *self.aliases)

    def param_spec(self, name: str) -> ParamSpec | None:
        return self._schema_index.get(name)

    @property
    def param_names(self) -> tuple[str, ...]:
        return tuple(spec.name for spec in self.schema)

    @property
    def self_closing(self) -> bool:
        """Whether tags for this definition take no body."""
        match self.params:
            case ComponentParams(self_closing=closing):
                return closing
            case GlyphParams() | SnippetParams():
                return True
            case StyleParams() | FrameParams() | BadgeParams():
                return False


@dataclass(frozen=True, slots=True)
class DefinitionRef:
    """Canonical (kind, id) carried by primitives instead of the alias used."""

    kind: DefinitionKind
    id: str

    @classmethod
    def of(cls, definition: RenderableDefinition) -> DefinitionRef:
        return cls(definition.kind, definition.id)

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.id}"


__all__ = [
    "KIND_PARAM_TYPES",
    "NAMESPACES",
    "RESOLUTION_ORDER",
    "BadgeParams",
    "ComponentParams",
    "ComponentType",
    "DefinitionKind",
    "DefinitionRef",
    "FrameParams",
    "GlyphParams",
    "KindParams",
    "ParamSpec",
    "ParamType",
    "PostProcess",
    "RenderableDefinition",
    "SnippetParams",
    "StyleParams",
]
