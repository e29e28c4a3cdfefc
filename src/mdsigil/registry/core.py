"""Definition registry for tag lookup.

The registry maps tag names (canonical ids and aliases) to their
RenderableDefinitions, and carries the colour palette and shield styles the
components refer to.

Thread Safety:
Registry is immutable after creation. Safe to share.
Use RegistryBuilder for mutable construction.

Example:
    >>> dot = RenderableDefinition("dot", DefinitionKind.GLYPH, GlyphParams("·"))
    >>> registry = RegistryBuilder().register(dot).build()
    >>> registry.resolve("dot").params.char
    '·'
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

from mdsigil.context import is_legal_promotion_target
from mdsigil.definitions import (
    KIND_PARAM_TYPES,
    RESOLUTION_ORDER,
    ComponentParams,
    ComponentType,
    DefinitionKind,
    RenderableDefinition,
    SnippetParams,
)
from mdsigil.errors import DefinitionError, ParseError
from mdsigil.utils.logger import get_logger
from mdsigil.utils.text import closest_names

logger = get_logger(__name__)

_HEX_COLOR = re.compile(r"[0-9A-Fa-f]{6}")

FALLBACK_SHIELD_STYLE = "flat-square"


class Registry:
    """Immutable registry of renderable definitions.

    Thread Safety:
        Immutable after creation. Safe to share across threads.
    """

    __slots__ = (
        "_by_kind",
        "_names",
        "_palette",
        "_shield_styles",
        "_shield_aliases",
        "_default_shield_style",
    )

    def __init__(
        self,
        by_kind: dict[DefinitionKind, dict[str, RenderableDefinition]],
        names: dict[DefinitionKind, dict[str, str]],
        palette: dict[str, str],
        shield_styles: tuple[str, ...],
        shield_aliases: dict[str, str],
        default_shield_style: str | None,
    ) -> None:
        """Initialize registry with pre-built mappings.

        Use RegistryBuilder (or ``load``) to create instances.
        """
        self._by_kind = MappingProxyType(
            {kind: MappingProxyType(dict(defs)) for kind, defs in by_kind.items()}
        )
        self._names = MappingProxyType(
            {kind: MappingProxyType(dict(table)) for kind, table in names.items()}
        )
        self._palette = MappingProxyType(dict(palette))
        self._shield_styles = shield_styles
        self._shield_aliases = MappingProxyType(dict(shield_aliases))
        self._default_shield_style = default_shield_style

    # -------------------------------------------------------------------------
    # Construction shortcuts
    # -------------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Registry:
        """Build a registry from definition records (see ``registry.data``)."""
        from mdsigil.registry.loader import load

        return load(data)

    @classmethod
    def from_json(cls, text: str) -> Registry:
        """Build a registry from a JSON document of definition records."""
        from mdsigil.registry.loader import load_json

        return load_json(text)

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def resolve(self, name: str) -> RenderableDefinition | None:
        """Resolve an unqualified tag name.

        Lookup is exact and case-sensitive. Kinds are tried in the order
        glyph, snippet, component, style, frame, badge; the first hit wins.

        Args:
            name: Canonical id or alias

        Returns:
            The definition, or None when nothing matches
        """
        for kind in RESOLUTION_ORDER:
            definition = self.lookup(kind, name)
            if definition is not None:
                return definition
        return None

    def lookup(self, kind: DefinitionKind, name: str) -> RenderableDefinition | None:
        """Resolve a name within one kind (id or alias)."""
        canonical = self._names.get(kind, {}).get(name)
        if canonical is None:
            return None
        return self._by_kind[kind][canonical]

    def get(self, kind: DefinitionKind, definition_id: str) -> RenderableDefinition | None:
        """Get a definition by canonical id only."""
        return self._by_kind.get(kind, {}).get(definition_id)

    def has(self, name: str) -> bool:
        """Check if any kind resolves ``name``."""
        return self.resolve(name) is not None

    def suggest(
        self, name: str, limit: int = 3, *, kind: DefinitionKind | None = None
    ) -> list[str]:
        """Nearest canonical ids to an unresolved name.

        Ordered by edit distance, ties broken lexically. With ``kind`` only
        that kind's ids are candidates. Used only for diagnostics; never
        changes resolution.
        """
        return closest_names(name, self.ids(kind), limit=limit)

    def ids(self, kind: DefinitionKind | None = None) -> frozenset[str]:
        """Canonical ids, optionally restricted to one kind."""
        kinds = (kind,) if kind is not None else RESOLUTION_ORDER
        return frozenset(
            definition_id for k in kinds for definition_id in self._by_kind.get(k, {})
        )

    def names(self, kind: DefinitionKind | None = None) -> frozenset[str]:
        """Every resolvable name (ids and aliases), optionally for one kind."""
        kinds = (kind,) if kind is not None else RESOLUTION_ORDER
        return frozenset(name for k in kinds for name in self._names.get(k, {}))

    def definitions(self, kind: DefinitionKind | None = None) -> tuple[RenderableDefinition, ...]:
        kinds = (kind,) if kind is not None else RESOLUTION_ORDER
        return tuple(
            definition for k in kinds for definition in self._by_kind.get(k, {}).values()
        )

    # -------------------------------------------------------------------------
    # Palette and shield styles
    # -------------------------------------------------------------------------

    @property
    def palette(self) -> Mapping[str, str]:
        return self._palette

    def resolve_color(self, value: str) -> str | None:
        """Resolve a palette name or 6-digit hex code to upper-case hex.

        A leading ``#`` on hex codes is accepted. Returns None when the value
        is neither.
        """
        if value in self._palette:
            return self._palette[value]
        candidate = value[1:] if value.startswith("#") else value
        if _HEX_COLOR.fullmatch(candidate):
            return candidate.upper()
        return None

    @property
    def shield_styles(self) -> tuple[str, ...]:
        return self._shield_styles

    def resolve_shield_style(self, name: str) -> str | None:
        """Resolve a shield style id or alias to its id."""
        return self._shield_aliases.get(name)

    @property
    def default_shield_style(self) -> str:
        return self._default_shield_style or FALLBACK_SHIELD_STYLE

    # -------------------------------------------------------------------------

    def __contains__(self, name: str) -> bool:
        """Support 'name in registry' syntax."""
        return self.has(name)

    def __iter__(self) -> Iterator[RenderableDefinition]:
        return iter(self.definitions())

    def __len__(self) -> int:
        """Number of definitions across all kinds."""
        return sum(len(defs) for defs in self._by_kind.values())

    def __repr__(self) -> str:
        counts = ", ".join(
            f"{kind.value}={len(self._by_kind.get(kind, {}))}" for kind in RESOLUTION_ORDER
        )
        return f"Registry({counts})"


class RegistryBuilder:
    """Mutable builder for Registry.

    Register definitions, colours, and shield styles, then call build() to
    create an immutable registry. Every invariant is checked as entries are
    added, so a finished build never holds ambiguous names.

    Example:
        >>> registry = RegistryBuilder().add_color("accent", "F41C80").build()
        >>> registry.resolve_color("accent")
        'F41C80'
    """

    __slots__ = ("_by_kind", "_names", "_palette", "_shield_styles", "_shield_aliases", "_default")

    def __init__(self) -> None:
        self._by_kind: dict[DefinitionKind, dict[str, RenderableDefinition]] = {
            kind: {} for kind in DefinitionKind
        }
        self._names: dict[DefinitionKind, dict[str, str]] = {kind: {} for kind in DefinitionKind}
        self._palette: dict[str, str] = {}
        self._shield_styles: list[str] = []
        self._shield_aliases: dict[str, str] = {}
        self._default: str | None = None

    def register(self, definition: RenderableDefinition) -> RegistryBuilder:
        """Register a definition.

        Args:
            definition: Definition to add

        Returns:
            Self for chaining

        Raises:
            DefinitionError: Duplicate id, ambiguous alias, mismatched kind
                data, or an illegal promotion declaration
        """
        kind = definition.kind
        expected = KIND_PARAM_TYPES[kind]
        if not isinstance(definition.params, expected):
            msg = f"{kind.value} definition needs {expected.__name__}, got {type(definition.params).__name__}"
            raise DefinitionError(msg, definition.id)

        if not definition.contexts:
            raise DefinitionError("must permit at least one context", definition.id)

        for target in definition.promotions:
            if target in definition.contexts:
                continue
            if not is_legal_promotion_target(definition.contexts, target):
                msg = f"cannot be promoted to {target.value} context"
                raise DefinitionError(msg, definition.id)

        table = self._names[kind]
        if definition.id in self._by_kind[kind]:
            raise DefinitionError(f"duplicate {kind.value} id", definition.id)
        for name in definition.names:
            if name in table:
                msg = f"name '{name}' already maps to {kind.value} '{table[name]}'"
                raise DefinitionError(msg, definition.id)
        if len(set(definition.names)) != len(definition.names):
            raise DefinitionError("alias repeats a name of the same definition", definition.id)

        self._by_kind[kind][definition.id] = definition
        for name in definition.names:
            table[name] = definition.id
        return self

    def register_all(self, definitions: list[RenderableDefinition]) -> RegistryBuilder:
        """Register multiple definitions."""
        for definition in definitions:
            self.register(definition)
        return self

    def add_color(self, name: str, value: str) -> RegistryBuilder:
        """Add a palette colour (6 hex digits, stored upper-case)."""
        if not _HEX_COLOR.fullmatch(value):
            raise DefinitionError(f"palette colour must be 6 hex digits, got '{value}'", name)
        if name in self._palette:
            raise DefinitionError("duplicate palette colour", name)
        self._palette[name] = value.upper()
        return self

    def add_shield_style(
        self,
        style_id: str,
        aliases: tuple[str, ...] = (),
        *,
        default: bool = False,
    ) -> RegistryBuilder:
        """Add a shield style and its aliases."""
        for name in (style_id, *aliases):
            if name in self._shield_aliases:
                raise DefinitionError(f"shield style name '{name}' already registered", style_id)
            self._shield_aliases[name] = style_id
        self._shield_styles.append(style_id)
        if default:
            if self._default is not None:
                raise DefinitionError(
                    f"default shield style already set to '{self._default}'", style_id
                )
            self._default = style_id
        return self

    def build(self) -> Registry:
        """Build the immutable registry.

        Snippet and expand-component templates are parsed here; a template
        that does not parse makes the whole registry invalid.

        Raises:
            DefinitionError: A template fails to parse
        """
        self._check_templates()
        registry = Registry(
            by_kind=self._by_kind,
            names=self._names,
            palette=self._palette,
            shield_styles=tuple(self._shield_styles),
            shield_aliases=self._shield_aliases,
            default_shield_style=self._default or (self._shield_styles[0] if self._shield_styles else None),
        )
        logger.debug("Built %r", registry)
        return registry

    def _check_templates(self) -> None:
        from mdsigil.parser import parse

        for kind in (DefinitionKind.SNIPPET, DefinitionKind.COMPONENT):
            for definition in self._by_kind[kind].values():
                match definition.params:
                    case SnippetParams(template=template):
                        pass
                    case ComponentParams(component_type=ComponentType.EXPAND, template=template):
                        if template is None:
                            raise DefinitionError("expand component needs a template", definition.id)
                    case _:
                        continue
                try:
                    parse(template)
                except ParseError as exc:
                    raise DefinitionError(f"template does not parse: {exc}", definition.id) from exc

    def __len__(self) -> int:
        """Number of registered definitions."""
        return sum(len(defs) for defs in self._by_kind.values())


__all__ = ["FALLBACK_SHIELD_STYLE", "Registry", "RegistryBuilder"]
