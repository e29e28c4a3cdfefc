"""Turn definition records into a Registry.

Records are plain dicts (or JSON), grouped by kind. Each record is converted
to a RenderableDefinition with kind defaults for contexts, promotions and the
parameter schema, then fed through RegistryBuilder so every invariant is
checked in one place.

Example:
    >>> registry = load()
    >>> registry.resolve("mb").id
    'mathbold'
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from mdsigil.context import EvalContext
from mdsigil.definitions import (
    BadgeParams,
    ComponentParams,
    ComponentType,
    DefinitionKind,
    FrameParams,
    GlyphParams,
    KindParams,
    ParamSpec,
    ParamType,
    PostProcess,
    RenderableDefinition,
    SnippetParams,
    StyleParams,
)
from mdsigil.errors import DefinitionError
from mdsigil.registry.core import Registry, RegistryBuilder
from mdsigil.utils.logger import get_logger

logger = get_logger(__name__)

# Record section -> kind
SECTIONS: Mapping[str, DefinitionKind] = MappingProxyType(
    {
        "glyphs": DefinitionKind.GLYPH,
        "snippets": DefinitionKind.SNIPPET,
        "components": DefinitionKind.COMPONENT,
        "styles": DefinitionKind.STYLE,
        "frames": DefinitionKind.FRAME,
        "badges": DefinitionKind.BADGE,
    }
)

_INLINE = EvalContext.INLINE
_BLOCK = EvalContext.BLOCK
_CHROME = EvalContext.FRAME_CHROME

# kind -> (contexts, promotions) used when a record omits them
KIND_CONTEXTS: Mapping[DefinitionKind, tuple[frozenset[EvalContext], frozenset[EvalContext]]] = (
    MappingProxyType(
        {
            DefinitionKind.GLYPH: (frozenset({_INLINE}), frozenset({_BLOCK, _CHROME})),
            DefinitionKind.SNIPPET: (frozenset({_INLINE, _BLOCK}), frozenset()),
            DefinitionKind.COMPONENT: (frozenset({_INLINE, _BLOCK}), frozenset()),
            DefinitionKind.STYLE: (frozenset({_INLINE, _BLOCK}), frozenset()),
            DefinitionKind.FRAME: (frozenset({_INLINE, _BLOCK}), frozenset()),
            DefinitionKind.BADGE: (frozenset({_INLINE}), frozenset({_BLOCK})),
        }
    )
)

# Schemas shared by every definition of a kind. Components declare their own.
KIND_SCHEMAS: Mapping[DefinitionKind, tuple[ParamSpec, ...]] = MappingProxyType(
    {
        DefinitionKind.GLYPH: (ParamSpec("repeat", ParamType.INT, default=1, minimum=1, maximum=200),),
        DefinitionKind.SNIPPET: (),
        DefinitionKind.COMPONENT: (),
        DefinitionKind.STYLE: (
            ParamSpec("spacing", ParamType.INT, default=0, minimum=0, maximum=16),
            ParamSpec("separator", ParamType.SEPARATOR),
        ),
        DefinitionKind.FRAME: (
            ParamSpec("prefix", ParamType.CHROME),
            ParamSpec("suffix", ParamType.CHROME),
        ),
        DefinitionKind.BADGE: (ParamSpec("color", ParamType.COLOR),),
    }
)


def load(records: Mapping[str, Any] | None = None) -> Registry:
    """Build a registry from definition records.

    Args:
        records: Record dict in the ``registry.data`` format. Defaults to the
            built-in definitions.

    Returns:
        A fresh, immutable Registry

    Raises:
        DefinitionError: The records are malformed or violate an invariant
    """
    if records is None:
        from mdsigil.registry.data import BUILTIN_RECORDS

        records = BUILTIN_RECORDS

    if not isinstance(records, Mapping):
        raise DefinitionError(f"records must be a mapping, got {type(records).__name__}")

    builder = RegistryBuilder()
    for section, kind in SECTIONS.items():
        entries = records.get(section) or {}
        _expect_mapping(entries, section)
        for definition_id, record in entries.items():
            _expect_mapping(record, definition_id)
            builder.register(_build_definition(kind, definition_id, record))

    palette = records.get("palette") or {}
    _expect_mapping(palette, "palette")
    for name, value in palette.items():
        builder.add_color(name, str(value))

    shield_styles = records.get("shield_styles") or {}
    _expect_mapping(shield_styles, "shield_styles")
    for style_id, record in shield_styles.items():
        _expect_mapping(record, style_id)
        builder.add_shield_style(
            style_id,
            tuple(record.get("aliases", ())),
            default=bool(record.get("default", False)),
        )

    registry = builder.build()
    logger.debug("Loaded %d definitions", len(registry))
    return registry


def load_json(text: str) -> Registry:
    """Build a registry from a JSON string of definition records."""
    try:
        records = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DefinitionError(f"invalid definition JSON: {exc}") from exc
    return load(records)


def _expect_mapping(value: Any, where: str) -> None:
    if not isinstance(value, Mapping):
        raise DefinitionError(f"expected a mapping, got {type(value).__name__}", where)


def _require(record: Mapping[str, Any], key: str, definition_id: str) -> Any:
    try:
        return record[key]
    except KeyError:
        raise DefinitionError(f"missing required field '{key}'", definition_id) from None


def _contexts(values: Any, definition_id: str) -> frozenset[EvalContext]:
    try:
        return frozenset(EvalContext.parse(str(v)) for v in values)
    except ValueError as exc:
        raise DefinitionError(f"unknown context in {list(values)!r}", definition_id) from exc


def _build_definition(
    kind: DefinitionKind, definition_id: str, record: Mapping[str, Any]
) -> RenderableDefinition:
    default_contexts, default_promotions = KIND_CONTEXTS[kind]
    contexts = (
        _contexts(record["contexts"], definition_id) if "contexts" in record else default_contexts
    )
    promotions = (
        _contexts(record["promotions"], definition_id)
        if "promotions" in record
        else default_promotions
    )

    schema = KIND_SCHEMAS[kind]
    if kind is DefinitionKind.COMPONENT:
        schema = _component_schema(record.get("params") or {}, definition_id)

    return RenderableDefinition(
        id=definition_id,
        kind=kind,
        params=_kind_params(kind, definition_id, record),
        aliases=tuple(record.get("aliases", ())),
        contexts=contexts,
        promotions=promotions,
        schema=schema,
        description=str(record.get("description", "")),
    )


def _kind_params(kind: DefinitionKind, definition_id: str, record: Mapping[str, Any]) -> KindParams:
    match kind:
        case DefinitionKind.GLYPH:
            char = str(_require(record, "char", definition_id))
            if not char:
                raise DefinitionError("glyph char must not be empty", definition_id)
            return GlyphParams(char)
        case DefinitionKind.SNIPPET:
            return SnippetParams(str(_require(record, "template", definition_id)))
        case DefinitionKind.STYLE:
            return StyleParams(_mapping_table(record, definition_id))
        case DefinitionKind.FRAME:
            return FrameParams(
                prefix=str(_require(record, "prefix", definition_id)),
                suffix=str(_require(record, "suffix", definition_id)),
            )
        case DefinitionKind.BADGE:
            return BadgeParams(_mapping_table(record, definition_id))
        case DefinitionKind.COMPONENT:
            return _component_params(definition_id, record)


def _mapping_table(record: Mapping[str, Any], definition_id: str) -> Mapping[str, str]:
    mappings = _require(record, "mappings", definition_id)
    _expect_mapping(mappings, definition_id)
    return MappingProxyType({str(k): str(v) for k, v in mappings.items()})


def _component_params(definition_id: str, record: Mapping[str, Any]) -> ComponentParams:
    try:
        component_type = ComponentType(record.get("type", "native"))
        post_process = PostProcess(record.get("post_process", "none"))
        body_context = record.get("body_context")
        slot = EvalContext.parse(body_context) if body_context else None
    except ValueError as exc:
        raise DefinitionError(str(exc), definition_id) from exc

    template = record.get("template")
    if component_type is ComponentType.EXPAND and not template:
        raise DefinitionError("expand component needs a template", definition_id)

    args = tuple(str(a) for a in record.get("args", ()))
    declared = set((record.get("params") or {}).keys())
    for arg in args:
        if arg not in declared:
            raise DefinitionError(f"positional arg '{arg}' has no parameter entry", definition_id)

    return ComponentParams(
        component_type=component_type,
        self_closing=bool(record.get("self_closing", True)),
        args=args,
        template=str(template) if template else None,
        body_context=slot,
        post_process=post_process,
    )


def _component_schema(params: Mapping[str, Any], definition_id: str) -> tuple[ParamSpec, ...]:
    _expect_mapping(params, definition_id)
    specs = []
    for name, spec in params.items():
        _expect_mapping(spec, f"{definition_id}.{name}")
        try:
            param_type = ParamType(spec.get("type", "string"))
        except ValueError as exc:
            raise DefinitionError(f"parameter '{name}': {exc}", definition_id) from exc
        choices = tuple(str(c) for c in spec.get("choices", ()))
        if param_type is ParamType.CHOICE and not choices:
            raise DefinitionError(f"choice parameter '{name}' lists no choices", definition_id)
        specs.append(
            ParamSpec(
                name=str(name),
                type=param_type,
                default=spec.get("default"),
                required=bool(spec.get("required", False)),
                choices=choices,
                minimum=spec.get("minimum"),
                maximum=spec.get("maximum"),
            )
        )
    return tuple(specs)


__all__ = ["KIND_CONTEXTS", "KIND_SCHEMAS", "SECTIONS", "load", "load_json"]
