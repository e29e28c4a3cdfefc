"""Tag parameter binding and validation.

Binds a tag's positional and named parameters to a definition's schema and
coerces each value to its declared type. Every failure raises
ValidationError with the offending parameter and, where one exists, the
value the author most likely meant.

Example:
    >>> registry = load()
    >>> tag = parse("{{ui:swatch:accent:style=square/}}").children[0]
    >>> swatch = registry.lookup(DefinitionKind.COMPONENT, "swatch")
    >>> values = bind_params(swatch, tag, registry, skip=1)
    >>> values["color"], values["style"]
    ('F41C80', 'flat-square')
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from mdsigil.definitions import ComponentParams, DefinitionKind, ParamSpec, ParamType
from mdsigil.errors import ValidationError
from mdsigil.utils.text import closest_names

if TYPE_CHECKING:
    from mdsigil.definitions import RenderableDefinition
    from mdsigil.location import SourceSpan
    from mdsigil.nodes import Tag
    from mdsigil.registry import Registry

_TRUE = frozenset({"true", "yes", "on", "1"})
_FALSE = frozenset({"false", "no", "off", "0"})

# Presentation selectors that may trail a single-character separator.
_VARIATION_SELECTORS = frozenset({"\ufe0e", "\ufe0f"})


@dataclass(frozen=True, slots=True)
class SeparatorValue:
    """A validated separator: the character, and the glyph it came from."""

    char: str
    glyph: RenderableDefinition | None = None


def _first(names: list[str]) -> str | None:
    return names[0] if names else None


def validate_separator(
    value: str,
    registry: Registry,
    *,
    tag: str,
    span: SourceSpan | None = None,
) -> SeparatorValue:
    """Validate a ``separator=`` value.

    Accepts a glyph name (``dot``, ``arrow``) or exactly one character.
    Surrounding whitespace and the template delimiters ``{`` and ``}`` are
    rejected.

    Raises:
        ValidationError: The value is empty, padded, contains a delimiter,
            or is more than one character
    """

    def fail(message: str, suggestion: str | None = None) -> ValidationError:
        return ValidationError(tag, message, param="separator", suggestion=suggestion, span=span)

    if not value:
        raise fail("separator must not be empty")
    if value != value.strip():
        raise fail(
            "separator must not have leading or trailing whitespace (use spacing=N for gaps)",
            value.strip() or None,
        )
    if "{" in value or "}" in value:
        raise fail("separator cannot contain the template delimiters '{' or '}'")

    glyph = registry.lookup(DefinitionKind.GLYPH, value)
    if glyph is not None:
        return SeparatorValue(glyph.params.char, glyph)

    if len(value) == 1 or (len(value) == 2 and value[1] in _VARIATION_SELECTORS):
        return SeparatorValue(value)

    if len(set(value)) == 1:
        suggestion = value[0]
    else:
        suggestion = _first(closest_names(value, registry.names(DefinitionKind.GLYPH), limit=1))
    raise fail(f"separator must be a single character or a glyph name, got '{value}'", suggestion)


def coerce(
    spec: ParamSpec,
    value: str,
    registry: Registry,
    *,
    tag: str,
    span: SourceSpan | None = None,
) -> Any:
    """Coerce one raw parameter value to its declared type.

    Raises:
        ValidationError: The value does not fit the type
    """

    def fail(message: str, suggestion: str | None = None) -> ValidationError:
        return ValidationError(tag, message, param=spec.name, suggestion=suggestion, span=span)

    match spec.type:
        case ParamType.STRING | ParamType.CHROME:
            return value
        case ParamType.INT:
            try:
                number = int(value)
            except ValueError:
                raise fail(f"'{spec.name}' must be an integer, got '{value}'") from None
            if spec.minimum is not None and number < spec.minimum:
                raise fail(f"'{spec.name}' must be at least {spec.minimum}, got {number}")
            if spec.maximum is not None and number > spec.maximum:
                raise fail(f"'{spec.name}' must be at most {spec.maximum}, got {number}")
            return number
        case ParamType.BOOL:
            lowered = value.lower()
            if lowered in _TRUE:
                return True
            if lowered in _FALSE:
                return False
            raise fail(f"'{spec.name}' must be true or false, got '{value}'")
        case ParamType.COLOR:
            return _color(value, registry, fail)
        case ParamType.COLOR_LIST:
            parts = [part for part in value.replace(",", "/").split("/") if part]
            if not parts:
                raise fail(f"'{spec.name}' needs at least one colour")
            return tuple(_color(part, registry, fail) for part in parts)
        case ParamType.SHIELD_STYLE:
            style = registry.resolve_shield_style(value)
            if style is None:
                known = list(registry.shield_styles)
                raise fail(
                    f"unknown shield style '{value}'",
                    _first(closest_names(value, known, limit=1, max_distance=len(value))),
                )
            return style
        case ParamType.CHOICE:
            if value not in spec.choices:
                raise fail(
                    f"'{spec.name}' must be one of {', '.join(spec.choices)}; got '{value}'",
                    _first(closest_names(value, spec.choices, limit=1, max_distance=len(value))),
                )
            return value
        case ParamType.SEPARATOR:
            return validate_separator(value, registry, tag=tag, span=span)


def _color(value: str, registry: Registry, fail: Any) -> str:
    resolved = registry.resolve_color(value)
    if resolved is None:
        raise fail(
            f"'{value}' is not a palette colour or 6-digit hex code",
            _first(closest_names(value, registry.palette, limit=1)),
        )
    return resolved


def bind_params(
    definition: RenderableDefinition,
    tag: Tag,
    registry: Registry,
    *,
    skip: int = 0,
    span: SourceSpan | None = None,
    name: str | None = None,
) -> dict[str, Any]:
    """Bind and validate a tag's parameters against a definition's schema.

    Args:
        definition: Resolved definition
        tag: Tag being resolved
        registry: Registry for colour, style and glyph lookups
        skip: Leading positional values already consumed (the name in
            ``{{frame:gradient}}``)
        span: Span for error messages (defaults to the tag's span)
        name: Tag name for error messages (defaults to ``tag.name``; the
            resolver passes ``ui:status`` for namespaced tags)

    Returns:
        Mapping of every schema parameter to its coerced value (None when
        omitted without a default)

    Raises:
        ValidationError: Unknown parameter, surplus positional value,
            missing required value, or malformed value
    """
    span = span or tag.span
    name = name or tag.name
    args = definition.params.args if isinstance(definition.params, ComponentParams) else ()

    positional = [p.value for p in tag.params if p.name is None][skip:]
    if len(positional) > len(args):
        surplus = positional[len(args)]
        expected = f"takes {len(args)}" if args else "takes no"
        raise ValidationError(
            name,
            f"unexpected positional value '{surplus}' ({definition.id} {expected} positional values)",
            span=span,
        )

    raw: dict[str, str] = dict(zip(args, positional, strict=False))
    for param in tag.params:
        if param.name is None:
            continue
        if definition.param_spec(param.name) is None:
            raise ValidationError(
                name,
                f"unknown parameter '{param.name}'",
                param=param.name,
                suggestion=_first(
                    closest_names(param.name, definition.param_names, limit=1, max_distance=3)
                ),
                span=span,
            )
        if param.name in raw and param.name in args[: len(positional)]:
            raise ValidationError(
                name,
                f"parameter '{param.name}' given both positionally and by name",
                param=param.name,
                span=span,
            )
        raw[param.name] = param.value

    values: dict[str, Any] = {}
    for spec in definition.schema:
        if spec.name in raw:
            values[spec.name] = coerce(spec, raw[spec.name], registry, tag=name, span=span)
        elif spec.required:
            raise ValidationError(
                name,
                f"missing required parameter '{spec.name}'",
                param=spec.name,
                span=span,
            )
        elif spec.default is not None:
            values[spec.name] = coerce(spec, str(spec.default), registry, tag=name, span=span)
        else:
            values[spec.name] = None
    return values


__all__ = ["SeparatorValue", "bind_params", "coerce", "validate_separator"]
