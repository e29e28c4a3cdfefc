"""Tests for tag resolution: lookup, validation, contexts, kinds."""

import pytest

from mdsigil import load
from mdsigil.config import ExpandConfig, expand_config_context
from mdsigil.context import EvalContext
from mdsigil.definitions import DefinitionKind, DefinitionRef, PostProcess
from mdsigil.diagnostics import DiagnosticCode, Severity
from mdsigil.errors import ContextError, ValidationError
from mdsigil.parser import parse
from mdsigil.primitives import (
    Badge,
    Divider,
    Frame,
    Glyph,
    Group,
    Separator,
    Status,
    StyledText,
    Swatch,
    Tech,
    Text,
)
from mdsigil.registry import Registry
from mdsigil.resolver import MAX_EXPANSION_DEPTH, Resolver, resolve, resolve_document

INLINE = EvalContext.INLINE
BLOCK = EvalContext.BLOCK
CHROME = EvalContext.FRAME_CHROME


def _resolve(source: str, registry: Registry, context: EvalContext = INLINE):
    tag = parse(source, registry=registry).children[0]
    return resolve(tag, context, registry)


def _mathbold(registry: Registry, text: str) -> tuple[str, ...]:
    return registry.resolve("mathbold").params.apply(text)


# =========================================================================
# Styles
# =========================================================================


class TestStyles:
    def test_mathbold(self, registry: Registry) -> None:
        primitive = _resolve("{{mathbold}}TEXT{{/mathbold}}", registry)
        assert isinstance(primitive, StyledText)
        assert primitive.text == "TEXT"
        assert primitive.chars == _mathbold(registry, "TEXT")
        assert primitive.rendered == "𝐓𝐄𝐗𝐓"

    def test_alias_carries_canonical_id(self, registry: Registry) -> None:
        primitive = _resolve("{{mb}}Hi{{/mb}}", registry)
        assert primitive.source == DefinitionRef(DefinitionKind.STYLE, "mathbold")

    def test_unmapped_characters_pass_through(self, registry: Registry) -> None:
        primitive = _resolve("{{mathbold}}A-1!{{/mathbold}}", registry)
        assert primitive.rendered == "𝐀-𝟏!"

    def test_separator_character(self, registry: Registry) -> None:
        primitive = _resolve("{{mathbold:separator=→}}AB{{/mathbold}}", registry)
        assert primitive.separator == Separator(None, "→")
        assert primitive.joined == "𝐀→𝐁"

    def test_separator_glyph(self, registry: Registry) -> None:
        primitive = _resolve("{{mathbold:separator=dot}}AB{{/mathbold}}", registry)
        assert primitive.separator == Separator(DefinitionRef(DefinitionKind.GLYPH, "dot"), "·")

    def test_separator_between_spaces_too(self, registry: Registry) -> None:
        primitive = _resolve("{{mathbold:separator=-}}A B{{/mathbold}}", registry)
        assert primitive.joined == "𝐀- -𝐁"

    def test_invalid_separator(self, registry: Registry) -> None:
        with pytest.raises(ValidationError) as exc_info:
            _resolve("{{mathbold:separator=::}}AB{{/mathbold}}", registry)
        assert exc_info.value.suggestion == ":"

    def test_spacing(self, registry: Registry) -> None:
        primitive = _resolve("{{mathbold:spacing=1}}AB{{/mathbold}}", registry)
        assert primitive.spacing == 1
        assert primitive.joined == "𝐀 𝐁"

    def test_separator_wins_over_spacing(self, registry: Registry) -> None:
        primitive = _resolve("{{mathbold:spacing=2:separator=|}}AB{{/mathbold}}", registry)
        assert primitive.spacing == 0
        assert primitive.joined == "𝐀|𝐁"

    def test_nested_tags_rejected(self, registry: Registry) -> None:
        with pytest.raises(ValidationError, match="plain text"):
            _resolve("{{mathbold}}A{{dot/}}{{/mathbold}}", registry)

    def test_self_closing_style_rejected(self, registry: Registry) -> None:
        with pytest.raises(ValidationError, match="body"):
            _resolve("{{mathbold/}}", registry)


# =========================================================================
# Glyphs, badges, snippets
# =========================================================================


class TestGlyphs:
    def test_glyph(self, registry: Registry) -> None:
        assert _resolve("{{arrow/}}", registry) == Glyph(
            DefinitionRef(DefinitionKind.GLYPH, "arrow"), "→", 1
        )

    def test_repeat(self, registry: Registry) -> None:
        assert _resolve("{{dash:repeat=5/}}", registry).repeat == 5

    def test_repeat_out_of_range(self, registry: Registry) -> None:
        with pytest.raises(ValidationError, match="at least"):
            _resolve("{{dash:repeat=0/}}", registry)

    def test_namespaced(self, registry: Registry) -> None:
        primitive = _resolve("{{glyph:check/}}", registry)
        assert primitive.char == "✓"

    def test_glyph_with_body_rejected(self, registry: Registry) -> None:
        with pytest.raises(ValidationError, match="no body"):
            _resolve("{{dot}}x{{/dot}}", registry)


class TestBadges:
    def test_badge(self, registry: Registry) -> None:
        primitive = _resolve("{{badge:circle}}3{{/badge}}", registry)
        assert primitive == Badge(DefinitionRef(DefinitionKind.BADGE, "circle"), "3", "③")

    def test_unqualified(self, registry: Registry) -> None:
        assert _resolve("{{paren}}1{{/paren}}", registry).glyph == "⑴"

    def test_label_outside_charset(self, registry: Registry) -> None:
        with pytest.raises(ValidationError, match="no circle badge"):
            _resolve("{{badge:circle}}99{{/badge}}", registry)

    def test_color(self, registry: Registry) -> None:
        primitive = _resolve("{{badge:circle:color=success}}1{{/badge}}", registry)
        assert primitive.color == "22C55E"
        assert primitive.glyph == "①"


class TestSnippets:
    def test_section_break(self, registry: Registry) -> None:
        primitive = _resolve("{{section-break/}}", registry)
        assert isinstance(primitive, Group)
        dash, space, sparkle, _, dash2 = primitive.children
        assert dash == Glyph(DefinitionRef(DefinitionKind.GLYPH, "dash"), "─", 3)
        assert space == Text(None, " ")
        assert sparkle.char == "✦"
        assert dash2 == dash

    def test_block_only_snippet(self, registry: Registry) -> None:
        assert isinstance(_resolve("{{rule/}}", registry, BLOCK), Group)
        with pytest.raises(ContextError):
            _resolve("{{rule/}}", registry, INLINE)

    def test_recursive_snippet_hits_depth_limit(self) -> None:
        registry = load({"snippets": {"loop": {"template": "again {{loop/}}"}}})
        tag = parse("{{loop/}}", registry=registry).children[0]
        diagnostics = []
        primitive = resolve(tag, INLINE, registry, diagnostics=diagnostics)
        assert isinstance(primitive, Group)
        (diagnostic,) = diagnostics
        assert str(MAX_EXPANSION_DEPTH) in diagnostic.message
        assert diagnostic.span == tag.span

    def test_invalid_tag_in_template_keeps_siblings(self) -> None:
        registry = load(
            {
                "glyphs": {"x": {"char": "x"}},
                "snippets": {"pair": {"template": "{{x:repeat=0/}} {{x:repeat=2/}}"}},
            }
        )
        diagnostics = []
        tag = parse("{{pair/}}", registry=registry).children[0]
        group = resolve(tag, INLINE, registry, diagnostics=diagnostics)
        bad, space, glyph = group.children
        assert bad == Text(None, "{{x:repeat=0/}}")
        assert space == Text(None, " ")
        assert glyph.repeat == 2
        (diagnostic,) = diagnostics
        assert diagnostic.code is DiagnosticCode.INVALID_PARAM
        assert diagnostic.span == tag.span


# =========================================================================
# Frames
# =========================================================================


class TestFrames:
    def test_frame(self, registry: Registry) -> None:
        primitive = _resolve("{{frame:gradient}}Title{{/frame}}", registry)
        assert isinstance(primitive, Frame)
        assert primitive.prefix == Text(None, "▓▒░ ")
        assert primitive.suffix == Text(None, " ░▒▓")
        assert primitive.children == (Text(None, "Title"),)

    def test_body_resolves_in_block(self, registry: Registry) -> None:
        primitive = _resolve("{{frame:gradient}}{{rule/}}{{/frame}}", registry)
        assert isinstance(primitive.children[0], Group)

    def test_styled_body(self, registry: Registry) -> None:
        primitive = _resolve("{{gradient}}{{mathbold}}Hi{{/mathbold}}{{/gradient}}", registry)
        assert primitive.children[0].chars == _mathbold(registry, "Hi")

    def test_chrome_glyph(self, registry: Registry) -> None:
        primitive = _resolve("{{frame:gradient:prefix=star:suffix=star}}x{{/frame}}", registry)
        assert primitive.prefix == Glyph(DefinitionRef(DefinitionKind.GLYPH, "star"), "★", 1)

    def test_chrome_literal(self, registry: Registry) -> None:
        primitive = _resolve("{{frame:gradient:prefix=>>}}x{{/frame}}", registry)
        assert primitive.prefix == Text(None, ">>")
        assert primitive.suffix == Text(None, " ░▒▓")

    def test_invalid_body_tags_each_reported(self, registry: Registry) -> None:
        source = "{{frame:gradient}}{{ui:status:bogus/}} {{ui:status:nope/}}{{/frame}}"
        diagnostics = []
        tag = parse(source, registry=registry).children[0]
        frame = resolve(tag, INLINE, registry, diagnostics=diagnostics)
        assert isinstance(frame, Frame)
        assert frame.children == (
            Text(None, "{{ui:status:bogus/}}"),
            Text(None, " "),
            Text(None, "{{ui:status:nope/}}"),
        )
        assert [d.code for d in diagnostics] == [DiagnosticCode.INVALID_PARAM] * 2
        assert "'bogus'" in diagnostics[0].message
        assert diagnostics[0].message.startswith("Tag 'ui:status':")
        assert "'nope'" in diagnostics[1].message

    def test_valid_body_tag_survives_invalid_sibling(self, registry: Registry) -> None:
        source = "{{frame:gradient}}{{ui:status:bogus/}} {{mathbold}}Hi{{/mathbold}}{{/frame}}"
        diagnostics = []
        tag = parse(source, registry=registry).children[0]
        frame = resolve(tag, INLINE, registry, diagnostics=diagnostics)
        assert frame.children[2].chars == _mathbold(registry, "Hi")
        assert len(diagnostics) == 1

    def test_chrome_rejects_inline_only_component(self, registry: Registry) -> None:
        with pytest.raises(ContextError) as exc_info:
            _resolve("{{frame:gradient:prefix=tech}}x{{/frame}}", registry)
        assert exc_info.value.attempted is CHROME


# =========================================================================
# Components
# =========================================================================


class TestNativeComponents:
    def test_swatch(self, registry: Registry) -> None:
        primitive = _resolve("{{ui:swatch:accent/}}", registry)
        assert primitive == Swatch(
            DefinitionRef(DefinitionKind.COMPONENT, "swatch"), "F41C80", "flat-square"
        )

    def test_swatch_options(self, registry: Registry) -> None:
        primitive = _resolve(
            "{{ui:swatch:cobalt:style=ftb:label=Core:icon=rust:icon_color=white:width=60/}}",
            registry,
        )
        assert primitive.style == "for-the-badge"
        assert primitive.label == "Core"
        assert primitive.icon == "rust"
        assert primitive.icon_color == "FFFFFF"
        assert primitive.width == 60

    def test_config_shield_style(self, registry: Registry) -> None:
        with expand_config_context(ExpandConfig(shield_style="plastic")):
            assert _resolve("{{ui:swatch:accent/}}", registry).style == "plastic"
            assert _resolve("{{ui:swatch:accent:style=flat/}}", registry).style == "flat"

    def test_divider(self, registry: Registry) -> None:
        primitive = _resolve("{{ui:divider:colors=accent/black/}}", registry, BLOCK)
        assert primitive == Divider(
            DefinitionRef(DefinitionKind.COMPONENT, "divider"), ("F41C80", "000000"), "flat-square"
        )

    def test_tech(self, registry: Registry) -> None:
        primitive = _resolve("{{ui:tech:python/}}", registry)
        assert isinstance(primitive, Tech)
        assert primitive.name == "python"
        assert primitive.bg_color == "292A2D"
        assert primitive.logo_color == "FFFFFF"

    def test_status(self, registry: Registry) -> None:
        primitive = _resolve("{{ui:status:warning/}}", registry)
        assert primitive == Status(
            DefinitionRef(DefinitionKind.COMPONENT, "status"), "warning", "EAB308", "flat-square"
        )

    def test_status_bad_level(self, registry: Registry) -> None:
        with pytest.raises(ValidationError) as exc_info:
            _resolve("{{ui:status:sucess/}}", registry)
        assert exc_info.value.suggestion == "success"

    def test_bad_color(self, registry: Registry) -> None:
        with pytest.raises(ValidationError, match="palette"):
            _resolve("{{ui:swatch:fuchsia/}}", registry)

    def test_unknown_parameter(self, registry: Registry) -> None:
        with pytest.raises(ValidationError) as exc_info:
            _resolve("{{ui:swatch:accent:lable=x/}}", registry)
        assert exc_info.value.suggestion == "label"


class TestExpandComponents:
    def test_header(self, registry: Registry) -> None:
        primitive = _resolve("{{header}}Hi{{/header}}", registry, BLOCK)
        assert isinstance(primitive, Group)
        (frame,) = primitive.children
        assert isinstance(frame, Frame)
        (styled,) = frame.children
        assert styled.chars == _mathbold(registry, "Hi")
        assert styled.separator.char == "·"

    def test_header_is_block_only(self, registry: Registry) -> None:
        with pytest.raises(ContextError):
            _resolve("{{header}}Hi{{/header}}", registry, INLINE)

    def test_callout(self, registry: Registry) -> None:
        primitive = _resolve("{{callout:success}}Done{{/callout}}", registry, BLOCK)
        assert primitive.post_process is PostProcess.BLOCKQUOTE
        swatch, text = primitive.children
        assert swatch.color == "22C55E"
        assert text == Text(None, " Done")

    def test_callout_default_color(self, registry: Registry) -> None:
        primitive = _resolve("{{callout}}Note{{/callout}}", registry, BLOCK)
        assert primitive.children[0].color == "F41C80"

    def test_named_substitution(self) -> None:
        registry = load(
            {
                "components": {
                    "pill": {
                        "type": "expand",
                        "params": {"word": {"type": "string", "default": "hi"}},
                        "template": "[$word]",
                    }
                }
            }
        )
        assert _resolve("{{pill:word=yo/}}", registry).children == (Text(None, "[yo]"),)
        assert _resolve("{{pill/}}", registry).children == (Text(None, "[hi]"),)


# =========================================================================
# Context checks
# =========================================================================


class TestContexts:
    def _registry(self, promotions: list[str]) -> Registry:
        return load(
            {"glyphs": {"x": {"char": "x", "contexts": ["inline"], "promotions": promotions}}}
        )

    def test_inline_only_in_chrome_raises(self) -> None:
        with pytest.raises(ContextError) as exc_info:
            _resolve("{{x/}}", self._registry([]), CHROME)
        assert exc_info.value.permitted == (INLINE,)

    def test_promotion_to_block_succeeds(self) -> None:
        primitive = _resolve("{{x/}}", self._registry(["block"]), BLOCK)
        assert isinstance(primitive, Glyph)

    def test_undeclared_promotion_fails(self) -> None:
        with pytest.raises(ContextError):
            _resolve("{{x/}}", self._registry([]), BLOCK)


# =========================================================================
# Unknown tags and documents
# =========================================================================


class TestUnknownTags:
    def test_passthrough(self, registry: Registry) -> None:
        resolver = Resolver(registry)
        tag = parse("{{notreal}}", registry=registry).children[0]
        assert resolver.resolve(tag, BLOCK) == Text(None, "{{notreal}}")
        (diagnostic,) = resolver.diagnostics
        assert diagnostic.code is DiagnosticCode.UNKNOWN_TAG
        assert diagnostic.severity is Severity.WARNING

    def test_suggestion(self, registry: Registry) -> None:
        diagnostics = []
        tag = parse("{{mathbodl/}}", registry=registry).children[0]
        resolve(tag, INLINE, registry, diagnostics=diagnostics)
        assert diagnostics[0].suggestion == "mathbold"

    def test_unknown_namespace_member(self, registry: Registry) -> None:
        diagnostics = []
        tag = parse("{{ui:swatchh:accent/}}", registry=registry).children[0]
        assert resolve(tag, INLINE, registry, diagnostics=diagnostics).text == tag.raw
        assert "ui:swatchh" in diagnostics[0].message
        assert diagnostics[0].suggestion == "swatch"

    def test_namespace_suggestions_stay_in_kind(self, registry: Registry) -> None:
        diagnostics = []
        tag = parse("{{ui:dott/}}", registry=registry).children[0]
        resolve(tag, INLINE, registry, diagnostics=diagnostics)
        assert "dot" in registry.suggest("dott")
        assert diagnostics[0].suggestion is None
        assert registry.suggest("tach", kind=DefinitionKind.COMPONENT) == ["tech"]

    def test_unknown_inside_frame(self, registry: Registry) -> None:
        diagnostics = []
        tag = parse("{{frame:gradient}}a {{nope/}} b{{/frame}}", registry=registry).children[0]
        frame = resolve(tag, INLINE, registry, diagnostics=diagnostics)
        assert Text(None, "{{nope/}}") in frame.children
        assert len(diagnostics) == 1


class TestResolveDocument:
    def test_single_unknown_tag(self, registry: Registry) -> None:
        doc = parse("before {{notreal}} after", registry=registry)
        resolution = resolve_document(doc, registry)
        assert resolution.primitives == (Text(None, "{{notreal}}"),)
        assert len(resolution.diagnostics) == 1

    def test_contexts_from_layout(self, registry: Registry) -> None:
        doc = parse("{{ui:status:success/}}\ninline {{ui:status:info/}}\n", registry=registry)
        resolution = resolve_document(doc, registry)
        assert [type(p) for p in resolution.primitives] == [Status, Status]
        assert resolution.diagnostics == ()

    def test_errors_become_diagnostics(self, registry: Registry) -> None:
        source = "{{ui:swatch:fuchsia/}} and {{header}}x{{/header}} and {{dot/}}"
        resolution = resolve_document(parse(source, registry=registry), registry)
        bad_color, inline_header, dot = resolution.primitives
        assert bad_color == Text(None, "{{ui:swatch:fuchsia/}}")
        assert inline_header == Text(None, "{{header}}x{{/header}}")
        assert isinstance(dot, Glyph)
        codes = [d.code for d in resolution.diagnostics]
        assert codes == [DiagnosticCode.INVALID_PARAM, DiagnosticCode.INVALID_CONTEXT]
        assert all(d.severity is Severity.ERROR for d in resolution.diagnostics)

    def test_diagnostic_spans(self, registry: Registry) -> None:
        source = "ok\n\n{{nope/}}"
        resolution = resolve_document(parse(source, registry=registry), registry)
        assert resolution.diagnostics[0].span.lineno == 3

    def test_items_keep_spans(self, registry: Registry) -> None:
        source = "a {{dot/}} b"
        resolution = resolve_document(parse(source, registry=registry), registry)
        (item,) = resolution.items
        assert item.span.slice(source) == "{{dot/}}"
        assert resolution.source == source

    def test_diagnostic_to_dict(self, registry: Registry) -> None:
        resolution = resolve_document(parse("{{nope/}}", registry=registry), registry)
        data = resolution.diagnostics[0].to_dict()
        assert data["code"] == "unknown-tag"
        assert data["severity"] == "warning"
        assert data["line"] == 1
