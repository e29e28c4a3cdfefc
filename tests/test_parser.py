"""Tests for the template tag parser."""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from mdsigil import load
from mdsigil.config import ExpandConfig, expand_config_context
from mdsigil.errors import ParseError
from mdsigil.nodes import Param, Tag, Text
from mdsigil.parser import Parser, code_ranges, parse, split_params
from mdsigil.registry import Registry

BUILTIN = load()

# =========================================================================
# Tag forms
# =========================================================================


class TestTagForms:
    def test_self_closing(self) -> None:
        (tag,) = parse("{{dot/}}").children
        assert isinstance(tag, Tag)
        assert tag.name == "dot"
        assert tag.self_closing
        assert tag.body is None
        assert tag.raw == "{{dot/}}"

    def test_block(self) -> None:
        doc = parse("a {{mathbold}}B{{/mathbold}} c")
        first, tag, last = doc.children
        assert first == Text(first.span, "a ")
        assert last.content == " c"
        assert tag.name == "mathbold"
        assert [node.content for node in tag.body] == ["B"]
        assert tag.inner == "B"
        assert tag.raw == "{{mathbold}}B{{/mathbold}}"
        assert not tag.self_closing

    def test_nested_blocks(self) -> None:
        (frame,) = parse("{{frame:gradient}}{{mathbold}}Hi{{/mathbold}}{{/frame}}").children
        (inner,) = frame.body
        assert inner.name == "mathbold"
        assert inner.body_text() == "Hi"
        assert frame.inner == "{{mathbold}}Hi{{/mathbold}}"

    def test_empty_body(self) -> None:
        (tag,) = parse("{{mathbold}}{{/mathbold}}").children
        assert tag.body == ()
        assert tag.inner == ""

    @pytest.mark.parametrize("source", ["{{ x }}", "{{}}", "{{ dot/}}", "{{dot", "{dot}"])
    def test_non_tags_are_text(self, source: str) -> None:
        doc = parse(source)
        assert doc.tags() == ()
        assert "".join(node.content for node in doc) == source

    def test_tags_do_not_span_lines(self) -> None:
        assert parse("{{dot\n/}}").tags() == ()

    def test_document_metadata(self) -> None:
        doc = parse("{{dot/}}", source_file="README.md")
        assert doc.source == "{{dot/}}"
        assert doc.source_file == "README.md"
        assert len(doc) == 1

    def test_parser_class(self) -> None:
        doc = Parser("{{mathbold}}Hi{{/mathbold}}").parse()
        assert doc.children[0].name == "mathbold"


# =========================================================================
# Parameters
# =========================================================================


class TestParameters:
    def test_positional_and_named(self) -> None:
        (tag,) = parse("{{ui:swatch:accent:style=flat/}}").children
        assert tag.params == (
            Param(None, "swatch"),
            Param(None, "accent"),
            Param("style", "flat"),
        )
        assert tag.positional == ("swatch", "accent")
        assert tag.named == {"style": "flat"}

    def test_separator_colon(self) -> None:
        (tag,) = parse("{{mathbold:separator=:}}x{{/mathbold}}").children
        assert tag.named == {"separator": ":"}

    def test_separator_double_colon(self) -> None:
        (tag,) = parse("{{mathbold:separator=::}}x{{/mathbold}}").children
        assert tag.named == {"separator": "::"}

    def test_closing_brace_value(self) -> None:
        (tag,) = parse("{{mathbold:separator=}}}x{{/mathbold}}").children
        assert tag.named == {"separator": "}"}
        assert tag.body_text() == "x"

    def test_multiple_named(self) -> None:
        assert split_params(":spacing=2:separator=-") == (
            Param("spacing", "2"),
            Param("separator", "-"),
        )

    def test_empty_header(self) -> None:
        assert split_params("") == ()

    def test_param_str(self) -> None:
        assert str(Param("style", "flat")) == "style=flat"
        assert str(Param(None, "accent")) == "accent"


# =========================================================================
# Structural errors
# =========================================================================


class TestStructuralErrors:
    def test_missing_closing_tag(self) -> None:
        with pytest.raises(ParseError, match="Unclosed"):
            parse("{{mathbold}}TEXT")

    def test_missing_closing_tag_with_registry(self) -> None:
        with pytest.raises(ParseError, match="Unclosed"):
            parse("{{mathbold}}TEXT", registry=BUILTIN)

    def test_self_closing_hint(self) -> None:
        with pytest.raises(ParseError, match=r"\{\{dot/\}\}"):
            parse("{{dot}} text", registry=BUILTIN)

    def test_unmatched_closing_tag(self) -> None:
        with pytest.raises(ParseError, match="no matching opening tag"):
            parse("text {{/mathbold}}")

    def test_mismatched_closing_tag(self) -> None:
        with pytest.raises(ParseError, match="Mismatched"):
            parse("{{mathbold}}x{{/italic}}")

    def test_error_span(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse("line one\n  {{/mathbold}}")
        err = exc_info.value
        assert err.lineno == 2
        assert err.col_offset == 3
        assert str(err).startswith("2:3 ")


# =========================================================================
# Unknown names with a registry
# =========================================================================


class TestUnknownNames:
    def test_unclosed_unknown_becomes_bare_tag(self, registry: Registry) -> None:
        tag, text = parse("{{notreal}} text", registry=registry).children
        assert tag.name == "notreal"
        assert tag.is_bare
        assert tag.raw == "{{notreal}}"
        assert text.content == " text"

    def test_unknown_inside_block(self, registry: Registry) -> None:
        (tag,) = parse("{{mathbold}}a {{nope}} b{{/mathbold}}", registry=registry).children
        kinds = [type(node).__name__ for node in tag.body]
        assert kinds == ["Text", "Tag", "Text"]
        assert tag.body[1].is_bare

    def test_closed_unknown_keeps_body(self, registry: Registry) -> None:
        (tag,) = parse("{{nope}}x{{/nope}}", registry=registry).children
        assert tag.body_text() == "x"

    def test_unknown_namespace_member(self, registry: Registry) -> None:
        (tag, _) = parse("{{frame:nope}} x", registry=registry).children
        assert tag.is_bare

    def test_without_registry_unknown_is_error(self) -> None:
        with pytest.raises(ParseError):
            parse("{{notreal}} text")


# =========================================================================
# Code preservation
# =========================================================================


class TestCodePreservation:
    def test_inline_code_span(self) -> None:
        doc = parse("use `{{dot/}}` for a dot: {{dot/}}")
        assert len(doc.tags()) == 1
        assert doc.tags()[0].span.offset == len("use `{{dot/}}` for a dot: ")

    def test_fenced_block(self) -> None:
        source = "```markdown\n{{dot/}}\n```\n{{dot/}}\n"
        assert len(parse(source).tags()) == 1

    def test_tilde_fence(self) -> None:
        assert parse("~~~\n{{mathbold}}x\n~~~\n").tags() == ()

    def test_unterminated_fence_runs_to_end(self) -> None:
        assert parse("```\n{{dot/}}\n").tags() == ()

    def test_unmatched_backtick_is_text(self) -> None:
        assert len(parse("a ` b {{dot/}}").tags()) == 1

    def test_disabled(self) -> None:
        with expand_config_context(ExpandConfig(preserve_code=False)):
            assert len(parse("`{{dot/}}`").tags()) == 1

    def test_code_ranges(self) -> None:
        assert code_ranges("a `b` c") == [(2, 5)]


# =========================================================================
# Positions
# =========================================================================


class TestPositions:
    def test_span(self) -> None:
        (_, tag) = parse("ab\n  {{dot/}}").children
        assert tag.span.lineno == 2
        assert tag.span.col_offset == 3
        assert tag.span.offset == 5
        assert tag.span.end_offset == 13
        assert tag.span.slice("ab\n  {{dot/}}") == "{{dot/}}"

    def test_standalone(self) -> None:
        tags = parse("{{dot/}}\n  {{dot/}}  \ntext {{dot/}}\n").tags()
        assert [tag.standalone for tag in tags] == [True, True, False]

    def test_block_tag_standalone(self) -> None:
        (tag,) = parse("{{mathbold}}Title{{/mathbold}}").children
        assert tag.standalone

    def test_source_file_in_span(self) -> None:
        (tag,) = parse("{{dot/}}", source_file="doc.md").children
        assert str(tag.span) == "doc.md:1:1"


# =========================================================================
# Properties
# =========================================================================


class TestParserProperties:
    @given(source=st.text(max_size=80).filter(lambda s: "{{" not in s))
    @settings(max_examples=50)
    def test_text_without_tags_round_trips(self, source: str) -> None:
        doc = parse(source)
        assert doc.tags() == ()
        assert "".join(node.content for node in doc) == source

    @given(source=st.text(alphabet="{}/:ab=` \n", max_size=40))
    @settings(max_examples=50)
    def test_only_parse_errors(self, source: str) -> None:
        try:
            doc = parse(source, registry=BUILTIN)
        except ParseError:
            return
        assert doc.source == source
