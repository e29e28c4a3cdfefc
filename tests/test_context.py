"""Tests for evaluation contexts and the promotion table."""

import pytest

from mdsigil.context import (
    PROMOTIONS,
    EvalContext,
    can_promote,
    check_context,
    is_legal_promotion_target,
)
from mdsigil.definitions import DefinitionKind, GlyphParams, RenderableDefinition
from mdsigil.errors import ContextError

INLINE = EvalContext.INLINE
BLOCK = EvalContext.BLOCK
CHROME = EvalContext.FRAME_CHROME


def _definition(contexts, promotions=()) -> RenderableDefinition:
    return RenderableDefinition(
        "x",
        DefinitionKind.GLYPH,
        GlyphParams("x"),
        contexts=frozenset(contexts),
        promotions=frozenset(promotions),
    )


class TestPromotionTable:
    def test_inline_promotes_to_block_and_chrome(self) -> None:
        assert can_promote(INLINE, BLOCK)
        assert can_promote(INLINE, CHROME)

    @pytest.mark.parametrize(
        ("declared", "requested"),
        [(BLOCK, INLINE), (BLOCK, CHROME), (CHROME, INLINE), (CHROME, BLOCK)],
    )
    def test_no_other_edges(self, declared: EvalContext, requested: EvalContext) -> None:
        assert not can_promote(declared, requested)

    def test_table_covers_every_ordered_pair(self) -> None:
        pairs = {(a, b) for a in EvalContext for b in EvalContext if a is not b}
        assert set(PROMOTIONS) == pairs

    def test_legal_target_from_any_context(self) -> None:
        assert is_legal_promotion_target([BLOCK, INLINE], CHROME)
        assert not is_legal_promotion_target([BLOCK], CHROME)


class TestParseContext:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("inline", INLINE),
            ("Block", BLOCK),
            ("frame_chrome", CHROME),
            ("frame-chrome", CHROME),
            ("FrameChrome", CHROME),
        ],
    )
    def test_parse(self, text: str, expected: EvalContext) -> None:
        assert EvalContext.parse(text) is expected

    def test_unknown(self) -> None:
        with pytest.raises(ValueError):
            EvalContext.parse("sidebar")


class TestCheckContext:
    def test_permitted_context(self) -> None:
        check_context(_definition([INLINE]), INLINE)

    def test_declared_promotion(self) -> None:
        check_context(_definition([INLINE], [BLOCK]), BLOCK)

    def test_inline_only_in_chrome_without_promotion(self) -> None:
        with pytest.raises(ContextError) as exc_info:
            check_context(_definition([INLINE]), CHROME, tag="x")
        err = exc_info.value
        assert err.tag == "x"
        assert err.permitted == (INLINE,)
        assert err.attempted is CHROME
        assert "frame_chrome" in str(err)

    def test_undeclared_promotion_is_not_applied(self) -> None:
        with pytest.raises(ContextError):
            check_context(_definition([INLINE], [BLOCK]), CHROME)

    def test_no_demotion(self) -> None:
        with pytest.raises(ContextError):
            check_context(_definition([BLOCK]), INLINE)
