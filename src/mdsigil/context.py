"""Evaluation contexts and the promotion table.

Every tag is resolved in one of three contexts:

- ``INLINE``: inside a line of prose
- ``BLOCK``: on a line of its own, or inside a frame body
- ``FRAME_CHROME``: the prefix/suffix decoration slots of a frame

A definition lists the contexts it is permitted in, and may declare that it
can be *promoted* into others. Promotion is legal only along the edges in
``PROMOTIONS`` and only one step at a time; there is no transitive closure.

Thread Safety:
All module state is immutable.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING

from mdsigil.errors import ContextError

if TYPE_CHECKING:
    from mdsigil.definitions import RenderableDefinition
    from mdsigil.location import SourceSpan


class EvalContext(Enum):
    """Where in the document a tag is being evaluated."""

    INLINE = "inline"
    BLOCK = "block"
    FRAME_CHROME = "frame_chrome"

    @classmethod
    def parse(cls, value: str) -> EvalContext:
        """Look up a context by its data name (``"inline"``, ``"block"``, ...)."""
        normalized = value.strip().lower().replace("-", "_")
        if normalized == "framechrome":
            normalized = "frame_chrome"
        return cls(normalized)


# (declared, requested) -> legal. Anything absent is illegal.
PROMOTIONS: MappingProxyType[tuple[EvalContext, EvalContext], bool] = MappingProxyType(
    {
        (EvalContext.INLINE, EvalContext.BLOCK): True,
        (EvalContext.INLINE, EvalContext.FRAME_CHROME): True,
        (EvalContext.BLOCK, EvalContext.INLINE): False,
        (EvalContext.BLOCK, EvalContext.FRAME_CHROME): False,
        (EvalContext.FRAME_CHROME, EvalContext.INLINE): False,
        (EvalContext.FRAME_CHROME, EvalContext.BLOCK): False,
    }
)


def can_promote(declared: EvalContext, requested: EvalContext) -> bool:
    """Single-step promotion check against ``PROMOTIONS``."""
    return PROMOTIONS.get((declared, requested), False)


def is_legal_promotion_target(contexts: Iterable[EvalContext], target: EvalContext) -> bool:
    """Whether ``target`` is reachable in one step from any of ``contexts``."""
    return any(can_promote(ctx, target) for ctx in contexts)


def check_context(
    definition: RenderableDefinition,
    requested: EvalContext,
    *,
    tag: str | None = None,
    span: SourceSpan | None = None,
) -> None:
    """Verify a definition may be used in ``requested``.

    The context passes when it is directly permitted, or when the
    definition declares it as a promotion target and some permitted
    context reaches it in a single table step.

    Raises:
        ContextError: The context is neither permitted nor reachable.
    """
    if requested in definition.contexts:
        return
    if requested in definition.promotions and is_legal_promotion_target(
        definition.contexts, requested
    ):
        return
    raise ContextError(tag or definition.id, definition.contexts, requested, span)


__all__ = [
    "PROMOTIONS",
    "EvalContext",
    "can_promote",
    "check_context",
    "is_legal_promotion_target",
]
