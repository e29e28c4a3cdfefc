"""Exception classes for mdsigil.

Every failure mode of the pipeline has its own class so callers can decide
what is fatal:

- DefinitionError: bad registry data. Fatal at startup.
- ParseError: malformed tag structure. Fatal for the document.
- ValidationError: bad parameters on one tag. Collected as a diagnostic.
- ContextError: a tag used where its definition does not permit. Collected.
- RenderError: a backend failed to produce output for a primitive.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mdsigil.context import EvalContext
    from mdsigil.location import SourceSpan


def _prefix(span: SourceSpan | None) -> str:
    if span is None or span.lineno == 0:
        return ""
    return f"{span} "


class MdsigilError(Exception):
    """Base exception for all mdsigil errors.

    Subclass this for specific error categories.
    """

    pass


class DefinitionError(MdsigilError):
    """Invalid definition data.

    Raised while loading a registry: duplicate ids, ambiguous aliases,
    illegal promotion declarations, or templates that do not parse.
    """

    def __init__(self, message: str, definition_id: str | None = None) -> None:
        """Initialize definition error.

        Args:
            message: Error description
            definition_id: Canonical id of the offending definition (optional)
        """
        self.message = message
        self.definition_id = definition_id
        where = f"Definition '{definition_id}': " if definition_id else ""
        super().__init__(f"{where}{message}")


class ParseError(MdsigilError):
    """Malformed tag structure.

    Raised when a closing tag has no matching opener, a closing tag names
    the wrong opener, or an opening tag is never closed.
    """

    def __init__(self, message: str, span: SourceSpan | None = None) -> None:
        """Initialize parse error with optional location.

        Args:
            message: Error description
            span: Source span of the offending tag
        """
        self.message = message
        self.span = span
        super().__init__(f"{_prefix(span)}{message}")

    @property
    def lineno(self) -> int | None:
        return self.span.lineno if self.span else None

    @property
    def col_offset(self) -> int | None:
        return self.span.col_offset if self.span else None


class ValidationError(MdsigilError):
    """A tag parameter is unknown or has a malformed value.

    Carries an optional "did you mean" suggestion.
    """

    def __init__(
        self,
        tag: str,
        message: str,
        *,
        param: str | None = None,
        suggestion: str | None = None,
        span: SourceSpan | None = None,
    ) -> None:
        """Initialize validation error.

        Args:
            tag: Tag name as written in the source
            message: Description of the problem
            param: Offending parameter name (optional)
            suggestion: Replacement the author probably meant (optional)
            span: Source span of the tag (optional)
        """
        self.tag = tag
        self.param = param
        self.suggestion = suggestion
        self.span = span
        self.message = message

        text = f"{_prefix(span)}Tag '{tag}': {message}"
        if suggestion:
            text += f" (did you mean '{suggestion}'?)"
        super().__init__(text)


class ContextError(MdsigilError):
    """A tag appears in an evaluation context its definition does not allow."""

    def __init__(
        self,
        tag: str,
        permitted: Iterable[EvalContext],
        attempted: EvalContext,
        span: SourceSpan | None = None,
    ) -> None:
        """Initialize context error.

        Args:
            tag: Tag name as written in the source
            permitted: Contexts the definition allows
            attempted: Context the tag was used in
            span: Source span of the tag (optional)
        """
        self.tag = tag
        self.permitted = tuple(permitted)
        self.attempted = attempted
        self.span = span

        allowed = ", ".join(ctx.value for ctx in self.permitted) or "none"
        super().__init__(
            f"{_prefix(span)}Tag '{tag}' cannot be used in {attempted.value} context "
            f"(permitted: {allowed})"
        )


class RenderError(MdsigilError):
    """A backend failed to render a primitive.

    Raised for invalid primitive data that slipped past validation, such as
    an unresolvable colour.
    """

    pass


__all__ = [
    "ContextError",
    "DefinitionError",
    "MdsigilError",
    "ParseError",
    "RenderError",
    "ValidationError",
]
