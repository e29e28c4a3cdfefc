"""Diagnostics collected during resolution.

Per-tag problems (unknown names, bad parameters, illegal contexts) do not
abort a document. Each becomes a Diagnostic and the offending tag passes
through as literal text.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from mdsigil.errors import ContextError, ValidationError
from mdsigil.location import SourceSpan


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class DiagnosticCode(Enum):
    """Stable identifiers for diagnostic categories."""

    UNKNOWN_TAG = "unknown-tag"
    INVALID_PARAM = "invalid-param"
    INVALID_CONTEXT = "invalid-context"
    RENDER_FALLBACK = "render-fallback"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """One problem found in a template.

    Attributes:
        severity: How serious the problem is
        code: Category identifier
        message: Human-readable description
        span: Where in the source
        suggestion: Replacement the author probably meant (optional)
    """

    severity: Severity
    code: DiagnosticCode
    message: str
    span: SourceSpan
    suggestion: str | None = None

    def __str__(self) -> str:
        text = f"{self.span}: {self.severity.value}[{self.code.value}]: {self.message}"
        if self.suggestion:
            text += f" (did you mean '{self.suggestion}'?)"
        return text

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly form for editor integrations and reports."""
        return {
            "severity": self.severity.value,
            "code": self.code.value,
            "message": self.message,
            "line": self.span.lineno,
            "column": self.span.col_offset,
            "offset": self.span.offset,
            "end_offset": self.span.end_offset,
            "file": self.span.source_file,
            "suggestion": self.suggestion,
        }

    @classmethod
    def unknown_tag(cls, name: str, span: SourceSpan, suggestions: list[str]) -> Diagnostic:
        return cls(
            severity=Severity.WARNING,
            code=DiagnosticCode.UNKNOWN_TAG,
            message=f"Unknown tag '{name}' left as literal text",
            span=span,
            suggestion=suggestions[0] if suggestions else None,
        )

    @classmethod
    def from_error(cls, error: ValidationError | ContextError, span: SourceSpan) -> Diagnostic:
        match error:
            case ValidationError():
                return cls(
                    severity=Severity.ERROR,
                    code=DiagnosticCode.INVALID_PARAM,
                    message=f"Tag '{error.tag}': {error.message}",
                    span=error.span or span,
                    suggestion=error.suggestion,
                )
            case ContextError():
                allowed = ", ".join(sorted(ctx.value for ctx in error.permitted))
                return cls(
                    severity=Severity.ERROR,
                    code=DiagnosticCode.INVALID_CONTEXT,
                    message=(
                        f"Tag '{error.tag}' cannot be used in {error.attempted.value} "
                        f"context (permitted: {allowed})"
                    ),
                    span=error.span or span,
                )


__all__ = ["Diagnostic", "DiagnosticCode", "Severity"]
