"""Source span tracking for error messages and diagnostics.

Provides SourceSpan, the byte-independent (code point) position of a tag or
text run in the template source. Spans travel from parser nodes through
primitives into rendered replacements, so output can be spliced back into the
original document.

Thread Safety:
SourceSpan is frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SourceSpan:
    """Half-open range ``[offset, end_offset)`` in the template source.

    Line and column numbers are 1-indexed and refer to the start of the span.

    Attributes:
        lineno: Starting line number (1-indexed)
        col_offset: Starting column (1-indexed)
        offset: Absolute start offset in the source string
        end_offset: Absolute end offset (exclusive)
        end_lineno: Ending line number (optional)
        end_col_offset: Ending column (optional)
        source_file: Source file path (optional)

    Examples:
        >>> span = SourceSpan(lineno=3, col_offset=5, offset=40, end_offset=52)
        >>> str(span)
        '3:5'
        >>> str(SourceSpan(1, 1, source_file="README.template.md"))
        'README.template.md:1:1'

    """

    lineno: int
    col_offset: int
    offset: int = 0
    end_offset: int = 0
    end_lineno: int | None = None
    end_col_offset: int | None = None
    source_file: str | None = None

    def __str__(self) -> str:
        """Format span for error messages ("file.md:10:5" or "10:5")."""
        if self.source_file:
            return f"{self.source_file}:{self.lineno}:{self.col_offset}"
        return f"{self.lineno}:{self.col_offset}"

    def __len__(self) -> int:
        return max(0, self.end_offset - self.offset)

    def span_to(self, end: SourceSpan) -> SourceSpan:
        """Create a new span running from this span's start to ``end``'s end."""
        return SourceSpan(
            lineno=self.lineno,
            col_offset=self.col_offset,
            offset=self.offset,
            end_offset=end.end_offset or end.offset,
            end_lineno=end.end_lineno or end.lineno,
            end_col_offset=end.end_col_offset or end.col_offset,
            source_file=self.source_file,
        )

    def slice(self, source: str) -> str:
        """Return the text this span covers in ``source``."""
        return source[self.offset : self.end_offset]

    @classmethod
    def unknown(cls) -> SourceSpan:
        """Placeholder span for synthetic nodes (e.g. expanded templates)."""
        return cls(lineno=0, col_offset=0)
