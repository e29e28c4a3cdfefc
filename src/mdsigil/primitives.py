"""Render primitives: the resolved, backend-independent IR.

The resolver turns each tag into one primitive. Text-like primitives
(``Text``, ``StyledText``, ``Separator``, ``Glyph``, ``Badge``) render to the
same characters everywhere; visual primitives (``Swatch``, ``Divider``,
``Tech``, ``Status``) are what backends turn into images. ``Frame`` and
``Group`` are containers.

Every primitive records the canonical definition it came from, never the
alias used in the source.

Primitive Hierarchy:
Primitive (base)
├── Text
├── StyledText
├── Separator
├── Glyph
├── Badge
├── Frame
├── Group
├── Swatch
├── Divider
├── Tech
└── Status

Thread Safety:
All primitives are frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

from typing import TypeAlias

from dataclasses import dataclass

from mdsigil.definitions import DefinitionRef, PostProcess


@dataclass(frozen=True, slots=True)
class Primitive:
    """Base class for all primitives.

    ``source`` is None for literal text that came from no definition.
    """

    source: DefinitionRef | None


# =============================================================================
# Text primitives
# =============================================================================


@dataclass(frozen=True, slots=True)
class Text(Primitive):
    """Literal text, passed through unchanged."""

    text: str


@dataclass(frozen=True, slots=True)
class Separator(Primitive):
    """One separator character placed between styled characters."""

    char: str


@dataclass(frozen=True, slots=True)
class StyledText(Primitive):
    """Text transformed through a style's character table.

    Attributes:
        text: Original (unstyled) text
        chars: Styled form of each input character
        separator: Character placed between styled characters (wins over
            ``spacing``)
        spacing: Number of spaces between styled characters
    """

    text: str
    chars: tuple[str, ...]
    separator: Separator | None = None
    spacing: int = 0

    @property
    def rendered(self) -> str:
        """Styled text without spacing or separators."""
        return "".join(self.chars)

    @property
    def joined(self) -> str:
        """Styled text with separator or spacing applied."""
        if self.separator is not None:
            return self.separator.char.join(self.chars)
        if self.spacing:
            return (" " * self.spacing).join(self.chars)
        return self.rendered


@dataclass(frozen=True, slots=True)
class Glyph(Primitive):
    """A named glyph, optionally repeated."""

    char: str
    repeat: int = 1


@dataclass(frozen=True, slots=True)
class Badge(Primitive):
    """Enclosed label such as ``①`` or ``⒜``.

    Attributes:
        label: Label text as written
        glyph: Enclosed character for the label
        color: Optional text colour (hex), used where HTML displays
    """

    label: str
    glyph: str
    color: str | None = None


# =============================================================================
# Containers
# =============================================================================


@dataclass(frozen=True, slots=True)
class Frame(Primitive):
    """Decorative prefix and suffix around a body."""

    prefix: Primitive
    suffix: Primitive
    children: tuple[Primitive, ...]


@dataclass(frozen=True, slots=True)
class Group(Primitive):
    """Sequence of primitives from a snippet or expand component."""

    children: tuple[Primitive, ...]
    post_process: PostProcess = PostProcess.NONE


# =============================================================================
# Visual primitives
# =============================================================================


@dataclass(frozen=True, slots=True)
class Swatch(Primitive):
    """Solid colour block.

    Attributes:
        color: 6-digit upper-case hex
        style: Shield style id
        label: Optional text on the block
        icon: Optional Simple Icons slug
        icon_color: Icon colour (hex)
        width: Width in pixels for SVG output
        height: Height in pixels for SVG output (None = style height)
    """

    color: str
    style: str
    label: str | None = None
    icon: str | None = None
    icon_color: str | None = None
    width: int | None = None
    height: int | None = None


@dataclass(frozen=True, slots=True)
class Divider(Primitive):
    """Horizontal bar of colour blocks."""

    colors: tuple[str, ...]
    style: str


@dataclass(frozen=True, slots=True)
class Tech(Primitive):
    """Technology logo chip.

    Attributes:
        name: Simple Icons slug (e.g. "rust", "python")
        bg_color: Background colour (hex)
        logo_color: Logo colour (hex)
        style: Shield style id
        label: Optional text next to the logo
    """

    name: str
    bg_color: str
    logo_color: str
    style: str
    label: str | None = None


@dataclass(frozen=True, slots=True)
class Status(Primitive):
    """Status indicator; ``color`` is the resolved colour for ``level``."""

    level: str
    color: str
    style: str


TextPrimitive: TypeAlias = Text | StyledText | Separator | Glyph | Badge
VisualPrimitive: TypeAlias = Swatch | Divider | Tech | Status
ContainerPrimitive: TypeAlias = Frame | Group


__all__ = [
    "Badge",
    "ContainerPrimitive",
    "Divider",
    "Frame",
    "Glyph",
    "Group",
    "Primitive",
    "Separator",
    "Status",
    "StyledText",
    "Swatch",
    "Tech",
    "Text",
    "TextPrimitive",
    "VisualPrimitive",
]
