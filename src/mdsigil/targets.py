"""Deployment targets and backend selection.

A Target describes where the expanded markdown will be read (GitHub, a local
docs site, npm, GitLab, PyPI) and what that place can display. Each target
names a preferred backend; the renderer downgrades any primitive the chosen
backend cannot deliver on that target to plain text.

Targets form a closed set. Dispatch over them uses ``match`` with
``assert_never`` so adding a variant fails type checking until every
``match`` handles it.

Example:
    >>> target = get_target("pypi")
    >>> target.preferred_backend
    <BackendKind.PLAINTEXT: 'plaintext'>
    >>> target.post_process("a → b")
    'a -> b'
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath
from types import MappingProxyType
from typing import assert_never

from mdsigil.utils.logger import get_logger
from mdsigil.utils.text import closest_names

logger = get_logger(__name__)


class BackendKind(Enum):
    """Output backends."""

    SHIELDS = "shields"
    SVG = "svg"
    PLAINTEXT = "plaintext"

    @classmethod
    def parse(cls, value: str) -> BackendKind:
        try:
            return cls(value.strip().lower())
        except ValueError:
            known = ", ".join(kind.value for kind in cls)
            raise ValueError(f"Unknown backend '{value}' (available: {known})") from None


class TargetKind(Enum):
    GITHUB = "github"
    LOCAL = "local"
    NPM = "npm"
    GITLAB = "gitlab"
    PYPI = "pypi"


@dataclass(frozen=True, slots=True)
class Target:
    """Capabilities of a deployment destination.

    Attributes:
        kind: Which destination
        supports_html: Raw HTML is rendered
        supports_svg_embed: Local SVG files referenced from markdown display
        supports_external_images: Remote images (shields.io) display
        unicode_styling: Mathematical alphanumeric styling displays well
        preferred_backend: Backend used unless overridden
        description: Human-readable summary
    """

    kind: TargetKind
    supports_html: bool
    supports_svg_embed: bool
    supports_external_images: bool
    preferred_backend: BackendKind
    unicode_styling: bool = True
    description: str = ""

    @property
    def name(self) -> str:
        return self.kind.value

    def accepts(self, backend: BackendKind) -> bool:
        """Whether output from ``backend`` displays on this target."""
        match backend:
            case BackendKind.SHIELDS:
                return self.supports_external_images
            case BackendKind.SVG:
                return self.supports_svg_embed
            case BackendKind.PLAINTEXT:
                return True
            case _:
                assert_never(backend)

    def post_process(self, text: str) -> str:
        """Whole-document rewrite applied after rendering."""
        match self.kind:
            case TargetKind.PYPI:
                return to_ascii(text)
            case TargetKind.GITHUB | TargetKind.LOCAL | TargetKind.NPM | TargetKind.GITLAB:
                return text
            case _:
                assert_never(self.kind)


# PyPI's renderer strips images and mangles box drawing; spell decorations in
# ASCII instead. Multi-codepoint emoji come first so their variation
# selectors go with them.
ASCII_REPLACEMENTS: tuple[tuple[str, str], ...] = (
    ("⚠️", "[!]"),
    ("ℹ️", "[i]"),
    ("🟢", "[OK]"),
    ("🟡", "[WARN]"),
    ("🔴", "[ERR]"),
    ("→", "->"),
    ("←", "<-"),
    ("↔", "<->"),
    ("•", "*"),
    ("·", "."),
    ("─", "-"),
    ("━", "-"),
    ("│", "|"),
    ("┌", "+"),
    ("┐", "+"),
    ("└", "+"),
    ("┘", "+"),
    ("├", "+"),
    ("┤", "+"),
    ("┬", "+"),
    ("┴", "+"),
    ("┼", "+"),
    ("▓", "#"),
    ("▒", "="),
    ("░", "-"),
    ("█", "#"),
    ("▌", "|"),
)


def to_ascii(text: str) -> str:
    """Replace decorative Unicode with ASCII equivalents."""
    for old, new in ASCII_REPLACEMENTS:
        text = text.replace(old, new)
    return text


TARGETS: MappingProxyType[TargetKind, Target] = MappingProxyType(
    {
        TargetKind.GITHUB: Target(
            kind=TargetKind.GITHUB,
            supports_html=False,
            supports_svg_embed=True,
            supports_external_images=True,
            preferred_backend=BackendKind.SHIELDS,
            description="GitHub README and wiki pages",
        ),
        TargetKind.LOCAL: Target(
            kind=TargetKind.LOCAL,
            supports_html=True,
            supports_svg_embed=True,
            supports_external_images=False,
            preferred_backend=BackendKind.SVG,
            description="Local documentation built offline",
        ),
        TargetKind.NPM: Target(
            kind=TargetKind.NPM,
            supports_html=False,
            supports_svg_embed=True,
            supports_external_images=True,
            preferred_backend=BackendKind.SHIELDS,
            description="npm package pages",
        ),
        TargetKind.GITLAB: Target(
            kind=TargetKind.GITLAB,
            supports_html=True,
            supports_svg_embed=True,
            supports_external_images=True,
            preferred_backend=BackendKind.SHIELDS,
            description="GitLab README and wiki pages",
        ),
        TargetKind.PYPI: Target(
            kind=TargetKind.PYPI,
            supports_html=False,
            supports_svg_embed=False,
            supports_external_images=True,
            preferred_backend=BackendKind.PLAINTEXT,
            unicode_styling=False,
            description="PyPI project description (ASCII-safe)",
        ),
    }
)

DEFAULT_TARGET = TargetKind.GITHUB

_DOCS_DIRS = frozenset({"docs", "documentation"})


def available_targets() -> list[str]:
    """Names accepted by ``get_target`` (besides ``"auto"``)."""
    return [kind.value for kind in TARGETS]


def default_target() -> Target:
    return TARGETS[DEFAULT_TARGET]


def detect_target_from_path(path: str | PurePath) -> Target | None:
    """Guess the target from where the output will be written.

    - ``README.md`` → github
    - ``PKG-INFO`` → pypi
    - ``package.json`` → npm
    - anything under a ``docs/`` or ``documentation/`` directory → local

    Returns:
        The detected target, or None when the path gives no hint
    """
    pure = PurePath(path)
    name = pure.name
    if name == "README.md":
        return TARGETS[TargetKind.GITHUB]
    if name in ("PKG-INFO", "PKG-INFO.md"):
        return TARGETS[TargetKind.PYPI]
    if name == "package.json":
        return TARGETS[TargetKind.NPM]
    if any(part.lower() in _DOCS_DIRS for part in pure.parent.parts):
        return TARGETS[TargetKind.LOCAL]
    return None


def get_target(name: str, *, output_path: str | PurePath | None = None) -> Target:
    """Look up a target by name (case-insensitive).

    ``"auto"`` detects the target from ``output_path`` and falls back to the
    default target when detection finds nothing.

    Raises:
        ValueError: Unknown target name
    """
    normalized = name.strip().lower()
    if normalized == "auto":
        detected = detect_target_from_path(output_path) if output_path is not None else None
        if detected is None:
            logger.debug("No target detected for %s; using %s", output_path, DEFAULT_TARGET.value)
            return default_target()
        logger.debug("Detected target %s for %s", detected.name, output_path)
        return detected
    try:
        return TARGETS[TargetKind(normalized)]
    except ValueError:
        known = available_targets()
        hint = closest_names(normalized, known, limit=1)
        msg = f"Unknown target '{name}' (available: {', '.join(known)}, auto)"
        if hint:
            msg += f"; did you mean '{hint[0]}'?"
        raise ValueError(msg) from None


__all__ = [
    "ASCII_REPLACEMENTS",
    "DEFAULT_TARGET",
    "TARGETS",
    "BackendKind",
    "Target",
    "TargetKind",
    "available_targets",
    "default_target",
    "detect_target_from_path",
    "get_target",
    "to_ascii",
]
