"""shields.io backend.

Renders visual primitives as markdown image references to shields.io static
badges. Pure: no I/O, and the same primitive always gives the same string.

URL forms:
- block: ``https://img.shields.io/badge/-%20-{HEX}?style={STYLE}``
- labelled block: ``https://img.shields.io/badge/-{LABEL}-{HEX}?style={STYLE}``
- logo chip: ``...?style={STYLE}&logo={SLUG}&logoColor={HEX}&label=&labelColor={HEX}``
"""

from __future__ import annotations

from urllib.parse import quote

from mdsigil.errors import RenderError
from mdsigil.primitives import Divider, Status, Swatch, Tech, VisualPrimitive
from mdsigil.renderers.protocol import Fragment
from mdsigil.targets import BackendKind
from mdsigil.utils.text import shields_escape

BADGE_URL = "https://img.shields.io/badge/"


def _check_hex(color: str) -> str:
    if len(color) != 6 or any(c not in "0123456789ABCDEFabcdef" for c in color):
        raise RenderError(f"Invalid colour '{color}' (expected 6 hex digits)")
    return color.upper()


def _message(label: str | None) -> str:
    return shields_escape(label) if label else "%20"


def badge_url(
    color: str,
    style: str,
    *,
    label: str | None = None,
    logo: str | None = None,
    logo_color: str | None = None,
) -> str:
    """Build a static badge URL.

    Example:
        >>> badge_url("f41c80", "flat-square")
        'https://img.shields.io/badge/-%20-F41C80?style=flat-square'
    """
    color = _check_hex(color)
    url = f"{BADGE_URL}-{_message(label)}-{color}?style={style}"
    if logo:
        logo_hex = _check_hex(logo_color or "FFFFFF")
        url += f"&logo={quote(logo, safe='')}&logoColor={logo_hex}&label=&labelColor={color}"
    return url


def _image(url: str) -> str:
    return f"![]({url})"


class ShieldsBackend:
    """Remote-reference backend (shields.io).

    Thread Safety:
        Stateless. Safe to share.
    """

    __slots__ = ()

    @property
    def kind(self) -> BackendKind:
        return BackendKind.SHIELDS

    def render(self, primitive: VisualPrimitive) -> Fragment:
        return Fragment(self.render_text(primitive))

    def render_text(self, primitive: VisualPrimitive) -> str:
        match primitive:
            case Swatch(icon=icon) if icon:
                return _image(
                    badge_url(
                        primitive.color,
                        primitive.style,
                        label=primitive.label,
                        logo=icon,
                        logo_color=primitive.icon_color,
                    )
                )
            case Swatch():
                return _image(badge_url(primitive.color, primitive.style, label=primitive.label))
            case Divider(colors=colors, style=style):
                return "".join(_image(badge_url(color, style)) for color in colors)
            case Tech():
                return _image(
                    badge_url(
                        primitive.bg_color,
                        primitive.style,
                        label=primitive.label,
                        logo=primitive.name,
                        logo_color=primitive.logo_color,
                    )
                )
            case Status(color=color, style=style):
                return _image(badge_url(color, style))
            case _:
                raise RenderError(f"shields backend cannot render {type(primitive).__name__}")


__all__ = ["BADGE_URL", "ShieldsBackend", "badge_url"]
