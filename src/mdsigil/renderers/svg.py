"""SVG backend.

Renders visual primitives as small SVG images. Each image is written as an
artifact named after a content hash of the primitive, so identical
primitives always produce the same path and the same bytes:

    {asset_dir}/{kind}_{hash}.svg

With ``inline=True`` the SVG is embedded as a base64 data URI and no
artifact is produced.

Shape per shield style:

======================  ======  ======  =====
style                   height  radius  shine
======================  ======  ======  =====
flat-square             20      0       no
flat                    20      3       no
for-the-badge           28      3       no
plastic                 20      3       yes
social                  20      10      no
======================  ======  ======  =====

"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from types import MappingProxyType

from mdsigil.errors import RenderError
from mdsigil.primitives import Divider, Status, Swatch, Tech, VisualPrimitive
from mdsigil.renderers.protocol import Artifact, Fragment
from mdsigil.stringbuilder import StringBuilder
from mdsigil.targets import BackendKind
from mdsigil.utils.hashing import subtree_hash
from mdsigil.utils.text import escape_xml

FONT_FAMILY = "Verdana,Geneva,DejaVu Sans,sans-serif"

SWATCH_WIDTH = 20
DIVIDER_SEGMENT_WIDTH = 40
TECH_MIN_WIDTH = 80


@dataclass(frozen=True, slots=True)
class StyleMetrics:
    height: int
    radius: int
    shine: bool = False


STYLE_METRICS: MappingProxyType[str, StyleMetrics] = MappingProxyType(
    {
        "flat-square": StyleMetrics(20, 0),
        "flat": StyleMetrics(20, 3),
        "for-the-badge": StyleMetrics(28, 3),
        "plastic": StyleMetrics(20, 3, shine=True),
        "social": StyleMetrics(20, 10),
    }
)

_SHINE = (
    '<linearGradient id="shine" x2="0" y2="100%">'
    '<stop offset="0" stop-color="#fff" stop-opacity=".7"/>'
    '<stop offset=".1" stop-color="#aaa" stop-opacity=".1"/>'
    '<stop offset=".9" stop-opacity=".3"/>'
    '<stop offset="1" stop-opacity=".5"/>'
    "</linearGradient>"
)


def metrics_for(style: str) -> StyleMetrics:
    """Metrics for a shield style; unknown styles get flat-square metrics."""
    return STYLE_METRICS.get(style, STYLE_METRICS["flat-square"])


def _hex(color: str) -> str:
    if len(color) != 6 or any(c not in "0123456789ABCDEFabcdef" for c in color):
        raise RenderError(f"Invalid colour '{color}' (expected 6 hex digits)")
    return color.upper()


def _contrast(color: str) -> str:
    """Black or white, whichever reads better on ``color``."""
    r, g, b = (int(color[i : i + 2], 16) for i in (0, 2, 4))
    luminance = 0.299 * r + 0.587 * g + 0.114 * b
    return "000000" if luminance > 150 else "FFFFFF"


def _text(x: float, y: float, content: str, *, fill: str, size: int) -> str:
    return (
        f'<text x="{x:g}" y="{y:g}" fill="#{fill}" font-family="{FONT_FAMILY}" '
        f'font-size="{size}" text-anchor="middle" dominant-baseline="central">'
        f"{escape_xml(content)}</text>"
    )


class SvgBackend:
    """File-producing backend.

    Thread Safety:
        Holds only configuration. Safe to share.
    """

    __slots__ = ("_asset_dir", "_inline")

    def __init__(self, asset_dir: str = "assets/mdsigil", *, inline: bool = False) -> None:
        """Initialize the backend.

        Args:
            asset_dir: Directory (POSIX, relative to the output document) for
                generated files
            inline: Embed SVG as data URIs instead of writing files
        """
        self._asset_dir = asset_dir.strip("/") or "."
        self._inline = inline

    @property
    def kind(self) -> BackendKind:
        return BackendKind.SVG

    def render(self, primitive: VisualPrimitive) -> Fragment:
        svg = self.build_svg(primitive)
        if self._inline:
            encoded = base64.b64encode(svg.encode("utf-8")).decode("ascii")
            return Fragment(f"![](data:image/svg+xml;base64,{encoded})")
        path = self.asset_path(primitive)
        return Fragment(f"![]({path})", (Artifact(path, svg.encode("utf-8")),))

    def asset_path(self, primitive: VisualPrimitive) -> str:
        """Deterministic relative path for a primitive's SVG file."""
        name = f"{type(primitive).__name__.lower()}_{subtree_hash(primitive)}.svg"
        return name if self._asset_dir == "." else f"{self._asset_dir}/{name}"

    def build_svg(self, primitive: VisualPrimitive) -> str:
        """SVG document text for a primitive."""
        match primitive:
            case Swatch():
                return self._swatch(primitive)
            case Divider():
                return self._divider(primitive)
            case Tech():
                return self._tech(primitive)
            case Status(color=color, style=style):
                return self._block(_hex(color), metrics_for(style), SWATCH_WIDTH)
            case _:
                raise RenderError(f"svg backend cannot render {type(primitive).__name__}")

    # -------------------------------------------------------------------------
    # Shapes
    # -------------------------------------------------------------------------

    def _document(self, width: int, height: int, body: str) -> str:
        return (
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}" '
            f'viewBox="0 0 {width} {height}">{body}</svg>\n'
        )

    def _block(
        self,
        color: str,
        metrics: StyleMetrics,
        width: int,
        height: int | None = None,
        label: str | None = None,
    ) -> str:
        height = height or metrics.height
        sb = StringBuilder()
        sb.append(f'<rect width="{width}" height="{height}" rx="{metrics.radius}" fill="#{color}"/>')
        if metrics.shine:
            sb.append(_SHINE)
            sb.append(
                f'<rect width="{width}" height="{height}" rx="{metrics.radius}" fill="url(#shine)"/>'
            )
        if label:
            size = 16 if height > 24 else 11
            sb.append(_text(width / 2, height / 2, label, fill=_contrast(color), size=size))
        return self._document(width, height, sb.build())

    def _swatch(self, swatch: Swatch) -> str:
        color = _hex(swatch.color)
        width = swatch.width
        if width is None:
            width = max(SWATCH_WIDTH, 7 * len(swatch.label) + 10) if swatch.label else SWATCH_WIDTH
        return self._block(color, metrics_for(swatch.style), width, swatch.height, swatch.label)

    def _divider(self, divider: Divider) -> str:
        metrics = metrics_for(divider.style)
        height = metrics.height
        width = DIVIDER_SEGMENT_WIDTH * len(divider.colors)

        sb = StringBuilder()
        sb.append(
            f'<clipPath id="round"><rect width="{width}" height="{height}" '
            f'rx="{metrics.radius}"/></clipPath>'
        )
        sb.append('<g clip-path="url(#round)">')
        for index, color in enumerate(divider.colors):
            sb.append(
                f'<rect x="{index * DIVIDER_SEGMENT_WIDTH}" width="{DIVIDER_SEGMENT_WIDTH}" '
                f'height="{height}" fill="#{_hex(color)}"/>'
            )
        sb.append("</g>")
        return self._document(width, height, sb.build())

    def _tech(self, tech: Tech) -> str:
        metrics = metrics_for(tech.style)
        height = metrics.height
        caption = (tech.label or tech.name).upper()
        size = 16 if height > 24 else 12
        width = max(TECH_MIN_WIDTH, (size * 3 // 4) * len(caption) + 16)
        bg = _hex(tech.bg_color)

        sb = StringBuilder()
        sb.append(f'<rect width="{width}" height="{height}" rx="{metrics.radius}" fill="#{bg}"/>')
        if metrics.shine:
            sb.append(_SHINE)
            sb.append(
                f'<rect width="{width}" height="{height}" rx="{metrics.radius}" fill="url(#shine)"/>'
            )
        sb.append(_text(width / 2, height / 2, caption, fill=_hex(tech.logo_color), size=size))
        return self._document(width, height, sb.build())


__all__ = ["STYLE_METRICS", "StyleMetrics", "SvgBackend", "metrics_for"]
