"""Plain-text backend.

Spells visual primitives as bracketed text, for targets that display no
images and as the fallback when a target rejects the chosen backend:

- swatch: ``[#F41C80]``, ``[#F41C80 rust]`` (icon) or ``[#F41C80 label]``
- divider: ``--- #292A2D #3B3C40 ---``
- tech: ``[rust]`` or ``[label]``
- status: ``[OK]``, ``[WARN]``, ``[ERR]``, ``[INFO]``
"""

from __future__ import annotations

from types import MappingProxyType

from mdsigil.errors import RenderError
from mdsigil.primitives import Divider, Status, Swatch, Tech, VisualPrimitive
from mdsigil.renderers.protocol import Fragment
from mdsigil.targets import BackendKind

STATUS_TEXT: MappingProxyType[str, str] = MappingProxyType(
    {
        "success": "[OK]",
        "warning": "[WARN]",
        "error": "[ERR]",
        "info": "[INFO]",
    }
)


class PlainTextBackend:
    """ASCII-friendly backend. Stateless."""

    __slots__ = ()

    @property
    def kind(self) -> BackendKind:
        return BackendKind.PLAINTEXT

    def render(self, primitive: VisualPrimitive) -> Fragment:
        return Fragment(self.render_text(primitive))

    def render_text(self, primitive: VisualPrimitive) -> str:
        match primitive:
            case Swatch(color=color, icon=icon, label=label):
                detail = icon or label
                return f"[#{color} {detail}]" if detail else f"[#{color}]"
            case Divider(colors=colors):
                return "--- " + " ".join(f"#{color}" for color in colors) + " ---"
            case Tech(name=name, label=label):
                return f"[{label or name}]"
            case Status(level=level):
                return STATUS_TEXT.get(level, "[?]")
            case _:
                raise RenderError(f"plaintext backend cannot render {type(primitive).__name__}")


__all__ = ["STATUS_TEXT", "PlainTextBackend"]
