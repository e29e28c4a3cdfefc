"""Built-in definition data.

``BUILTIN_RECORDS`` uses the same record format accepted by
``Registry.from_dict`` and ``Registry.from_json``, so it doubles as the
reference for writing custom definition files.

Record format::

    {
        "glyphs":     {id: {"char", "aliases"?, "contexts"?, "promotions"?}},
        "snippets":   {id: {"template", ...}},
        "components": {id: {"type": "native"|"expand", "self_closing"?,
                            "args"?, "params"?, "template"?,
                            "body_context"?, "post_process"?, ...}},
        "styles":     {id: {"mappings", ...}},
        "frames":     {id: {"prefix", "suffix", ...}},
        "badges":     {id: {"mappings", ...}},
        "palette":    {name: "RRGGBB"},
        "shield_styles": {id: {"aliases"?, "default"?}},
    }

"""

from __future__ import annotations

from typing import Any

from mdsigil.registry.tables import BADGE_TABLES, STYLE_TABLES

_GLYPHS: dict[str, dict[str, Any]] = {
    "dot": {"char": "·", "aliases": ["middot"]},
    "bullet": {"char": "•", "aliases": ["bul"]},
    "dash": {"char": "─", "aliases": ["line"]},
    "bolddash": {"char": "━", "aliases": ["heavy-dash"]},
    "arrow": {"char": "→", "aliases": ["rarrow"]},
    "larrow": {"char": "←"},
    "pipe": {"char": "│", "aliases": ["vbar"]},
    "star": {"char": "★"},
    "diamond": {"char": "◆"},
    "sparkle": {"char": "✦"},
    "check": {"char": "✓", "aliases": ["tick"]},
    "cross": {"char": "✗"},
    "block.full": {"char": "█", "aliases": ["block"]},
    "shade.light": {"char": "░", "aliases": ["light"]},
    "shade.medium": {"char": "▒", "aliases": ["medium"]},
    "shade.dark": {"char": "▓", "aliases": ["dark"]},
}

_SNIPPETS: dict[str, dict[str, Any]] = {
    "section-break": {
        "template": "{{dash:repeat=3/}} {{sparkle/}} {{dash:repeat=3/}}",
        "description": "Centered ornament for separating sections",
    },
    "rule": {
        "template": "{{bolddash:repeat=40/}}",
        "contexts": ["block"],
        "description": "Heavy horizontal rule",
    },
}

_STYLE_PARAM = {"type": "shield_style"}

_COMPONENTS: dict[str, dict[str, Any]] = {
    "swatch": {
        "type": "native",
        "args": ["color"],
        "params": {
            "color": {"type": "color", "required": True},
            "style": _STYLE_PARAM,
            "label": {"type": "string"},
            "icon": {"type": "string"},
            "icon_color": {"type": "color"},
            "width": {"type": "int", "minimum": 1, "maximum": 400},
            "height": {"type": "int", "minimum": 1, "maximum": 200},
        },
        "description": "Solid colour block",
    },
    "divider": {
        "type": "native",
        "params": {
            "colors": {"type": "color_list", "default": "ui.bg/ui.surface/ui.panel/accent"},
            "style": _STYLE_PARAM,
        },
        "contexts": ["block"],
        "description": "Bar of colour blocks",
    },
    "tech": {
        "type": "native",
        "args": ["name"],
        "params": {
            "name": {"type": "string", "required": True},
            "bg": {"type": "color", "default": "ui.bg"},
            "logo": {"type": "color", "default": "white"},
            "style": _STYLE_PARAM,
            "label": {"type": "string"},
        },
        "contexts": ["inline"],
        "promotions": ["block"],
        "description": "Technology logo chip (Simple Icons slug)",
    },
    "status": {
        "type": "native",
        "args": ["level"],
        "params": {
            "level": {
                "type": "choice",
                "required": True,
                "choices": ["success", "warning", "error", "info"],
            },
            "style": _STYLE_PARAM,
        },
        "contexts": ["inline"],
        "promotions": ["block"],
        "description": "Status indicator block",
    },
    "header": {
        "type": "expand",
        "self_closing": False,
        "template": "{{frame:gradient}}{{mathbold:separator=dot}}$content{{/mathbold}}{{/frame}}",
        "body_context": "inline",
        "contexts": ["block"],
        "description": "Gradient-framed bold heading",
    },
    "callout": {
        "type": "expand",
        "self_closing": False,
        "args": ["color"],
        "params": {"color": {"type": "color", "default": "accent"}},
        "template": "{{ui:swatch:$1/}} $content",
        "body_context": "block",
        "post_process": "blockquote",
        "contexts": ["block"],
        "description": "Blockquote with a colour marker",
    },
}

_FRAMES: dict[str, dict[str, Any]] = {
    "gradient": {"prefix": "▓▒░ ", "suffix": " ░▒▓", "aliases": ["grad"]},
    "solid-left": {"prefix": "█ ", "suffix": "", "aliases": ["left"]},
    "solid-right": {"prefix": "", "suffix": " █", "aliases": ["right"]},
    "solid-both": {"prefix": "█ ", "suffix": " █", "aliases": ["solid"]},
    "line-light": {"prefix": "── ", "suffix": " ──", "aliases": ["thin"]},
    "line-bold": {"prefix": "━━ ", "suffix": " ━━", "aliases": ["thick"]},
    "line-double": {"prefix": "══ ", "suffix": " ══", "aliases": ["double-line"]},
    "stars": {"prefix": "★ ", "suffix": " ★", "aliases": ["star-frame"]},
    "bracket": {"prefix": "【", "suffix": "】", "aliases": ["lenticular"]},
    "diamonds": {"prefix": "◆ ", "suffix": " ◆", "aliases": ["diamond-frame"]},
}

_PALETTE: dict[str, str] = {
    "accent": "F41C80",
    "success": "22C55E",
    "warning": "EAB308",
    "error": "EF4444",
    "info": "3B82F6",
    "cobalt": "2B6CB0",
    "slate": "334155",
    "ui.bg": "292A2D",
    "ui.surface": "3B3C40",
    "ui.panel": "4A4B50",
    "white": "FFFFFF",
    "black": "000000",
}

_SHIELD_STYLES: dict[str, dict[str, Any]] = {
    "flat-square": {"aliases": ["square"], "default": True},
    "flat": {"aliases": []},
    "for-the-badge": {"aliases": ["large", "ftb"]},
    "plastic": {"aliases": []},
    "social": {"aliases": []},
}


def _table_records(tables: dict) -> dict[str, dict[str, Any]]:
    return {
        name: {"aliases": list(aliases), "description": description, "mappings": mapping}
        for name, (aliases, description, mapping) in tables.items()
    }


BUILTIN_RECORDS: dict[str, Any] = {
    "glyphs": _GLYPHS,
    "snippets": _SNIPPETS,
    "components": _COMPONENTS,
    "styles": _table_records(STYLE_TABLES),
    "frames": _FRAMES,
    "badges": _table_records(BADGE_TABLES),
    "palette": _PALETTE,
    "shield_styles": _SHIELD_STYLES,
}

