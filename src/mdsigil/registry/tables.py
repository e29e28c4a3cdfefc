"""Character tables for the built-in styles and badges.

Most Unicode text styles are contiguous runs in the Mathematical Alphanumeric
Symbols block (U+1D400..U+1D7FF), so a table is generated from the code point
of its capital A (lowercase follows 26 code points later) and of its digit
zero. A handful of letters were encoded earlier in Letterlike Symbols; those
slots are reserved in the math block and must be patched from ``holes``.
"""

from __future__ import annotations

from string import ascii_lowercase, ascii_uppercase, digits


def offset_table(
    upper: int | None = None,
    lower: int | None = None,
    digit: int | None = None,
    *,
    holes: dict[str, str] | None = None,
    fold_lower: bool = False,
) -> dict[str, str]:
    """Build a character table from code point offsets.

    Args:
        upper: Code point of the styled "A"
        lower: Code point of the styled "a" (defaults to ``upper + 26``)
        digit: Code point of the styled "0"
        holes: Per-character overrides for reserved code points
        fold_lower: Map lowercase letters to the uppercase forms (for
            capital-only styles such as negative squared)
    """
    table: dict[str, str] = {}
    if upper is not None:
        for i, ch in enumerate(ascii_uppercase):
            table[ch] = chr(upper + i)
        if fold_lower:
            for i, ch in enumerate(ascii_lowercase):
                table[ch] = chr(upper + i)
        elif lower is None:
            lower = upper + 26
    if lower is not None:
        for i, ch in enumerate(ascii_lowercase):
            table[ch] = chr(lower + i)
    if digit is not None:
        for i, ch in enumerate(digits):
            table[ch] = chr(digit + i)
    if holes:
        table.update(holes)
    return table


_ITALIC_HOLES = {"h": "ℎ"}

_SCRIPT_HOLES = {
    "B": "ℬ",
    "E": "ℰ",
    "F": "ℱ",
    "H": "ℋ",
    "I": "ℐ",
    "L": "ℒ",
    "M": "ℳ",
    "R": "ℛ",
    "e": "ℯ",
    "g": "ℊ",
    "o": "ℴ",
}

_FRAKTUR_HOLES = {
    "C": "ℭ",
    "H": "ℌ",
    "I": "ℑ",
    "R": "ℜ",
    "Z": "ℨ",
}

_DOUBLE_STRUCK_HOLES = {
    "C": "ℂ",
    "H": "ℍ",
    "N": "ℕ",
    "P": "ℙ",
    "Q": "ℚ",
    "R": "ℝ",
    "Z": "ℤ",
}

_SMALL_CAPS = "ᴀʙᴄᴅᴇꜰɢʜɪᴊᴋʟᴍɴᴏᴘǫʀsᴛᴜᴠᴡxʏᴢ"


def _small_caps() -> dict[str, str]:
    table = dict(zip(ascii_lowercase, _SMALL_CAPS, strict=True))
    table.update(zip(ascii_uppercase, _SMALL_CAPS, strict=True))
    return table


def _circled() -> dict[str, str]:
    table = offset_table(0x24B6, 0x24D0)
    table["0"] = "⓪"
    for n in range(1, 10):
        table[str(n)] = chr(0x2460 + n - 1)
    return table


# id -> (aliases, description, table)
STYLE_TABLES: dict[str, tuple[tuple[str, ...], str, dict[str, str]]] = {
    "mathbold": (("mb", "bold"), "Mathematical bold", offset_table(0x1D400, digit=0x1D7CE)),
    "italic": (("it",), "Mathematical italic", offset_table(0x1D434, holes=_ITALIC_HOLES)),
    "bold-italic": (("bi",), "Mathematical bold italic", offset_table(0x1D468)),
    "script": (("scr", "cursive"), "Mathematical script", offset_table(0x1D49C, holes=_SCRIPT_HOLES)),
    "bold-script": (("bscr",), "Mathematical bold script", offset_table(0x1D4D0)),
    "fraktur": (("fr", "gothic"), "Mathematical fraktur", offset_table(0x1D504, holes=_FRAKTUR_HOLES)),
    "bold-fraktur": (("bfr",), "Mathematical bold fraktur", offset_table(0x1D56C)),
    "double-struck": (
        ("ds", "blackboard"),
        "Mathematical double-struck",
        offset_table(0x1D538, digit=0x1D7D8, holes=_DOUBLE_STRUCK_HOLES),
    ),
    "sans": (("ss",), "Mathematical sans-serif", offset_table(0x1D5A0, digit=0x1D7E2)),
    "sans-bold": (("ssb",), "Mathematical sans-serif bold", offset_table(0x1D5D4, digit=0x1D7EC)),
    "sans-italic": (("ssi",), "Mathematical sans-serif italic", offset_table(0x1D608)),
    "sans-bold-italic": (("ssbi",), "Mathematical sans-serif bold italic", offset_table(0x1D63C)),
    "monospace": (("mono", "code"), "Mathematical monospace", offset_table(0x1D670, digit=0x1D7F6)),
    "fullwidth": (("fw", "wide"), "Fullwidth forms", offset_table(0xFF21, 0xFF41, 0xFF10)),
    "circled": (("bubble",), "Circled letters and digits", _circled()),
    "negative-squared": (("neg-sq",), "Negative squared capitals", offset_table(0x1F170, fold_lower=True)),
    "negative-circled": (("neg-circ",), "Negative circled capitals", offset_table(0x1F150, fold_lower=True)),
    "squared": (("sq",), "Squared capitals", offset_table(0x1F130, fold_lower=True)),
    "small-caps": (("sc",), "Small capitals", _small_caps()),
}


def _numbered(start: int, first: int, last: int) -> dict[str, str]:
    return {str(n): chr(start + n - first) for n in range(first, last + 1)}


def _letters(start: int) -> dict[str, str]:
    return {ch: chr(start + i) for i, ch in enumerate(ascii_lowercase)}


def _circle_badges() -> dict[str, str]:
    table = {"0": "⓪"}
    table.update(_numbered(0x2460, 1, 20))
    table.update(_letters(0x24D0))
    return table


def _negative_circle_badges() -> dict[str, str]:
    table = {"0": "⓿"}
    table.update(_numbered(0x2776, 1, 10))
    table.update(_numbered(0x24EB, 11, 20))
    return table


def _paren_badges() -> dict[str, str]:
    table = _numbered(0x2474, 1, 20)
    table.update(_letters(0x249C))
    return table


# id -> (aliases, description, table)
BADGE_TABLES: dict[str, tuple[tuple[str, ...], str, dict[str, str]]] = {
    "circle": (("circled-number",), "Circled numbers 0-20 and letters", _circle_badges()),
    "negative-circle": (("dark-circle",), "Negative circled numbers 0-20", _negative_circle_badges()),
    "paren": (("parenthesized",), "Parenthesized numbers 1-20 and letters", _paren_badges()),
    "period": (("period-number",), "Numbers with full stop 1-20", _numbered(0x2488, 1, 20)),
    "double-circle": (("double",), "Double circled numbers 1-10", _numbered(0x24F5, 1, 10)),
}
