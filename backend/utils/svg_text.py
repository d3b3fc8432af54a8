import re

_HEX_COLOR = re.compile(r"^[0-9A-Fa-f]{6}$")

# Alpha suffix for the semi-transparent text variant (footer)
TRANSPARENT_ALPHA = "80"

ELLIPSIS = "…"


def escape_xml(text: str) -> str:
    """Escape text for use inside SVG attributes and text nodes."""
    if not text:
        return "Unknown"
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )


def parse_color(color: str, transparent: bool = False) -> str:
    """Normalize a colour: bare 6-digit hex gets '#', anything else passes through."""
    if not color:
        return "transparent"
    if _HEX_COLOR.match(color):
        alpha = TRANSPARENT_ALPHA if transparent else ""
        return f"#{color}{alpha}"
    return color


def escape_label(text: str, max_chars: int) -> str:
    """Escape a label, shortening it with an ellipsis when the escaped form is too long.

    Length is measured on the escaped string. When shortened, the result keeps
    max_chars - 2 escaped characters, cut on whole source characters so an
    entity such as &amp; is never split.
    """
    escaped = escape_xml(text)
    if len(escaped) <= max_chars:
        return escaped

    budget = max_chars - 2
    kept = ""
    for char in text:
        piece = escape_xml(char)
        if len(kept) + len(piece) > budget:
            break
        kept += piece
    return f"{kept}{ELLIPSIS}"
