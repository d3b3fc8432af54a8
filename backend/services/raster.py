"""SVG to PNG conversion"""

PNG_MAGIC = b"\x89PNG"


def svg_to_png(svg: str) -> bytes:
    """Rasterize an SVG document. Blocking, call via asyncio.to_thread from async code."""
    # cairosvg loads the native cairo library on import, only needed for PNG output
    import cairosvg

    return cairosvg.svg2png(bytestring=svg.encode("utf-8"))
