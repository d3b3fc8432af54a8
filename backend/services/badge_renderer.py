"""SVG badge rendering

Turns a list of GitHub users into an embeddable SVG: a background rect, an
optional title, one linked avatar (with label) per user and an optional footer.

Avatars are downloaded and inlined as data URIs, at most AVATAR_FETCH_CONCURRENCY
at a time. In dynamic mode nothing is downloaded and the images point at the
remote avatar URLs instead.
"""
import logging
from typing import List, Optional

import httpx

from config import settings
from models.render_options import RenderOptions
from models.user import User
from services.avatar_fetcher import fetch_and_encode
from services.badge_layout import BadgeLayout
from services.concurrency import TaskFailure, run_with_concurrency
from utils.svg_text import escape_label, escape_xml, parse_color

logger = logging.getLogger(__name__)

# Fixed to protect avatar hosts and local sockets, not user tunable
AVATAR_FETCH_CONCURRENCY = 5

FOOTER_DISABLED = "none"
ERROR_TEXT_COLOR = "#ff4d4f"
ERROR_WIDTH = 800
ERROR_HEIGHT = 120

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"


def _attr(value: str) -> str:
    """Escape an attribute value (empty stays empty)."""
    return escape_xml(value) if value else ""


def _num(value: float) -> str:
    """Format a coordinate without a trailing .0"""
    return str(int(value)) if float(value).is_integer() else str(value)


def resolve_footer_text(footer_text: str, default_footer: str = "") -> str:
    """Explicit footer, else the configured default. "none" hides the footer."""
    text = footer_text or default_footer or ""
    return "" if text == FOOTER_DISABLED else text


class BadgeSVGBuilder:
    """Builds the SVG document for one badge."""

    def __init__(self, users: List[User], options: RenderOptions, default_footer: str = ""):
        self.options = options
        self.layout = BadgeLayout.for_users(len(users), options)
        self.users = users[:self.layout.count]
        self.footer_text = resolve_footer_text(options.footer_text, default_footer)
        self.text_color = parse_color(options.text_color)

    def _svg_header(self) -> str:
        layout = self.layout
        if self.options.is_responsive:
            size = f'width="100%" height="100%" viewBox="{layout.view_box}"'
        else:
            size = f'width="{layout.width}px" height="{layout.height}px"'
        return (
            f'<svg xmlns="{SVG_NS}" xmlns:xlink="{XLINK_NS}" {size} '
            f'preserveAspectRatio="xMidYMid meet">\n'
        )

    def _svg_footer(self) -> str:
        return "</svg>"

    def _background(self) -> str:
        o = self.options
        border = parse_color(o.outer_border_color or o.text_color)
        return (
            f'  <rect width="100%" height="100%" fill="{_attr(parse_color(o.background_color))}" '
            f'stroke="{_attr(border)}" stroke-width="{o.outer_border_width}px" '
            f'rx="{o.outer_border_radius}px"/>\n'
        )

    def _title_element(self) -> str:
        o = self.options
        if not o.title:
            return ""
        return (
            f'  <text x="50%" y="{_num(o.margin + o.font_size * 1.5)}" '
            f'font-family="{_attr(o.font_family)}" font-size="{self.layout.title_font_size}px" '
            f'fill="{_attr(self.text_color)}" text-anchor="middle" dominant-baseline="middle">'
            f'{escape_xml(o.title)}</text>\n'
        )

    def _footer_element(self) -> str:
        if not self.footer_text:
            return ""
        o = self.options
        layout = self.layout
        return (
            f'  <text x="{layout.width - o.margin}" y="{layout.height - 5}" '
            f'font-family="{_attr(o.font_family)}" font-size="{_num(o.font_size * 0.8)}px" '
            f'fill="{_attr(parse_color(o.text_color, transparent=True))}" text-anchor="end">'
            f'{escape_xml(self.footer_text)}</text>\n'
        )

    def _user_element(self, index: int, user: User, image_src: str) -> str:
        o = self.options
        x, y = self.layout.position(index)

        if o.dynamic:
            remote = _attr(user.avatar_url)
            href = f'href="{remote}" xlink:href="{remote}"'
        else:
            href = f'xlink:href="{_attr(image_src)}"'

        parts = [
            f'  <a xlink:href="{_attr(user.profile_url)}" target="_blank">\n',
            f'    <image {href} x="{x}" y="{y}" height="{o.avatar_size}px" width="{o.avatar_size}px" '
            f'clip-path="inset(0% round {o.clip_rounding})"/>\n',
        ]
        if not o.hide_label:
            label = escape_label(user.display_name, self.layout.max_label_chars)
            parts.append(
                f'    <text x="{x}" y="{self.layout.label_y(index)}" font-family="{_attr(o.font_family)}" '
                f'font-size="{o.font_size}px" fill="{_attr(self.text_color)}">{label}</text>\n'
            )
        parts.append("  </a>\n")
        return "".join(parts)

    def build(self, images: Optional[List[str]] = None) -> str:
        """Assemble the document. images[i] is the data URI for users[i] (ignored in dynamic mode)."""
        images = images or [""] * len(self.users)
        body = "".join(
            self._user_element(index, user, images[index])
            for index, user in enumerate(self.users)
        )
        return (
            self._svg_header()
            + self._background()
            + self._title_element()
            + body
            + self._footer_element()
            + self._svg_footer()
        )


async def encode_avatars(users: List[User], client: Optional[httpx.AsyncClient] = None) -> List[str]:
    """Fetch and inline every avatar, index-aligned with users. Failures become ""."""
    if not users:
        return []

    if client is None:
        async with httpx.AsyncClient(timeout=settings.avatar_fetch_timeout) as own_client:
            return await encode_avatars(users, own_client)

    async def _fetch(url: str) -> str:
        return await fetch_and_encode(url, client)

    results = await run_with_concurrency(
        [user.avatar_url for user in users],
        _fetch,
        AVATAR_FETCH_CONCURRENCY,
    )
    return ["" if isinstance(r, TaskFailure) else r for r in results]


async def create_user_svg(
    users: List[User],
    options: RenderOptions,
    default_footer: str = "",
    client: Optional[httpx.AsyncClient] = None,
) -> str:
    """Render the badge SVG for users.

    default_footer is used when options.footer_text is empty; pass the
    configured service-wide footer here.
    """
    builder = BadgeSVGBuilder(users, options, default_footer)
    if options.dynamic:
        return builder.build()

    images = await encode_avatars(builder.users, client)
    failed = sum(1 for image in images if not image)
    if failed:
        logger.info(f"Rendered badge with {failed}/{len(images)} avatars missing")
    return builder.build(images)


def create_error_svg(message: str, options: Optional[RenderOptions] = None) -> str:
    """Minimal SVG showing an error message. Never raises."""
    try:
        o = options or RenderOptions()
        return (
            f'<svg xmlns="{SVG_NS}" width="{ERROR_WIDTH}" height="{ERROR_HEIGHT}">\n'
            f'  <rect width="100%" height="100%" fill="{_attr(parse_color(o.background_color))}"/>\n'
            f'  <text x="50%" y="50%" font-family="{_attr(o.font_family)}" font-size="{o.font_size}" '
            f'fill="{ERROR_TEXT_COLOR}" text-anchor="middle" dominant-baseline="middle">'
            f'<tspan>{escape_xml(str(message))}</tspan></text>\n'
            f'</svg>'
        )
    except Exception as e:
        logger.error(f"Error SVG rendering failed: {e}")
        return (
            f'<svg xmlns="{SVG_NS}" width="{ERROR_WIDTH}" height="{ERROR_HEIGHT}">'
            f'<text x="50%" y="50%" fill="{ERROR_TEXT_COLOR}" text-anchor="middle">Error</text></svg>'
        )
