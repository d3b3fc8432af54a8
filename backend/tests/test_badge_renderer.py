import asyncio
import xml.etree.ElementTree as ET
from dataclasses import replace
from typing import List

import httpx
import pytest

import services.badge_renderer as badge_renderer
from models.render_options import RenderOptions, Shape
from models.user import User
from services.badge_renderer import create_error_svg, create_user_svg, resolve_footer_text
from utils.svg_text import ELLIPSIS

SVG = "{http://www.w3.org/2000/svg}"
XLINK_HREF = "{http://www.w3.org/1999/xlink}href"


async def _render(users: List[User], options: RenderOptions, handler, **kwargs) -> str:
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        return await create_user_svg(users, options, client=client, **kwargs)


def _groups(svg: str) -> List[ET.Element]:
    return ET.fromstring(svg).findall(f"{SVG}a")


# =============================================================================
# Badge composition
# =============================================================================

@pytest.mark.asyncio
async def test_limit_scenario(users, image_handler) -> None:
    options = RenderOptions(
        limit=2, per_row=8, avatar_size=50, margin=20, text_offset=20,
        shape=Shape.SQUARE, hide_label=False, dynamic=False,
    )
    svg = await _render(users, options, image_handler)

    groups = _groups(svg)
    assert [g.get(XLINK_HREF) for g in groups] == ["https://github.com/alice", "https://github.com/bob"]
    assert "charlie" not in svg
    assert svg.count('clip-path="inset(0% round 0%)"') == 2
    # One row: 1 * (50 + 20 + 20) + 20 high, 8 * (50 + 20) + 20 wide
    assert 'width="580px" height="110px"' in svg
    assert len(image_handler.requests) == 2


@pytest.mark.asyncio
async def test_document_is_well_formed_with_namespaces(users, options, image_handler) -> None:
    svg = await _render(users, replace(options, title="Our <Team>", footer_text="Thanks & more"), image_handler)

    root = ET.fromstring(svg)
    assert root.tag == f"{SVG}svg"
    assert 'xmlns="http://www.w3.org/2000/svg"' in svg
    assert 'xmlns:xlink="http://www.w3.org/1999/xlink"' in svg
    # Background first, then title, groups, footer
    children = list(root)
    assert children[0].tag == f"{SVG}rect"
    assert children[1].tag == f"{SVG}text" and children[1].text == "Our <Team>"
    assert [c.tag for c in children[2:5]] == [f"{SVG}a"] * 3
    assert children[-1].text == "Thanks & more"


@pytest.mark.asyncio
async def test_avatars_are_inlined_in_order(users, options, make_handler) -> None:
    handler = make_handler(
        lambda request: httpx.Response(200, content=request.url.path.encode(), headers={"content-type": "image/jpeg"})
    )
    svg = await _render(users, options, handler)

    images = [g.find(f"{SVG}image").get(XLINK_HREF) for g in _groups(svg)]
    assert images == [
        "data:image/jpeg;base64,LzE=",  # "/1"
        "data:image/jpeg;base64,LzI=",
        "data:image/jpeg;base64,LzM=",
    ]


@pytest.mark.asyncio
async def test_failed_avatar_renders_blank(users, options, make_handler, fake_png: bytes) -> None:
    def respond(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/2":
            return httpx.Response(500)
        return httpx.Response(200, content=fake_png, headers={"content-type": "image/png"})

    svg = await _render(users, options, make_handler(respond))

    images = [g.find(f"{SVG}image").get(XLINK_HREF) for g in _groups(svg)]
    assert images[0].startswith("data:image/png;base64,")
    assert images[1] == ""
    assert images[2].startswith("data:image/png;base64,")


@pytest.mark.asyncio
async def test_dynamic_mode_links_remote_avatars(users, options, image_handler, monkeypatch) -> None:
    calls = []

    async def fake_fetch(url, client=None):
        calls.append(url)
        return ""

    monkeypatch.setattr(badge_renderer, "fetch_and_encode", fake_fetch)
    many = users * 10
    svg = await _render(many, replace(options, dynamic=True, limit=30), image_handler)

    assert calls == []
    assert image_handler.requests == []
    image = _groups(svg)[0].find(f"{SVG}image")
    assert image.get("href") == "https://x/1"
    assert image.get(XLINK_HREF) == "https://x/1"


@pytest.mark.asyncio
async def test_avatar_fetches_respect_concurrency_cap(options, monkeypatch) -> None:
    active = 0
    peak = 0

    async def fake_fetch(url, client=None):
        nonlocal active, peak
        active += 1
        peak = max(peak, active)
        await asyncio.sleep(0.001)
        active -= 1
        return "data:image/png;base64,AA=="

    monkeypatch.setattr(badge_renderer, "fetch_and_encode", fake_fetch)
    many = [User(login=f"user{i}", avatar_url=f"https://x/{i}") for i in range(20)]
    async with httpx.AsyncClient() as client:
        await create_user_svg(many, options, client=client)

    assert peak == badge_renderer.AVATAR_FETCH_CONCURRENCY == 5


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "shape, rounding",
    [(Shape.SQUARE, "0%"), (Shape.CIRCLE, "50%"), (Shape.SQUIRCLE, "25%")],
)
async def test_shape_clip_path(users, options, image_handler, shape: Shape, rounding: str) -> None:
    svg = await _render(users, replace(options, shape=shape), image_handler)
    assert svg.count(f'clip-path="inset(0% round {rounding})"') == 3


# =============================================================================
# Labels
# =============================================================================

@pytest.mark.asyncio
async def test_labels_use_name_then_login(users, options, image_handler) -> None:
    svg = await _render(users, replace(options, avatar_size=100), image_handler)

    labels = [g.find(f"{SVG}text").text for g in _groups(svg)]
    assert labels == ["Alice Smith", "Bob Jones", "charlie"]


@pytest.mark.asyncio
async def test_hide_label(users, options, image_handler) -> None:
    svg = await _render(users, replace(options, hide_label=True), image_handler)

    assert "Alice Smith" not in svg
    assert all(g.find(f"{SVG}text") is None for g in _groups(svg))


@pytest.mark.asyncio
async def test_special_characters_are_escaped(options, image_handler) -> None:
    special = [
        User(login="user1", name="A&B", avatar_url="https://example.com/1"),
        User(login="user2", name="<hi>", avatar_url="https://example.com/2"),
        User(login="user3", name='"quote"', avatar_url="https://example.com/3"),
    ]
    svg = await _render(special, replace(options, avatar_size=100), image_handler)

    assert "A&amp;B" in svg
    assert "&lt;hi&gt;" in svg
    assert "&quot;quote&quot;" in svg
    ET.fromstring(svg)


@pytest.mark.asyncio
async def test_long_names_are_truncated(options, image_handler) -> None:
    long = [User(login="user", name="This is a very long name that should be truncated", avatar_url="https://x/1")]
    svg = await _render(long, options, image_handler)

    # avatar 50, font 12: 10 characters max, so 8 kept plus the ellipsis
    assert _groups(svg)[0].find(f"{SVG}text").text == f"This is {ELLIPSIS}"


# =============================================================================
# Canvas, colours, footer
# =============================================================================

@pytest.mark.asyncio
async def test_fixed_canvas_size(users, options, image_handler) -> None:
    svg = await _render(users, replace(options, per_row=5), image_handler)

    assert 'width="370px"' in svg
    assert "viewBox" not in svg


@pytest.mark.asyncio
async def test_responsive_canvas(users, options, image_handler) -> None:
    svg = await _render(users, replace(options, is_responsive=True, per_row=5), image_handler)

    root = ET.fromstring(svg)
    assert root.get("width") == "100%"
    assert root.get("height") == "100%"
    assert root.get("viewBox") == "0 0 370 110"


@pytest.mark.asyncio
async def test_explicit_canvas_size(users, options, image_handler) -> None:
    svg = await _render(users, replace(options, svg_width=900, svg_height=300), image_handler)
    assert 'width="900px" height="300px"' in svg


@pytest.mark.asyncio
async def test_colours_and_border(users, options, image_handler) -> None:
    svg = await _render(
        users,
        replace(options, background_color="ff0000", text_color="0000ff", outer_border_width=2, outer_border_radius=8),
        image_handler,
    )

    rect = ET.fromstring(svg).find(f"{SVG}rect")
    assert rect.get("fill") == "#ff0000"
    # Border falls back to the text colour
    assert rect.get("stroke") == "#0000ff"
    assert rect.get("stroke-width") == "2px"
    assert rect.get("rx") == "8px"
    assert 'fill="#0000ff"' in svg


@pytest.mark.asyncio
async def test_explicit_border_colour(users, options, image_handler) -> None:
    svg = await _render(users, replace(options, outer_border_color="green"), image_handler)
    assert ET.fromstring(svg).find(f"{SVG}rect").get("stroke") == "green"


@pytest.mark.asyncio
async def test_footer_uses_transparent_text_colour(users, options, image_handler) -> None:
    svg = await _render(users, replace(options, footer_text="Made with love", per_row=5), image_handler)

    footer = ET.fromstring(svg).findall(f"{SVG}text")[-1]
    assert footer.text == "Made with love"
    assert footer.get("fill") == "#33333380"
    assert footer.get("text-anchor") == "end"
    assert footer.get("x") == "350"
    assert footer.get("y") == "105"


@pytest.mark.asyncio
async def test_default_footer_is_injected(users, options, image_handler) -> None:
    svg = await _render(users, options, image_handler, default_footer="Powered by readme-contribs")
    assert "Powered by readme-contribs" in svg


@pytest.mark.asyncio
async def test_footer_none_suppresses_default(users, options, image_handler) -> None:
    svg = await _render(users, replace(options, footer_text="none"), image_handler, default_footer="Default")
    assert "Default" not in svg
    assert 'text-anchor="end"' not in svg


@pytest.mark.parametrize(
    "explicit, default, expected",
    [
        ("Mine", "Default", "Mine"),
        ("", "Default", "Default"),
        ("", "", ""),
        ("none", "Default", ""),
        ("", "none", ""),
    ],
)
def test_resolve_footer_text(explicit: str, default: str, expected: str) -> None:
    assert resolve_footer_text(explicit, default) == expected


@pytest.mark.asyncio
async def test_empty_user_list(options, image_handler) -> None:
    svg = await _render([], options, image_handler)

    assert _groups(svg) == []
    assert image_handler.requests == []


# =============================================================================
# Error image
# =============================================================================

def test_error_svg_contains_message(options) -> None:
    svg = create_error_svg("Network failure", replace(options, background_color="#ffffff", font_family="Courier New", font_size=20))

    assert "Network failure" in svg
    assert 'fill="#ff4d4f"' in svg
    assert 'fill="#ffffff"' in svg
    assert 'font-family="Courier New"' in svg
    assert 'font-size="20"' in svg
    ET.fromstring(svg)


def test_error_svg_escapes_message(options) -> None:
    svg = create_error_svg("<script> & friends", options)

    assert "&lt;script&gt; &amp; friends" in svg
    assert ET.fromstring(svg).find(f"{SVG}text/{SVG}tspan").text == "<script> & friends"


def test_error_svg_without_options() -> None:
    svg = create_error_svg("oops")
    assert "oops" in svg
    ET.fromstring(svg)
