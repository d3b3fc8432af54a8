"""Badge API endpoints

Each endpoint fetches a list of GitHub accounts and renders them as an
SVG (or PNG with ?format=png) avatar badge for embedding in a README.

Example:
    ![Contributors](https://<host>/contributors/lissy93/dashy?perRow=10&shape=circle)
"""
import asyncio
import logging
from typing import Awaitable, Callable, Dict, List

from fastapi import APIRouter, Request
from fastapi.responses import Response

from api.validation import validate_github_name
from config import settings
from models.badge_params import BadgeParams
from models.render_options import OutputFormat
from models.user import User
from services.badge_renderer import create_error_svg, create_user_svg
from services.github_client import GitHubClient, github_client
from services.raster import svg_to_png

logger = logging.getLogger(__name__)

router = APIRouter()

SVG_MEDIA_TYPE = "image/svg+xml"
PNG_MEDIA_TYPE = "image/png"
NO_CACHE_HEADERS = {"Cache-Control": "no-cache, no-store, must-revalidate"}

UserFetcher = Callable[..., Awaitable[List[User]]]

# Route name to the client method listing its users
USER_SOURCES: Dict[str, Callable[[GitHubClient], UserFetcher]] = {
    "contributors": lambda gh: gh.fetch_contributors,
    "stargazers": lambda gh: gh.fetch_stargazers,
    "forkers": lambda gh: gh.fetch_forkers,
    "watchers": lambda gh: gh.fetch_watchers,
    "followers": lambda gh: gh.fetch_followers,
    "sponsors": lambda gh: gh.fetch_sponsors,
}


async def _render_badge(request: Request, source: str, **path_params: str) -> Response:
    """Validate, fetch, render. Any failure after query parsing becomes an error image."""
    params = BadgeParams.from_query(request.query_params)
    options = params.to_render_options()

    try:
        names = [validate_github_name(value, key) for key, value in path_params.items()]
        fetch = USER_SOURCES[source](github_client)
        users = await fetch(*names, limit=params.limit)

        svg = await create_user_svg(users, options, default_footer=settings.footer_text)
        if params.format == OutputFormat.PNG:
            png = await asyncio.to_thread(svg_to_png, svg)
            return Response(content=png, media_type=PNG_MEDIA_TYPE)
        return Response(content=svg, media_type=SVG_MEDIA_TYPE)
    except Exception as e:
        logger.error(f"[BADGE] {request.url.path} failed: {type(e).__name__}: {e}")
        return Response(
            content=create_error_svg(str(e), options),
            status_code=500,
            media_type=SVG_MEDIA_TYPE,
            headers=NO_CACHE_HEADERS,
        )


# =============================================================================
# Repository badges
# =============================================================================

@router.get("/contributors/{owner}/{repo}")
async def contributors_badge(request: Request, owner: str, repo: str):
    """Badge of a repository's contributors."""
    return await _render_badge(request, "contributors", owner=owner, repo=repo)


@router.get("/stargazers/{owner}/{repo}")
async def stargazers_badge(request: Request, owner: str, repo: str):
    return await _render_badge(request, "stargazers", owner=owner, repo=repo)


@router.get("/forkers/{owner}/{repo}")
async def forkers_badge(request: Request, owner: str, repo: str):
    return await _render_badge(request, "forkers", owner=owner, repo=repo)


@router.get("/watchers/{owner}/{repo}")
async def watchers_badge(request: Request, owner: str, repo: str):
    return await _render_badge(request, "watchers", owner=owner, repo=repo)


# =============================================================================
# User badges
# =============================================================================

@router.get("/followers/{author}")
async def followers_badge(request: Request, author: str):
    return await _render_badge(request, "followers", author=author)


@router.get("/sponsors/{author}")
async def sponsors_badge(request: Request, author: str):
    """Badge of a user's GitHub Sponsors."""
    return await _render_badge(request, "sponsors", author=author)
