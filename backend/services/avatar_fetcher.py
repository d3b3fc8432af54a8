"""Avatar download and data-URI encoding"""
import base64
import logging
from typing import Optional

import httpx

from config import settings

logger = logging.getLogger(__name__)

# GitHub avatars accept ?size=N and return a small thumbnail
AVATAR_THUMBNAIL_SIZE = 50
DEFAULT_MIME_TYPE = "image/png"


def thumbnail_url(url: str, size: int = AVATAR_THUMBNAIL_SIZE) -> str:
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}size={size}"


async def fetch_and_encode(url: str, client: Optional[httpx.AsyncClient] = None) -> str:
    """
    Fetch an avatar and return it as a data:<mime>;base64,<data> URI.
    Returns "" on any failure so the badge renders with a blank avatar instead.
    """
    if client is None:
        async with httpx.AsyncClient(timeout=settings.avatar_fetch_timeout) as own_client:
            return await fetch_and_encode(url, own_client)

    fetch_url = thumbnail_url(url)
    try:
        response = await client.get(fetch_url, follow_redirects=True)
        if not response.is_success:
            logger.warning(f"Failed to fetch the image from {url}: {response.status_code} {response.reason_phrase}")
            return ""
        mime_type = response.headers.get("content-type") or DEFAULT_MIME_TYPE
        encoded = base64.b64encode(response.content).decode("ascii")
        return f"data:{mime_type};base64,{encoded}"
    except Exception as e:
        logger.warning(f"Error fetching image {url}: {type(e).__name__}: {e}")
        return ""
