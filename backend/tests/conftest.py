from typing import Callable, List

import httpx
import pytest

from models.render_options import RenderOptions
from models.user import User

# Smallest valid PNG header is enough, nothing decodes it
FAKE_PNG = b"\x89PNG\r\n\x1a\nfake-image-data"


@pytest.fixture
def users() -> List[User]:
    return [
        User(login="alice", name="Alice Smith", avatar_url="https://x/1"),
        User(login="bob", name="Bob Jones", avatar_url="https://x/2"),
        User(login="charlie", name="", avatar_url="https://x/3"),
    ]


@pytest.fixture
def options() -> RenderOptions:
    return RenderOptions(font_family="Arial", limit=100)


class RecordingHandler:
    """httpx.MockTransport handler that records requests and serves FAKE_PNG."""

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response] = None):
        self.requests: List[httpx.Request] = []
        self._respond = respond

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._respond is not None:
            return self._respond(request)
        return httpx.Response(200, content=FAKE_PNG, headers={"content-type": "image/png"})


@pytest.fixture
def image_handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def make_handler() -> Callable[..., RecordingHandler]:
    return RecordingHandler


@pytest.fixture
def fake_png() -> bytes:
    return FAKE_PNG
