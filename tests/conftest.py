import asyncio
import json
from pathlib import Path

import httpx
import pytest

from xhsfeed import MemoryCache, Settings

USER_ID = "52d8c541b4c4d60e6c867480"
PROFILE_URL = f"https://www.xiaohongshu.com/user/profile/{USER_ID}"
NOTE_IDS = [
    "64a1b2c3d4e5f60718293a01",
    "64a1b2c3d4e5f60718293a02",
    "64a1b2c3d4e5f60718293a03",
]


@pytest.fixture
def fixture_dir() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def load_page(fixture_dir):
    def _loader(name: str) -> str:
        with open(fixture_dir / name, "r", encoding="utf-8") as f:
            return f.read()
    return _loader


@pytest.fixture
def profile_page(load_page) -> str:
    return load_page("profile.html")


def state_page(state_literal: str) -> str:
    return (
        "<html><head><script>var a = 1;</script></head><body>"
        f"<script>window.__INITIAL_STATE__={state_literal}</script>"
        "</body></html>"
    )


def note_page(note_id: str, title: str = "", desc: str = "",
              images: tuple = (), time: int = 1700000000000) -> str:
    state = {
        "note": {
            "firstNoteId": note_id,
            "noteDetailMap": {
                note_id: {
                    "note": {
                        "noteId": note_id,
                        "title": title,
                        "desc": desc,
                        "imageList": [{"urlDefault": url, "width": 1080} for url in images],
                        "time": time,
                    },
                    "comments": {"list": []},
                },
            },
        },
    }
    return state_page(json.dumps(state, ensure_ascii=False))


@pytest.fixture
def make_note_page():
    return note_page


@pytest.fixture
def make_state_page():
    return state_page


class MockRoutes:
    """Serves canned pages through ``httpx.MockTransport``.

    A route value is a body string, an int status code, a
    ``(body, delay_seconds)`` tuple or a callable taking the request.
    """

    def __init__(self, routes: dict | None = None):
        self.routes = dict(routes or {})
        self.calls: list[str] = []
        self.requests: list[httpx.Request] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.calls.append(url)
        self.requests.append(request)
        route = self.routes.get(url)
        if callable(route):
            return route(request)
        if route is None:
            return httpx.Response(404, text="not found")
        if isinstance(route, int):
            return httpx.Response(route, text="")
        if isinstance(route, tuple):
            body, delay = route
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            try:
                await asyncio.sleep(delay)
            finally:
                self.in_flight -= 1
            return httpx.Response(200, text=body)
        return httpx.Response(200, text=route)

    def client(self, **kwargs) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler), **kwargs)


@pytest.fixture
def mock_routes():
    def _factory(routes=None) -> MockRoutes:
        return MockRoutes(routes)
    return _factory


@pytest.fixture
def cache() -> MemoryCache:
    return MemoryCache(ttl=60)


@pytest.fixture
def cookie_settings() -> Settings:
    return Settings(cookie="web_session=abc", concurrency=2)


@pytest.fixture
def anonymous_settings() -> Settings:
    return Settings(cookie="")


@pytest.fixture
def user_id() -> str:
    return USER_ID


@pytest.fixture
def profile_url() -> str:
    return PROFILE_URL


@pytest.fixture
def note_ids() -> list[str]:
    return list(NOTE_IDS)
