"""
Pytest fixtures and configuration for pubglookup tests.

Provides a scripted local stand-in for the PUBG API, a call-counting fetcher
stub, a controllable clock, and sample payloads.
"""

import asyncio
import json
from typing import Any

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from pubglookup.cache.memory import MemoryCache
from pubglookup.collectors.fetcher import Fetcher
from stubs import FakeClock

# =============================================================================
# Sample Payloads
# =============================================================================

PLAYER_PAYLOAD: dict[str, Any] = {
    "data": [
        {
            "type": "player",
            "id": "account.p1",
            "attributes": {"name": "shroud", "shardId": "steam"},
            "relationships": {
                "matches": {
                    "data": [
                        {"type": "match", "id": "m1"},
                        {"type": "match", "id": "m2"},
                        {"type": "match", "id": "m3"},
                    ]
                }
            },
        }
    ]
}

MATCH_PAYLOAD: dict[str, Any] = {
    "data": {
        "type": "match",
        "id": "m1",
        "attributes": {
            "createdAt": "2024-03-01T18:22:04Z",
            "duration": 1834,
            "gameMode": "squad-fpp",
            "mapName": "Baltic_Main",
        },
    }
}


@pytest.fixture
def player_payload() -> dict[str, Any]:
    return json.loads(json.dumps(PLAYER_PAYLOAD))


@pytest.fixture
def match_payload() -> dict[str, Any]:
    return json.loads(json.dumps(MATCH_PAYLOAD))


# =============================================================================
# Clock and Store
# =============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> MemoryCache:
    return MemoryCache(clock=clock)


# =============================================================================
# Fake PUBG API
# =============================================================================


class FakeApi:
    """Scripted HTTP server answering every GET from a path -> response table."""

    def __init__(self) -> None:
        self.responses: dict[str, tuple[int, str]] = {}
        self.hang_paths: set[str] = set()
        self.requests: list[dict[str, Any]] = []
        self.release = asyncio.Event()
        self.received = asyncio.Event()
        self.server: TestServer | None = None

    def respond(self, path: str, status: int = 200, body: str | dict = "") -> None:
        if isinstance(body, dict):
            body = json.dumps(body)
        self.responses[path] = (status, body)

    def hang(self, path: str) -> None:
        """Hold requests to ``path`` open until the fixture tears down."""
        self.hang_paths.add(path)

    def url(self, path: str) -> str:
        assert self.server is not None
        return str(self.server.make_url(path))

    @property
    def root(self) -> str:
        return self.url("/")

    async def handle(self, request: web.Request) -> web.Response:
        self.requests.append(
            {
                "path": request.path,
                "query": dict(request.query),
                "headers": dict(request.headers),
            }
        )
        self.received.set()

        if request.path in self.hang_paths:
            await self.release.wait()

        status, body = self.responses.get(request.path, (404, '{"errors":[{"title":"Not Found"}]}'))
        return web.Response(status=status, text=body, content_type="application/vnd.api+json")


@pytest.fixture
async def fake_api():
    """Start a local server standing in for the PUBG API."""
    api = FakeApi()
    app = web.Application()
    app.router.add_get("/{tail:.*}", api.handle)

    server = TestServer(app)
    await server.start_server()
    api.server = server

    yield api

    api.release.set()
    await server.close()


@pytest.fixture
async def fetcher():
    """A real fetcher with its own session."""
    async with Fetcher() as f:
        yield f
