"""Shared fixtures: an in-memory XPipe API served through httpx.MockTransport."""

import json

import httpx
import pytest

from xpctl.client import XPipeClient
from xpctl.config import Settings


class FakeXPipe:
    """Records requests and answers them like a local XPipe instance."""

    def __init__(self, found=None, infos=None, token="token-123"):
        self.found = found or []
        self.infos = infos or []
        self.token = token
        self.requests: list[httpx.Request] = []
        self.overrides: dict[str, httpx.Response] = {}

    def bodies(self, path: str) -> list[dict]:
        return [json.loads(r.content) for r in self.requests if r.url.path == path]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path in self.overrides:
            return self.overrides[path]

        if path == "/handshake":
            return httpx.Response(200, json={"sessionToken": self.token})

        if request.headers.get("Authorization") != f"Bearer {self.token}":
            return httpx.Response(401, text="unauthorized")

        if path == "/connection/query":
            return httpx.Response(200, json={"found": self.found})
        if path == "/connection/info":
            return httpx.Response(200, json={"infos": self.infos})
        if path == "/connection/terminal":
            return httpx.Response(200, json={})
        return httpx.Response(404, text="not found")


@pytest.fixture
def fake_xpipe():
    return FakeXPipe(
        found=["a1", "a2", "b1"],
        infos=[
            {"connection": "a1", "name": ["web1"]},
            {"connection": "a2", "name": ["web1"]},
            {"connection": "b1", "name": ["db"], "rawData": {"containerName": "postgres"}},
        ],
    )


@pytest.fixture
def xpipe_client(fake_xpipe):
    client = XPipeClient(base_url="http://xpipe.test", transport=httpx.MockTransport(fake_xpipe))
    yield client
    client.close()


@pytest.fixture
def settings():
    return Settings(api_key="secret", api_url="http://xpipe.test")
