"""Shared fixtures.

The remote LMS API is replaced by ``FakeRemote`` behind ``httpx.MockTransport``;
no test opens a network connection.
"""

import json
import os
import tempfile
from collections.abc import Callable, Iterator
from typing import Any

import httpx
import pytest


os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_FORMAT", "json")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="portal-logs-"))
os.environ.setdefault("API_URL", "http://remote.test/api")

from fastapi.testclient import TestClient  # noqa: E402

from portal.api.client import ApiClient  # noqa: E402
from portal.api.session import AuthSession  # noqa: E402
from portal.auth.dependencies import Session, get_api_client  # noqa: E402
from portal.main import app  # noqa: E402


API_URL = os.environ["API_URL"]

Responder = Callable[[httpx.Request], httpx.Response]


class FakeRemote:
    """Route table standing in for the remote API.

    Unregistered routes answer 404 ``{"error": "not found"}``.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Responder] = {}
        self.requests: list[httpx.Request] = []

    def on(
        self,
        method: str,
        path: str,
        json_body: Any = None,
        status_code: int = 200,
    ) -> None:
        """Answer ``method path`` (path relative to the API root) with JSON."""
        self.routes[(method, path)] = lambda _request: httpx.Response(
            status_code, json=json_body
        )

    def on_call(self, method: str, path: str, responder: Responder) -> None:
        self.routes[(method, path)] = responder

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api")
        responder = self.routes.get((request.method, path))
        if responder is None:
            return httpx.Response(404, json={"error": "not found"})
        return responder(request)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [
            r
            for r in self.requests
            if r.method == method and r.url.path.removeprefix("/api") == path
        ]

    @staticmethod
    def body(request: httpx.Request) -> Any:
        return json.loads(request.content)


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def make_api(remote: FakeRemote) -> Callable[..., ApiClient]:
    """Factory for API clients wired to ``remote``."""

    def factory(token: str | None = None) -> ApiClient:
        return ApiClient(
            API_URL,
            AuthSession(token=token),
            transport=httpx.MockTransport(remote.handle),
        )

    return factory


@pytest.fixture
def client(remote: FakeRemote) -> Iterator[TestClient]:
    """Portal test client whose API calls go to ``remote``."""

    async def api_client_override(session: Session):
        api = ApiClient(API_URL, session, transport=httpx.MockTransport(remote.handle))
        try:
            yield api
        finally:
            await api.aclose()

    app.dependency_overrides[get_api_client] = api_client_override
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
