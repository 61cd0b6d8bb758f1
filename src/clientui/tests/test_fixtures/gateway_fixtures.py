"""
Fixtures for gateway client and web tests.

`gateway_backend` stands in for the gateway: tests register canned responses per
`(method, path)` and inspect the requests that were sent. It is plugged into the real
`GatewayClient` through `httpx.MockTransport`, so request building, status handling
and decoding all run for real.
"""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from clientui.clients.gateway import GatewayClient
from clientui.main import create_app


class FakeGateway:
    def __init__(self):
        self.routes: dict[tuple[str, str], httpx.Response | Exception] = {}
        self.requests: list[httpx.Request] = []

    def reply(self, method: str, path: str, status_code: int = 200, body=None) -> None:
        """Register a response. `body` may be JSON-able data, a str, or None (empty body)."""
        if body is None:
            content = b""
        elif isinstance(body, str):
            content = body.encode("utf-8")
        else:
            content = json.dumps(body).encode("utf-8")
        self.routes[(method, path)] = httpx.Response(status_code, content=content)

    def fail(self, method: str, path: str, exc: Exception) -> None:
        """Make the call raise a transport exception instead of answering."""
        self.routes[(method, path)] = exc

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        answer = self.routes.get((request.method, request.url.path))
        if answer is None:
            return httpx.Response(404, content=b"no canned response")
        if isinstance(answer, Exception):
            raise answer
        return answer

    def sent(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]


@pytest.fixture
def gateway_backend() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def gateway(test_settings, gateway_backend: FakeGateway):
    client = GatewayClient.from_settings(test_settings, transport=httpx.MockTransport(gateway_backend.handler))
    yield client
    client.close()


@pytest.fixture
def app(test_settings, gateway: GatewayClient):
    return create_app(settings=test_settings, gateway=gateway)


@pytest.fixture
def client(app):
    """TestClient that leaves redirects alone so tests can assert them."""
    with TestClient(app, follow_redirects=False) as c:
        yield c
