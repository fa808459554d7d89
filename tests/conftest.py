"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable, Iterator

import httpx
import pytest

from bitmark_registry import ClientConfig, RegistryClient

BASE_URI = "https://registry.example.com"


class RecordingRegistry:
    """A MockTransport handler that replays canned responses and records requests."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responder: Callable[[httpx.Request], httpx.Response] = lambda request: (
            httpx.Response(200, content=b'{"message":""}')
        )

    def respond(self, status_code: int = 200, body: bytes | str = b"") -> None:
        content = body.encode("utf-8") if isinstance(body, str) else body
        self.responder = lambda request: httpx.Response(status_code, content=content)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    @property
    def last(self) -> httpx.Request:
        assert self.requests, "no request was sent"
        return self.requests[-1]


@pytest.fixture()
def registry() -> RecordingRegistry:
    return RecordingRegistry()


@pytest.fixture()
def make_client(registry: RecordingRegistry) -> Iterator[Callable[..., RegistryClient]]:
    """Build RegistryClients wired to the recording transport."""
    clients: list[RegistryClient] = []

    def _make(config: ClientConfig | None = None, base_uri: str = BASE_URI) -> RegistryClient:
        client = RegistryClient.from_uri(
            base_uri, config, transport=httpx.MockTransport(registry)
        )
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()


@pytest.fixture()
def client(make_client: Callable[..., RegistryClient]) -> RegistryClient:
    return make_client()
