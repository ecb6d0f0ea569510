"""Pytest configuration and fixtures."""

import json
from typing import Any

import pytest

from celine.opa_client import PolicyClient, PolicyClientConfig, TransportResponse

OPA_URL = "https://opa.test"


class FakeTransport:
    """Replays canned (status, body) responses and records requests."""

    def __init__(self, *responses: tuple[int, Any]):
        self.responses = list(responses)
        self.requests: list[dict[str, Any]] = []
        self.closed = False

    async def send(self, url: str, *, method: str, json: Any = None, **options: Any):
        self.requests.append(
            {"url": url, "method": method, "json": json, "options": options}
        )
        status_code, body = self.responses.pop(0)
        return TransportResponse(status_code=status_code, content=_encode(body))

    async def aclose(self) -> None:
        self.closed = True


class DictCache:
    """Minimal cache satisfying the client's cache contract."""

    def __init__(self):
        self.data: dict[str, Any] = {}

    def get(self, key: str) -> Any:
        return self.data.get(key)

    def set(self, key: str, value: Any) -> None:
        self.data[key] = value

    def clear(self) -> None:
        self.data.clear()


def _encode(body: Any) -> bytes:
    if isinstance(body, bytes):
        return body
    return json.dumps(body).encode()


@pytest.fixture
def opa_url() -> str:
    return OPA_URL


@pytest.fixture
def make_transport():
    """Factory for a FakeTransport with canned responses."""
    return FakeTransport


@pytest.fixture
def dict_cache() -> DictCache:
    return DictCache()


@pytest.fixture
def make_client():
    """Factory building a PolicyClient around a FakeTransport."""

    def _make(*responses: tuple[int, Any], **config: Any) -> tuple[PolicyClient, FakeTransport]:
        transport = FakeTransport(*responses)
        client = PolicyClient(PolicyClientConfig(url=OPA_URL, **config), transport)
        return client, transport

    return _make


@pytest.fixture
def sample_input() -> dict:
    """Sample query input for a user reading a dataset."""
    return {
        "subject": {"id": "11111111-1111-1111-1111-111111111111", "type": "user"},
        "resource": {"id": "ds-internal", "type": "dataset"},
        "headers": {"authorization": "Bearer token"},
    }
