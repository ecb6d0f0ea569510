"""HTTP transport used by PolicyClient."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import httpx

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransportResponse:
    """Status code and raw body of an HTTP response."""

    status_code: int
    content: bytes = b""

    def json(self) -> Any:
        """Decode the body as JSON.

        Raises:
            ValueError: if the body is not valid JSON
        """
        return json.loads(self.content)


@runtime_checkable
class Transport(Protocol):
    """Sends one HTTP request and returns the response."""

    async def send(
        self, url: str, *, method: str, json: Any = None, **options: Any
    ) -> TransportResponse: ...


class HttpxTransport:
    """Transport backed by httpx.AsyncClient."""

    def __init__(
        self,
        timeout: float = 5.0,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize the transport.

        Args:
            timeout: Request timeout in seconds, ignored when ``client`` is given
            client: Optional preconfigured client (owned by the caller)
        """
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "HttpxTransport":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def send(
        self, url: str, *, method: str, json: Any = None, **options: Any
    ) -> TransportResponse:
        """Send a request; httpx errors propagate to the caller."""
        client = self._get_client()
        if json is None:
            response = await client.request(method, url, **options)
        else:
            response = await client.request(method, url, json=json, **options)
        logger.debug("OPA %s %s -> %s", method, url, response.status_code)
        return TransportResponse(
            status_code=response.status_code, content=response.content
        )

    async def aclose(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
