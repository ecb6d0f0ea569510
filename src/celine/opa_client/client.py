"""Async client for the OPA data API."""

from __future__ import annotations

import time
from typing import Any, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from celine.opa_client.cache import Cache, make_cache_key
from celine.opa_client.config import PolicyClientConfig
from celine.opa_client.errors import OpaClientError
from celine.opa_client.models import BadRequestBody, dump_input
from celine.opa_client.transport import HttpxTransport, Transport

logger = structlog.get_logger()

ResponseT = TypeVar("ResponseT", bound=BaseModel)


def _strict_equals(left: Any, right: Any) -> bool:
    """Equality that keeps booleans apart from numbers (1 != True)."""
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    return left == right


def _result_of(document: Any) -> Any:
    if isinstance(document, dict):
        return document.get("result")
    return None


class PolicyClient:
    """Queries policy decisions from an OPA server.

    Resources may use dot or slash notation: ``my.resource.allow`` and
    ``my/resource/allow`` address the same document.
    """

    def __init__(self, config: PolicyClientConfig, transport: Transport):
        """Initialize the client.

        Args:
            config: Endpoint, method and cache configuration
            transport: Transport used to send requests
        """
        self._config = config
        self._transport = transport

    @classmethod
    def from_url(
        cls,
        url: str,
        transport: Transport | None = None,
        **overrides: Any,
    ) -> "PolicyClient":
        """Create a client for a bare base URL.

        Args:
            url: OPA base URL
            transport: Transport to use, an HttpxTransport when omitted
            overrides: Other PolicyClientConfig fields (opa_version, method, ...)
        """
        config = PolicyClientConfig(url=url, **overrides)
        return cls(config, transport or HttpxTransport())

    async def __aenter__(self) -> "PolicyClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release the transport, when it holds resources."""
        close = getattr(self._transport, "aclose", None)
        if close is not None:
            await close()

    @property
    def config(self) -> PolicyClientConfig:
        return self._config

    @property
    def cache(self) -> Cache | None:
        return self._config.cache

    def endpoint(self, resource: str) -> str:
        """URL of the data document for a resource."""
        resource_path = resource.replace(".", "/")
        return f"{self._config.url}/{self._config.opa_version}/data/{resource_path}"

    async def query(
        self,
        resource: str,
        input: Any = None,
        response_model: type[ResponseT] | None = None,
    ) -> Any:
        """Query the requested OPA resource.

        Args:
            resource: Resource in dot or slash notation
            input: Optional input document (mapping or pydantic model)
            response_model: Optional model to validate the response into

        Returns:
            The decoded response, or an instance of ``response_model``

        Raises:
            OpaClientError: SERVER on 500, BAD_REQUEST on 4xx, UNKNOWN_STATUS
                on any other non-200 status, MALFORMED_RESPONSE when the body
                cannot be decoded
        """
        resource_path = resource.replace(".", "/")
        input_data = dump_input(input)

        cache = self._config.cache
        if cache is not None:
            cache_key = make_cache_key(resource_path, input_data)
            cached = cache.get(cache_key)
            if cached:
                logger.debug("Policy query", resource=resource_path, cached=True)
                return self._validate(resource, input_data, cached, response_model)

        # The configured method and the query body always win over request_options.
        options = {
            k: v
            for k, v in self._config.request_options.items()
            if k not in ("method", "json")
        }
        if input_data is not None:
            options["json"] = {"input": input_data}

        start_time = time.perf_counter()
        response = await self._transport.send(
            self.endpoint(resource), method=self._config.method, **options
        )
        elapsed_ms = (time.perf_counter() - start_time) * 1000
        status_code = response.status_code

        logger.debug(
            "Policy query",
            resource=resource_path,
            method=self._config.method,
            status_code=status_code,
            latency_ms=round(elapsed_ms, 2),
            cached=False,
        )

        if status_code == 500:
            raise self._failed(OpaClientError.server_error(resource, input_data))

        if 400 <= status_code < 500:
            try:
                body = BadRequestBody.model_validate(response.json())
            except ValueError as e:
                raise self._failed(
                    OpaClientError.malformed_response(resource, status_code, input_data)
                ) from e
            raise self._failed(OpaClientError.bad_request(resource, input_data, body))

        if status_code != 200:
            raise self._failed(
                OpaClientError.unknown_status(resource, status_code, input_data)
            )

        try:
            document = response.json()
        except ValueError as e:
            raise self._failed(
                OpaClientError.malformed_response(resource, status_code, input_data)
            ) from e

        if cache is not None:
            cache.set(cache_key, document)

        return self._validate(resource, input_data, document, response_model)

    async def assert_(
        self, resource: str, input: Any = None, expected: Any = True
    ) -> None:
        """Raise if the resource result differs from ``expected``.

        Args:
            resource: Resource in dot or slash notation
            input: Optional input document
            expected: Expected result, defaults to True

        Raises:
            OpaClientError: ASSERT on mismatch, or any query error
        """
        document = await self.query(resource, input)
        if not _strict_equals(_result_of(document), expected):
            raise self._failed(
                OpaClientError.assert_failed(resource, expected, dump_input(input))
            )

    async def evaluate(self, resource: str, input: Any = None) -> bool:
        """Return the boolean decision of a policy.

        Args:
            resource: Resource in dot or slash notation
            input: Optional input document

        Raises:
            OpaClientError: NOT_FOUND if the result is missing or not a
                boolean, or any query error
        """
        document = await self.query(resource, input)
        result = _result_of(document)
        if not isinstance(result, bool):
            raise self._failed(OpaClientError.not_found(resource, dump_input(input)))
        return result

    def _validate(
        self,
        resource: str,
        input_data: Any,
        document: Any,
        response_model: type[ResponseT] | None,
    ) -> Any:
        if response_model is None:
            return document
        try:
            return response_model.model_validate(document)
        except ValidationError as e:
            raise self._failed(
                OpaClientError.malformed_response(resource, 200, input_data)
            ) from e

    @staticmethod
    def _failed(error: OpaClientError) -> OpaClientError:
        logger.warning(
            "Policy query failed",
            resource=error.resource,
            kind=error.kind.value,
            status_code=error.status_code,
        )
        return error
