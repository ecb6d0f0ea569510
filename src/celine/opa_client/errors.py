"""Errors raised by the OPA client."""

from __future__ import annotations

from enum import Enum
from typing import Any

from celine.opa_client.models import BadRequestBody


class ErrorKind(str, Enum):
    """Failure categories of a policy query."""

    SERVER = "server"
    BAD_REQUEST = "bad_request"
    UNKNOWN_STATUS = "unknown_status"
    ASSERT = "assert"
    NOT_FOUND = "not_found"
    MALFORMED_RESPONSE = "malformed_response"


class OpaClientError(Exception):
    """Error raised for a failed policy query.

    Every error carries the queried resource and input. Kind-specific
    attributes are None when they do not apply:

    - ``response`` for BAD_REQUEST
    - ``status_code`` for UNKNOWN_STATUS and MALFORMED_RESPONSE
    - ``expected`` for ASSERT
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        resource: str,
        input: Any = None,
        *,
        response: BadRequestBody | None = None,
        status_code: int | None = None,
        expected: Any = None,
    ):
        super().__init__(message or "OPA Client Error")
        self.kind = kind
        self.resource = resource
        self.input = input
        self.response = response
        self.status_code = status_code
        self.expected = expected

    def __repr__(self) -> str:
        return f"OpaClientError(kind={self.kind.value!r}, resource={self.resource!r})"

    @classmethod
    def server_error(cls, resource: str, input: Any = None) -> OpaClientError:
        return cls(
            ErrorKind.SERVER,
            f"OPA server error occurs retrieving resource {resource}",
            resource,
            input,
        )

    @classmethod
    def bad_request(
        cls, resource: str, input: Any = None, response: BadRequestBody | None = None
    ) -> OpaClientError:
        return cls(
            ErrorKind.BAD_REQUEST,
            f"OPA bad request for resource {resource}",
            resource,
            input,
            response=response,
        )

    @classmethod
    def unknown_status(
        cls, resource: str, status_code: int, input: Any = None
    ) -> OpaClientError:
        return cls(
            ErrorKind.UNKNOWN_STATUS,
            f"OPA unknown error occurs retrieving resource {resource}",
            resource,
            input,
            status_code=status_code,
        )

    @classmethod
    def assert_failed(
        cls, resource: str, expected: Any, input: Any = None
    ) -> OpaClientError:
        return cls(
            ErrorKind.ASSERT,
            f"OPA assert failed for resource {resource}",
            resource,
            input,
            expected=expected,
        )

    @classmethod
    def not_found(cls, resource: str, input: Any = None) -> OpaClientError:
        return cls(
            ErrorKind.NOT_FOUND,
            f"OPA resource {resource} not found",
            resource,
            input,
        )

    @classmethod
    def malformed_response(
        cls, resource: str, status_code: int, input: Any = None
    ) -> OpaClientError:
        return cls(
            ErrorKind.MALFORMED_RESPONSE,
            f"OPA returned a malformed response for resource {resource}",
            resource,
            input,
            status_code=status_code,
        )
