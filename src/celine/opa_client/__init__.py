"""Async client for the Open Policy Agent data API."""

from celine.opa_client.cache import Cache, DecisionCache, make_cache_key
from celine.opa_client.client import PolicyClient
from celine.opa_client.config import PolicyClientConfig, Settings, get_settings
from celine.opa_client.errors import ErrorKind, OpaClientError
from celine.opa_client.models import (
    BadRequestBody,
    OpaWarning,
    QueryEntity,
    QueryInput,
    QueryResponse,
)
from celine.opa_client.transport import HttpxTransport, Transport, TransportResponse

__all__ = [
    "PolicyClient",
    "PolicyClientConfig",
    "Settings",
    "get_settings",
    "Cache",
    "DecisionCache",
    "make_cache_key",
    "ErrorKind",
    "OpaClientError",
    "BadRequestBody",
    "OpaWarning",
    "QueryEntity",
    "QueryInput",
    "QueryResponse",
    "HttpxTransport",
    "Transport",
    "TransportResponse",
]
