"""REST runtime abstractions."""

from .cache import MemoryResponseCache, ResponseCache
from .http_client import HTTPClient, HttpResponse
from .provider import RESTProvider
from .runner import ResponseAdapter, RestEndpointSpec, RestRunner
from .transport import RESTTransport

__all__ = [
    "HTTPClient",
    "HttpResponse",
    "MemoryResponseCache",
    "ResponseCache",
    "RESTTransport",
    "RESTProvider",
    "RestRunner",
    "RestEndpointSpec",
    "ResponseAdapter",
]
