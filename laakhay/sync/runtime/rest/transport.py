"""REST transport: sends page requests, optionally through a response cache."""

from __future__ import annotations

import base64
import hashlib
import json
import logging
from typing import Any

from multidict import CIMultiDict

from ...utils.query import query_pairs
from ..paging.definitions import PageRequest
from .cache import ResponseCache
from .http_client import HTTPClient, HttpResponse, ResponseHook

logger = logging.getLogger(__name__)


class RESTTransport:
    """Sends requests for a REST provider.

    GET responses are cached when both ``cache`` and ``expiry`` are given.
    ``expiry`` is a lifetime in seconds; 0 caches without expiry.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float = 30.0,
        cache: ResponseCache | None = None,
        expiry: float | None = None,
        http: HTTPClient | None = None,
    ) -> None:
        if expiry is not None and expiry < 0:
            raise ValueError("expiry cannot be negative")
        self._http = http or HTTPClient(base_url=base_url, timeout=timeout)
        self._cache = cache
        self._expiry = expiry

    @property
    def http(self) -> HTTPClient:
        return self._http

    def add_response_hook(self, hook: ResponseHook) -> None:
        self._http.add_response_hook(hook)

    async def send(self, request: PageRequest) -> HttpResponse:
        method = request.method.upper()
        cacheable = self._cache is not None and self._expiry is not None and method == "GET"

        key = None
        if cacheable:
            key = cache_key(self._http.resolve_url(request.url), request)
            cached = self._cache.get(key)
            if cached is not None:
                logger.debug("response_cache_hit", extra={"method": method, "url": request.url})
                return decode_response(cached)

        response = await self._http.request(
            method,
            request.url,
            params=request.query,
            headers=request.headers,
            json_body=request.body if method != "GET" else None,
        )

        if key is not None:
            self._cache.set(key, encode_response(response), expiry=self._expiry or None)
        return response

    async def get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        response = await self.send(PageRequest("GET", path, query=params, headers=headers))
        return response.json()

    async def post(
        self,
        path: str,
        json_body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        response = await self.send(PageRequest("POST", path, body=json_body, headers=headers))
        return response.json()

    async def close(self) -> None:
        await self._http.close()


def cache_key(url: str, request: PageRequest) -> str:
    """Fingerprint of everything that can change a GET response."""
    material = json.dumps(
        [
            request.method.upper(),
            url,
            query_pairs(request.query),
            sorted((k.lower(), v) for k, v in (request.headers or {}).items()),
        ],
        separators=(",", ":"),
    )
    return hashlib.sha256(material.encode()).hexdigest()


def encode_response(response: HttpResponse) -> bytes:
    return json.dumps(
        {
            "status": response.status,
            "headers": list(response.headers.items()),
            "body": base64.b64encode(response.body).decode("ascii"),
        }
    ).encode()


def decode_response(data: bytes) -> HttpResponse:
    envelope = json.loads(data)
    return HttpResponse(
        status=envelope["status"],
        headers=CIMultiDict([tuple(item) for item in envelope["headers"]]),
        body=base64.b64decode(envelope["body"]),
    )
