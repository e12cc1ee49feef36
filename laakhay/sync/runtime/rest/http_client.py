"""Async HTTP client built on aiohttp."""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

import aiohttp
from multidict import CIMultiDict

from ...core.exceptions import RateLimitError, TransportError
from ...utils.query import query_pairs

logger = logging.getLogger(__name__)

# A hook receives each aiohttp response and may return a delay (in seconds)
# to wait before the next request
ResponseHook = Callable[[aiohttp.ClientResponse], float | None | Awaitable[float | None]]

_RATE_LIMIT_STATUSES = frozenset({418, 429})
_DEFAULT_RETRY_AFTER = 60.0


@dataclass(frozen=True)
class HttpResponse:
    """Status, headers and raw body of a completed request."""

    status: int
    headers: CIMultiDict[str] = field(default_factory=CIMultiDict)
    body: bytes = b""

    def json(self) -> Any:
        """Decode the body as JSON (None for an empty body)."""
        if not self.body:
            return None
        return json.loads(self.body)


class HTTPClient:
    """Async HTTP client wrapper.

    Failures are reported as TransportError: network failures without a
    status code, non-2xx responses with one. Requests are never retried.
    """

    def __init__(self, base_url: str | None = None, timeout: float = 30.0) -> None:
        self.base_url = base_url.rstrip("/") if base_url else base_url
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: aiohttp.ClientSession | None = None
        self._response_hooks: list[ResponseHook] = []
        self._throttle_until: float | None = None

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    def add_response_hook(self, hook: ResponseHook) -> None:
        """Register a hook called with every response."""
        self._response_hooks.append(hook)

    def set_throttle(self, delay: float) -> None:
        """Delay the next request by at least ``delay`` seconds."""
        if delay <= 0:
            return
        until = time.time() + delay
        if self._throttle_until is None or until > self._throttle_until:
            self._throttle_until = until

    def resolve_url(self, url: str) -> str:
        """Combine relative URLs with the base URL."""
        if self.base_url and not url.startswith(("http://", "https://")):
            return f"{self.base_url}/{url.lstrip('/')}"
        return url

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        json_body: Any = None,
    ) -> HttpResponse:
        """Send a request and return the completed response.

        Raises:
            RateLimitError: If the backend responds with 429 or 418
            TransportError: On network failure or any other non-2xx status
        """
        await self._wait_for_throttle()
        url = self.resolve_url(url)
        pairs = query_pairs(params)

        try:
            async with self.session.request(
                method.upper(),
                url,
                params=pairs or None,
                headers=headers,
                json=json_body,
            ) as response:
                body = await response.read()
                await self._run_hooks(response)
                result = HttpResponse(
                    status=response.status,
                    headers=CIMultiDict(response.headers),
                    body=body,
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(
                "transport_request_failed",
                extra={"method": method, "url": url, "error_type": type(e).__name__},
            )
            raise TransportError(f"{method.upper()} {url} failed: {e}", url=url) from e

        if result.status in _RATE_LIMIT_STATUSES:
            retry_after = _retry_after(result.headers)
            self.set_throttle(retry_after)
            raise RateLimitError(
                f"{method.upper()} {url} was rate limited",
                retry_after=retry_after,
                status_code=result.status,
                url=url,
            )
        if not 200 <= result.status < 300:
            raise TransportError(
                f"{method.upper()} {url} returned HTTP {result.status}",
                status_code=result.status,
                url=url,
            )
        return result

    async def get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """GET request returning the decoded JSON body."""
        response = await self.request("GET", url, params=params, headers=headers)
        return response.json()

    async def post(
        self,
        url: str,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """POST request returning the decoded JSON body."""
        response = await self.request("POST", url, headers=headers, json_body=json)
        return response.json()

    async def _wait_for_throttle(self) -> None:
        if self._throttle_until is None:
            return
        delay = self._throttle_until - time.time()
        self._throttle_until = None
        if delay > 0:
            await asyncio.sleep(delay)

    async def _run_hooks(self, response: aiohttp.ClientResponse) -> None:
        for hook in self._response_hooks:
            try:
                delay = hook(response)
                if inspect.isawaitable(delay):
                    delay = await delay
            except Exception as e:
                logger.warning(
                    "response_hook_failed",
                    extra={"hook": getattr(hook, "__name__", repr(hook)), "error": str(e)},
                )
                continue
            if delay:
                self.set_throttle(float(delay))

    async def close(self) -> None:
        """Close session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> HTTPClient:
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        await self.close()


def _retry_after(headers: CIMultiDict[str]) -> float:
    value = headers.get("Retry-After")
    if value is None:
        return _DEFAULT_RETRY_AFTER
    try:
        return max(float(value), 0.0)
    except ValueError:
        return _DEFAULT_RETRY_AFTER
