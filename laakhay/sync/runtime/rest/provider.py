"""Base class for providers backed by a REST API.

Architecture:
    A REST provider looks up the endpoint spec and adapter registered for an
    entity type, then uses RestRunner to execute requests through its
    RESTTransport. Subclasses supply the endpoint registry and entity classes.
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import AsyncIterator
from time import perf_counter
from typing import Any

from ...core.base import BaseProvider
from ...core.exceptions import UnsupportedEntityError
from ...core.keys import EntityId
from ..paging import Page, Pager, extract_pager
from .cache import ResponseCache
from .runner import ResponseAdapter, RestEndpointSpec, RestRunner
from .transport import RESTTransport


class RESTProvider(BaseProvider):
    """Provider whose records come from declarative REST endpoint specs."""

    # Path requested by fetch_health()
    HEALTH_PATH = "/"

    def __init__(
        self,
        provider_id: str,
        *,
        base_url: str | None = None,
        timeout: float = 30.0,
        cache: ResponseCache | None = None,
        expiry: float | None = None,
        transport: RESTTransport | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            provider_id: Identifier used in the keys of this provider's entities
            base_url: Base URL of the REST API
            timeout: Request timeout in seconds
            cache: Optional response cache for GET requests
            expiry: Cache lifetime in seconds (0: no expiry, None: do not cache)
            transport: Preconfigured transport (overrides the other options)
        """
        super().__init__(provider_id)
        self._transport = transport or RESTTransport(
            base_url, timeout=timeout, cache=cache, expiry=expiry
        )
        self._runner = RestRunner(self._transport)

    @property
    def transport(self) -> RESTTransport:
        return self._transport

    @abstractmethod
    def get_endpoint_spec(self, entity_type: str) -> RestEndpointSpec | None:
        """Return the endpoint spec for ``entity_type``, or None."""
        pass

    def get_endpoint_adapter(self, entity_type: str) -> ResponseAdapter:
        return ResponseAdapter()

    def _require_spec(self, entity_type: str) -> RestEndpointSpec:
        spec = self.get_endpoint_spec(entity_type)
        if spec is None:
            raise UnsupportedEntityError(self.provider_id, entity_type)
        return spec

    async def fetch_record(self, entity_type: str, entity_id: EntityId) -> dict[str, Any]:
        spec = self._require_spec(entity_type)
        params = {"id": entity_id, "filter": {}}
        return await self._runner.run(
            spec=spec, adapter=self.get_endpoint_adapter(entity_type), params=params
        )

    def iter_pages(
        self,
        entity_type: str,
        query: dict[str, Any] | None = None,
        *,
        pager: Pager | None = None,
    ) -> AsyncIterator[Page]:
        spec = self._require_spec(entity_type)
        params = {"id": None, "filter": dict(query or {})}
        if pager is None:
            pager = extract_pager(spec, params)
        return self._runner.iter_pages(
            spec=spec,
            adapter=self.get_endpoint_adapter(entity_type),
            params=params,
            pager=pager,
        )

    def supports_multi_value_filter(self, entity_type: str, key: str) -> bool:
        spec = self.get_endpoint_spec(entity_type)
        return spec is not None and key in spec.multi_value_filters

    async def fetch_health(self) -> dict[str, object]:
        """Request HEALTH_PATH to verify connectivity."""
        start = perf_counter()
        await self._transport.get(self.HEALTH_PATH)
        latency_ms = (perf_counter() - start) * 1000.0
        return {
            "provider": self.provider_id,
            "status": "ok",
            "latency_ms": latency_ms,
            "endpoint": self.HEALTH_PATH,
        }

    async def close(self) -> None:
        await self._transport.close()
