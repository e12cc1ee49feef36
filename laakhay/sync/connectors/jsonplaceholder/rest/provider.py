"""JSONPlaceholder REST provider.

Architecture:
    This provider uses the endpoint registry to look up specs and adapters,
    and RESTProvider to execute requests. Listing endpoints are paginated by
    page number ("_page"/"_limit"); filtering by a parent id uses the nested
    path ("/users/1/posts").
"""

from __future__ import annotations

from typing import ClassVar

from laakhay.sync.models import SyncEntity
from laakhay.sync.runtime.rest import (
    ResponseAdapter,
    ResponseCache,
    RestEndpointSpec,
    RESTProvider,
    RESTTransport,
)

from .. import config
from ..entities import ENTITY_CLASSES
from .endpoints import get_endpoint_adapter, get_endpoint_spec


class JsonPlaceholderProvider(RESTProvider):
    """Provider for the JSONPlaceholder fake REST API."""

    entity_classes: ClassVar[dict[str, type[SyncEntity]]] = ENTITY_CLASSES
    HEALTH_PATH = config.HEALTH_PATH

    def __init__(
        self,
        *,
        base_url: str | None = None,
        provider_id: str = config.PROVIDER_ID,
        timeout: float = 30.0,
        cache: ResponseCache | None = None,
        expiry: float | None = None,
        transport: RESTTransport | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            base_url: API base URL (defaults to JSON_PLACEHOLDER_BASE_URL)
            provider_id: Identifier used in entity keys
            timeout: Request timeout in seconds
            cache: Optional response cache for GET requests
            expiry: Cache lifetime in seconds (0: no expiry, None: do not cache)
            transport: Preconfigured transport (overrides the other options)
        """
        self.base_url = base_url or config.BASE_URL
        super().__init__(
            provider_id,
            base_url=self.base_url,
            timeout=timeout,
            cache=cache,
            expiry=expiry,
            transport=transport,
        )

    def get_endpoint_spec(self, entity_type: str) -> RestEndpointSpec | None:
        return get_endpoint_spec(entity_type)

    def get_endpoint_adapter(self, entity_type: str) -> ResponseAdapter:
        adapter_cls = get_endpoint_adapter(entity_type)
        return adapter_cls() if adapter_cls is not None else ResponseAdapter()

    def __repr__(self) -> str:
        return f"JsonPlaceholderProvider({self.base_url!r})"
