"""Base provider abstract class.

Architecture:
    This module defines the BaseProvider abstract base class that all entity
    providers must implement. It provides:
    - Abstract fetch primitives (fetch_record, iter_pages, close)
    - Entity class lookup by entity type
    - Batch filter discovery (supports_multi_value_filter)
    - Async context manager support

Design Decisions:
    - Providers return raw records, never entities: hydration, interning and
      deferral belong to the sync session
    - Async context manager: Ensures proper resource cleanup
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Any, ClassVar

from .exceptions import UnsupportedEntityError
from .keys import EntityId

if TYPE_CHECKING:
    from ..models.entity import SyncEntity
    from ..runtime.paging import Page, Pager


class BaseProvider(ABC):
    """Abstract base class for all entity providers.

    Subclasses declare the entities they service in ``entity_classes`` and
    implement the fetch primitives. ``provider_id`` is the first component
    of every key of every entity retrieved through the provider.
    """

    entity_classes: ClassVar[dict[str, type[SyncEntity]]] = {}

    def __init__(self, provider_id: str) -> None:
        if not provider_id or not isinstance(provider_id, str):
            raise ValueError("provider_id must be a non-empty string")
        self.provider_id = provider_id

    def entity_class(self, entity_type: str) -> type[SyncEntity]:
        """Return the entity class for ``entity_type``.

        Raises:
            UnsupportedEntityError: If the provider does not service the type
        """
        cls = self.entity_classes.get(entity_type)
        if cls is None:
            raise UnsupportedEntityError(self.provider_id, entity_type)
        return cls

    def supports(self, entity_type: str) -> bool:
        return entity_type in self.entity_classes

    def supports_multi_value_filter(self, entity_type: str, key: str) -> bool:
        """Whether ``key`` accepts a list of values in one filtered fetch."""
        return False

    async def fetch_health(self) -> dict[str, object]:
        """Fetch provider health information."""
        raise NotImplementedError("fetch_health is not implemented for this provider")

    @abstractmethod
    async def fetch_record(self, entity_type: str, entity_id: EntityId) -> dict[str, Any]:
        """Fetch the raw record of one entity by id."""
        pass

    @abstractmethod
    def iter_pages(
        self,
        entity_type: str,
        query: dict[str, Any] | None = None,
        *,
        pager: Pager | None = None,
    ) -> AsyncIterator[Page]:
        """Stream pages of raw records matching ``query``.

        ``pager`` overrides the pager the provider would otherwise use.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close provider connections and cleanup resources."""
        pass

    async def __aenter__(self) -> BaseProvider:
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        await self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.provider_id!r})"
