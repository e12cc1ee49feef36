"""Custom exception hierarchy."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .keys import EntityKey


class SyncError(Exception):
    """Base exception for all library errors."""

    pass


class ProviderError(SyncError):
    """Error from an entity provider or its backend."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransportError(ProviderError):
    """Request could not be completed by the transport.

    A network failure carries no status code. A response with a non-2xx HTTP
    status carries it in ``status_code``.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        *,
        url: str | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code)
        self.url = url

    @property
    def is_network_error(self) -> bool:
        return self.status_code is None


class RateLimitError(TransportError):
    """Backend rate limit exceeded."""

    def __init__(
        self,
        message: str,
        retry_after: float = 60,
        *,
        status_code: int = 429,
        url: str | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code, url=url)
        self.retry_after = retry_after


class UnsupportedEntityError(ProviderError):
    """Entity type is not serviced by the provider."""

    def __init__(self, provider_id: str, entity_type: str) -> None:
        super().__init__(f"Entity type not supported by {provider_id}: {entity_type}")
        self.provider_id = provider_id
        self.entity_type = entity_type


class PagerConfigurationError(SyncError):
    """Pager cannot derive the next request from its configuration.

    Raised when a cursor pager has no cursor key and none can be detected
    from the initial query once a second page is requested.
    """

    pass


class NoMorePagesError(SyncError):
    """Next-page accessor used on the last page of a stream."""

    pass


class ResolutionError(SyncError):
    """Deferred entity or relationship could not be resolved."""

    def __init__(
        self,
        message: str,
        *,
        key: EntityKey | None = None,
        entity_type: str | None = None,
        filter: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.key = key
        if entity_type is None and key is not None:
            entity_type = key.entity_type
        self.entity_type = entity_type
        self.filter = filter


class SerializationError(SyncError):
    """Entity graph could not be serialized under the given rules."""

    pass
