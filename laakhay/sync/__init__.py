"""Laakhay Sync - Entity synchronization core.

Turns paginated, relationship-bearing records from remote backends into a
deduplicated, cycle-safe graph of typed entities, with controllable timing
for resolving cross-entity references.
"""

from .connectors.jsonplaceholder import JsonPlaceholderProvider
from .core import (
    BaseProvider,
    DeferralPolicy,
    EntityKey,
    IdentityMap,
    NoMorePagesError,
    PagerConfigurationError,
    ProviderError,
    RateLimitError,
    RelationshipKind,
    ResolutionError,
    SerializationError,
    SyncError,
    TransportError,
    UnsupportedEntityError,
)
from .models import Collection, Reference, SyncEntity
from .runtime import SyncContext, SyncSession
from .runtime.deferral import DeferralEngine, DeferredEntity, DeferredRelationship, is_deferred
from .runtime.paging import (
    EntitySelector,
    NextRequest,
    ODataPager,
    Page,
    PageRequest,
    Pager,
    PagerState,
    QueryPager,
)
from .runtime.rest import (
    HTTPClient,
    MemoryResponseCache,
    ResponseCache,
    RESTProvider,
    RESTTransport,
)
from .serialization import GraphSerializer, SerializeRules, serialize

__all__ = [
    # Sessions
    "SyncSession",
    "SyncContext",
    "DeferralPolicy",
    # Identity
    "EntityKey",
    "IdentityMap",
    # Entities
    "SyncEntity",
    "Reference",
    "Collection",
    "RelationshipKind",
    # Deferral
    "DeferralEngine",
    "DeferredEntity",
    "DeferredRelationship",
    "is_deferred",
    # Paging
    "Page",
    "PageRequest",
    "NextRequest",
    "Pager",
    "PagerState",
    "EntitySelector",
    "ODataPager",
    "QueryPager",
    # Providers and transport
    "BaseProvider",
    "RESTProvider",
    "RESTTransport",
    "HTTPClient",
    "ResponseCache",
    "MemoryResponseCache",
    "JsonPlaceholderProvider",
    # Serialization
    "GraphSerializer",
    "SerializeRules",
    "serialize",
    # Exceptions
    "SyncError",
    "ProviderError",
    "TransportError",
    "RateLimitError",
    "UnsupportedEntityError",
    "PagerConfigurationError",
    "NoMorePagesError",
    "ResolutionError",
    "SerializationError",
]
