"""Core components."""

from .base import BaseProvider
from .enums import DeferralPolicy, RelationshipKind
from .exceptions import (
    NoMorePagesError,
    PagerConfigurationError,
    ProviderError,
    RateLimitError,
    ResolutionError,
    SerializationError,
    SyncError,
    TransportError,
    UnsupportedEntityError,
)
from .identity_map import IdentityMap
from .keys import EntityId, EntityKey

__all__ = [
    "BaseProvider",
    "DeferralPolicy",
    "RelationshipKind",
    "EntityId",
    "EntityKey",
    "IdentityMap",
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
