"""Entity models."""

from .entity import Collection, Reference, Relationship, SyncEntity

__all__ = [
    "Collection",
    "Reference",
    "Relationship",
    "SyncEntity",
]
