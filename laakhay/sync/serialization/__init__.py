"""Entity graph serialization."""

from .serializer import (
    CIRCULAR_REFERENCE,
    UNRESOLVED,
    GraphSerializer,
    SerializeRules,
    serialize,
)

__all__ = [
    "CIRCULAR_REFERENCE",
    "UNRESOLVED",
    "GraphSerializer",
    "SerializeRules",
    "serialize",
]
