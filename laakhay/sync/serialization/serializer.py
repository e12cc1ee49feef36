"""Entity graph serializer with a cycle guard.

Serialization walks an entity's fields depth-first and produces a tree of
plain Python values (dicts, lists, scalars) suitable for JSON output or
storage. The keys of the entities on the current path are kept on a
visited stack; an entity whose key is already on the stack is emitted as a
circular-reference sentinel instead of being expanded again, so any finite
graph serializes in finite time.

Unresolved placeholders are emitted as "unresolved" markers. Serializing
never resolves a placeholder.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from ..core.exceptions import SerializationError
from ..core.keys import EntityKey
from ..models.entity import SyncEntity
from ..runtime.deferral import DeferredEntity, DeferredRelationship

CIRCULAR_REFERENCE = "circular reference"
UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class SerializeRules:
    """Options controlling how an entity graph is serialized.

    Attributes:
        max_depth: Maximum number of nested entities on one path (None: unlimited)
        date_format: strftime format for dates and datetimes (None: ISO 8601)
        exclude: Field names omitted from every entity
        links_only: Emit nested entities as {type, id} links instead of expanding them
    """

    max_depth: int | None = None
    date_format: str | None = None
    exclude: frozenset[str] = frozenset()
    links_only: bool = False

    def __post_init__(self) -> None:
        if self.max_depth is not None and self.max_depth < 1:
            raise ValueError("max_depth must be positive")


class GraphSerializer:
    """Serializes entity graphs according to a set of SerializeRules."""

    def __init__(self, rules: SerializeRules | None = None) -> None:
        self.rules = rules or SerializeRules()

    def serialize(
        self,
        entity: SyncEntity,
        visited: list[EntityKey | int] | None = None,
    ) -> dict[str, Any]:
        """Serialize ``entity`` and everything reachable from it.

        Args:
            entity: Root of the graph
            visited: Keys of entities already on the path (normally empty)

        Raises:
            SerializationError: If the graph is deeper than ``max_depth``
        """
        return self._entity(entity, [] if visited is None else visited)

    def _entity(self, entity: SyncEntity, visited: list[EntityKey | int]) -> dict[str, Any]:
        marker = _path_key(entity)
        if marker in visited:
            return {
                "type": type(entity).entity_type,
                "id": entity.id,
                "reason": CIRCULAR_REFERENCE,
            }
        if self.rules.max_depth is not None and len(visited) >= self.rules.max_depth:
            raise SerializationError(
                f"Maximum depth ({self.rules.max_depth}) exceeded at {entity!r}"
            )

        visited.append(marker)
        try:
            return {
                name: self._value(getattr(entity, name), visited)
                for name in type(entity).model_fields
                if name not in self.rules.exclude
            }
        finally:
            visited.pop()

    def _value(self, value: Any, visited: list[EntityKey | int]) -> Any:
        if isinstance(value, DeferredEntity | DeferredRelationship):
            if value.is_resolved:
                return self._value(value.value, visited)
            return _unresolved(value)
        if isinstance(value, SyncEntity):
            if self.rules.links_only and visited:
                return {"type": type(value).entity_type, "id": value.id}
            return self._entity(value, visited)
        if isinstance(value, BaseModel):
            return self._value(value.model_dump(), visited)
        if isinstance(value, datetime | date):
            if self.rules.date_format is not None:
                return value.strftime(self.rules.date_format)
            return value.isoformat()
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, Decimal | UUID):
            return str(value)
        if isinstance(value, dict):
            return {str(k): self._value(v, visited) for k, v in value.items()}
        if isinstance(value, list | tuple | set | frozenset):
            return [self._value(item, visited) for item in value]
        return value


def serialize(entity: SyncEntity, rules: SerializeRules | None = None) -> dict[str, Any]:
    """Serialize an entity graph to a tree of plain values."""
    return GraphSerializer(rules).serialize(entity)


def _path_key(entity: SyncEntity) -> EntityKey | int:
    key = entity.entity_key
    # Entities without an id have no key to compare; fall back to the instance
    return key if key.id is not None else id(entity)


def _unresolved(placeholder: DeferredEntity | DeferredRelationship) -> dict[str, Any]:
    if isinstance(placeholder, DeferredEntity):
        return {"type": placeholder.entity_type, "id": placeholder.id, "reason": UNRESOLVED}
    return {
        "type": placeholder.entity_type,
        "filter": dict(placeholder.filter),
        "reason": UNRESOLVED,
    }
