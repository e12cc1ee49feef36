"""Composite entity identity."""

from __future__ import annotations

from dataclasses import dataclass

EntityId = int | str


@dataclass(frozen=True)
class EntityKey:
    """Identity of an entity within a sync session.

    Two entities with equal keys are the same entity. A key whose ``id`` is
    ``None`` belongs to an entity that has not been assigned an identity yet
    and is never deduplicated.

    Attributes:
        provider_id: Identifier of the provider the entity came from
        entity_type: Entity type name (e.g. "user")
        id: Backend identifier, or None
    """

    provider_id: str
    entity_type: str
    id: EntityId | None = None

    @property
    def is_identified(self) -> bool:
        return self.id is not None

    def __str__(self) -> str:
        return f"{self.provider_id}:{self.entity_type}/{self.id if self.id is not None else '?'}"
