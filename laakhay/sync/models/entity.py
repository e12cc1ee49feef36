"""Sync entity base model and relationship descriptors.

Architecture:
    Entities are mutable Pydantic models. Scalar fields are validated from
    backend records; relationship fields are populated by the sync session
    after the entity has been interned, so every relationship points at a
    canonical instance, a deferred placeholder, or None.

Design Decisions:
    - Mutable models: relationship fields are swapped in place when
      placeholders resolve
    - Equality by identity key: entities with the same key are the same
      entity, and comparing cyclic graphs field by field would not terminate
    - Relationships declared as class-level descriptors, not inferred from
      annotations, so the session never guesses how to fetch a relation
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, PrivateAttr

from ..core.enums import RelationshipKind
from ..core.keys import EntityKey


@dataclass(frozen=True)
class Reference:
    """Relationship to one entity (or a list of entities) by id.

    Attributes:
        entity_type: Type of the related entity
        id_field: Attribute on the owner holding the related id, or a list of ids
    """

    entity_type: str
    id_field: str

    @property
    def kind(self) -> RelationshipKind:
        return RelationshipKind.REFERENCE


@dataclass(frozen=True)
class Collection:
    """Relationship to the entities whose filter key matches the owner's id.

    Attributes:
        entity_type: Type of the related entities
        filter_key: Filter parameter selecting related entities by owner id
            (e.g. "userId" for a user's posts)
    """

    entity_type: str
    filter_key: str

    @property
    def kind(self) -> RelationshipKind:
        return RelationshipKind.COLLECTION


Relationship = Reference | Collection


class SyncEntity(BaseModel):
    """Base class for entities synchronized from a provider."""

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        populate_by_name=True,
        extra="ignore",
    )

    entity_type: ClassVar[str] = ""
    relationships: ClassVar[dict[str, Relationship]] = {}

    id: int | str | None = None

    _provider_id: str | None = PrivateAttr(default=None)

    @property
    def provider_id(self) -> str | None:
        return self._provider_id

    def bind_provider(self, provider_id: str) -> None:
        """Attach the entity to the provider it was retrieved from."""
        if self._provider_id is not None and self._provider_id != provider_id:
            raise ValueError(
                f"{self!r} already belongs to provider {self._provider_id!r}"
            )
        self._provider_id = provider_id

    @property
    def entity_key(self) -> EntityKey:
        return EntityKey(self._provider_id or "", type(self).entity_type, self.id)

    @classmethod
    def relationship_keys(cls) -> set[str]:
        """Raw record keys that belong to relationship fields."""
        keys: set[str] = set()
        for name in cls.relationships:
            keys.add(name)
            field = cls.model_fields.get(name)
            if field is not None and field.alias:
                keys.add(field.alias)
        return keys

    @classmethod
    def field_for(cls, key: str) -> str | None:
        """Resolve a raw record key (field name or alias) to a field name."""
        if key in cls.model_fields:
            return key
        for name, field in cls.model_fields.items():
            if field.alias == key:
                return name
        return None

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, SyncEntity):
            return False
        key = self.entity_key
        return key.id is not None and key == other.entity_key

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"

    __str__ = __repr__
