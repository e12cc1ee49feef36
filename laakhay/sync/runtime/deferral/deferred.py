"""Deferred placeholders for relationships not yet fetched.

Architecture:
    A placeholder is created by the sync session while linking an entity's
    relationship fields and is bound to the slot it occupies (an entity
    field, or an index in a list field). Resolving it fetches through the
    placeholder's SyncContext and replaces the slot's value with the result,
    so later reads of the field see the concrete value directly.

Design Decisions:
    - Resolution is idempotent: a resolved placeholder returns its cached
      value and never fetches again
    - Inspecting a placeholder (is_deferred, is_resolved, value) never
      triggers a fetch
    - A 404 from the backend is a ResolutionError; every other error
      propagates unchanged
"""

from __future__ import annotations

import asyncio
from collections.abc import Hashable
from typing import TYPE_CHECKING, Any

from ...core.enums import DeferralPolicy
from ...core.exceptions import ResolutionError, TransportError
from ...core.keys import EntityKey

if TYPE_CHECKING:
    from ...models.entity import SyncEntity
    from ..context import SyncContext


class _Placeholder:
    """Slot binding and resolution bookkeeping shared by both placeholders."""

    def __init__(self, context: SyncContext, policy: DeferralPolicy | None = None) -> None:
        self.context = context
        self.policy = policy
        self._owner: Any = None
        self._field: str | None = None
        self._index: int | None = None
        self._resolved = False
        self._value: Any = None
        self._lock = asyncio.Lock()

    @property
    def provider_id(self) -> str:
        return self.context.provider_id

    @property
    def is_resolved(self) -> bool:
        return self._resolved

    @property
    def value(self) -> Any:
        """Resolved value, or None while unresolved. Never fetches."""
        return self._value

    def bind(self, owner: Any, field: str, index: int | None = None):
        """Record the slot this placeholder occupies."""
        self._owner = owner
        self._field = field
        self._index = index
        return self

    def replace(self, value: Any) -> None:
        """Mark the placeholder resolved and write ``value`` into its slot."""
        self._value = value
        self._resolved = True
        if self._owner is None or self._field is None:
            return
        if self._index is None:
            setattr(self._owner, self._field, value)
            return
        items = getattr(self._owner, self._field)
        if isinstance(items, list) and self._index < len(items) and items[self._index] is self:
            items[self._index] = value


class DeferredEntity(_Placeholder):
    """Stands in for one related entity identified by key but not fetched."""

    def __init__(
        self,
        context: SyncContext,
        key: EntityKey,
        policy: DeferralPolicy | None = None,
    ) -> None:
        if key.id is None:
            raise ValueError("A deferred entity needs an id")
        super().__init__(context, policy)
        self.key = key

    @property
    def entity_type(self) -> str:
        return self.key.entity_type

    @property
    def id(self) -> Any:
        return self.key.id

    async def resolve(self) -> SyncEntity:
        """Fetch (or look up) the entity and replace this placeholder with it.

        Raises:
            ResolutionError: If the backend has no entity with this id
        """
        async with self._lock:
            if self._resolved:
                return self._value
            try:
                entity = await self.context.fetch_by_id(
                    self.key.entity_type, self.key.id, policy=self.policy
                )
            except TransportError as e:
                if e.status_code == 404:
                    raise ResolutionError(f"{self.key} not found", key=self.key) from e
                raise
            self.replace(entity)
            return entity

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DeferredEntity):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __repr__(self) -> str:
        state = "resolved" if self._resolved else "unresolved"
        return f"<DeferredEntity {self.key} ({state})>"


class DeferredRelationship(_Placeholder):
    """Stands in for the entities matching a filter, e.g. a user's posts."""

    def __init__(
        self,
        context: SyncContext,
        entity_type: str,
        filter: dict[str, Any],
        policy: DeferralPolicy | None = None,
    ) -> None:
        if not filter:
            raise ValueError("A deferred relationship needs a filter")
        super().__init__(context, policy)
        self.entity_type = entity_type
        self.filter = dict(filter)

    async def resolve(self) -> list[SyncEntity]:
        """Fetch the matching entities and replace this placeholder with them.

        Raises:
            ResolutionError: If the backend reports the collection missing
        """
        async with self._lock:
            if self._resolved:
                return self._value
            try:
                entities = await self.context.fetch_by_filter(
                    self.entity_type, self.filter, policy=self.policy
                )
            except TransportError as e:
                if e.status_code == 404:
                    raise ResolutionError(
                        f"No {self.entity_type} collection for {self.filter!r}",
                        entity_type=self.entity_type,
                        filter=self.filter,
                    ) from e
                raise
            self.replace(list(entities))
            return self._value

    def replace(self, value: Any) -> None:
        # Each owner gets its own list
        super().replace(list(value))

    @property
    def identity(self) -> tuple[str, str, Hashable]:
        return (self.provider_id, self.entity_type, _freeze(self.filter))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DeferredRelationship):
            return NotImplemented
        return self.identity == other.identity

    def __hash__(self) -> int:
        return hash(self.identity)

    def __repr__(self) -> str:
        state = "resolved" if self._resolved else "unresolved"
        return f"<DeferredRelationship {self.provider_id}:{self.entity_type} {self.filter!r} ({state})>"


Deferred = DeferredEntity | DeferredRelationship


def is_deferred(value: Any) -> bool:
    """True if ``value`` is an unresolved placeholder. Never fetches."""
    return isinstance(value, _Placeholder) and not value.is_resolved


def _freeze(value: Any) -> Hashable:
    if isinstance(value, dict):
        return tuple(sorted((str(k), _freeze(v)) for k, v in value.items()))
    if isinstance(value, list | tuple | set | frozenset):
        return tuple(_freeze(v) for v in value)
    return value
