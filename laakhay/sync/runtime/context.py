"""Binding of a sync session to one provider."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..core.enums import DeferralPolicy
from ..core.keys import EntityId, EntityKey

if TYPE_CHECKING:
    from ..core.base import BaseProvider
    from ..models.entity import SyncEntity
    from .session import SyncSession


class SyncContext:
    """The fetch primitives placeholders resolve through.

    One context exists per (session, provider) pair. Fetches go through the
    session so that every result is hydrated and interned.
    """

    def __init__(self, session: SyncSession, provider: BaseProvider) -> None:
        self.session = session
        self.provider = provider

    @property
    def provider_id(self) -> str:
        return self.provider.provider_id

    def lookup(self, key: EntityKey) -> SyncEntity | None:
        return self.session.identity_map.lookup(key)

    def supports_multi_value_filter(self, entity_type: str, key: str) -> bool:
        return self.provider.supports_multi_value_filter(entity_type, key)

    async def fetch_by_id(
        self,
        entity_type: str,
        entity_id: EntityId,
        *,
        policy: DeferralPolicy | None = None,
    ) -> SyncEntity:
        return await self.session.fetch_by_id(self.provider, entity_type, entity_id, policy=policy)

    async def fetch_by_filter(
        self,
        entity_type: str,
        filter: dict[str, Any],
        *,
        policy: DeferralPolicy | None = None,
    ) -> list[SyncEntity]:
        return await self.session.fetch_related(self.provider, entity_type, filter, policy=policy)

    def __repr__(self) -> str:
        return f"SyncContext({self.provider_id!r})"
