"""Sync session: hydrates paged records into an interned entity graph.

Architecture:
    A SyncSession owns one IdentityMap and one DeferralEngine. Providers
    stream pages of raw records; the session turns each record into an
    entity, interns it, and links its relationship fields:
    - embedded objects are hydrated and interned directly
    - references already in the identity map are linked directly
    - anything else becomes a DeferredEntity or DeferredRelationship, which
      the engine resolves according to the session's DeferralPolicy

    Entities are interned before their relationships are linked, so a
    relationship pointing back at an entity being hydrated finds the
    canonical instance and cyclic graphs stay finite.

Design Decisions:
    - Pull API: iter_pages() and run_query() are async iterators, consumed
      one page at a time
    - Stop is cooperative: the stop signal is checked between pages, and a
      page, once requested, is always fully hydrated
    - Stop applies to the streams running when it is called; later streams
      and the fetches that resolve placeholders always run to completion
    - RESOLVE_LATE drains after the last page has been handed to the caller
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Mapping
from contextlib import aclosing
from dataclasses import replace
from typing import Any

from pydantic import ValidationError

from ..core.base import BaseProvider
from ..core.enums import DeferralPolicy
from ..core.exceptions import ProviderError
from ..core.identity_map import IdentityMap
from ..core.keys import EntityId, EntityKey
from ..models.entity import Collection, Reference, SyncEntity
from .context import SyncContext
from .deferral import DeferralEngine, DeferredEntity, DeferredRelationship
from .paging import Page, Pager
from .paging.telemetry import log_page_stream_stopped

logger = logging.getLogger(__name__)


class SyncSession:
    """One logical synchronization run against one or more providers."""

    def __init__(
        self,
        policy: DeferralPolicy | str = DeferralPolicy.RESOLVE_EARLY,
        identity_map: IdentityMap | None = None,
    ) -> None:
        self.policy = _coerce_policy(policy)
        self.identity_map = identity_map if identity_map is not None else IdentityMap()
        self.deferrals = DeferralEngine()
        self._contexts: dict[str, SyncContext] = {}
        self._stop_generation = 0

    def context(self, provider: BaseProvider) -> SyncContext:
        """Return the context binding this session to ``provider``."""
        context = self._contexts.get(provider.provider_id)
        if context is None or context.provider is not provider:
            context = SyncContext(self, provider)
            self._contexts[provider.provider_id] = context
        return context

    def stop(self) -> None:
        """Ask the page streams running now to stop before their next page."""
        self._stop_generation += 1

    @property
    def stopped(self) -> bool:
        """True once stop() has been called."""
        return self._stop_generation > 0

    def iter_pages(
        self,
        provider: BaseProvider,
        entity_type: str,
        query: dict[str, Any] | None = None,
        *,
        pager: Pager | None = None,
        policy: DeferralPolicy | str | None = None,
    ) -> AsyncIterator[Page]:
        """Stream pages of hydrated entities.

        Each yielded Page holds canonical entities instead of raw records.
        Under RESOLVE_LATE, placeholders created by this stream are resolved
        once the caller asks for the page after the last one.

        Args:
            provider: Provider to fetch from
            entity_type: Entity type to query
            query: Filter passed to the provider
            pager: Pager overriding the provider's own
            policy: DeferralPolicy overriding the session's
        """
        return self._stream(provider, entity_type, query, pager, self._policy(policy), True)

    async def fetch_related(
        self,
        provider: BaseProvider,
        entity_type: str,
        query: dict[str, Any],
        *,
        policy: DeferralPolicy | str | None = None,
    ) -> list[SyncEntity]:
        """Fetch every entity matching ``query`` for placeholder resolution.

        Unlike fetch_all(), the fetch ignores stop(): a placeholder is only
        ever resolved to the complete result.
        """
        stream = self._stream(provider, entity_type, query, None, self._policy(policy), False)
        async with aclosing(stream) as pages:
            return [entity async for page in pages for entity in page.entities]

    async def _stream(
        self,
        provider: BaseProvider,
        entity_type: str,
        query: dict[str, Any] | None,
        pager: Pager | None,
        policy: DeferralPolicy,
        stoppable: bool,
    ) -> AsyncIterator[Page]:
        generation = self._stop_generation
        context = self.context(provider)
        checkpoint = self.deferrals.checkpoint()
        pages = 0

        async with aclosing(provider.iter_pages(entity_type, query, pager=pager)) as stream:
            async for page in stream:
                entities = [
                    await self._hydrate(context, entity_type, record, policy)
                    for record in page.entities
                ]
                pages += 1
                yield replace(page, entities=tuple(entities))

                if page.is_last_page:
                    break
                if stoppable and self._stop_generation != generation:
                    log_page_stream_stopped(
                        entity_type=entity_type, pages=pages, entity_count=page.entity_count
                    )
                    return

        if policy is DeferralPolicy.RESOLVE_LATE:
            await self.deferrals.drain(checkpoint)

    async def run_query(
        self,
        provider: BaseProvider,
        entity_type: str,
        query: dict[str, Any] | None = None,
        *,
        pager: Pager | None = None,
        policy: DeferralPolicy | str | None = None,
    ) -> AsyncIterator[SyncEntity]:
        """Lazily yield the entities of every page, in order.

        The iterator is single-pass; call again to restart the query.
        """
        async with aclosing(
            self.iter_pages(provider, entity_type, query, pager=pager, policy=policy)
        ) as pages:
            async for page in pages:
                for entity in page.entities:
                    yield entity

    async def fetch_all(
        self,
        provider: BaseProvider,
        entity_type: str,
        query: dict[str, Any] | None = None,
        *,
        pager: Pager | None = None,
        policy: DeferralPolicy | str | None = None,
    ) -> list[SyncEntity]:
        """Run a query to completion and return its entities."""
        return [
            entity
            async for entity in self.run_query(
                provider, entity_type, query, pager=pager, policy=policy
            )
        ]

    async def fetch_by_id(
        self,
        provider: BaseProvider,
        entity_type: str,
        entity_id: EntityId,
        *,
        policy: DeferralPolicy | str | None = None,
    ) -> SyncEntity:
        """Return one entity, from the identity map if already interned."""
        existing = self.identity_map.lookup(EntityKey(provider.provider_id, entity_type, entity_id))
        if existing is not None:
            return existing

        policy = self._policy(policy)
        checkpoint = self.deferrals.checkpoint()
        record = await provider.fetch_record(entity_type, entity_id)
        entity = await self._hydrate(self.context(provider), entity_type, record, policy)
        if policy is DeferralPolicy.RESOLVE_LATE:
            await self.deferrals.drain(checkpoint)
        return entity

    async def resolve_deferred(self) -> int:
        """Resolve every queued placeholder, whichever stream created it."""
        return await self.deferrals.drain()

    def forget(self, provider: BaseProvider | str) -> int:
        """Drop every interned entity of a provider.

        Returns:
            Number of entities dropped
        """
        provider_id = provider if isinstance(provider, str) else provider.provider_id
        self._contexts.pop(provider_id, None)
        dropped = self.identity_map.forget(provider_id)
        logger.info("identity_map_forget", extra={"provider": provider_id, "dropped": dropped})
        return dropped

    def _policy(self, policy: DeferralPolicy | str | None) -> DeferralPolicy:
        return self.policy if policy is None else _coerce_policy(policy)

    async def _hydrate(
        self,
        context: SyncContext,
        entity_type: str,
        record: Any,
        policy: DeferralPolicy,
    ) -> SyncEntity:
        if not isinstance(record, Mapping):
            raise ProviderError(
                f"Invalid {entity_type} record from {context.provider_id}: "
                f"expected an object, got {type(record).__name__}"
            )
        cls = context.provider.entity_class(entity_type)
        link_keys = cls.relationship_keys()

        related: dict[str, Any] = {}
        data: dict[str, Any] = {}
        for key, value in record.items():
            if key in link_keys:
                related[cls.field_for(key) or key] = value
            else:
                data[key] = value

        try:
            entity = cls.model_validate(data)
        except ValidationError as e:
            raise ProviderError(
                f"Invalid {entity_type} record from {context.provider_id}: {e}"
            ) from e
        entity.bind_provider(context.provider_id)

        canonical = self.identity_map.intern(entity.entity_key, entity)
        if canonical is not entity:
            return canonical
        if entity.id is not None:
            self.deferrals.settle(entity.entity_key, entity)

        await self._link(context, entity, related, policy)
        return entity

    async def _link(
        self,
        context: SyncContext,
        entity: SyncEntity,
        related: dict[str, Any],
        policy: DeferralPolicy,
    ) -> None:
        placeholders: list[DeferredEntity | DeferredRelationship] = []

        for name, relationship in type(entity).relationships.items():
            raw = related.get(name)
            if raw is None and isinstance(relationship, Reference):
                raw = getattr(entity, relationship.id_field, None)

            if raw is None:
                if isinstance(relationship, Collection) and entity.id is not None:
                    placeholder = DeferredRelationship(
                        context,
                        relationship.entity_type,
                        {relationship.filter_key: entity.id},
                        policy=policy,
                    ).bind(entity, name)
                    setattr(entity, name, placeholder)
                    placeholders.append(placeholder)
                continue

            if isinstance(raw, list | tuple):
                items: list[Any] = []
                for index, item in enumerate(raw):
                    value = await self._related(context, relationship.entity_type, item, policy)
                    if isinstance(value, DeferredEntity):
                        placeholders.append(value.bind(entity, name, index))
                    items.append(value)
                setattr(entity, name, items)
                continue

            value = await self._related(context, relationship.entity_type, raw, policy)
            if isinstance(value, DeferredEntity):
                placeholders.append(value.bind(entity, name))
            setattr(entity, name, value)

        for placeholder in placeholders:
            await self.deferrals.defer(placeholder, policy)

    async def _related(
        self,
        context: SyncContext,
        entity_type: str,
        raw: Any,
        policy: DeferralPolicy,
    ) -> SyncEntity | DeferredEntity:
        if isinstance(raw, Mapping):
            return await self._hydrate(context, entity_type, raw, policy)
        key = EntityKey(context.provider_id, entity_type, raw)
        existing = self.identity_map.lookup(key)
        if existing is not None:
            return existing
        return DeferredEntity(context, key, policy=policy)


def _coerce_policy(policy: DeferralPolicy | str) -> DeferralPolicy:
    if isinstance(policy, DeferralPolicy):
        return policy
    return DeferralPolicy.from_str(policy)
