"""Deferral policy engine.

This module decides when placeholders created by a sync session are
resolved: immediately (RESOLVE_EARLY), in one batched pass at the end of
the owning page stream (RESOLVE_LATE), or never (DO_NOT_RESOLVE).

RESOLVE_LATE placeholders wait in a queue indexed by a monotonically
increasing counter. A page stream records a checkpoint when it starts and
drains only the placeholders queued after it, so streams started while a
drain is in progress never drain their parent's queue.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any

from ...core.enums import DeferralPolicy
from ...core.exceptions import ResolutionError
from ...core.keys import EntityKey
from .deferred import Deferred, DeferredEntity, DeferredRelationship

logger = logging.getLogger(__name__)


class DeferralEngine:
    """Pending-resolution queue shared by the page streams of one session."""

    def __init__(self) -> None:
        self._pending: dict[int, Deferred] = {}
        self._counter = 0

    def checkpoint(self) -> int:
        """Return a marker separating placeholders queued before and after now."""
        return self._counter

    def pending(self, since: int = 0) -> list[Deferred]:
        return [p for index, p in sorted(self._pending.items()) if index > since]

    def __len__(self) -> int:
        return len(self._pending)

    async def defer(self, placeholder: Deferred, policy: DeferralPolicy) -> None:
        """Apply ``policy`` to a freshly created placeholder."""
        if policy is DeferralPolicy.DO_NOT_RESOLVE:
            return
        if policy is DeferralPolicy.RESOLVE_EARLY:
            await placeholder.resolve()
            return

        self._counter += 1
        self._pending[self._counter] = placeholder
        logger.debug(
            "deferral_queued",
            extra={
                "checkpoint": self._counter,
                "kind": type(placeholder).__name__,
                "entity_type": placeholder.entity_type,
            },
        )

    def settle(self, key: EntityKey, entity: Any) -> int:
        """Resolve queued placeholders for ``key`` to an entity just interned.

        Returns:
            Number of placeholders settled
        """
        settled = [
            index
            for index, p in self._pending.items()
            if isinstance(p, DeferredEntity) and p.key == key
        ]
        for index in settled:
            self._pending.pop(index).replace(entity)
        return len(settled)

    async def drain(self, since: int = 0) -> int:
        """Resolve every placeholder queued after checkpoint ``since``.

        Relationships are resolved before entities, since each relationship
        fetch can deliver entities other placeholders are waiting for. The
        loop repeats until nothing queued after ``since`` remains.

        If a resolution fails, placeholders taken from the queue but not
        resolved are put back and the error propagates.

        Returns:
            Number of placeholders resolved
        """
        resolved = 0
        in_flight: dict[int, Deferred] = {}
        try:
            while True:
                batch = {i: p for i, p in self._pending.items() if i > since}
                if not batch:
                    break
                relationships = {
                    i: p for i, p in batch.items() if isinstance(p, DeferredRelationship)
                }
                in_flight = relationships or batch
                for index in in_flight:
                    del self._pending[index]
                if relationships:
                    await _resolve_relationships(list(relationships.values()))
                else:
                    await _resolve_entities(list(batch.values()))
                resolved += len(in_flight)
                in_flight = {}
        except Exception as e:
            requeued = 0
            for index, placeholder in in_flight.items():
                if not placeholder.is_resolved:
                    self._pending[index] = placeholder
                    requeued += 1
            logger.error(
                "deferral_drain_failed",
                extra={
                    "checkpoint": since,
                    "resolved": resolved,
                    "requeued": requeued,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
            )
            raise

        logger.info("deferral_drain_complete", extra={"checkpoint": since, "resolved": resolved})
        return resolved


async def _resolve_each(placeholders: list[Deferred]) -> None:
    """Resolve placeholders one at a time, fetching each distinct one once."""
    first: dict[Deferred, Deferred] = {}
    for placeholder in placeholders:
        if placeholder.is_resolved:
            continue
        leader = first.setdefault(placeholder, placeholder)
        if leader is placeholder:
            await placeholder.resolve()
        else:
            placeholder.replace(leader.value)


async def _resolve_relationships(placeholders: list[DeferredRelationship]) -> None:
    groups: dict[tuple[Any, str, str], list[DeferredRelationship]] = defaultdict(list)
    single: list[DeferredRelationship] = []
    for p in placeholders:
        if len(p.filter) == 1:
            key, value = next(iter(p.filter.items()))
            if not isinstance(value, list | tuple | set | dict) and _batchable(p, key):
                groups[(p.context, p.entity_type, key)].append(p)
                continue
        single.append(p)

    for (context, entity_type, key), members in groups.items():
        values = _distinct(p.filter[key] for p in members)
        if len(values) < 2:
            single.extend(members)
            continue
        entity_cls = context.provider.entity_class(entity_type)
        field = entity_cls.field_for(key)
        if field is None:
            single.extend(members)
            continue
        entities = await context.fetch_by_filter(
            entity_type, {key: values}, policy=members[0].policy
        )
        by_value: dict[str, list[Any]] = defaultdict(list)
        for entity in entities:
            by_value[_match_key(getattr(entity, field, None))].append(entity)
        unmatched = set(by_value) - {_match_key(value) for value in values}
        if unmatched:
            raise ResolutionError(
                f"Batch fetch of {entity_type} by {key!r} returned entities matching "
                f"no requested value: {sorted(unmatched)!r}",
                entity_type=entity_type,
                filter={key: values},
            )
        for p in members:
            p.replace(by_value.get(_match_key(p.filter[key]), []))

    await _resolve_each(single)


async def _resolve_entities(placeholders: list[DeferredEntity]) -> None:
    groups: dict[tuple[Any, str], list[DeferredEntity]] = defaultdict(list)
    single: list[DeferredEntity] = []
    for p in placeholders:
        if p.is_resolved:
            continue
        existing = p.context.lookup(p.key)
        if existing is not None:
            p.replace(existing)
        elif _batchable(p, "id"):
            groups[(p.context, p.entity_type)].append(p)
        else:
            single.append(p)

    for (context, entity_type), members in groups.items():
        ids = _distinct(p.id for p in members)
        if len(ids) < 2:
            single.extend(members)
            continue
        entities = await context.fetch_by_filter(
            entity_type, {"id": ids}, policy=members[0].policy
        )
        by_id = {entity.id: entity for entity in entities}
        missing = [p for p in members if p.id not in by_id]
        for p in members:
            if p.id in by_id:
                p.replace(by_id[p.id])
        if missing:
            raise ResolutionError(
                f"{len(missing)} {entity_type} entities not returned by batch fetch: "
                f"{_distinct(p.id for p in missing)!r}",
                key=missing[0].key,
            )

    await _resolve_each(single)


def _batchable(placeholder: Deferred, key: str) -> bool:
    return placeholder.context.supports_multi_value_filter(placeholder.entity_type, key)


def _match_key(value: Any) -> str:
    # Backends may return ids as strings where owners hold ints, or the reverse
    return str(value)


def _distinct(values) -> list[Any]:
    seen: list[Any] = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen
