"""Per-session identity map.

Architecture:
    The identity map guarantees at most one in-memory instance per
    (provider, entity type, id). Every entity produced by a sync session is
    passed through ``intern()`` before it is linked to other entities or
    handed to a caller, which is what makes cyclic graphs finite.

Design Decisions:
    - First candidate wins: later candidates for the same key are discarded,
      never merged into the stored instance
    - Unidentified entities (id is None) are returned as-is
    - A single lock guards the table so independent queries can share a map
"""

from __future__ import annotations

import threading
from typing import Any

from .keys import EntityKey


class IdentityMap:
    """Maps entity keys to their canonical instance for one sync session."""

    def __init__(self) -> None:
        self._entities: dict[EntityKey, Any] = {}
        self._lock = threading.Lock()

    def intern(self, key: EntityKey, candidate: Any) -> Any:
        """Return the canonical instance for ``key``.

        If ``key`` has already been interned, the stored instance is returned
        and ``candidate`` is discarded. Callers must use the return value,
        not ``candidate``.

        Args:
            key: Identity of the candidate
            candidate: Freshly built entity

        Returns:
            The stored instance for ``key``, or ``candidate`` if none exists
            or ``key`` has no id
        """
        if key.id is None:
            return candidate

        with self._lock:
            existing = self._entities.get(key)
            if existing is not None:
                return existing
            self._entities[key] = candidate
            return candidate

    def lookup(self, key: EntityKey) -> Any | None:
        """Return the canonical instance for ``key`` without interning."""
        if key.id is None:
            return None
        with self._lock:
            return self._entities.get(key)

    def forget(self, provider_id: str) -> int:
        """Drop every entry belonging to a provider.

        Returns:
            Number of entries dropped
        """
        with self._lock:
            stale = [key for key in self._entities if key.provider_id == provider_id]
            for key in stale:
                del self._entities[key]
        return len(stale)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, EntityKey):
            return False
        return self.lookup(key) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entities)
