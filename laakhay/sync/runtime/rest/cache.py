"""Response caching for REST transports."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import Protocol, runtime_checkable


@runtime_checkable
class ResponseCache(Protocol):
    """Storage for encoded responses keyed by request fingerprint."""

    def get(self, key: str) -> bytes | None:
        """Return the cached value, or None if absent or expired."""
        ...

    def set(self, key: str, value: bytes, expiry: float | None = None) -> None:
        """Store ``value``; ``expiry`` is a lifetime in seconds (None: no expiry)."""
        ...


class MemoryResponseCache:
    """In-process ResponseCache with per-entry expiry."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[bytes, float | None]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> bytes | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at is not None and self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: bytes, expiry: float | None = None) -> None:
        if expiry is not None and expiry <= 0:
            raise ValueError("expiry must be positive (or None for no expiry)")
        expires_at = self._clock() + expiry if expiry is not None else None
        with self._lock:
            self._entries[key] = (value, expires_at)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
