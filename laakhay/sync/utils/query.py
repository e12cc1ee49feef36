"""Query string helpers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def query_value(value: Any) -> str:
    """Convert a scalar to its query string representation."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def query_pairs(query: Mapping[str, Any] | None) -> list[tuple[str, str]]:
    """Flatten a query mapping into key/value pairs.

    List and tuple values become repeated keys, and None values are dropped.

    Examples:
        >>> query_pairs({"id": [1, 2], "q": None, "active": True})
        [('id', '1'), ('id', '2'), ('active', 'true')]
    """
    pairs: list[tuple[str, str]] = []
    for key, value in (query or {}).items():
        if value is None:
            continue
        if isinstance(value, list | tuple | set | frozenset):
            pairs.extend((key, query_value(item)) for item in value)
        else:
            pairs.append((key, query_value(value)))
    return pairs
