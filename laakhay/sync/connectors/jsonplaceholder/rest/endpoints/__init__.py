"""JSONPlaceholder REST endpoint registry.

This module exports the endpoint specification and adapter of every
entity type serviced by the JSONPlaceholder provider.
"""

from __future__ import annotations

from laakhay.sync.runtime.rest import ResponseAdapter, RestEndpointSpec

from .albums import SPEC as AlbumsSpec  # noqa: N811
from .albums import Adapter as AlbumsAdapter
from .comments import SPEC as CommentsSpec  # noqa: N811
from .comments import Adapter as CommentsAdapter
from .photos import SPEC as PhotosSpec  # noqa: N811
from .photos import Adapter as PhotosAdapter
from .posts import SPEC as PostsSpec  # noqa: N811
from .posts import Adapter as PostsAdapter
from .todos import SPEC as TodosSpec  # noqa: N811
from .todos import Adapter as TodosAdapter
from .users import SPEC as UsersSpec  # noqa: N811
from .users import Adapter as UsersAdapter

# Registry mapping entity types to specs and adapters
_ENDPOINT_REGISTRY: dict[str, tuple[RestEndpointSpec, type[ResponseAdapter]]] = {
    spec.entity_type: (spec, adapter)
    for spec, adapter in (
        (UsersSpec, UsersAdapter),
        (PostsSpec, PostsAdapter),
        (CommentsSpec, CommentsAdapter),
        (AlbumsSpec, AlbumsAdapter),
        (PhotosSpec, PhotosAdapter),
        (TodosSpec, TodosAdapter),
    )
}


def get_endpoint_spec(entity_type: str) -> RestEndpointSpec | None:
    """Get endpoint specification by entity type.

    Args:
        entity_type: Entity type (e.g., "user", "post")

    Returns:
        RestEndpointSpec if found, None otherwise
    """
    entry = _ENDPOINT_REGISTRY.get(entity_type)
    return entry[0] if entry else None


def get_endpoint_adapter(entity_type: str) -> type[ResponseAdapter] | None:
    """Get endpoint adapter class by entity type."""
    entry = _ENDPOINT_REGISTRY.get(entity_type)
    return entry[1] if entry else None


def list_endpoints() -> list[str]:
    """List all entity types with an endpoint."""
    return list(_ENDPOINT_REGISTRY.keys())


__all__ = ["get_endpoint_adapter", "get_endpoint_spec", "list_endpoints"]
