"""Pagination data structures.

This module defines the structures exchanged between the REST runner and
pagers: the request a page was produced by, the page itself, the descriptor
of the next request, and the mutable per-query pager state.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ...core.exceptions import NoMorePagesError

if TYPE_CHECKING:
    from .pagers import Pager


@dataclass(frozen=True)
class PageRequest:
    """A request sent (or about to be sent) to a backend.

    Attributes:
        method: HTTP method ("GET" or "POST")
        url: Absolute URL or path relative to the transport's base URL
        query: Query parameters not already encoded in ``url``
        body: JSON body for POST requests
        headers: Request headers
    """

    method: str
    url: str
    query: dict[str, Any] | None = None
    body: Any = None
    headers: dict[str, str] | None = None


@dataclass(frozen=True)
class NextRequest:
    """Descriptor of the request that retrieves the next page.

    ``url`` includes any query string. ``body`` and ``headers`` are None when
    the previous request's values should be reused.
    """

    url: str
    body: Any = None
    headers: dict[str, str] | None = None


@dataclass(frozen=True)
class Page:
    """Immutable snapshot of one backend response.

    Attributes:
        entities: Records (or entities, once hydrated) extracted from the response
        is_last_page: True if no further page can be requested
        entity_count: Cumulative number of entities including previous pages
        request: The request that produced this page
    """

    entities: tuple[Any, ...]
    is_last_page: bool
    entity_count: int
    request: PageRequest | None = None
    _next: NextRequest | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.is_last_page and self._next is not None:
            raise ValueError("The last page cannot have a next request")
        if not self.is_last_page and self._next is None:
            raise ValueError("A page that is not the last must have a next request")

    @classmethod
    def create(
        cls,
        entities: list[Any] | tuple[Any, ...],
        *,
        previous: Page | None = None,
        next_request: NextRequest | None = None,
        request: PageRequest | None = None,
    ) -> Page:
        """Build a page, deriving ``is_last_page`` and ``entity_count``."""
        entities = tuple(entities)
        return cls(
            entities=entities,
            is_last_page=next_request is None,
            entity_count=len(entities) + (previous.entity_count if previous is not None else 0),
            request=request,
            _next=next_request,
        )

    def _require_next(self) -> NextRequest:
        if self._next is None:
            raise NoMorePagesError("No more pages")
        return self._next

    @property
    def next_request(self) -> NextRequest:
        return self._require_next()

    @property
    def next_url(self) -> str:
        return self._require_next().url

    @property
    def next_body(self) -> Any:
        return self._require_next().body

    @property
    def next_headers(self) -> dict[str, str] | None:
        return self._require_next().headers


@dataclass
class PagerState:
    """Bookkeeping owned by one pager for the lifetime of one query.

    Attributes:
        initial_query: Query parameters of the first request
        cursor_key: Query parameter acting as the cursor, once known
        cursor_value: Last cursor value sent
        cursor_detected: Whether cursor key detection has already run
        link_field: Response field holding the next-page link, once known
        pages: Number of pages extracted so far
    """

    initial_query: dict[str, Any] = field(default_factory=dict)
    cursor_key: str | None = None
    cursor_value: int | None = None
    cursor_detected: bool = False
    link_field: str | None = None
    pages: int = 0


@dataclass(frozen=True)
class EntitySelector:
    """Where a pager finds the entity list in a response body.

    Exactly one of ``path`` and ``project`` may be set. With neither, the
    whole body is the entity list (a single object becomes a one-item list).

    Attributes:
        path: Dotted path to the list within the body (e.g. "value", "data.items")
        project: Function mapping the body to the entity list
    """

    path: str | None = None
    project: Callable[[Any], Any] | None = None

    def __post_init__(self) -> None:
        if self.path is not None and self.project is not None:
            raise ValueError("EntitySelector cannot have both path and project")
        if self.path is not None and not self.path:
            raise ValueError("EntitySelector path cannot be empty")

    @classmethod
    def whole_body(cls) -> EntitySelector:
        return cls()

    @classmethod
    def field(cls, path: str) -> EntitySelector:
        return cls(path=path)

    @classmethod
    def using(cls, project: Callable[[Any], Any]) -> EntitySelector:
        return cls(project=project)

    def select(self, data: Any) -> list[Any]:
        """Extract the entity list from a decoded response body."""
        if self.project is not None:
            selected = self.project(data)
        elif self.path is not None:
            selected = data
            for part in self.path.split("."):
                if not isinstance(selected, Mapping):
                    selected = None
                    break
                selected = selected.get(part)
        else:
            selected = data

        if selected is None:
            return []
        if isinstance(selected, list | tuple):
            return list(selected)
        return [selected]


def coerce_selector(selector: EntitySelector | str | Callable[[Any], Any] | None) -> EntitySelector:
    """Normalize a selector given as a path, a function, or None (whole body)."""
    if selector is None:
        return EntitySelector.whole_body()
    if isinstance(selector, EntitySelector):
        return selector
    if isinstance(selector, str):
        return EntitySelector.field(selector)
    if callable(selector):
        return EntitySelector.using(selector)
    raise TypeError(f"Invalid entity selector: {selector!r}")


def extract_pager(spec: Any, params: dict[str, Any] | None = None) -> Pager | None:
    """Extract a pager from an endpoint specification.

    If the spec has a ``pager`` attribute, it is returned, or called as a
    factory with the request params if it is not a Pager instance. Factories
    give each page stream its own pager state.

    Args:
        spec: REST endpoint specification
        params: Request params passed to pager factories

    Returns:
        Pager for the endpoint, or None if the endpoint is not paginated
    """
    from .pagers import Pager

    pager = getattr(spec, "pager", None)
    if pager is None:
        return None
    if isinstance(pager, Pager):
        return pager
    if callable(pager):
        return pager(params or {})
    raise TypeError(f"Invalid pager for endpoint {getattr(spec, 'entity_type', '?')}: {pager!r}")
