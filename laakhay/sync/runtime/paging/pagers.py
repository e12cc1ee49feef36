"""Pagination strategies.

A pager turns one backend response into a Page and describes the request
for the next page, so callers can consume paginated endpoints without
knowing which continuation convention the backend uses.

Architecture:
    - Pager: protocol base class owning a PagerState per query
    - ODataPager: follows a next-page link found in the response body
    - QueryPager: increments a cursor query parameter after each page

Design Decisions:
    - Stateful instances: state is reset by prepare_initial_request() and
      must not be shared by concurrent page streams (use a pager factory)
    - Selectors are configuration values (EntitySelector), not closures
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Any

from multidict import CIMultiDict
from yarl import URL

from ...core.exceptions import PagerConfigurationError
from ...utils.query import query_pairs
from .definitions import (
    EntitySelector,
    NextRequest,
    Page,
    PageRequest,
    PagerState,
    coerce_selector,
)

Selector = EntitySelector | str | Callable[[Any], Any] | None


class Pager(ABC):
    """Pluggable strategy deriving successive page requests from responses."""

    def __init__(self, selector: Selector = None) -> None:
        self.selector = coerce_selector(selector)
        self._state: PagerState | None = None

    @property
    def state(self) -> PagerState:
        if self._state is None:
            self._state = PagerState()
        return self._state

    def prepare_initial_request(
        self,
        query: dict[str, Any] | None,
        body: Any,
        headers: dict[str, str] | None,
    ) -> tuple[dict[str, Any] | None, Any, dict[str, str] | None]:
        """Start a new query and return the (possibly amended) first request.

        Subclasses may inject pagination parameters but must not assume
        that a later page exists.
        """
        self._state = PagerState(initial_query=dict(query or {}))
        return query, body, headers

    @abstractmethod
    def extract_page(
        self,
        data: Any,
        headers: Mapping[str, str] | None,
        request: PageRequest,
        previous: Page | None = None,
    ) -> Page:
        """Build a Page from a decoded response body.

        Args:
            data: Decoded response body
            headers: Response headers
            request: The request that produced the response
            previous: The previous page of the same query, if any

        Returns:
            Page with entities, cumulative count and the next request
        """
        pass

    def _begin_page(self, request: PageRequest) -> PagerState:
        if self._state is None:
            # extract_page() called without prepare_initial_request()
            self._state = PagerState(initial_query=dict(request.query or {}))
        self._state.pages += 1
        return self._state


class ODataPager(Pager):
    """Follows next-page links returned in the response body.

    The link field is either given explicitly or derived from the OData
    protocol version of the first response: "@odata.nextLink" for
    OData-Version 4.0, "@nextLink" otherwise. An explicit field may be a
    dotted path (e.g. "links.next"). A missing or empty link ends the stream.
    """

    VERSION_HEADER = "OData-Version"
    VERSION_4 = "4.0"

    def __init__(
        self,
        next_link_field: str | None = None,
        *,
        selector: Selector = "value",
        max_page_size: int | None = None,
    ) -> None:
        super().__init__(selector)
        if max_page_size is not None and max_page_size < 1:
            raise ValueError("max_page_size must be positive")
        self.next_link_field = next_link_field
        self.max_page_size = max_page_size

    def prepare_initial_request(
        self,
        query: dict[str, Any] | None,
        body: Any,
        headers: dict[str, str] | None,
    ) -> tuple[dict[str, Any] | None, Any, dict[str, str] | None]:
        query, body, headers = super().prepare_initial_request(query, body, headers)
        if self.max_page_size is not None:
            headers = {**(headers or {}), "Prefer": f"odata.maxpagesize={self.max_page_size}"}
        return query, body, headers

    def extract_page(
        self,
        data: Any,
        headers: Mapping[str, str] | None,
        request: PageRequest,
        previous: Page | None = None,
    ) -> Page:
        state = self._begin_page(request)
        entities = self.selector.select(data)

        if state.link_field is None:
            state.link_field = self.next_link_field or self._link_field_for(headers)

        next_url = _lookup(data, state.link_field)
        next_request = NextRequest(url=str(next_url)) if next_url else None
        return Page.create(entities, previous=previous, next_request=next_request, request=request)

    def _link_field_for(self, headers: Mapping[str, str] | None) -> str:
        version = CIMultiDict(headers or {}).get(self.VERSION_HEADER)
        prefix = "@odata." if version is not None and version.strip() == self.VERSION_4 else "@"
        return f"{prefix}nextLink"


class QueryPager(Pager):
    """Increments a cursor query parameter by 1 after each page.

    If no cursor key is configured, the first integer-valued parameter of
    the initial query is adopted as the cursor when the first page is
    extracted, and kept for the rest of the query.

    The stream ends when a page yields no entities, or, if ``page_size`` is
    set, when a page yields fewer entities than ``page_size``. Without
    ``page_size`` only an empty page ends the stream.
    """

    def __init__(
        self,
        cursor_key: str | None = None,
        *,
        page_size: int | None = None,
        page_size_key: str | None = None,
        first_value: int = 1,
        selector: Selector = None,
    ) -> None:
        super().__init__(selector)
        if page_size is not None and page_size < 1:
            raise ValueError("page_size must be positive")
        if page_size_key is not None and page_size is None:
            raise ValueError("page_size_key requires page_size")
        self.cursor_key = cursor_key
        self.page_size = page_size
        self.page_size_key = page_size_key
        self.first_value = first_value

    def prepare_initial_request(
        self,
        query: dict[str, Any] | None,
        body: Any,
        headers: dict[str, str] | None,
    ) -> tuple[dict[str, Any] | None, Any, dict[str, str] | None]:
        query = dict(query or {})
        if self.page_size_key is not None and self.page_size_key not in query:
            query[self.page_size_key] = self.page_size
        if self.cursor_key is not None and self.cursor_key not in query:
            query[self.cursor_key] = self.first_value
        return super().prepare_initial_request(query, body, headers)

    def extract_page(
        self,
        data: Any,
        headers: Mapping[str, str] | None,
        request: PageRequest,
        previous: Page | None = None,
    ) -> Page:
        state = self._begin_page(request)
        entities = self.selector.select(data)

        if not state.cursor_detected:
            state.cursor_detected = True
            key = self.cursor_key or _detect_cursor_key(state.initial_query)
            state.cursor_key = key
            if key is not None:
                state.cursor_value = _as_int(state.initial_query.get(key))

        if not entities or (self.page_size is not None and len(entities) < self.page_size):
            return Page.create(entities, previous=previous, request=request)

        if state.cursor_key is None or state.cursor_value is None:
            raise PagerConfigurationError(
                "Cannot request the next page: no cursor key configured and none "
                f"found in the initial query {state.initial_query!r}"
            )

        state.cursor_value += 1
        next_query = {**state.initial_query, state.cursor_key: state.cursor_value}
        next_url = URL(request.url).with_query(query_pairs(next_query))
        return Page.create(
            entities,
            previous=previous,
            next_request=NextRequest(url=str(next_url)),
            request=request,
        )


def _detect_cursor_key(query: Mapping[str, Any]) -> str | None:
    for key, value in query.items():
        if _as_int(value) is not None:
            return key
    return None


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value)
    return None


def _lookup(data: Any, field: str) -> Any:
    if not isinstance(data, Mapping):
        return None
    if field in data:
        return data[field]
    value: Any = data
    for part in field.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
    return value
