"""Path, query and pager builders shared by JSONPlaceholder endpoints.

Every endpoint receives params of the form ``{"id": ..., "filter": {...}}``:
- ``id`` set: fetch one record from ``/<resource>/<id>``
- ``filter`` holding one value of the parent key: list the parent's
  records from ``/<parents>/<parent id>/<resource>``
- otherwise: list ``/<resource>`` with the filter as query parameters
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any
from urllib.parse import quote

from laakhay.sync.core.exceptions import ProviderError
from laakhay.sync.runtime.paging import QueryPager
from laakhay.sync.runtime.rest import ResponseAdapter

from ...config import PAGE_KEY, PAGE_SIZE, PAGE_SIZE_KEY


def _nested_parent(params: dict[str, Any], parent_key: str | None) -> Any:
    if parent_key is None:
        return None
    value = params.get("filter", {}).get(parent_key)
    if value is None or isinstance(value, list | tuple | set):
        return None
    return value


def path_builder(
    resource: str,
    parent_key: str | None = None,
    parent_resource: str | None = None,
) -> Callable[[dict[str, Any]], str]:
    """Build the path function for ``/<resource>``, nested under its parent."""

    def build_path(params: dict[str, Any]) -> str:
        entity_id = params.get("id")
        if entity_id is not None:
            return f"/{resource}/{quote(str(entity_id), safe='')}"
        parent = _nested_parent(params, parent_key)
        if parent is not None:
            return f"/{parent_resource}/{quote(str(parent), safe='')}/{resource}"
        return f"/{resource}"

    return build_path


def query_builder(parent_key: str | None = None) -> Callable[[dict[str, Any]], dict[str, Any]]:
    """Build the query function passing the filter through as query parameters."""

    def build_query(params: dict[str, Any]) -> dict[str, Any]:
        if params.get("id") is not None:
            return {}
        query = dict(params.get("filter", {}))
        if _nested_parent(params, parent_key) is not None:
            # Already part of the path
            query.pop(parent_key)
        return query

    return build_query


def build_pager(params: dict[str, Any]) -> QueryPager:
    """Pager factory: one page-number pager per stream."""
    return QueryPager(PAGE_KEY, page_size=PAGE_SIZE, page_size_key=PAGE_SIZE_KEY)


class RecordAdapter(ResponseAdapter):
    """Adapter checking that JSONPlaceholder responses hold JSON objects."""

    def parse(self, response: Any, params: dict[str, Any]) -> dict[str, Any]:
        """Parse a single-record response (``GET /<resource>/<id>``)."""
        if not isinstance(response, Mapping) or not response:
            raise ProviderError(
                f"Invalid response format: expected a record, got {type(response).__name__}"
            )
        return dict(response)

    def parse_record(self, record: Any, params: dict[str, Any]) -> dict[str, Any]:
        if not isinstance(record, Mapping):
            raise ProviderError(
                f"Invalid record format: expected dict, got {type(record).__name__}"
            )
        return dict(record)
