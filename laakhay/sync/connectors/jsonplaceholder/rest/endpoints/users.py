"""Users endpoint definition (`/users`)."""

from __future__ import annotations

from laakhay.sync.runtime.rest import RestEndpointSpec

from .common import RecordAdapter, build_pager, path_builder, query_builder

SPEC = RestEndpointSpec(
    entity_type="user",
    method="GET",
    build_path=path_builder("users"),
    build_query=query_builder(),
    pager=build_pager,
    multi_value_filters=frozenset({"id"}),
)


class Adapter(RecordAdapter):
    pass
