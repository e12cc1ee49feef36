"""Posts endpoint definition (`/posts`, `/users/{userId}/posts`)."""

from __future__ import annotations

from laakhay.sync.runtime.rest import RestEndpointSpec

from .common import RecordAdapter, build_pager, path_builder, query_builder

SPEC = RestEndpointSpec(
    entity_type="post",
    method="GET",
    build_path=path_builder("posts", "userId", "users"),
    build_query=query_builder("userId"),
    pager=build_pager,
    multi_value_filters=frozenset({"id", "userId"}),
)


class Adapter(RecordAdapter):
    pass
