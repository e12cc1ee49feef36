"""Comments endpoint definition (`/comments`, `/posts/{postId}/comments`)."""

from __future__ import annotations

from laakhay.sync.runtime.rest import RestEndpointSpec

from .common import RecordAdapter, build_pager, path_builder, query_builder

SPEC = RestEndpointSpec(
    entity_type="comment",
    method="GET",
    build_path=path_builder("comments", "postId", "posts"),
    build_query=query_builder("postId"),
    pager=build_pager,
    multi_value_filters=frozenset({"id", "postId"}),
)


class Adapter(RecordAdapter):
    pass
