"""To-do endpoint definition for tasks (`/todos`, `/users/{userId}/todos`)."""

from __future__ import annotations

from laakhay.sync.runtime.rest import RestEndpointSpec

from .common import RecordAdapter, build_pager, path_builder, query_builder

SPEC = RestEndpointSpec(
    entity_type="task",
    method="GET",
    build_path=path_builder("todos", "userId", "users"),
    build_query=query_builder("userId"),
    pager=build_pager,
    multi_value_filters=frozenset({"id", "userId"}),
)


class Adapter(RecordAdapter):
    pass
