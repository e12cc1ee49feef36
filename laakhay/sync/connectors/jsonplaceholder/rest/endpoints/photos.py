"""Photos endpoint definition (`/photos`, `/albums/{albumId}/photos`)."""

from __future__ import annotations

from laakhay.sync.runtime.rest import RestEndpointSpec

from .common import RecordAdapter, build_pager, path_builder, query_builder

SPEC = RestEndpointSpec(
    entity_type="photo",
    method="GET",
    build_path=path_builder("photos", "albumId", "albums"),
    build_query=query_builder("albumId"),
    pager=build_pager,
    multi_value_filters=frozenset({"id", "albumId"}),
)


class Adapter(RecordAdapter):
    pass
