"""Unit tests for Page, EntitySelector and pager extraction."""

from __future__ import annotations

import pytest

from laakhay.sync.core import NoMorePagesError
from laakhay.sync.runtime.paging import (
    EntitySelector,
    NextRequest,
    Page,
    PageRequest,
    QueryPager,
    coerce_selector,
    extract_pager,
)
from laakhay.sync.runtime.rest import RestEndpointSpec


class TestPage:
    """Test Page construction and next-request accessors."""

    def test_create_first_page(self):
        page = Page.create([1, 2], next_request=NextRequest(url="/items?page=2"))
        assert page.entities == (1, 2)
        assert page.entity_count == 2
        assert not page.is_last_page
        assert page.next_url == "/items?page=2"
        assert page.next_body is None
        assert page.next_headers is None

    def test_entity_count_is_cumulative(self):
        first = Page.create([1, 2], next_request=NextRequest(url="/items?page=2"))
        second = Page.create([3], previous=first)
        assert second.entity_count == 3
        assert second.is_last_page

    def test_empty_previous_page_still_counts(self):
        first = Page.create([], next_request=NextRequest(url="/items?page=2"))
        second = Page.create([1], previous=first)
        assert second.entity_count == 1

    def test_next_accessors_on_last_page_raise(self):
        page = Page.create([1])
        for accessor in ("next_request", "next_url", "next_body", "next_headers"):
            with pytest.raises(NoMorePagesError):
                getattr(page, accessor)

    def test_inconsistent_page_rejected(self):
        with pytest.raises(ValueError):
            Page(entities=(), is_last_page=False, entity_count=0)
        with pytest.raises(ValueError):
            Page(entities=(), is_last_page=True, entity_count=0, _next=NextRequest(url="/x"))


class TestEntitySelector:
    """Test where entity lists are found in response bodies."""

    def test_whole_body_list(self):
        assert EntitySelector.whole_body().select([{"id": 1}]) == [{"id": 1}]

    def test_whole_body_object_becomes_one_item(self):
        assert EntitySelector.whole_body().select({"id": 1}) == [{"id": 1}]

    def test_field_path(self):
        selector = EntitySelector.field("data.items")
        assert selector.select({"data": {"items": [1, 2]}}) == [1, 2]
        assert selector.select({"data": None}) == []
        assert selector.select({}) == []

    def test_projection(self):
        selector = EntitySelector.using(lambda body: body["rows"][1:])
        assert selector.select({"rows": [0, 1, 2]}) == [1, 2]

    def test_null_body(self):
        assert EntitySelector.whole_body().select(None) == []

    def test_path_and_projection_exclusive(self):
        with pytest.raises(ValueError):
            EntitySelector(path="value", project=lambda body: body)

    def test_coerce_selector(self):
        assert coerce_selector(None) == EntitySelector.whole_body()
        assert coerce_selector("value").path == "value"
        assert coerce_selector(len).project is len
        with pytest.raises(TypeError):
            coerce_selector(42)


class TestExtractPager:
    """Test pager lookup on endpoint specs."""

    def _spec(self, pager):
        return RestEndpointSpec(
            entity_type="post", method="GET", build_path=lambda p: "/posts", pager=pager
        )

    def test_no_pager(self):
        assert extract_pager(self._spec(None)) is None

    def test_static_pager(self):
        pager = QueryPager("page")
        assert extract_pager(self._spec(pager)) is pager

    def test_factory_called_per_stream(self):
        calls = []

        def factory(params):
            calls.append(params)
            return QueryPager("page")

        spec = self._spec(factory)
        first = extract_pager(spec, {"filter": {}})
        second = extract_pager(spec, {"filter": {}})

        assert first is not second
        assert calls == [{"filter": {}}, {"filter": {}}]

    def test_invalid_pager(self):
        with pytest.raises(TypeError):
            extract_pager(self._spec("page"))

    def test_page_request_defaults(self):
        request = PageRequest("GET", "/posts")
        assert request.query is None
        assert request.headers is None
