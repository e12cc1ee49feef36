"""Shared fixtures for unit tests: an in-memory provider that counts calls."""

from __future__ import annotations

from typing import Any, ClassVar

import pytest
from pydantic import Field

from laakhay.sync.core.base import BaseProvider
from laakhay.sync.core.exceptions import TransportError
from laakhay.sync.models import Collection, Reference, SyncEntity
from laakhay.sync.runtime.deferral import DeferredEntity, DeferredRelationship
from laakhay.sync.runtime.paging import NextRequest, Page


class Member(SyncEntity):
    entity_type: ClassVar[str] = "user"
    relationships: ClassVar[dict] = {"posts": Collection("post", "userId")}

    name: str | None = None
    posts: list[Any] | DeferredRelationship | None = None


class Article(SyncEntity):
    entity_type: ClassVar[str] = "post"
    relationships: ClassVar[dict] = {
        "user": Reference("user", "user_id"),
        "reviewers": Reference("user", "reviewer_ids"),
    }

    user_id: int | None = Field(default=None, alias="userId")
    reviewer_ids: list[int] | None = Field(default=None, alias="reviewerIds")
    title: str | None = None
    user: Member | DeferredEntity | None = None
    reviewers: list[Any] | None = None


Member.model_rebuild()
Article.model_rebuild()


def _matches(record: dict[str, Any], query: dict[str, Any] | None) -> bool:
    for key, value in (query or {}).items():
        if isinstance(value, list | tuple | set):
            if record.get(key) not in value:
                return False
        elif record.get(key) != value:
            return False
    return True


class FakeProvider(BaseProvider):
    """Serves records from memory in pages of ``page_size``."""

    entity_classes: ClassVar[dict[str, type[SyncEntity]]] = {"user": Member, "post": Article}

    def __init__(
        self,
        records: dict[str, list[dict[str, Any]]],
        *,
        provider_id: str = "fake",
        page_size: int = 10,
        multi_value: set[tuple[str, str]] | None = None,
    ) -> None:
        super().__init__(provider_id)
        self.records = records
        self.page_size = page_size
        self.multi_value = multi_value or set()
        self.calls: list[tuple[str, str, Any]] = []
        self.closed = False

    def calls_to(self, method: str) -> list[tuple[str, str, Any]]:
        return [call for call in self.calls if call[0] == method]

    async def fetch_record(self, entity_type: str, entity_id: Any) -> dict[str, Any]:
        self.calls.append(("fetch_record", entity_type, entity_id))
        for record in self.records.get(entity_type, []):
            if record.get("id") == entity_id:
                return dict(record)
        raise TransportError(f"{entity_type} {entity_id} not found", status_code=404)

    async def iter_pages(self, entity_type, query=None, *, pager=None):
        self.calls.append(("iter_pages", entity_type, dict(query or {})))
        records = [r for r in self.records.get(entity_type, []) if _matches(r, query)]
        chunks = [
            records[i : i + self.page_size] for i in range(0, len(records), self.page_size)
        ] or [[]]
        previous = None
        for index, chunk in enumerate(chunks):
            last = index == len(chunks) - 1
            page = Page.create(
                [dict(r) for r in chunk],
                previous=previous,
                next_request=None if last else NextRequest(url=f"/{entity_type}?page={index + 2}"),
            )
            yield page
            previous = page

    def supports_multi_value_filter(self, entity_type: str, key: str) -> bool:
        return (entity_type, key) in self.multi_value

    async def close(self) -> None:
        self.closed = True


USERS = [
    {"id": 1, "name": "Leanne"},
    {"id": 2, "name": "Ervin"},
    {"id": 3, "name": "Clementine"},
]

POSTS = [
    {"id": 11, "userId": 1, "title": "first"},
    {"id": 12, "userId": 1, "title": "second"},
    {"id": 21, "userId": 2, "title": "third"},
]


@pytest.fixture
def make_provider():
    """Factory building a FakeProvider over copies of the sample records."""

    def factory(records=None, **kwargs) -> FakeProvider:
        if records is None:
            records = {"user": [dict(u) for u in USERS], "post": [dict(p) for p in POSTS]}
        return FakeProvider(records, **kwargs)

    return factory


@pytest.fixture
def provider(make_provider) -> FakeProvider:
    return make_provider()
