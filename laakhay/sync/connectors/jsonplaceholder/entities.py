"""JSONPlaceholder entities.

Each entity's scalar fields mirror the API's record keys (camelCase keys
map to snake_case fields through aliases). Relationship fields are filled
by the sync session.
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import Field

from laakhay.sync.models import Collection, Reference, Relationship, SyncEntity
from laakhay.sync.runtime.deferral import DeferredEntity, DeferredRelationship


class User(SyncEntity):
    entity_type: ClassVar[str] = "user"
    relationships: ClassVar[dict[str, Relationship]] = {
        "posts": Collection("post", "userId"),
        "albums": Collection("album", "userId"),
        "tasks": Collection("task", "userId"),
    }

    name: str | None = None
    username: str | None = None
    email: str | None = None
    address: dict[str, Any] | None = None
    phone: str | None = None
    website: str | None = None
    company: dict[str, Any] | None = None

    posts: list[Post] | DeferredRelationship | None = None
    albums: list[Album] | DeferredRelationship | None = None
    tasks: list[Task] | DeferredRelationship | None = None


class Post(SyncEntity):
    entity_type: ClassVar[str] = "post"
    relationships: ClassVar[dict[str, Relationship]] = {
        "user": Reference("user", "user_id"),
        "comments": Collection("comment", "postId"),
    }

    user_id: int | None = Field(default=None, alias="userId")
    title: str | None = None
    body: str | None = None

    user: User | DeferredEntity | None = None
    comments: list[Comment] | DeferredRelationship | None = None


class Comment(SyncEntity):
    entity_type: ClassVar[str] = "comment"
    relationships: ClassVar[dict[str, Relationship]] = {
        "post": Reference("post", "post_id"),
    }

    post_id: int | None = Field(default=None, alias="postId")
    name: str | None = None
    email: str | None = None
    body: str | None = None

    post: Post | DeferredEntity | None = None


class Album(SyncEntity):
    entity_type: ClassVar[str] = "album"
    relationships: ClassVar[dict[str, Relationship]] = {
        "user": Reference("user", "user_id"),
        "photos": Collection("photo", "albumId"),
    }

    user_id: int | None = Field(default=None, alias="userId")
    title: str | None = None

    user: User | DeferredEntity | None = None
    photos: list[Photo] | DeferredRelationship | None = None


class Photo(SyncEntity):
    entity_type: ClassVar[str] = "photo"
    relationships: ClassVar[dict[str, Relationship]] = {
        "album": Reference("album", "album_id"),
    }

    album_id: int | None = Field(default=None, alias="albumId")
    title: str | None = None
    url: str | None = None
    thumbnail_url: str | None = Field(default=None, alias="thumbnailUrl")

    album: Album | DeferredEntity | None = None


class Task(SyncEntity):
    """A to-do item (served from "/todos")."""

    entity_type: ClassVar[str] = "task"
    relationships: ClassVar[dict[str, Relationship]] = {
        "user": Reference("user", "user_id"),
    }

    user_id: int | None = Field(default=None, alias="userId")
    title: str | None = None
    completed: bool = False

    user: User | DeferredEntity | None = None


for _model in (User, Post, Comment, Album, Photo, Task):
    _model.model_rebuild()
del _model

ENTITY_CLASSES: dict[str, type[SyncEntity]] = {
    cls.entity_type: cls for cls in (User, Post, Comment, Album, Photo, Task)
}
