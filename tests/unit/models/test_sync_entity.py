"""Unit tests for the SyncEntity base model."""

from __future__ import annotations

import pytest

from laakhay.sync.connectors.jsonplaceholder import Post, User
from laakhay.sync.core import EntityKey, RelationshipKind
from laakhay.sync.models import Collection, Reference


class TestSyncEntityIdentity:
    """Test keys and equality."""

    def test_entity_key(self):
        user = User(id=1, name="Leanne")
        user.bind_provider("jsonplaceholder")
        assert user.entity_key == EntityKey("jsonplaceholder", "user", 1)
        assert user.provider_id == "jsonplaceholder"

    def test_equal_keys_are_equal(self):
        a, b = User(id=1, name="a"), User(id=1, name="b")
        a.bind_provider("p")
        b.bind_provider("p")
        assert a == b

    def test_unidentified_entities_equal_only_to_themselves(self):
        a, b = User(name="a"), User(name="a")
        assert a == a
        assert a != b

    def test_bind_provider_twice_to_other_provider_fails(self):
        user = User(id=1)
        user.bind_provider("a")
        user.bind_provider("a")
        with pytest.raises(ValueError, match="already belongs"):
            user.bind_provider("b")

    def test_repr_does_not_walk_relationships(self):
        user = User(id=1)
        post = Post(id=10, userId=1)
        user.posts = [post]
        post.user = user
        assert repr(user) == "User(id=1)"


class TestSyncEntityRelationships:
    """Test relationship descriptors and raw-key mapping."""

    def test_descriptor_kinds(self):
        assert Reference("user", "user_id").kind is RelationshipKind.REFERENCE
        assert Collection("post", "userId").kind is RelationshipKind.COLLECTION

    def test_relationship_keys(self):
        assert Post.relationship_keys() == {"user", "comments"}

    def test_field_for_alias(self):
        assert Post.field_for("userId") == "user_id"
        assert Post.field_for("title") == "title"
        assert Post.field_for("nope") is None

    def test_validates_camel_case_records(self):
        post = Post.model_validate({"id": 1, "userId": 3, "title": "t", "unknown": True})
        assert post.user_id == 3
        assert post.user is None
