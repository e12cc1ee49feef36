"""Unit tests for SyncSession.

Tests focus on hydration, interning and when deferred relationships resolve.
"""

from __future__ import annotations

import pytest

from laakhay.sync.core import DeferralPolicy, EntityKey, ProviderError
from laakhay.sync.runtime import SyncSession
from laakhay.sync.runtime.deferral import DeferredEntity, DeferredRelationship, is_deferred

NO_RESOLVE = DeferralPolicy.DO_NOT_RESOLVE


def user_key(user_id: int) -> EntityKey:
    return EntityKey("fake", "user", user_id)


class TestSessionBasics:
    def test_default_policy_is_resolve_early(self):
        assert SyncSession().policy is DeferralPolicy.RESOLVE_EARLY

    def test_policy_from_string(self):
        assert SyncSession(policy="resolve-late").policy is DeferralPolicy.RESOLVE_LATE

    def test_invalid_policy_rejected(self):
        with pytest.raises(ValueError):
            SyncSession(policy="sometimes")

    def test_context_reused_per_provider(self, provider):
        session = SyncSession()
        assert session.context(provider) is session.context(provider)
        assert session.context(provider).provider is provider


class TestSessionPaging:
    """Test page streams of hydrated entities."""

    @pytest.mark.asyncio
    async def test_pages_hold_entities(self, make_provider):
        provider = make_provider(page_size=2)
        session = SyncSession(policy=NO_RESOLVE)

        pages = [page async for page in session.iter_pages(provider, "user")]

        assert [len(page.entities) for page in pages] == [2, 1]
        assert [page.is_last_page for page in pages] == [False, True]
        assert [page.entity_count for page in pages] == [2, 3]
        assert [user.name for user in pages[0].entities] == ["Leanne", "Ervin"]
        assert all(user.provider_id == "fake" for page in pages for user in page.entities)

    @pytest.mark.asyncio
    async def test_run_query_yields_entities_in_order(self, make_provider):
        provider = make_provider(page_size=2)
        session = SyncSession(policy=NO_RESOLVE)

        ids = [user.id async for user in session.run_query(provider, "user")]

        assert ids == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_query_is_passed_to_provider(self, provider):
        session = SyncSession(policy=NO_RESOLVE)

        posts = await session.fetch_all(provider, "post", {"userId": 2})

        assert [post.id for post in posts] == [21]
        assert provider.calls == [("iter_pages", "post", {"userId": 2})]

    @pytest.mark.asyncio
    async def test_same_record_interned_once(self, provider):
        session = SyncSession(policy=NO_RESOLVE)

        first = await session.fetch_all(provider, "user")
        second = await session.fetch_all(provider, "user")

        assert all(a is b for a, b in zip(first, second, strict=True))
        assert len(session.identity_map) == 3

    @pytest.mark.asyncio
    async def test_stop_ends_stream_between_pages(self, make_provider):
        provider = make_provider(page_size=1)
        session = SyncSession(policy=DeferralPolicy.RESOLVE_LATE)
        pages = []

        async for page in session.iter_pages(provider, "post"):
            pages.append(page)
            session.stop()

        assert session.stopped
        assert len(pages) == 1
        # Stopped streams do not drain
        assert is_deferred(pages[0].entities[0].user)

    @pytest.mark.asyncio
    async def test_placeholder_resolved_in_full_after_stop(self, make_provider):
        provider = make_provider(page_size=1)
        session = SyncSession(policy=NO_RESOLVE)
        async for page in session.iter_pages(provider, "user"):
            user = page.entities[0]
            session.stop()

        posts = await user.posts.resolve()

        assert [post.id for post in posts] == [11, 12]
        assert user.posts == posts

    @pytest.mark.asyncio
    async def test_streams_started_after_stop_run_to_completion(self, make_provider):
        provider = make_provider(page_size=1)
        session = SyncSession(policy=NO_RESOLVE)
        session.stop()

        users = await session.fetch_all(provider, "user")

        assert session.stopped
        assert [user.id for user in users] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_invalid_record_raises_provider_error(self, make_provider):
        provider = make_provider({"user": [{"id": 1, "name": ["not", "a", "name"]}]})
        session = SyncSession(policy=NO_RESOLVE)

        with pytest.raises(ProviderError, match="Invalid user record"):
            await session.fetch_all(provider, "user")


class TestSessionLinking:
    """Test how relationship fields are filled."""

    @pytest.mark.asyncio
    async def test_references_deferred_under_do_not_resolve(self, provider):
        session = SyncSession(policy=NO_RESOLVE)

        post = await session.fetch_by_id(provider, "post", 11)

        assert isinstance(post.user, DeferredEntity)
        assert post.user.key == user_key(1)
        assert post.reviewers is None
        assert provider.calls == [("fetch_record", "post", 11)]
        assert len(session.deferrals) == 0

    @pytest.mark.asyncio
    async def test_collections_deferred_by_owner_id(self, provider):
        session = SyncSession(policy=NO_RESOLVE)

        user = await session.fetch_by_id(provider, "user", 1)

        assert isinstance(user.posts, DeferredRelationship)
        assert user.posts.filter == {"userId": 1}

    @pytest.mark.asyncio
    async def test_interned_reference_linked_directly(self, provider):
        session = SyncSession(policy=NO_RESOLVE)
        user = await session.fetch_by_id(provider, "user", 1)

        post = await session.fetch_by_id(provider, "post", 11)

        assert post.user is user

    @pytest.mark.asyncio
    async def test_embedded_relationship_hydrated_and_interned(self, make_provider):
        provider = make_provider(
            {"post": [{"id": 11, "title": "first", "user": {"id": 1, "name": "Leanne"}}]}
        )
        session = SyncSession(policy=NO_RESOLVE)

        post = await session.fetch_by_id(provider, "post", 11)

        assert post.user.name == "Leanne"
        assert session.identity_map.lookup(user_key(1)) is post.user
        assert provider.calls_to("fetch_record") == [("fetch_record", "post", 11)]

    @pytest.mark.asyncio
    async def test_reference_list_resolved_per_slot(self, make_provider):
        records = {
            "user": [{"id": 2, "name": "Ervin"}, {"id": 3, "name": "Clementine"}],
            "post": [{"id": 31, "title": "reviewed", "reviewerIds": [2, 3]}],
        }
        provider = make_provider(records)
        session = SyncSession(policy=NO_RESOLVE)

        post = await session.fetch_by_id(provider, "post", 31)
        assert all(isinstance(r, DeferredEntity) for r in post.reviewers)

        await post.reviewers[1].resolve()

        assert isinstance(post.reviewers[0], DeferredEntity)
        assert post.reviewers[1].name == "Clementine"

    @pytest.mark.asyncio
    async def test_cycle_resolves_to_same_instance(self, provider):
        session = SyncSession(policy=DeferralPolicy.RESOLVE_EARLY)

        user = await session.fetch_by_id(provider, "user", 1)

        assert [post.id for post in user.posts] == [11, 12]
        assert all(post.user is user for post in user.posts)


class TestSessionPolicies:
    """Test resolution timing under each policy."""

    @pytest.mark.asyncio
    async def test_resolve_early_links_before_page_is_yielded(self, make_provider):
        provider = make_provider(page_size=2)
        session = SyncSession(policy=DeferralPolicy.RESOLVE_EARLY)
        pages = session.iter_pages(provider, "post")

        first = await anext(pages)
        await pages.aclose()

        assert not is_deferred(first.entities[0].user)
        assert first.entities[0].user.name == "Leanne"

    @pytest.mark.asyncio
    async def test_resolve_late_drains_after_last_page(self, make_provider):
        provider = make_provider(page_size=2)
        session = SyncSession(policy=DeferralPolicy.RESOLVE_LATE)
        pages = session.iter_pages(provider, "post")

        first = await anext(pages)
        assert is_deferred(first.entities[0].user)
        last = await anext(pages)
        assert last.is_last_page
        assert is_deferred(last.entities[0].user)
        assert provider.calls_to("fetch_record") == []

        with pytest.raises(StopAsyncIteration):
            await anext(pages)

        post = first.entities[0]
        assert post.user.name == "Leanne"
        assert last.entities[0].user.name == "Ervin"
        assert first.entities[1].user is post.user
        assert post in post.user.posts
        assert len(session.deferrals) == 0

    @pytest.mark.asyncio
    async def test_collection_timing_per_policy(self, make_provider):
        late = SyncSession(policy=DeferralPolicy.RESOLVE_LATE)
        pages = late.iter_pages(make_provider(page_size=2), "user")

        user = (await anext(pages)).entities[0]
        assert isinstance(user.posts, DeferredRelationship)
        async for _ in pages:
            pass
        assert [post.id for post in user.posts] == [11, 12]

        early = SyncSession(policy=DeferralPolicy.RESOLVE_EARLY)
        pages = early.iter_pages(make_provider(page_size=2), "user")

        user = (await anext(pages)).entities[0]
        await pages.aclose()
        assert [post.id for post in user.posts] == [11, 12]

    @pytest.mark.asyncio
    async def test_abandoned_late_stream_keeps_queue(self, make_provider):
        provider = make_provider(page_size=2)
        session = SyncSession(policy=DeferralPolicy.RESOLVE_LATE)
        pages = session.iter_pages(provider, "post")

        first = await anext(pages)
        await pages.aclose()
        assert len(session.deferrals) == 2

        await session.resolve_deferred()

        assert first.entities[0].user.name == "Leanne"
        assert len(session.deferrals) == 0

    @pytest.mark.asyncio
    async def test_per_call_policy_overrides_session(self, provider):
        session = SyncSession(policy=DeferralPolicy.RESOLVE_EARLY)

        post = await session.fetch_by_id(provider, "post", 11, policy="do_not_resolve")

        assert is_deferred(post.user)

    @pytest.mark.asyncio
    async def test_fetch_by_id_late_drains_before_returning(self, provider):
        session = SyncSession(policy=DeferralPolicy.RESOLVE_LATE)

        post = await session.fetch_by_id(provider, "post", 11)

        assert post.user.name == "Leanne"


class TestSessionIdentityMap:
    @pytest.mark.asyncio
    async def test_fetch_by_id_uses_identity_map(self, provider):
        session = SyncSession(policy=NO_RESOLVE)
        users = await session.fetch_all(provider, "user")

        user = await session.fetch_by_id(provider, "user", 2)

        assert user is users[1]
        assert provider.calls_to("fetch_record") == []

    @pytest.mark.asyncio
    async def test_forget_drops_provider_entities(self, provider, caplog):
        session = SyncSession(policy=NO_RESOLVE)
        first = await session.fetch_by_id(provider, "user", 1)

        with caplog.at_level("INFO", logger="laakhay.sync.runtime.session"):
            assert session.forget(provider) == 1

        assert session.identity_map.lookup(user_key(1)) is None
        assert any(r.getMessage() == "identity_map_forget" for r in caplog.records)
        again = await session.fetch_by_id(provider, "user", 1)
        assert again is not first
        assert len(provider.calls_to("fetch_record")) == 2

    @pytest.mark.asyncio
    async def test_providers_do_not_share_identities(self, make_provider):
        a = make_provider(provider_id="a")
        b = make_provider(provider_id="b")
        session = SyncSession(policy=NO_RESOLVE)

        user_a = await session.fetch_by_id(a, "user", 1)
        user_b = await session.fetch_by_id(b, "user", 1)

        assert user_a is not user_b
        assert user_a != user_b
        assert session.forget("a") == 1
        assert session.identity_map.lookup(EntityKey("b", "user", 1)) is user_b
