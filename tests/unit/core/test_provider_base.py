"""Unit tests for BaseProvider."""

from __future__ import annotations

import pytest

from laakhay.sync.core import BaseProvider, UnsupportedEntityError


class TestBaseProvider:
    """Test the shared behavior of providers."""

    def test_is_abstract(self):
        with pytest.raises(TypeError):
            BaseProvider("fake")  # type: ignore[abstract]

    def test_entity_class_lookup(self, provider):
        assert provider.entity_class("user").entity_type == "user"
        assert provider.supports("post")
        assert not provider.supports("invoice")

    def test_entity_class_unsupported(self, provider):
        with pytest.raises(UnsupportedEntityError) as exc_info:
            provider.entity_class("invoice")
        assert exc_info.value.provider_id == "fake"

    def test_requires_provider_id(self, make_provider):
        with pytest.raises(ValueError, match="provider_id"):
            make_provider(provider_id="")

    @pytest.mark.asyncio
    async def test_context_manager_closes(self, provider):
        async with provider as p:
            assert p is provider
        assert provider.closed

    @pytest.mark.asyncio
    async def test_fetch_health_not_implemented_by_default(self, provider):
        with pytest.raises(NotImplementedError):
            await provider.fetch_health()

    def test_multi_value_filters_unsupported_by_default(self, provider):
        assert not BaseProvider.supports_multi_value_filter(provider, "user", "id")
