"""
Tests for event-driven cache invalidation.

Covers which keys each event drops, including the configurable list
invalidation on update/delete.
"""

import pytest
from unittest.mock import MagicMock

from catalog.cache.invalidation import CacheEvent, CacheInvalidator
from catalog.cache.keys import products_key, product_key, product_slug_key
from catalog.cache.store import CacheStore


@pytest.fixture
def populated_cache(clock) -> CacheStore:
    cache = CacheStore(clock=clock)
    cache.set(products_key(1, 12), ["p1", "p2"])
    cache.set(products_key(2, 12), ["p3"])
    cache.set(products_key(1, 12, {"search": "mug"}), ["p1"])
    cache.set(product_key(1), "p1")
    cache.set(product_key(2), "p2")
    cache.set(product_slug_key("blue-mug"), "p1")
    return cache


class TestProductEvents:
    """Test invalidation scope per product event."""

    def test_created_clears_everything(self, populated_cache):
        invalidator = CacheInvalidator(populated_cache)

        result = invalidator.handle_event(CacheEvent.PRODUCT_CREATED, product_id=9)

        assert result.success is True
        assert result.keys_invalidated == 6
        assert len(populated_cache) == 0

    def test_updated_drops_entity_slug_and_lists(self, populated_cache):
        invalidator = CacheInvalidator(populated_cache, invalidate_lists=True)

        invalidator.handle_event(CacheEvent.PRODUCT_UPDATED, product_id=1, slug="blue-mug")

        assert populated_cache.keys() == [product_key(2)]

    def test_updated_without_list_invalidation(self, populated_cache):
        """List pages stay until their TTL lapses."""
        invalidator = CacheInvalidator(populated_cache, invalidate_lists=False)

        invalidator.handle_event(CacheEvent.PRODUCT_UPDATED, product_id=1, slug="blue-mug")

        assert populated_cache.get(product_key(1)) is None
        assert populated_cache.get(product_slug_key("blue-mug")) is None
        assert populated_cache.get(products_key(1, 12)) == ["p1", "p2"]
        assert populated_cache.get(product_key(2)) == "p2"

    def test_deleted_has_update_scope(self, populated_cache):
        invalidator = CacheInvalidator(populated_cache, invalidate_lists=False)

        result = invalidator.handle_event(CacheEvent.PRODUCT_DELETED, product_id=2)

        assert result.keys_invalidated == 1
        assert populated_cache.get(product_key(2)) is None
        assert populated_cache.get(product_key(1)) == "p1"

    def test_repeated_invalidation_is_harmless(self, populated_cache):
        invalidator = CacheInvalidator(populated_cache)

        invalidator.handle_event(CacheEvent.PRODUCT_UPDATED, product_id=1)
        second = invalidator.handle_event(CacheEvent.PRODUCT_UPDATED, product_id=1)

        assert second.success is True
        assert second.keys_invalidated == 0


class TestManualEvents:
    """Test manual invalidation events."""

    def test_manual_product_keeps_lists(self, populated_cache):
        invalidator = CacheInvalidator(populated_cache, invalidate_lists=True)

        invalidator.handle_event(
            CacheEvent.MANUAL_INVALIDATE_PRODUCT, product_id=1, slug="blue-mug"
        )

        assert populated_cache.get(product_key(1)) is None
        assert populated_cache.get(products_key(1, 12)) == ["p1", "p2"]

    def test_manual_all(self, populated_cache):
        invalidator = CacheInvalidator(populated_cache)

        invalidator.handle_event(CacheEvent.MANUAL_INVALIDATE_ALL)

        assert len(populated_cache) == 0


class TestInvalidationErrors:
    """Failures are reported, never raised."""

    def test_store_error_is_collected(self):
        cache = MagicMock()
        cache.delete.side_effect = RuntimeError("boom")
        invalidator = CacheInvalidator(cache)

        result = invalidator.handle_event(CacheEvent.PRODUCT_UPDATED, product_id=1)

        assert result.success is False
        assert result.errors == ["boom"]
