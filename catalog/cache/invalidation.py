"""
Cache Invalidation Service

Event-driven invalidation of the storefront data cache, run synchronously
right after a successful write against the CMS.

Events trigger targeted cache invalidation:
- PRODUCT_CREATED: Clear everything (no way to tell which list pages move)
- PRODUCT_UPDATED: Drop the product entry (and list pages, if configured)
- PRODUCT_DELETED: Same scope as an update

With invalidate_lists=False, update and delete leave list pages stale until
their TTL lapses.
"""

import logging
import time
from enum import Enum
from typing import Optional, List
from dataclasses import dataclass

from catalog.cache.keys import (
    PRODUCTS_LIST_PREFIX,
    product_key,
    product_slug_key,
)
from catalog.cache.store import CacheStore


logger = logging.getLogger(__name__)


class CacheEvent(Enum):
    """Events that trigger cache invalidation."""

    # Product lifecycle
    PRODUCT_CREATED = "product_created"
    PRODUCT_UPDATED = "product_updated"
    PRODUCT_DELETED = "product_deleted"

    # Manual invalidation
    MANUAL_INVALIDATE_PRODUCT = "manual_invalidate_product"
    MANUAL_INVALIDATE_ALL = "manual_invalidate_all"


@dataclass
class InvalidationResult:
    """Result of a cache invalidation operation."""
    event: CacheEvent
    success: bool
    keys_invalidated: int
    duration_ms: float
    errors: List[str]


class CacheInvalidator:
    """
    Handles cache invalidation based on events.

    Failures are collected into the result and logged; they never
    propagate to the write that triggered them.
    """

    def __init__(
        self,
        cache: CacheStore,
        invalidate_lists: bool = True,
    ):
        self._cache = cache
        self.invalidate_lists = invalidate_lists

    def _invalidate_product(
        self,
        product_id: Optional[int],
        slug: Optional[str],
        include_lists: bool,
    ) -> int:
        count = 0
        if product_id is not None and self._cache.delete(product_key(product_id)):
            count += 1
        if slug and self._cache.delete(product_slug_key(slug)):
            count += 1
        if include_lists:
            count += self._cache.delete_prefix(PRODUCTS_LIST_PREFIX)
        return count

    def handle_event(
        self,
        event: CacheEvent,
        product_id: Optional[int] = None,
        slug: Optional[str] = None,
    ) -> InvalidationResult:
        """
        Handle cache invalidation for an event.

        Args:
            event: What happened
            product_id: Affected product, for product-scoped events
            slug: Slug of the affected product, when known
        """
        start_time = time.perf_counter()
        errors = []
        keys_invalidated = 0

        logger.info(
            f"Cache invalidation event: {event.value}, "
            f"product={product_id}, slug={slug}"
        )

        try:
            if event in (CacheEvent.PRODUCT_CREATED, CacheEvent.MANUAL_INVALIDATE_ALL):
                keys_invalidated += self._cache.clear()

            elif event in (CacheEvent.PRODUCT_UPDATED, CacheEvent.PRODUCT_DELETED):
                keys_invalidated += self._invalidate_product(
                    product_id, slug, include_lists=self.invalidate_lists
                )

            elif event == CacheEvent.MANUAL_INVALIDATE_PRODUCT:
                keys_invalidated += self._invalidate_product(
                    product_id, slug, include_lists=False
                )

        except Exception as e:
            errors.append(str(e))
            logger.error(f"Cache invalidation error: {e}")

        duration = (time.perf_counter() - start_time) * 1000

        result = InvalidationResult(
            event=event,
            success=len(errors) == 0,
            keys_invalidated=keys_invalidated,
            duration_ms=duration,
            errors=errors,
        )

        logger.info(
            f"Invalidation complete: {keys_invalidated} keys, "
            f"duration: {duration:.2f}ms"
        )

        return result
