"""
Product Catalog Caching Layer

Two in-process caches in the storefront:
- Data cache (CacheStore): CMS responses, read-through with per-resource TTL
- Page cache (PageCache): rendered listing/detail payloads keyed by path

Consistency paths:
- Storefront writes invalidate the data cache directly (CacheInvalidator)
- CMS saves fire a webhook to /api/revalidate, which invalidates the page cache

The two caches are never synchronized with each other directly.

Usage:
    cache = CacheStore(default_ttl=300)
    product = await cache.fetch_with_cache(product_key(5), ttl=1800, producer=fetch)

    invalidator = CacheInvalidator(cache)
    invalidator.handle_event(CacheEvent.PRODUCT_UPDATED, product_id=5)
"""

from catalog.cache.config import CacheConfig, CacheTTL, get_cache_config
from catalog.cache.store import CacheStore, CacheEntry, CacheStats
from catalog.cache.keys import (
    products_key,
    product_key,
    product_slug_key,
    serialize_filters,
)
from catalog.cache.invalidation import (
    CacheInvalidator,
    CacheEvent,
    InvalidationResult,
)
from catalog.cache.pages import PageCache, normalize_path
from catalog.cache.headers import (
    generate_etag,
    etag_for_payload,
    add_page_cache_headers,
    check_not_modified,
    CacheHeadersBuilder,
)

__all__ = [
    # Config
    "CacheConfig",
    "CacheTTL",
    "get_cache_config",
    # Store
    "CacheStore",
    "CacheEntry",
    "CacheStats",
    # Keys
    "products_key",
    "product_key",
    "product_slug_key",
    "serialize_filters",
    # Invalidation
    "CacheInvalidator",
    "CacheEvent",
    "InvalidationResult",
    # Pages
    "PageCache",
    "normalize_path",
    # Headers
    "generate_etag",
    "etag_for_payload",
    "add_page_cache_headers",
    "check_not_modified",
    "CacheHeadersBuilder",
]
