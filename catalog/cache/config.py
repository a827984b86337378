"""
Cache Configuration

Centralized configuration for the storefront caching layer.

Two independent caches live in the storefront process:
- Data cache: CMS responses keyed by logical query (list vs single product)
- Page cache: rendered listing/detail payloads keyed by path

Both are in-process only. Each storefront instance has its own copy.
"""

import os
from dataclasses import dataclass, field
from datetime import timedelta
from functools import lru_cache


@dataclass(frozen=True)
class CacheTTL:
    """
    Cache TTL configuration by data type.

    List queries change whenever any product changes, so they get the
    short TTL. Single products are only invalidated by their own writes.
    """

    # Data cache
    PRODUCTS_LIST: timedelta = timedelta(minutes=5)
    PRODUCT: timedelta = timedelta(minutes=30)

    # Page cache (regeneration window for rendered pages)
    PAGE: timedelta = timedelta(minutes=30)
    PAGE_STALE_WHILE_REVALIDATE: timedelta = timedelta(hours=1)

    @classmethod
    def for_resource(cls, resource: str) -> timedelta:
        """Get TTL for a resource name."""
        mapping = {
            "products": cls.PRODUCTS_LIST,
            "product": cls.PRODUCT,
            "page": cls.PAGE,
        }
        return mapping.get(resource, cls.PRODUCTS_LIST)


def _env_seconds(name: str, default: timedelta) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default.total_seconds()
    return float(raw)


@dataclass
class CacheConfig:
    """
    Main cache configuration.

    Settings can be overridden via environment variables:
    - CACHE_ENABLED: Enable/disable the data cache globally
    - CACHE_INVALIDATE_LISTS_ON_WRITE: Drop list queries on update/delete too
    - PRODUCTS_CACHE_TTL / PRODUCT_CACHE_TTL / PAGE_CACHE_TTL: TTLs in seconds
    """

    enabled: bool = field(default_factory=lambda: os.getenv(
        "CACHE_ENABLED",
        "true"
    ).lower() == "true")

    # False keeps list entries stale after update/delete until their TTL lapses
    invalidate_lists_on_write: bool = field(default_factory=lambda: os.getenv(
        "CACHE_INVALIDATE_LISTS_ON_WRITE",
        "true"
    ).lower() == "true")

    products_ttl: float = field(default_factory=lambda: _env_seconds(
        "PRODUCTS_CACHE_TTL", CacheTTL.PRODUCTS_LIST
    ))
    product_ttl: float = field(default_factory=lambda: _env_seconds(
        "PRODUCT_CACHE_TTL", CacheTTL.PRODUCT
    ))
    page_ttl: float = field(default_factory=lambda: _env_seconds(
        "PAGE_CACHE_TTL", CacheTTL.PAGE
    ))
    page_stale_while_revalidate: float = CacheTTL.PAGE_STALE_WHILE_REVALIDATE.total_seconds()


@lru_cache(maxsize=1)
def get_cache_config() -> CacheConfig:
    """Get singleton cache configuration."""
    return CacheConfig()
