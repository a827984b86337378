"""
Cache Management API

Provides endpoints for cache monitoring and manual operations.

Endpoints:
- Health check for monitoring/alerting
- Statistics for both storefront caches
- Manual invalidation for debugging (requires X-Revalidate-Secret)
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from catalog.cache import CacheEvent, CacheInvalidator, CacheStore, PageCache
from catalog.webhooks.notifier import product_path

from api.dependencies import (
    get_cache,
    get_invalidator,
    get_page_cache,
    require_revalidate_secret,
)


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/cache", tags=["Cache Management"])


# =============================================================================
# RESPONSE MODELS
# =============================================================================

class CacheHealthResponse(BaseModel):
    """Cache health check response."""
    status: str = Field(..., description="healthy or disabled")
    backend: str = Field(default="memory", description="Cache backend type")
    cached_entries: int = Field(..., description="Number of cached data entries")
    cached_pages: int = Field(..., description="Number of cached rendered pages")
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class CacheStatsResponse(BaseModel):
    """Cache statistics response."""
    enabled: bool
    backend: str = "memory"
    entries: int
    hits: int
    misses: int
    writes: int
    deletes: int
    producer_errors: int
    hit_rate_percent: float
    pages: Dict[str, Any]


class InvalidationResponse(BaseModel):
    """Cache invalidation response."""
    success: bool
    keys_invalidated: int
    pages_invalidated: int = 0
    duration_ms: float
    errors: List[str] = []


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("/health", response_model=CacheHealthResponse)
def cache_health_check(
    cache: CacheStore = Depends(get_cache),
    pages: PageCache = Depends(get_page_cache),
):
    """
    Check cache health.

    Use this endpoint for monitoring and alerting systems.
    """
    return CacheHealthResponse(
        status="healthy" if cache.enabled else "disabled",
        cached_entries=len(cache),
        cached_pages=len(pages.paths()),
        timestamp=datetime.utcnow(),
    )


@router.get("/stats", response_model=CacheStatsResponse)
def get_cache_stats(
    cache: CacheStore = Depends(get_cache),
    pages: PageCache = Depends(get_page_cache),
):
    """
    Get current cache statistics.

    Note: Stats are reset on application restart.
    """
    return CacheStatsResponse(**cache.get_stats(), pages=pages.get_stats())


@router.post(
    "/invalidate/product/{product_id}",
    response_model=InvalidationResponse,
    dependencies=[Depends(require_revalidate_secret)],
)
def invalidate_product_cache(
    product_id: int,
    slug: Optional[str] = None,
    invalidator: CacheInvalidator = Depends(get_invalidator),
    pages: PageCache = Depends(get_page_cache),
):
    """
    Invalidate cached data and the rendered page for one product.

    List pages are left alone.
    """
    result = invalidator.handle_event(
        CacheEvent.MANUAL_INVALIDATE_PRODUCT,
        product_id=product_id,
        slug=slug,
    )
    page_removed = pages.revalidate_path(product_path(product_id))

    return InvalidationResponse(
        success=result.success,
        keys_invalidated=result.keys_invalidated,
        pages_invalidated=int(page_removed),
        duration_ms=result.duration_ms,
        errors=result.errors,
    )


@router.post(
    "/invalidate/all",
    response_model=InvalidationResponse,
    dependencies=[Depends(require_revalidate_secret)],
)
def invalidate_all_cache(
    invalidator: CacheInvalidator = Depends(get_invalidator),
    pages: PageCache = Depends(get_page_cache),
):
    """
    Invalidate ALL cached data and rendered pages.

    CAUTION: Every following request goes to the CMS until the caches
    are repopulated.
    """
    result = invalidator.handle_event(CacheEvent.MANUAL_INVALIDATE_ALL)
    page_count = pages.clear()
    logger.warning(f"Manual invalidation: {result.keys_invalidated} entries, {page_count} pages")

    return InvalidationResponse(
        success=result.success,
        keys_invalidated=result.keys_invalidated,
        pages_invalidated=page_count,
        duration_ms=result.duration_ms,
        errors=result.errors,
    )
