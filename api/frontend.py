"""
Storefront Application

FastAPI app that serves the product catalog:
1. Product pages (listing and detail) through the rendered-page cache
2. JSON product API through the read-through data cache
3. /api/revalidate for the CMS webhook
4. Cache monitoring and manual invalidation

Run with:
    uvicorn api.frontend:app --port 3000
"""

import logging
import sys
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from catalog import __version__
from catalog.cache import (
    CacheConfig,
    CacheInvalidator,
    CacheStore,
    PageCache,
    get_cache_config,
)
from catalog.cms import CatalogAPIError, WordPressClient
from catalog.services import ProductService
from catalog.utils.config import Settings, get_settings

from api import cache, products, revalidate

# Configure logging to stdout
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
    force=True,  # Override any existing config
)
logger = logging.getLogger(__name__)

# Quiet down chatty loggers
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


def create_app(
    settings: Optional[Settings] = None,
    cache_config: Optional[CacheConfig] = None,
    cms_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the storefront app.

    Args:
        settings: Application settings (defaults to get_settings())
        cache_config: Cache TTLs and switches (defaults to get_cache_config())
        cms_transport: Custom httpx transport for the CMS client (tests)
    """
    settings = settings or get_settings()
    cache_config = cache_config or get_cache_config()

    app = FastAPI(
        title="Product Catalog Storefront",
        description="Cached product catalog backed by a WordPress-compatible CMS",
        version=__version__,
    )

    # ========================================================================
    # STATE
    # ========================================================================

    data_cache = CacheStore(
        default_ttl=cache_config.products_ttl,
        enabled=cache_config.enabled,
    )
    invalidator = CacheInvalidator(
        data_cache,
        invalidate_lists=cache_config.invalidate_lists_on_write,
    )
    client = WordPressClient(
        base_url=settings.wordpress_api_url,
        token=settings.WORDPRESS_TOKEN,
        timeout=settings.API_TIMEOUT,
        transport=cms_transport,
    )

    app.state.settings = settings
    app.state.cache_config = cache_config
    app.state.cache = data_cache
    app.state.page_cache = PageCache(ttl=cache_config.page_ttl)
    app.state.invalidator = invalidator
    app.state.cms_client = client
    app.state.product_service = ProductService(
        client,
        data_cache,
        invalidator=invalidator,
        config=cache_config,
    )

    # ========================================================================
    # LIFECYCLE
    # ========================================================================

    @app.on_event("startup")
    async def startup_event():
        logger.info(
            f"Storefront starting: cms={settings.wordpress_api_url}, "
            f"cache_enabled={cache_config.enabled}, "
            f"list_ttl={cache_config.products_ttl}s, product_ttl={cache_config.product_ttl}s, "
            f"page_ttl={cache_config.page_ttl}s"
        )
        if not settings.REVALIDATE_SECRET:
            logger.warning("REVALIDATE_SECRET is not set - every revalidation request will be rejected")

    @app.on_event("shutdown")
    async def shutdown_event():
        await client.close()
        logger.info("CMS client closed")

    # ========================================================================
    # ERRORS
    # ========================================================================

    @app.exception_handler(CatalogAPIError)
    async def catalog_error_handler(request: Request, exc: CatalogAPIError):
        status_code = exc.status_code or 500
        logger.error(f"{request.method} {request.url.path} failed: {exc.code} {exc.message}")
        return JSONResponse(
            status_code=status_code,
            content={"error": exc.message, "code": exc.code},
        )

    # ========================================================================
    # ROUTES
    # ========================================================================

    app.include_router(products.page_router)
    app.include_router(products.router)
    app.include_router(revalidate.router)
    app.include_router(cache.router)

    return app


app = create_app()


# ============================================================================
# RUN SERVER
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.frontend:app",
        host="0.0.0.0",
        port=3000,
        reload=True,
    )
