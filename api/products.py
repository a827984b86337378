"""
Storefront Product Routes

Pages (served through the page cache, with CDN headers):
- GET /                 Product listing
- GET /products/{id}    Product detail

JSON API (served through the data cache via ProductService):
- GET    /api/products
- GET    /api/products/search?q=
- GET    /api/products/slug/{slug}
- GET    /api/products/{id}
- POST   /api/products
- PATCH  /api/products/{id}
- DELETE /api/products/{id}

CMS failures raise CatalogAPIError and are turned into JSON by the
handler registered in api.frontend.
"""

import logging
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response

from catalog.cache import (
    CacheConfig,
    PageCache,
    add_page_cache_headers,
    check_not_modified,
    etag_for_payload,
)
from catalog.cache.pages import ROOT_PATH
from catalog.models import (
    PaginatedResponse,
    Product,
    ProductCreate,
    ProductFilters,
    ProductUpdate,
)
from catalog.services import ProductService
from catalog.webhooks.notifier import product_path

from api.dependencies import (
    get_cache_config_dep,
    get_page_cache,
    get_product_service,
)


logger = logging.getLogger(__name__)

page_router = APIRouter(tags=["Pages"])
router = APIRouter(prefix="/api/products", tags=["Products"])

LISTING_PAGE_SIZE = 12


# =============================================================================
# PAGE HELPERS
# =============================================================================

def _page_response(
    request: Request,
    payload: Dict[str, Any],
    config: CacheConfig,
) -> Response:
    """JSON page response with ETag and shared-cache headers, or a 304."""
    etag = etag_for_payload(payload)

    not_modified = check_not_modified(request, etag)
    if not_modified is not None:
        return not_modified

    response = JSONResponse(content=payload)
    return add_page_cache_headers(
        response,
        ttl=config.page_ttl,
        stale_while_revalidate=config.page_stale_while_revalidate,
        etag=etag,
    )


# =============================================================================
# PAGES
# =============================================================================

@page_router.get("/")
async def product_listing_page(
    request: Request,
    page: int = Query(1, ge=1),
    search: Optional[str] = None,
    service: ProductService = Depends(get_product_service),
    pages: PageCache = Depends(get_page_cache),
    config: CacheConfig = Depends(get_cache_config_dep),
):
    """
    Product listing page.

    Only the default view (first page, no search) is stored in the page
    cache; other listings are rendered on every request.
    """
    filters = ProductFilters(search=search) if search else None

    async def render() -> Dict[str, Any]:
        result = await service.get_products(page=page, per_page=LISTING_PAGE_SIZE, filters=filters)
        return jsonable_encoder({
            "page": page,
            "products": result.data,
            "total": result.total,
            "total_pages": result.total_pages,
        })

    if page == 1 and not search:
        payload = await pages.render(ROOT_PATH, render)
    else:
        payload = await render()

    return _page_response(request, payload, config)


@page_router.get("/products/{product_id}")
async def product_detail_page(
    request: Request,
    product_id: int,
    service: ProductService = Depends(get_product_service),
    pages: PageCache = Depends(get_page_cache),
    config: CacheConfig = Depends(get_cache_config_dep),
):
    """Product detail page, regenerated after the page TTL or on revalidation."""

    async def render() -> Dict[str, Any]:
        product = await service.get_product(product_id)
        return jsonable_encoder({"product": product})

    payload = await pages.render(product_path(product_id), render)
    return _page_response(request, payload, config)


# =============================================================================
# JSON API
# =============================================================================

@router.get("", response_model=PaginatedResponse)
async def list_products(
    page: int = Query(1, ge=1),
    per_page: int = Query(12, ge=1, le=100),
    search: Optional[str] = None,
    category: Optional[int] = None,
    tag: Optional[int] = None,
    orderby: Optional[str] = None,
    order: Optional[Literal["asc", "desc"]] = None,
    service: ProductService = Depends(get_product_service),
):
    """One page of products."""
    filters = ProductFilters(
        search=search,
        category=category,
        tag=tag,
        orderby=orderby,
        order=order,
    )
    return await service.get_products(
        page=page,
        per_page=per_page,
        filters=filters if filters.to_params() else None,
    )


@router.get("/search", response_model=List[Product])
async def search_products(
    q: str = Query(..., min_length=1),
    service: ProductService = Depends(get_product_service),
):
    """Free-text product search (not cached)."""
    return await service.search_products(q)


@router.get("/slug/{slug}", response_model=Product)
async def get_product_by_slug(
    slug: str,
    service: ProductService = Depends(get_product_service),
):
    return await service.get_product_by_slug(slug)


@router.get("/{product_id}", response_model=Product)
async def get_product(
    product_id: int,
    service: ProductService = Depends(get_product_service),
):
    return await service.get_product(product_id)


@router.post("", response_model=Product, status_code=201)
async def create_product(
    data: ProductCreate,
    service: ProductService = Depends(get_product_service),
):
    return await service.create_product(data)


@router.patch("/{product_id}", response_model=Product)
async def update_product(
    product_id: int,
    data: ProductUpdate,
    service: ProductService = Depends(get_product_service),
):
    return await service.update_product(product_id, data)


@router.delete("/{product_id}")
async def delete_product(
    product_id: int,
    service: ProductService = Depends(get_product_service),
):
    await service.delete_product(product_id)
    return {"deleted": True, "id": product_id}
