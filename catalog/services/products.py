"""
Product Service

Storefront access to CMS products:
1. Reads go through the in-process data cache (read-through, per-resource TTL)
2. Writes go straight to the CMS, then invalidate the data cache
3. CMS payloads are mapped to the Product model

Write failures propagate as CatalogAPIError and leave the cache untouched.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from catalog.cache.config import CacheConfig, get_cache_config
from catalog.cache.invalidation import CacheEvent, CacheInvalidator
from catalog.cache.keys import product_key, product_slug_key, products_key
from catalog.cache.store import CacheStore
from catalog.cms.client import CatalogAPIError, ErrorCode, WordPressClient
from catalog.models import (
    PaginatedResponse,
    Product,
    ProductCreate,
    ProductFilters,
    ProductUpdate,
)

logger = logging.getLogger(__name__)

PRODUCTS_PATH = "/wp/v2/products"
SEARCH_PAGE_SIZE = 10


def _rendered(value: Any) -> str:
    """CMS text fields arrive either as plain strings or as {"rendered": ...}."""
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        return value.get("rendered") or ""
    return ""


def map_wordpress_product(raw: Dict[str, Any]) -> Product:
    """Map a CMS REST product to the storefront Product model."""
    price = raw.get("price")
    stock = raw.get("stock")
    return Product(
        id=raw["id"],
        title=_rendered(raw.get("title")),
        slug=raw.get("slug"),
        status=raw.get("status"),
        price=price if price is not None else 0,
        sku=raw.get("sku") or "",
        stock=stock if stock is not None else 0,
        content=_rendered(raw.get("content")),
        excerpt=_rendered(raw.get("excerpt")),
    )


class ProductService:
    """
    Cached product reads and invalidating writes.

    Usage:
        service = ProductService(client, cache)
        page = await service.get_products(page=1, filters=ProductFilters(search="mug"))
        product = await service.update_product(5, ProductUpdate(price=12.5))
    """

    def __init__(
        self,
        client: WordPressClient,
        cache: CacheStore,
        invalidator: Optional[CacheInvalidator] = None,
        config: Optional[CacheConfig] = None,
    ):
        self._client = client
        self._cache = cache
        self._config = config or get_cache_config()
        self._invalidator = invalidator or CacheInvalidator(
            cache,
            invalidate_lists=self._config.invalidate_lists_on_write,
        )

    # =========================================================================
    # Reads
    # =========================================================================

    async def get_products(
        self,
        page: int = 1,
        per_page: int = 12,
        filters: Optional[Union[ProductFilters, Mapping[str, Any]]] = None,
    ) -> PaginatedResponse:
        """One page of products, cached with the list TTL."""
        if filters is not None and not isinstance(filters, ProductFilters):
            filters = ProductFilters(**filters)

        async def produce() -> PaginatedResponse:
            params = {
                "page": str(page),
                "per_page": str(per_page),
                "_embed": "true",
            }
            if filters:
                params.update(filters.to_params())

            result = await self._client.get(PRODUCTS_PATH, params=params)
            products = (
                [map_wordpress_product(item) for item in result.data]
                if isinstance(result.data, list) else []
            )
            return PaginatedResponse(
                data=products,
                total=result.total,
                total_pages=result.total_pages,
            )

        return await self._cache.fetch_with_cache(
            products_key(page, per_page, filters),
            self._config.products_ttl,
            produce,
        )

    async def get_product(self, product_id: int) -> Product:
        """Single product by id, cached with the entity TTL."""

        async def produce() -> Product:
            result = await self._client.get(
                f"{PRODUCTS_PATH}/{product_id}",
                params={"_embed": "true"},
            )
            return map_wordpress_product(result.data)

        return await self._cache.fetch_with_cache(
            product_key(product_id),
            self._config.product_ttl,
            produce,
        )

    async def get_product_by_slug(self, slug: str) -> Product:
        """
        Single product by slug, cached with the entity TTL.

        Raises:
            CatalogAPIError: PRODUCT_NOT_FOUND when no product has this slug
        """

        async def produce() -> Product:
            result = await self._client.get(
                PRODUCTS_PATH,
                params={"slug": slug, "_embed": "true"},
            )
            if isinstance(result.data, list) and result.data:
                return map_wordpress_product(result.data[0])
            raise CatalogAPIError(
                "Product not found",
                status_code=404,
                code=ErrorCode.PRODUCT_NOT_FOUND,
            )

        return await self._cache.fetch_with_cache(
            product_slug_key(slug),
            self._config.product_ttl,
            produce,
        )

    async def search_products(self, query: str) -> List[Product]:
        """Free-text search. Not cached."""
        result = await self._client.get(
            PRODUCTS_PATH,
            params={
                "search": query,
                "per_page": str(SEARCH_PAGE_SIZE),
                "_embed": "true",
            },
        )
        if not isinstance(result.data, list):
            return []
        return [map_wordpress_product(item) for item in result.data]

    # =========================================================================
    # Writes
    # =========================================================================

    async def create_product(self, data: ProductCreate) -> Product:
        """Create a product, then clear the whole data cache."""
        result = await self._client.post(PRODUCTS_PATH, data.to_payload())
        product = map_wordpress_product(result.data)

        self._invalidator.handle_event(CacheEvent.PRODUCT_CREATED, product_id=product.id)
        logger.info(f"Created product {product.id} ({product.sku})")
        return product

    async def update_product(self, product_id: int, data: ProductUpdate) -> Product:
        """
        Update a product, then drop its cached entries.

        An update with no fields set skips the CMS write, but still drops
        the cached entry and re-reads the product.
        """
        if data.is_empty:
            self._invalidator.handle_event(CacheEvent.PRODUCT_UPDATED, product_id=product_id)
            return await self.get_product(product_id)

        result = await self._client.post(f"{PRODUCTS_PATH}/{product_id}", data.to_payload())
        product = map_wordpress_product(result.data)

        self._invalidator.handle_event(
            CacheEvent.PRODUCT_UPDATED,
            product_id=product_id,
            slug=product.slug,
        )
        logger.info(f"Updated product {product_id}: {sorted(data.model_fields_set)}")
        return product

    async def delete_product(self, product_id: int) -> None:
        """Permanently delete a product, then drop its cached entries."""
        result = await self._client.delete(
            f"{PRODUCTS_PATH}/{product_id}",
            params={"force": "true"},
        )

        previous = result.data.get("previous") if isinstance(result.data, dict) else None
        slug = previous.get("slug") if isinstance(previous, dict) else None

        self._invalidator.handle_event(
            CacheEvent.PRODUCT_DELETED,
            product_id=product_id,
            slug=slug,
        )
        logger.info(f"Deleted product {product_id}")
