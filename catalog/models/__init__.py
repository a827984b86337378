"""
Product Catalog - Data Models

Shared data models used by the storefront and the CMS.
"""

from .product import (
    Product,
    PaginatedResponse,
    ProductCreate,
    ProductUpdate,
    ProductFilters,
    ProductStatus,
)

__all__ = [
    "Product",
    "PaginatedResponse",
    "ProductCreate",
    "ProductUpdate",
    "ProductFilters",
    "ProductStatus",
]
