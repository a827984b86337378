"""
Cache Key Builders

Keys are plain strings derived from the logical query. Filter parameters
are serialized with sorted keys so two equal filter sets always map to the
same entry, whatever order they were built in.
"""

import json
from typing import Any, Mapping, Optional, Union

from catalog.models import ProductFilters


PRODUCTS_LIST_PREFIX = "products_"
PRODUCT_PREFIX = "product_"
PRODUCT_SLUG_PREFIX = "product_slug_"

FilterInput = Optional[Union[ProductFilters, Mapping[str, Any]]]


def serialize_filters(filters: FilterInput) -> str:
    """Order-independent serialization. Empty and missing filters are equal."""
    if filters is None:
        params = {}
    elif isinstance(filters, ProductFilters):
        params = filters.to_params()
    else:
        params = {
            name: str(value)
            for name, value in filters.items()
            if value is not None and value != ""
        }
    return json.dumps(params, sort_keys=True, separators=(",", ":"))


def products_key(page: int, per_page: int, filters: FilterInput = None) -> str:
    """Key for one page of a list query."""
    return f"{PRODUCTS_LIST_PREFIX}{page}_{per_page}_{serialize_filters(filters)}"


def product_key(product_id: int) -> str:
    """Key for a single product looked up by id."""
    return f"{PRODUCT_PREFIX}{product_id}"


def product_slug_key(slug: str) -> str:
    """Key for a single product looked up by slug."""
    return f"{PRODUCT_SLUG_PREFIX}{slug}"
