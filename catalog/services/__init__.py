"""
Product Catalog Services Layer

Business logic that combines CMS calls with the storefront caches.
"""

from .products import ProductService, map_wordpress_product

__all__ = ["ProductService", "map_wordpress_product"]
