"""
Product Catalog

Storefront and CMS services for a small product catalog:
1. Reads products from the CMS through an in-process read-through cache
2. Serves listing and detail pages through a rendered-page cache
3. Invalidates cached data after storefront writes
4. Revalidates rendered pages when the CMS reports a product change
"""

__version__ = "0.1.0"
