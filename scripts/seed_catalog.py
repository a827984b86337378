#!/usr/bin/env python3
"""
Seed Catalog Script

Create sample products in the CMS through the storefront's ProductService,
then read the first listing page back through the cache.

Usage:
    python scripts/seed_catalog.py
    python scripts/seed_catalog.py --count 3 --verbose

Reads WORDPRESS_URL and WORDPRESS_TOKEN from the environment or .env.
WORDPRESS_TOKEN must match the CMS_API_TOKEN of the CMS.
"""

import asyncio
import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from catalog.cache import CacheStore, get_cache_config
from catalog.cms import CatalogAPIError, WordPressClient
from catalog.models import ProductCreate
from catalog.services import ProductService
from catalog.utils.config import get_settings


SAMPLE_PRODUCTS = [
    {"title": "Blue Ceramic Mug", "price": 12.0, "sku": "MUG-BLUE", "stock": 40,
     "excerpt": "Hand-glazed, 350 ml."},
    {"title": "Red Ceramic Mug", "price": 12.0, "sku": "MUG-RED", "stock": 25,
     "excerpt": "Hand-glazed, 350 ml."},
    {"title": "Cast Iron Teapot", "price": 48.5, "sku": "TEA-IRON", "stock": 8,
     "excerpt": "Keeps tea hot for an hour."},
    {"title": "Bamboo Tea Tray", "price": 29.0, "sku": "TRAY-BAMBOO", "stock": 12},
    {"title": "Loose Leaf Sampler", "price": 19.9, "sku": "TEA-SAMPLER", "stock": 0,
     "status": "draft", "excerpt": "Six teas, 25 g each."},
]


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(),
        ]
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


async def seed(count: int):
    """Create up to count sample products and list what the storefront sees."""

    load_dotenv()
    settings = get_settings()

    print(f"\n{'='*60}")
    print(f"Seeding catalog at {settings.wordpress_api_url}")
    print(f"{'='*60}\n")

    async with WordPressClient(
        base_url=settings.wordpress_api_url,
        token=settings.WORDPRESS_TOKEN,
        timeout=settings.API_TIMEOUT,
    ) as client:
        service = ProductService(client, CacheStore(), config=get_cache_config())

        created = 0
        for sample in SAMPLE_PRODUCTS[:count]:
            try:
                product = await service.create_product(ProductCreate(**sample))
            except CatalogAPIError as e:
                print(f"  FAILED {sample['title']}: {e.code} {e.message}")
                continue

            created += 1
            print(f"  Created #{product.id} {product.title} ({product.sku})")

        page = await service.get_products()

    print(f"\n{created}/{min(count, len(SAMPLE_PRODUCTS))} products created")
    print(f"Storefront listing now shows {page.total} published products")
    return created


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Create sample products in the CMS"
    )
    parser.add_argument(
        "--count", "-n",
        type=int,
        default=len(SAMPLE_PRODUCTS),
        help=f"Number of sample products to create (default: {len(SAMPLE_PRODUCTS)})"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging"
    )

    args = parser.parse_args()

    setup_logging(args.verbose)

    try:
        created = asyncio.run(seed(args.count))
    except CatalogAPIError as e:
        print(f"\nCMS unavailable: {e.code} {e.message}")
        sys.exit(1)

    sys.exit(0 if created else 1)


if __name__ == "__main__":
    main()
