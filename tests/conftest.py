"""
Pytest Configuration and Shared Fixtures

Provides common fixtures for all test modules:
- A controllable clock for TTL tests
- A fake WordPress product API served through httpx.MockTransport
- Settings and cache configuration with known values
"""

import pytest

from catalog.cache import CacheConfig, CacheStore
from catalog.cms import WordPressClient
from catalog.services import ProductService
from catalog.utils.config import Settings

from tests.fakes import CMS_URL, TEST_SECRET, FakeClock, FakeCMS, wp_product


# ============================================================================
# Clock
# ============================================================================

@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ============================================================================
# Fake CMS
# ============================================================================

@pytest.fixture
def fake_cms() -> FakeCMS:
    return FakeCMS([
        wp_product(1, "Blue Mug"),
        wp_product(2, "Red Mug", price=12.5),
        wp_product(3, "Green Teapot", stock=None, price=None),
    ])


# ============================================================================
# Configuration
# ============================================================================

@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        WORDPRESS_URL=CMS_URL,
        REVALIDATE_SECRET=TEST_SECRET,
        REVALIDATE_WEBHOOK_URL=None,
        CMS_API_TOKEN=None,
    )


@pytest.fixture
def cache_config() -> CacheConfig:
    return CacheConfig(
        enabled=True,
        invalidate_lists_on_write=True,
        products_ttl=300.0,
        product_ttl=1800.0,
        page_ttl=1800.0,
    )


# ============================================================================
# Services
# ============================================================================

@pytest.fixture
async def cms_client(fake_cms):
    client = WordPressClient(base_url=f"{CMS_URL}/wp-json", transport=fake_cms.transport())
    yield client
    await client.close()


@pytest.fixture
def data_cache(clock) -> CacheStore:
    return CacheStore(default_ttl=300.0, clock=clock)


@pytest.fixture
def product_service(cms_client, data_cache, cache_config) -> ProductService:
    return ProductService(cms_client, data_cache, config=cache_config)
