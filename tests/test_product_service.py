"""
Tests for ProductService and the CMS client.

The CMS is the in-memory FakeCMS from tests.fakes, reached through
httpx.MockTransport, so every test can count real round trips.
"""

import httpx
import pytest

from catalog.cache.keys import products_key, product_key, product_slug_key
from catalog.cms import CatalogAPIError, ErrorCode, WordPressClient
from catalog.models import ProductCreate, ProductFilters, ProductUpdate
from catalog.services import ProductService, map_wordpress_product

from tests.fakes import CMS_URL, wp_product


# =============================================================================
# MAPPING TESTS
# =============================================================================

class TestMapping:
    """Test CMS payload mapping."""

    def test_rendered_fields_are_unwrapped(self):
        product = map_wordpress_product(wp_product(7, "Blue Mug", price=9.5, stock=3))

        assert product.id == 7
        assert product.title == "Blue Mug"
        assert product.content == "<p>Blue Mug</p>"
        assert product.price == 9.5
        assert product.stock == 3

    def test_missing_numbers_default_to_zero(self):
        product = map_wordpress_product(wp_product(7, price=None, stock=None, sku=None))

        assert product.price == 0
        assert product.stock == 0
        assert product.sku == ""

    def test_plain_string_title(self):
        product = map_wordpress_product({"id": 1, "title": "Plain"})
        assert product.title == "Plain"


# =============================================================================
# READ TESTS
# =============================================================================

@pytest.mark.asyncio
class TestReads:
    """Test cached reads."""

    async def test_second_read_is_served_from_cache(self, product_service, fake_cms):
        first = await product_service.get_product(1)
        second = await product_service.get_product(1)

        assert first == second
        assert fake_cms.calls("GET") == 1

    async def test_product_expires_after_entity_ttl(self, product_service, fake_cms, clock):
        await product_service.get_product(1)
        clock.advance(1799)
        await product_service.get_product(1)
        assert fake_cms.calls("GET") == 1

        clock.advance(1)
        await product_service.get_product(1)
        assert fake_cms.calls("GET") == 2

    async def test_list_uses_short_ttl(self, product_service, fake_cms, clock):
        result = await product_service.get_products(page=1, per_page=2)

        assert [p.id for p in result.data] == [1, 2]
        assert result.total == 3
        assert result.total_pages == 2

        clock.advance(301)
        await product_service.get_products(page=1, per_page=2)
        assert fake_cms.calls("GET") == 2

    async def test_list_query_sends_filters(self, product_service, fake_cms, data_cache):
        await product_service.get_products(filters={"search": "mug", "order": "asc"})

        params = fake_cms.requests[-1].url.params
        assert params["search"] == "mug"
        assert params["order"] == "asc"
        assert params["_embed"] == "true"
        assert products_key(1, 12, ProductFilters(search="mug", order="asc")) in data_cache.keys()

    async def test_get_by_slug(self, product_service, data_cache):
        product = await product_service.get_product_by_slug("red-mug")

        assert product.id == 2
        assert product_slug_key("red-mug") in data_cache.keys()

    async def test_unknown_slug_is_not_found_and_not_cached(self, product_service, data_cache):
        with pytest.raises(CatalogAPIError) as exc_info:
            await product_service.get_product_by_slug("nope")

        assert exc_info.value.code == ErrorCode.PRODUCT_NOT_FOUND
        assert exc_info.value.status_code == 404
        assert product_slug_key("nope") not in data_cache.keys()

    async def test_missing_product_propagates_cms_error(self, product_service, data_cache):
        with pytest.raises(CatalogAPIError) as exc_info:
            await product_service.get_product(99)

        assert exc_info.value.status_code == 404
        assert exc_info.value.code == "rest_post_invalid_id"
        assert product_key(99) not in data_cache.keys()

    async def test_search_is_not_cached(self, product_service, fake_cms, data_cache):
        results = await product_service.search_products("mug")
        await product_service.search_products("mug")

        assert {p.id for p in results} == {1, 2}
        assert fake_cms.calls("GET") == 2
        assert len(data_cache) == 0


# =============================================================================
# WRITE TESTS
# =============================================================================

@pytest.mark.asyncio
class TestWrites:
    """Test writes and the invalidation they trigger."""

    async def test_create_clears_cache_without_recaching(self, product_service, data_cache):
        await product_service.get_products()
        await product_service.get_product(1)

        created = await product_service.create_product(
            ProductCreate(title="Yellow Mug", price=8.0, sku="YM-1", stock=2)
        )

        assert created.title == "Yellow Mug"
        assert len(data_cache) == 0

    async def test_update_refetches_on_next_read(self, product_service, fake_cms):
        await product_service.get_product(1)

        updated = await product_service.update_product(1, ProductUpdate(price=20.0))
        assert updated.price == 20.0

        reread = await product_service.get_product(1)
        assert reread.price == 20.0
        assert fake_cms.calls("GET") == 2

    async def test_update_leaves_other_products_cached(self, product_service, data_cache):
        await product_service.get_product(1)
        await product_service.get_product(2)

        await product_service.update_product(1, ProductUpdate(stock=0))

        assert product_key(1) not in data_cache.keys()
        assert product_key(2) in data_cache.keys()

    async def test_update_with_no_fields_skips_the_cms(self, product_service, fake_cms):
        product = await product_service.update_product(1, ProductUpdate())

        assert product.id == 1
        assert fake_cms.calls("POST") == 0

    async def test_update_with_no_fields_rereads_from_the_cms(self, product_service, fake_cms):
        before = await product_service.get_product(1)
        fake_cms.products[1]["price"] = 99.0

        after = await product_service.update_product(1, ProductUpdate())
        reread = await product_service.get_product(1)

        assert before.price == 10.0
        assert after.price == 99.0
        assert reread.price == 99.0
        assert fake_cms.calls("POST") == 0

    async def test_delete_drops_entity_and_slug(self, product_service, data_cache):
        await product_service.get_product(2)
        await product_service.get_product_by_slug("red-mug")

        await product_service.delete_product(2)

        assert product_key(2) not in data_cache.keys()
        assert product_slug_key("red-mug") not in data_cache.keys()

    async def test_failed_write_leaves_cache_untouched(self, product_service, data_cache):
        await product_service.get_product(1)

        with pytest.raises(CatalogAPIError):
            await product_service.update_product(99, ProductUpdate(price=1.0))

        assert product_key(1) in data_cache.keys()

    async def test_list_invalidation_can_be_disabled(self, cms_client, data_cache, cache_config):
        cache_config.invalidate_lists_on_write = False
        service = ProductService(cms_client, data_cache, config=cache_config)

        await service.get_products()
        await service.update_product(1, ProductUpdate(price=1.0))

        assert products_key(1, 12) in data_cache.keys()


# =============================================================================
# CLIENT ERROR TESTS
# =============================================================================

def _client(handler) -> WordPressClient:
    return WordPressClient(base_url=f"{CMS_URL}/wp-json", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
class TestClientErrors:
    """Test mapping of CMS failures to error codes."""

    async def test_non_json_response(self):
        client = _client(lambda request: httpx.Response(200, text="<html>oops</html>"))

        with pytest.raises(CatalogAPIError) as exc_info:
            await client.get("/wp/v2/products")

        assert exc_info.value.code == ErrorCode.INVALID_RESPONSE
        assert exc_info.value.status_code == 502
        await client.close()

    async def test_redirect_to_installer(self):
        def handler(request):
            if request.url.path.endswith("install.php"):
                return httpx.Response(200, text="<html>Install</html>")
            return httpx.Response(302, headers={"Location": f"{CMS_URL}/wp-admin/install.php"})

        client = _client(handler)

        with pytest.raises(CatalogAPIError) as exc_info:
            await client.get("/wp/v2/products")

        assert exc_info.value.code == ErrorCode.NOT_INSTALLED
        assert exc_info.value.status_code == 503
        await client.close()

    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        client = _client(handler)

        with pytest.raises(CatalogAPIError) as exc_info:
            await client.get("/wp/v2/products/1")

        assert exc_info.value.code == ErrorCode.FETCH_ERROR
        assert exc_info.value.status_code is None
        await client.close()

    async def test_error_status_without_code(self):
        client = _client(lambda request: httpx.Response(500, json={"message": "Server error"}))

        with pytest.raises(CatalogAPIError) as exc_info:
            await client.get("/wp/v2/products")

        assert exc_info.value.code == ErrorCode.HTTP_ERROR
        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "Server error"
        await client.close()

    async def test_pagination_headers(self):
        client = _client(lambda request: httpx.Response(
            200, json=[], headers={"X-WP-Total": "42", "X-WP-TotalPages": "4"}
        ))

        result = await client.get("/wp/v2/products")

        assert result.total == 42
        assert result.total_pages == 4
        await client.close()

    async def test_closed_client_refuses_requests(self):
        client = _client(lambda request: httpx.Response(200, json=[]))
        await client.close()

        with pytest.raises(CatalogAPIError):
            await client.get("/wp/v2/products")
