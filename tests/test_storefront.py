"""
Tests for the storefront HTTP surface.

Covers the cached pages, the JSON product API and the cache management
routes, all against the FakeCMS through the real app wiring.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from api.frontend import create_app
from catalog.cache.keys import product_key

from tests.fakes import TEST_SECRET


@pytest.fixture
def app(settings, cache_config, fake_cms):
    return create_app(settings=settings, cache_config=cache_config, cms_transport=fake_cms.transport())


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


# =============================================================================
# PAGE TESTS
# =============================================================================

class TestProductPages:
    """Test pages served through the page cache."""

    def test_detail_page(self, client):
        response = client.get("/products/1")

        assert response.status_code == 200
        assert response.json()["product"]["title"] == "Blue Mug"
        assert "s-maxage=1800" in response.headers["Cache-Control"]
        assert "stale-while-revalidate=3600" in response.headers["Cache-Control"]
        assert response.headers["ETag"].startswith('W/"')

    def test_detail_page_is_rendered_once(self, client, fake_cms):
        client.get("/products/1")
        client.get("/products/1")

        assert fake_cms.calls("GET") == 1

    def test_stale_page_until_revalidated(self, app, client, fake_cms):
        """A CMS edit shows up once both the page and the data cache let go of it."""
        first = client.get("/products/1").json()
        fake_cms.products[1]["price"] = 99.0

        assert client.get("/products/1").json() == first

        client.post("/api/revalidate", json={"secret": TEST_SECRET, "path": "/products/1"})
        app.state.cache.delete(product_key(1))

        assert client.get("/products/1").json()["product"]["price"] == 99.0

    def test_if_none_match_returns_304(self, client):
        etag = client.get("/products/1").headers["ETag"]

        response = client.get("/products/1", headers={"If-None-Match": etag})

        assert response.status_code == 304
        assert response.headers["ETag"] == etag

    def test_missing_product_page(self, client, app):
        response = client.get("/products/99")

        assert response.status_code == 404
        assert response.json()["code"] == "rest_post_invalid_id"
        assert app.state.page_cache.paths() == []

    def test_listing_page_is_cached(self, app, client):
        response = client.get("/")

        assert response.status_code == 200
        assert [p["id"] for p in response.json()["products"]] == [1, 2, 3]
        assert app.state.page_cache.paths() == ["/"]

    def test_filtered_listing_bypasses_page_cache(self, app, client):
        response = client.get("/", params={"search": "mug"})

        assert response.status_code == 200
        assert len(response.json()["products"]) == 2
        assert app.state.page_cache.paths() == []


# =============================================================================
# JSON API TESTS
# =============================================================================

class TestProductAPI:
    """Test the JSON product API."""

    def test_list(self, client):
        response = client.get("/api/products", params={"per_page": 2})

        body = response.json()
        assert response.status_code == 200
        assert len(body["data"]) == 2
        assert body["total"] == 3
        assert body["total_pages"] == 2

    def test_get(self, client):
        response = client.get("/api/products/2")
        assert response.json()["price"] == 12.5

    def test_get_by_slug(self, client):
        response = client.get("/api/products/slug/green-teapot")

        assert response.status_code == 200
        assert response.json()["id"] == 3

    def test_unknown_slug(self, client):
        response = client.get("/api/products/slug/nope")

        assert response.status_code == 404
        assert response.json() == {"error": "Product not found", "code": "PRODUCT_NOT_FOUND"}

    def test_search(self, client):
        response = client.get("/api/products/search", params={"q": "teapot"})
        assert [p["id"] for p in response.json()] == [3]

    def test_search_requires_query(self, client):
        assert client.get("/api/products/search").status_code == 422

    def test_create(self, app, client):
        client.get("/api/products/1")

        response = client.post("/api/products", json={
            "title": "Yellow Mug", "price": 8.0, "sku": "YM-1", "stock": 2,
        })

        assert response.status_code == 201
        assert response.json()["title"] == "Yellow Mug"
        assert len(app.state.cache) == 0

    def test_create_rejects_unknown_fields(self, client):
        response = client.post("/api/products", json={
            "title": "Mug", "price": 1.0, "sku": "M", "stock": 1, "regular_price": 2.0,
        })
        assert response.status_code == 422

    def test_update(self, client):
        response = client.patch("/api/products/1", json={"stock": 0})

        assert response.status_code == 200
        assert response.json()["stock"] == 0

    def test_delete(self, client, fake_cms):
        response = client.delete("/api/products/2")

        assert response.json() == {"deleted": True, "id": 2}
        assert 2 not in fake_cms.products

    def test_cms_transport_failure(self, settings, cache_config):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        app = create_app(settings=settings, cache_config=cache_config,
                         cms_transport=httpx.MockTransport(handler))
        with TestClient(app) as client:
            response = client.get("/api/products/1")

        assert response.status_code == 500
        assert response.json()["code"] == "WP_FETCH_ERROR"


# =============================================================================
# CACHE MANAGEMENT TESTS
# =============================================================================

class TestCacheRoutes:
    """Test cache monitoring and manual invalidation."""

    def test_health(self, client):
        client.get("/products/1")

        body = client.get("/api/cache/health").json()
        assert body["status"] == "healthy"
        assert body["cached_entries"] == 1
        assert body["cached_pages"] == 1

    def test_stats(self, client):
        client.get("/api/products/1")
        client.get("/api/products/1")

        body = client.get("/api/cache/stats").json()
        assert body["hits"] == 1
        assert body["misses"] == 1
        assert body["pages"]["ttl_seconds"] == 1800

    def test_invalidate_requires_secret(self, client):
        assert client.post("/api/cache/invalidate/all").status_code == 401
        response = client.post(
            "/api/cache/invalidate/all", headers={"X-Revalidate-Secret": "wrong"}
        )
        assert response.status_code == 401

    def test_invalidate_all(self, app, client):
        client.get("/products/1")
        client.get("/api/products")

        response = client.post(
            "/api/cache/invalidate/all", headers={"X-Revalidate-Secret": TEST_SECRET}
        )

        body = response.json()
        assert body["success"] is True
        assert body["keys_invalidated"] == 2
        assert body["pages_invalidated"] == 1
        assert len(app.state.cache) == 0

    def test_invalidate_product(self, app, client):
        client.get("/products/1")
        client.get("/api/products")

        response = client.post(
            "/api/cache/invalidate/product/1", headers={"X-Revalidate-Secret": TEST_SECRET}
        )

        body = response.json()
        assert body["keys_invalidated"] == 1
        assert body["pages_invalidated"] == 1
        assert len(app.state.cache) == 1
