"""
Tests for the product and catalog endpoints

Author: MinkenWorld
Date: 2025-11-06
"""
import httpx


class TestProductListing:

    def test_sorted_page(self, client, fake_backend, sample_regions, product_factory):
        fake_backend.add("GET", "/store/regions", {"regions": sample_regions})
        fake_backend.add("GET", "/store/products", {"products": [
            product_factory("a", price=300, seller_id="sel_1"),
            product_factory("b", price=100, seller_id="sel_1"),
            product_factory("c", price=200, seller_id="sel_2"),
            product_factory("d", price=50, seller_id="sel_1"),
        ], "count": 4})

        response = client.get("/api/v1/products/", params={
            "seller_id": "sel_1", "sort_by": "price_asc", "limit": 2
        })

        body = response.json()
        assert response.status_code == 200
        assert [p["id"] for p in body["data"]] == ["d", "b"]
        assert body["total"] == 3
        assert body["pages"] == 2
        assert body["next_page"] == 2

        request = fake_backend.requests_to("/store/products")[0]
        assert request.url.params["region_id"] == "reg_ke"
        assert request.url.params["limit"] == "100"

    def test_forwards_customer_cookie(self, client, fake_backend, sample_regions):
        fake_backend.add("GET", "/store/regions", {"regions": sample_regions})
        fake_backend.add("GET", "/store/products", {"products": []})

        client.get("/api/v1/products/", headers={"Cookie": "_medusa_jwt=tok_123"})

        request = fake_backend.requests_to("/store/products")[0]
        assert request.headers["authorization"] == "Bearer tok_123"

    def test_backend_failure_is_an_empty_page(self, client, fake_backend, sample_regions):
        fake_backend.add("GET", "/store/regions", {"regions": sample_regions})
        fake_backend.add("GET", "/store/products", {}, status_code=500)

        response = client.get("/api/v1/products/", params={"country_code": "pl"})

        body = response.json()
        assert response.status_code == 200
        assert body["data"] == []
        assert body["total"] == 0
        assert body["next_page"] is None

    def test_invalid_page_is_422(self, client):
        assert client.get("/api/v1/products/", params={"page": 0}).status_code == 422


class TestProductSearch:

    def test_returns_cards(self, client, fake_backend, sample_regions, product_factory):
        fake_backend.add("GET", "/store/regions", {"regions": sample_regions})
        fake_backend.add("GET", "/store/products", {"products": [product_factory("a", price=99)]})

        body = client.get("/api/v1/products/search", params={"q": "bag"}).json()

        assert body["count"] == 1
        assert body["data"][0]["variant_id"] == "variant_a"

    def test_unreachable_backend_is_502(self, client, fake_backend, sample_regions):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        fake_backend.add("GET", "/store/regions", {"regions": sample_regions})
        fake_backend.add("GET", "/store/products", handler=handler)

        assert client.get("/api/v1/products/search", params={"q": "bag"}).status_code == 502


class TestCatalogEndpoints:

    def test_categories(self, client, fake_backend):
        fake_backend.add("GET", "/store/product-categories", {"product_categories": [
            {"id": "root", "category_children": [{"id": "cars", "parent_category_id": "root"}]},
            {"id": "cars", "parent_category_id": "root"},
        ]})

        body = client.get("/api/v1/categories").json()

        assert [c["id"] for c in body["data"]["categories"]] == ["cars"]

    def test_unknown_category_is_404(self, client, fake_backend):
        fake_backend.add("GET", "/store/product-categories", {"product_categories": []})

        assert client.get("/api/v1/categories/nope").status_code == 404

    def test_collections(self, client, fake_backend):
        fake_backend.add("GET", "/store/collections", {"collections": [
            {"id": "c1", "title": "b"}, {"id": "c2", "title": "a"}
        ]})

        body = client.get("/api/v1/collections").json()

        assert body["count"] == 2
        assert [c["id"] for c in body["data"]] == ["c2", "c1"]

    def test_unknown_collection_is_404(self, client, fake_backend):
        fake_backend.add("GET", "/store/collections", {"collections": []})

        assert client.get("/api/v1/collections/nope").status_code == 404

    def test_region_by_country(self, client, fake_backend, sample_regions):
        fake_backend.add("GET", "/store/regions", {"regions": sample_regions})

        assert client.get("/api/v1/regions/UG").json()["data"]["id"] == "reg_ke"
        assert client.get("/api/v1/regions/zz").status_code == 404

    def test_health(self, client, fake_backend):
        fake_backend.add("GET", "/health", {})

        body = client.get("/health").json()

        assert body["status"] == "healthy"
        assert body["commerce_backend"]["success"] is True

    def test_health_degraded(self, client):
        assert client.get("/health").json()["status"] == "degraded"
