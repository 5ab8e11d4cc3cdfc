"""
Unit tests for region, category and collection lookups

Author: MinkenWorld
Date: 2025-11-06
"""
import asyncio

from app.services.category_service import build_category_tree, get_category_by_handle, list_categories
from app.services.collection_service import get_collection_by_handle, list_collections, sort_collections
from app.services.region_service import get_region, list_regions, retrieve_region


class TestRegions:
    """Test region lookups"""

    def test_get_region_matches_any_listed_country(self, connector, fake_backend, sample_regions):
        fake_backend.add("GET", "/store/regions", {"regions": sample_regions})

        assert asyncio.run(get_region("ug", connector=connector))["id"] == "reg_ke"
        assert asyncio.run(get_region("DE", connector=connector))["id"] == "reg_eu"

    def test_get_region_unknown_country_is_none(self, connector, fake_backend, sample_regions):
        fake_backend.add("GET", "/store/regions", {"regions": sample_regions})

        assert asyncio.run(get_region("zz", connector=connector)) is None
        assert asyncio.run(get_region("", connector=connector)) is None

    def test_regions_are_cached(self, connector, fake_backend, sample_regions):
        fake_backend.add("GET", "/store/regions", {"regions": sample_regions})

        asyncio.run(get_region("ke", connector=connector))
        asyncio.run(get_region("pl", connector=connector))

        assert len(fake_backend.requests_to("/store/regions")) == 1

    def test_list_regions_backend_error_is_empty(self, connector, fake_backend):
        fake_backend.add("GET", "/store/regions", {}, status_code=503)

        assert asyncio.run(list_regions(connector=connector)) == []

    def test_retrieve_region_missing_is_none(self, connector):
        assert asyncio.run(retrieve_region("reg_missing", connector=connector)) is None


class TestCategoryTree:
    """Test build_category_tree"""

    def test_children_of_parents_become_main_categories(self):
        flat = [
            {"id": "root", "parent_category_id": None, "category_children": [
                {"id": "fashion", "parent_category_id": "root"},
                {"id": "homes", "parent_category_id": "root"},
            ]},
            {"id": "fashion", "parent_category_id": "root"},
            {"id": "homes", "parent_category_id": "root"},
            {"id": "shoes", "parent_category_id": "fashion"},
            {"id": "bags", "parent_category_id": "fashion"},
        ]

        tree = build_category_tree(flat)

        assert [c["id"] for c in tree["parent_categories"]] == ["root"]
        assert [c["id"] for c in tree["categories"]] == ["fashion", "homes"]
        fashion, homes = tree["categories"]
        assert [c["id"] for c in fashion["category_children"]] == ["shoes", "bags"]
        assert "category_children" not in homes

    def test_empty_list(self):
        assert build_category_tree([]) == {"parent_categories": [], "categories": []}


class TestCategoryLookups:
    """Test category backend calls"""

    def test_list_categories_requests_full_tree(self, connector, fake_backend):
        fake_backend.add("GET", "/store/product-categories", {"product_categories": []})

        asyncio.run(list_categories(connector=connector))

        params = fake_backend.requests[0].url.params
        assert params["limit"] == "100"
        assert params["include_descendants_tree"] == "true"
        assert params["include_ancestors_tree"] == "true"

    def test_list_categories_backend_error_is_empty_tree(self, connector, fake_backend):
        fake_backend.add("GET", "/store/product-categories", {}, status_code=500)

        assert asyncio.run(list_categories(connector=connector)) == {"parent_categories": [], "categories": []}

    def test_get_category_by_handle(self, connector, fake_backend):
        fake_backend.add("GET", "/store/product-categories", {"product_categories": [{"id": "pcat_1", "handle": "shoes"}]})

        category = asyncio.run(get_category_by_handle("shoes", connector=connector))

        assert category["id"] == "pcat_1"
        assert fake_backend.requests[0].url.params["handle"] == "shoes"

    def test_get_category_by_unknown_handle_is_none(self, connector, fake_backend):
        fake_backend.add("GET", "/store/product-categories", {"product_categories": []})

        assert asyncio.run(get_category_by_handle("nope", connector=connector)) is None


class TestCollections:
    """Test collection ordering and lookups"""

    def test_ranked_first_then_title(self):
        collections = [
            {"id": "c1", "title": "Zebra"},
            {"id": "c2", "title": "apple", "rank": None},
            {"id": "c3", "title": "Mid", "rank": 2},
            {"id": "c4", "title": "Top", "rank": 0},
            {"id": "c5", "title": "Banana"},
        ]

        assert [c["id"] for c in sort_collections(collections)] == ["c4", "c3", "c2", "c5", "c1"]

    def test_list_collections_defaults_and_count(self, connector, fake_backend):
        fake_backend.add("GET", "/store/collections", {"collections": [
            {"id": "c1", "title": "B"},
            {"id": "c2", "title": "A", "rank": 1},
        ], "count": 40})

        result = asyncio.run(list_collections(connector=connector))

        params = fake_backend.requests[0].url.params
        assert params["limit"] == "100"
        assert params["offset"] == "0"
        assert [c["id"] for c in result["collections"]] == ["c2", "c1"]
        assert result["count"] == 2

    def test_list_collections_backend_error(self, connector, fake_backend):
        fake_backend.add("GET", "/store/collections", {}, status_code=500)

        assert asyncio.run(list_collections(connector=connector)) == {"collections": [], "count": 0}

    def test_get_collection_by_handle(self, connector, fake_backend):
        fake_backend.add("GET", "/store/collections", {"collections": [{"id": "c1", "handle": "summer"}]})

        assert asyncio.run(get_collection_by_handle("summer", connector=connector))["id"] == "c1"
