"""
Pytest fixtures and configuration for the storefront backend tests

This file provides shared fixtures that can be used across all test modules.
The commerce backend is replaced by an in-process httpx MockTransport, so no
test needs network access.

Author: MinkenWorld
Date: 2025-11-06
"""
import pytest
import httpx
from fastapi.testclient import TestClient

from app.connectors.medusa_connector import MedusaConnector, set_connector
from app.core.rate_limit import rate_limiter
from app.main import app


class FakeCommerceBackend:
    """
    Routes (method, path) to canned JSON responses and records every request.

    Usage:
        backend.add("GET", "/store/regions", {"regions": [...]})
        backend.add("GET", "/store/products", handler=lambda request: httpx.Response(...))
    """

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, method, path, payload=None, status_code=200, handler=None):
        self.routes[(method, path)] = handler or (status_code, payload if payload is not None else {})

    def requests_to(self, path):
        return [r for r in self.requests if r.url.path == path]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": "Not found"})
        if callable(route):
            return route(request)
        status_code, payload = route
        return httpx.Response(status_code, json=payload)


def make_product(
    product_id,
    price=None,
    created_at="2025-01-01T00:00:00.000Z",
    seller_id=None,
    title=None,
    description=None,
    handle=None,
    currency="kes",
    variants=True
):
    """Build a Store API product dict"""
    product = {
        "id": product_id,
        "title": title or f"Product {product_id}",
        "description": description,
        "handle": handle or f"product-{product_id}",
        "thumbnail": f"https://cdn.test/{product_id}.png",
        "images": [],
        "created_at": created_at,
        "variants": [],
    }
    if variants:
        product["variants"] = [{
            "id": f"variant_{product_id}",
            "calculated_price": (
                {"calculated_amount": price, "currency_code": currency}
                if price is not None else None
            )
        }]
    if seller_id:
        product["seller"] = {"id": seller_id, "name": f"Seller {seller_id}"}
    return product


@pytest.fixture
def fake_backend():
    """In-memory commerce backend"""
    return FakeCommerceBackend()


@pytest.fixture
def connector(fake_backend):
    """
    MedusaConnector wired to the fake backend and installed as the
    process-wide connector for the duration of the test.
    """
    connector = MedusaConnector(
        base_url="http://medusa.test",
        publishable_key="pk_test",
        transport=httpx.MockTransport(fake_backend)
    )
    set_connector(connector)
    yield connector
    set_connector(None)


@pytest.fixture
def client(connector):
    """FastAPI test client backed by the fake commerce backend"""
    return TestClient(app)


@pytest.fixture
def product_factory():
    """Provides make_product to tests"""
    return make_product


@pytest.fixture
def sample_regions():
    return [
        {
            "id": "reg_ke",
            "name": "Kenya",
            "currency_code": "kes",
            "countries": [{"iso_2": "ke"}, {"iso_2": "ug"}]
        },
        {
            "id": "reg_eu",
            "name": "Europe",
            "currency_code": "eur",
            "countries": [{"iso_2": "pl"}, {"iso_2": "de"}]
        }
    ]


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    rate_limiter.reset()
    yield
    rate_limiter.reset()
