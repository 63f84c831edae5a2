from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from marketplace.api.application import create_app
from marketplace.guest_cart.store import InMemoryGuestCartStore

ADMIN = {"X-User-Id": "admin-001", "X-User-Role": "admin"}


@pytest.fixture()
def guest_store():
    return InMemoryGuestCartStore(ttl=timedelta(hours=24))


@pytest.fixture()
def client(guest_store):
    return TestClient(create_app(guest_cart_store=guest_store))


@pytest.fixture()
def product(client):
    """Create a product through the admin API and return its id."""

    def _create(name="Seer Fish", category="Fish", price=450.0, stock=10, **extra):
        response = client.post(
            "/admin/products",
            json={"name": name, "category": category, "price": price, "stock": stock, **extra},
            headers=ADMIN,
        )
        assert response.status_code == 201
        return response.json()["productId"]

    return _create
