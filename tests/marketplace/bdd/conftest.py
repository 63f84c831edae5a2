"""Shared BDD fixtures and step definitions for the marketplace."""

from datetime import timedelta

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, then, when

from marketplace.cart.cart import Cart
from marketplace.cart.items import AddToCart
from marketplace.catalogue.management import AddProduct
from marketplace.catalogue.queries import get_product
from marketplace.checkout.placement import PlaceOrder, place_order
from marketplace.errors import MarketplaceError
from marketplace.utils.clock import local_now

BUYER = "buyer-001"


@pytest.fixture()
def buyer_id():
    return BUYER


@pytest.fixture()
def products():
    """Product ids by name."""
    return {}


@pytest.fixture()
def placed():
    """Order ids in the order they were placed."""
    return []


@pytest.fixture()
def error():
    """Container for the business error raised by a When step."""
    return {"exc": None}


@pytest.fixture()
def checkout(placed, error):
    """Place an order for tomorrow evening, recording either the order id or the business error."""

    def _checkout():
        command = PlaceOrder(
            user_id=BUYER,
            address="12 Beach Road, Fort Kochi",
            phone="9876543210",
            delivery_date=local_now().date() + timedelta(days=1),
            delivery_slot="16:00-20:00",
        )
        try:
            placed.append(place_order(command))
        except MarketplaceError as exc:
            error["exc"] = exc

    return _checkout


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{name}" priced {price:f} with {stock:d} in stock'))
def _(products, name, price, stock):
    products[name] = current_domain.process(
        AddProduct(name=name, category="Fish", price=price, stock=stock),
        asynchronous=False,
    )


@given(parsers.cfparse('the buyer has {quantity:d} of "{name}" in their cart'))
def _(products, name, quantity):
    current_domain.process(
        AddToCart(user_id=BUYER, product_id=products[name], quantity=quantity),
        asynchronous=False,
    )


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@given("the buyer checks out for tomorrow evening")
@when("the buyer checks out for tomorrow evening")
def _(checkout):
    checkout()


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('"{name}" has {stock:d} in stock'))
def _(products, name, stock):
    assert get_product(products[name]).stock == stock


@then(parsers.cfparse('"{name}" is no longer available'))
def _(products, name):
    assert get_product(products[name]).is_available is False


@then("the buyer's cart is empty")
def _():
    assert current_domain.repository_for(Cart).get(BUYER).items == []


@then(parsers.cfparse('checkout fails with "{code}"'))
@then(parsers.cfparse('the request fails with "{code}"'))
def _(error, code):
    assert error["exc"] is not None
    assert error["exc"].code == code
