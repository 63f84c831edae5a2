"""Application tests for cart commands and cart reads."""

import pytest
from protean import current_domain

from marketplace.cart.cart import Cart
from marketplace.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartQuantity
from marketplace.cart.queries import item_count, load_cart, validate_cart
from marketplace.catalogue.management import RemoveProduct, SetProductAvailability, SetProductStock
from marketplace.errors import InsufficientStockError, InvalidQuantityError, NotFoundError, UnavailableError

USER = "user-001"


def _add(product_id, quantity=1):
    return current_domain.process(AddToCart(user_id=USER, product_id=product_id, quantity=quantity), asynchronous=False)


class TestAddToCart:
    def test_first_add_creates_cart(self, make_product):
        product_id = make_product(stock=5)
        item_id = _add(product_id, 2)

        cart = current_domain.repository_for(Cart).get(USER)
        assert str(cart.items[0].id) == item_id
        assert cart.items[0].quantity == 2

    def test_second_add_merges(self, make_product):
        product_id = make_product(stock=5)
        first = _add(product_id, 2)
        second = _add(product_id, 1)

        assert first == second
        assert item_count(USER) == 3

    def test_unknown_product(self):
        with pytest.raises(NotFoundError) as exc:
            _add("missing-product")
        assert exc.value.message == "Product not found"

    def test_unavailable_product(self, make_product):
        product_id = make_product(is_available=False)
        with pytest.raises(UnavailableError) as exc:
            _add(product_id)
        assert exc.value.message == "Product is not available"

    def test_non_positive_quantity(self, make_product):
        product_id = make_product()
        with pytest.raises(InvalidQuantityError):
            _add(product_id, 0)

    def test_more_than_stock(self, make_product):
        product_id = make_product(stock=3)
        with pytest.raises(InsufficientStockError) as exc:
            _add(product_id, 4)
        assert exc.value.message == "Only 3 items available in stock"

    def test_merge_beyond_stock(self, make_product):
        product_id = make_product(stock=3)
        _add(product_id, 2)
        with pytest.raises(InsufficientStockError) as exc:
            _add(product_id, 2)
        assert exc.value.message == "Cannot add more items. Only 3 available in stock"
        assert item_count(USER) == 2

    def test_adding_does_not_touch_stock(self, make_product):
        from marketplace.catalogue.queries import get_product

        product_id = make_product(stock=3)
        _add(product_id, 2)
        assert get_product(product_id).stock == 3


class TestUpdateAndRemove:
    def test_update_quantity(self, make_product):
        product_id = make_product(stock=5)
        item_id = _add(product_id, 1)

        current_domain.process(UpdateCartQuantity(user_id=USER, item_id=item_id, quantity=4), asynchronous=False)
        assert item_count(USER) == 4

    def test_update_beyond_stock(self, make_product):
        product_id = make_product(stock=5)
        item_id = _add(product_id, 1)
        with pytest.raises(InsufficientStockError):
            current_domain.process(UpdateCartQuantity(user_id=USER, item_id=item_id, quantity=6), asynchronous=False)

    def test_update_without_cart(self):
        with pytest.raises(NotFoundError) as exc:
            current_domain.process(UpdateCartQuantity(user_id=USER, item_id="item-1", quantity=1), asynchronous=False)
        assert exc.value.message == "Cart not found"

    def test_update_unknown_item(self, make_product):
        _add(make_product())
        with pytest.raises(NotFoundError) as exc:
            current_domain.process(UpdateCartQuantity(user_id=USER, item_id="item-1", quantity=1), asynchronous=False)
        assert exc.value.message == "Item not found in cart"

    def test_remove_is_idempotent(self, make_product):
        item_id = _add(make_product())
        for _ in range(2):
            current_domain.process(RemoveFromCart(user_id=USER, item_id=item_id), asynchronous=False)
        assert item_count(USER) == 0

    def test_clear(self, make_product):
        _add(make_product(name="Seer Fish"))
        _add(make_product(name="Mud Crab", category="Crab"))

        current_domain.process(ClearCart(user_id=USER), asynchronous=False)

        assert current_domain.repository_for(Cart).get(USER).items == []

    def test_clear_without_cart(self):
        current_domain.process(ClearCart(user_id=USER), asynchronous=False)
        assert item_count(USER) == 0


class TestCartReads:
    def test_absent_cart_reads_empty(self):
        view = load_cart(USER)
        assert view.items == []
        assert view.persisted is False
        assert view.total_amount == 0.0

    def test_totals(self, make_product):
        _add(make_product(name="Seer Fish", price=450.0, stock=5), 2)
        _add(make_product(name="Squid", category="Squid", price=120.5, stock=5), 1)

        view = load_cart(USER)
        assert view.total_items == 3
        assert view.total_amount == 1020.5

    def test_stale_lines_pruned_on_read(self, make_product):
        kept = make_product(name="Seer Fish")
        removed = make_product(name="Mud Crab", category="Crab")
        disabled = make_product(name="Squid", category="Squid")
        for product_id in (kept, removed, disabled):
            _add(product_id)

        current_domain.process(RemoveProduct(product_id=removed), asynchronous=False)
        current_domain.process(SetProductAvailability(product_id=disabled, is_available=False), asynchronous=False)

        view = load_cart(USER)
        assert [line.product_id for line in view.items] == [kept]
        assert len(current_domain.repository_for(Cart).get(USER).items) == 1

    def test_validate_reports_shortage(self, make_product):
        product_id = make_product(name="Seer Fish", stock=5)
        _add(product_id, 4)
        current_domain.process(SetProductStock(product_id=product_id, stock=2), asynchronous=False)

        assert validate_cart(USER) == ["Seer Fish: Only 2 available, you have 4 in cart"]

    def test_validate_reports_unavailable_and_missing(self, make_product):
        disabled = make_product(name="Seer Fish")
        removed = make_product(name="Mud Crab", category="Crab")
        _add(disabled)
        _add(removed)
        current_domain.process(SetProductAvailability(product_id=disabled, is_available=False), asynchronous=False)
        current_domain.process(RemoveProduct(product_id=removed), asynchronous=False)

        assert sorted(validate_cart(USER)) == ["Product no longer exists", "Seer Fish is no longer available"]

    def test_validate_absent_cart(self):
        assert validate_cart(USER) == []
