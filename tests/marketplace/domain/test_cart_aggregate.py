"""Tests for the Cart aggregate."""

import pytest
from protean.exceptions import ValidationError

from marketplace.cart.cart import Cart, CartItem
from marketplace.errors import InvalidQuantityError, NotFoundError


@pytest.fixture()
def cart():
    return Cart.create("user-001")


class TestAddItem:
    def test_first_add_creates_line(self, cart):
        item = cart.add_item("prod-1", 2)

        assert len(cart.items) == 1
        assert item.quantity == 2
        assert item.added_at is not None

    def test_duplicate_product_merges_quantity(self, cart):
        cart.add_item("prod-1", 2)
        cart.add_item("prod-1", 3)

        assert len(cart.items) == 1
        assert cart.items[0].quantity == 5

    def test_zero_quantity_rejected(self, cart):
        with pytest.raises(InvalidQuantityError) as exc:
            cart.add_item("prod-1", 0)
        assert exc.value.message == "Quantity must be greater than 0"

    def test_item_count_sums_quantities(self, cart):
        cart.add_item("prod-1", 2)
        cart.add_item("prod-2", 4)
        assert cart.item_count == 6
        assert cart.quantity_of("prod-2") == 4
        assert cart.quantity_of("prod-3") == 0


class TestUniqueProducts:
    def test_two_lines_for_one_product_rejected(self, cart):
        cart.add_item("prod-1", 1)
        with pytest.raises(ValidationError) as exc:
            cart.add_items(CartItem(product_id="prod-1", quantity=1))
        assert "A product can appear only once in a cart" in str(exc.value)


class TestUpdateAndRemove:
    def test_update_quantity(self, cart):
        item = cart.add_item("prod-1", 1)
        cart.update_item_quantity(item.id, 4)
        assert cart.items[0].quantity == 4

    def test_update_unknown_item(self, cart):
        with pytest.raises(NotFoundError) as exc:
            cart.update_item_quantity("missing", 1)
        assert exc.value.message == "Item not found in cart"

    def test_update_to_zero_rejected(self, cart):
        item = cart.add_item("prod-1", 1)
        with pytest.raises(InvalidQuantityError):
            cart.update_item_quantity(item.id, 0)

    def test_remove_item(self, cart):
        item = cart.add_item("prod-1", 1)
        assert cart.remove_item(item.id) is True
        assert cart.items == []

    def test_remove_missing_item_is_noop(self, cart):
        cart.add_item("prod-1", 1)
        assert cart.remove_item("missing") is False
        assert len(cart.items) == 1

    def test_prune_drops_lines_for_products(self, cart):
        cart.add_item("prod-1", 1)
        cart.add_item("prod-2", 1)
        cart.add_item("prod-3", 1)

        assert cart.prune(["prod-1", "prod-3"]) == 2
        assert [str(i.product_id) for i in cart.items] == ["prod-2"]

    def test_clear(self, cart):
        cart.add_item("prod-1", 1)
        cart.add_item("prod-2", 1)
        cart.clear()
        assert cart.items == []
        assert cart.item_count == 0
