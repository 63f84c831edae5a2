"""Cart item management: commands and handler.

Adding and updating check the live catalogue, but never touch product stock;
stock only moves at checkout.
"""

from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from marketplace.cart.cart import Cart
from marketplace.cart.queries import find_cart
from marketplace.catalogue.queries import get_product
from marketplace.domain import marketplace
from marketplace.errors import (
    InsufficientStockError,
    InvalidQuantityError,
    NotFoundError,
    UnavailableError,
)


@marketplace.command(part_of="Cart")
class AddToCart:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)


@marketplace.command(part_of="Cart")
class UpdateCartQuantity:
    user_id = Identifier(required=True)
    item_id = Identifier(required=True)
    quantity = Integer(required=True)


@marketplace.command(part_of="Cart")
class RemoveFromCart:
    user_id = Identifier(required=True)
    item_id = Identifier(required=True)


@marketplace.command(part_of="Cart")
class ClearCart:
    user_id = Identifier(required=True)


@marketplace.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        if command.quantity <= 0:
            raise InvalidQuantityError("Quantity must be greater than 0")

        product = get_product(command.product_id)
        if not product.is_available:
            raise UnavailableError("Product is not available")

        cart = find_cart(command.user_id) or Cart.create(command.user_id)
        in_cart = cart.quantity_of(product.id)
        if in_cart + command.quantity > product.stock:
            if in_cart:
                message = f"Cannot add more items. Only {product.stock} available in stock"
            else:
                message = f"Only {product.stock} items available in stock"
            raise InsufficientStockError(
                product.name,
                available=product.stock,
                requested=in_cart + command.quantity,
                message=message,
            )

        item = cart.add_item(product.id, command.quantity)
        current_domain.repository_for(Cart).add(cart)
        return str(item.id)

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        if command.quantity <= 0:
            raise InvalidQuantityError("Quantity must be greater than 0")

        cart = find_cart(command.user_id)
        if cart is None:
            raise NotFoundError("Cart not found", entity="Cart", entity_id=str(command.user_id))

        item = cart.find_item(command.item_id)
        if item is None:
            raise NotFoundError("Item not found in cart", entity="CartItem", entity_id=str(command.item_id))

        product = get_product(item.product_id)
        if command.quantity > product.stock:
            raise InsufficientStockError(
                product.name,
                available=product.stock,
                requested=command.quantity,
                message=f"Only {product.stock} items available in stock",
            )

        cart.update_item_quantity(command.item_id, command.quantity)
        current_domain.repository_for(Cart).add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        cart = find_cart(command.user_id)
        if cart is None:
            return

        if cart.remove_item(command.item_id):
            current_domain.repository_for(Cart).add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        cart = find_cart(command.user_id)
        if cart is None or not cart.items:
            return

        cart.clear()
        current_domain.repository_for(Cart).add(cart)
