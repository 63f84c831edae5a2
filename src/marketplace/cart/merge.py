"""Merging a guest's session cart into their cart after sign-in."""

import json

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.cart.cart import Cart
from marketplace.cart.queries import find_cart
from marketplace.catalogue.queries import find_product
from marketplace.domain import marketplace

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Cart")
class MergeGuestCart:
    user_id = Identifier(required=True)
    session_id = String(max_length=255)
    items = Text(required=True)  # JSON: list of {product_id, quantity}


@marketplace.command_handler(part_of=Cart)
class MergeGuestCartHandler:
    @handle(MergeGuestCart)
    def merge_guest_cart(self, command):
        """Fold guest lines into the user's cart.

        Products that disappeared or were switched off are skipped, and merged
        quantities are capped at live stock. Returns the number of lines merged.
        """
        guest_items = json.loads(command.items) if isinstance(command.items, str) else command.items
        if not guest_items:
            return 0

        cart = find_cart(command.user_id) or Cart.create(command.user_id)

        merged = 0
        for guest_item in guest_items:
            product = find_product(guest_item["product_id"])
            if product is None or not product.is_available:
                continue

            in_cart = cart.quantity_of(product.id)
            addable = min(int(guest_item["quantity"]), product.stock - in_cart)
            if addable <= 0:
                continue

            cart.add_item(product.id, addable)
            merged += 1

        if merged:
            current_domain.repository_for(Cart).add(cart)

        logger.info(
            "Guest cart merged",
            user_id=str(command.user_id),
            session_id=command.session_id,
            merged=merged,
            skipped=len(guest_items) - merged,
        )
        return merged
