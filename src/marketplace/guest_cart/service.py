"""Guest cart operations and hand-over to the signed-in cart.

Guest lines are keyed by product id. Stock is checked when lines are added
or changed but, as with signed-in carts, nothing is reserved until checkout.
"""

import json
from datetime import UTC, datetime

import structlog
from protean.utils.globals import current_domain

from marketplace.cart.merge import MergeGuestCart
from marketplace.catalogue.queries import find_product, get_product
from marketplace.errors import (
    InsufficientStockError,
    InvalidQuantityError,
    NotFoundError,
    UnavailableError,
)
from marketplace.guest_cart.store import GuestCartStore
from marketplace.utils import money

logger = structlog.get_logger(__name__)


class GuestCartService:
    def __init__(self, store: GuestCartStore):
        self.store = store

    def _items(self, session_id: str) -> list[dict]:
        return self.store.get(session_id) or []

    def get_cart(self, session_id: str) -> dict:
        """Guest cart with product details; lines for vanished or switched-off products are left out."""
        lines = []
        for item in self._items(session_id):
            product = find_product(item["product_id"])
            if product is None or not product.is_available:
                continue
            lines.append(
                {
                    "product_id": str(product.id),
                    "name": product.name,
                    "category": product.category,
                    "price": product.price,
                    "quantity": item["quantity"],
                    "stock": product.stock,
                    "subtotal": money.as_float(money.line_total(product.price, item["quantity"])),
                    "added_at": item.get("added_at"),
                }
            )
        return {
            "session_id": session_id,
            "items": lines,
            "total_items": sum(line["quantity"] for line in lines),
            "total_amount": money.as_float(money.total(line["subtotal"] for line in lines)),
        }

    def add_item(self, session_id: str, product_id: str, quantity: int) -> dict:
        if quantity <= 0:
            raise InvalidQuantityError("Quantity must be greater than 0")

        product = get_product(product_id)
        if not product.is_available:
            raise UnavailableError("Product is not available")

        items = self._items(session_id)
        existing = next((i for i in items if i["product_id"] == str(product.id)), None)
        in_cart = existing["quantity"] if existing else 0
        if in_cart + quantity > product.stock:
            raise InsufficientStockError(
                product.name,
                available=product.stock,
                requested=in_cart + quantity,
                message=f"Only {product.stock} items available in stock",
            )

        if existing:
            existing["quantity"] += quantity
        else:
            items.append(
                {
                    "product_id": str(product.id),
                    "quantity": quantity,
                    "added_at": datetime.now(UTC).isoformat(),
                }
            )
        self.store.set(session_id, items)
        return self.get_cart(session_id)

    def update_item(self, session_id: str, product_id: str, quantity: int) -> dict:
        if quantity <= 0:
            raise InvalidQuantityError("Quantity must be greater than 0")

        items = self.store.get(session_id)
        if items is None:
            raise NotFoundError("Cart not found", entity="GuestCart", entity_id=session_id)

        item = next((i for i in items if i["product_id"] == str(product_id)), None)
        if item is None:
            raise NotFoundError("Item not found in cart", entity="CartItem", entity_id=str(product_id))

        product = get_product(product_id)
        if quantity > product.stock:
            raise InsufficientStockError(
                product.name,
                available=product.stock,
                requested=quantity,
                message=f"Only {product.stock} items available in stock",
            )

        item["quantity"] = quantity
        self.store.set(session_id, items)
        return self.get_cart(session_id)

    def remove_item(self, session_id: str, product_id: str) -> dict:
        items = self.store.get(session_id)
        if items is not None:
            remaining = [i for i in items if i["product_id"] != str(product_id)]
            if len(remaining) != len(items):
                self.store.set(session_id, remaining)
        return self.get_cart(session_id)

    def clear(self, session_id: str) -> dict:
        self.store.delete(session_id)
        return self.get_cart(session_id)

    def item_count(self, session_id: str) -> int:
        return sum(i["quantity"] for i in self._items(session_id))

    def merge_into_user_cart(self, session_id: str, user_id: str) -> int:
        """Move the guest's lines into ``user_id``'s cart and forget the guest cart."""
        items = self.store.get(session_id)
        if not items:
            return 0

        merged = current_domain.process(
            MergeGuestCart(
                user_id=user_id,
                session_id=session_id,
                items=json.dumps([{"product_id": i["product_id"], "quantity": i["quantity"]} for i in items]),
            ),
            asynchronous=False,
        )
        self.store.delete(session_id)
        return merged
