"""Cart aggregate (CQRS): one persistent cart per signed-in buyer.

The cart is keyed by the buyer's user id, so a user can never own two carts.
It stores only product references and quantities; names, prices and stock are
resolved from the catalogue whenever the cart is read or checked out.
Once created a cart is never deleted, only emptied.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer

from marketplace.domain import marketplace
from marketplace.errors import InvalidQuantityError, NotFoundError


@marketplace.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()


@marketplace.aggregate
class Cart:
    user_id = Identifier(identifier=True, required=True)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def products_must_be_unique(self):
        product_ids = [str(i.product_id) for i in self.items]
        if len(product_ids) != len(set(product_ids)):
            raise ValidationError({"items": ["A product can appear only once in a cart"]})

    @classmethod
    def create(cls, user_id):
        now = datetime.now(UTC)
        return cls(user_id=user_id, created_at=now, updated_at=now)

    @property
    def item_count(self) -> int:
        return sum(i.quantity for i in self.items)

    def find_item(self, item_id) -> CartItem | None:
        return next((i for i in self.items if str(i.id) == str(item_id)), None)

    def item_for_product(self, product_id) -> CartItem | None:
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    def quantity_of(self, product_id) -> int:
        item = self.item_for_product(product_id)
        return item.quantity if item else 0

    def add_item(self, product_id, quantity):
        """Add ``quantity`` of a product, merging into the existing line if there is one."""
        if quantity is None or quantity <= 0:
            raise InvalidQuantityError("Quantity must be greater than 0")

        now = datetime.now(UTC)
        existing = self.item_for_product(product_id)
        if existing:
            existing.quantity += quantity
            item = existing
        else:
            item = CartItem(product_id=product_id, quantity=quantity, added_at=now)
            self.add_items(item)

        self.updated_at = now
        return item

    def update_item_quantity(self, item_id, quantity):
        if quantity is None or quantity <= 0:
            raise InvalidQuantityError("Quantity must be greater than 0")

        item = self.find_item(item_id)
        if item is None:
            raise NotFoundError("Item not found in cart", entity="CartItem", entity_id=str(item_id))

        item.quantity = quantity
        self.updated_at = datetime.now(UTC)
        return item

    def remove_item(self, item_id) -> bool:
        """Drop a line. Removing a line that is not there is not an error."""
        item = self.find_item(item_id)
        if item is None:
            return False

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)
        return True

    def prune(self, product_ids) -> int:
        """Drop every line referencing one of ``product_ids``; returns how many went."""
        stale = [i for i in self.items if str(i.product_id) in {str(p) for p in product_ids}]
        for item in stale:
            self.remove_items(item)
        if stale:
            self.updated_at = datetime.now(UTC)
        return len(stale)

    def clear(self):
        for item in list(self.items):
            self.remove_items(item)
        self.updated_at = datetime.now(UTC)
