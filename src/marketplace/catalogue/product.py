"""Product aggregate (CQRS): a catalogue listing with live stock.

Stock is the only inventory the marketplace keeps. Checkout reserves it by
decrementing, cancellation releases it again. Availability follows stock:
a product with no stock is never available, and restocking turns it back on
unless an administrator switched it off by hand.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String

from marketplace.catalogue.events import ProductSoldOut
from marketplace.domain import marketplace
from marketplace.errors import InsufficientStockError, UnavailableError

MAX_PRICE = 100000.0
MAX_STOCK = 10000


class ProductCategory(Enum):
    FISH = "Fish"
    PRAWN = "Prawn"
    CRAB = "Crab"
    SQUID = "Squid"


@marketplace.aggregate
class Product:
    name = String(required=True, min_length=2, max_length=100)
    category = String(required=True, choices=ProductCategory)
    price = Float(required=True, min_value=0.01, max_value=MAX_PRICE)
    stock = Integer(required=True, min_value=0, max_value=MAX_STOCK, default=0)
    is_available = Boolean(default=True)
    # Set when an administrator switches the product off; restocking then leaves it off
    manually_disabled = Boolean(default=False)
    description = String(max_length=500)
    created_by = String(max_length=255)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def product_without_stock_cannot_be_available(self):
        if self.stock == 0 and self.is_available:
            raise ValidationError({"is_available": ["A product with no stock cannot be available"]})

    @classmethod
    def create(cls, name, category, price, stock=0, description=None, created_by=None, is_available=True):
        now = datetime.now(UTC)
        return cls(
            name=name,
            category=category,
            price=price,
            stock=stock,
            is_available=bool(is_available) and stock > 0,
            manually_disabled=not is_available,
            description=description,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )

    def update_details(self, name=None, category=None, price=None, description=None):
        with atomic_change(self):
            if name is not None:
                self.name = name
            if category is not None:
                self.category = category
            if price is not None:
                self.price = price
            if description is not None:
                self.description = description
            self.updated_at = datetime.now(UTC)

    def set_availability(self, available: bool):
        if available and self.stock == 0:
            raise UnavailableError(f"{self.name} has no stock and cannot be made available")

        with atomic_change(self):
            self.is_available = available
            self.manually_disabled = not available
            self.updated_at = datetime.now(UTC)

    def set_stock(self, stock: int):
        """Administrative stock correction."""
        with atomic_change(self):
            self._apply_stock(stock)

    def reserve(self, quantity: int):
        """Take ``quantity`` units out of stock for a placed order."""
        if quantity > self.stock:
            raise InsufficientStockError(self.name, available=self.stock, requested=quantity)

        with atomic_change(self):
            self._apply_stock(self.stock - quantity)

        if self.stock == 0:
            self.raise_(ProductSoldOut(product_id=self.id, name=self.name, sold_out_at=self.updated_at))

    def release(self, quantity: int):
        """Put ``quantity`` units back, e.g. when an order is cancelled."""
        with atomic_change(self):
            self._apply_stock(self.stock + quantity)

    def _apply_stock(self, stock: int):
        previous = self.stock
        self.stock = stock
        if stock == 0:
            self.is_available = False
        elif previous == 0 and not self.manually_disabled:
            self.is_available = True
        self.updated_at = datetime.now(UTC)
