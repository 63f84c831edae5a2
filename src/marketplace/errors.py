"""Marketplace error taxonomy.

Every business-rule failure raised by the marketplace is a ``MarketplaceError``.
Each subclass knows its machine-readable ``code`` and the HTTP status it maps to,
so the API layer can render any of them without a per-route translation table.

Field-level validation (lengths, ranges, choices) is left to Protean's own
``ValidationError`` raised by the field descriptors.
"""

from datetime import datetime
from typing import Any


class MarketplaceError(Exception):
    """Base error for recoverable, user-facing failures."""

    code = "MARKETPLACE_ERROR"
    status_code = 400

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        if code is not None:
            self.code = code
        super().__init__(self.message)

    def details(self) -> dict[str, Any]:
        """Extra payload rendered alongside ``error`` and ``code``."""
        return {}


class NotFoundError(MarketplaceError):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, message: str, entity: str | None = None, entity_id: str | None = None):
        super().__init__(message)
        self.entity = entity
        self.entity_id = entity_id

    def details(self) -> dict[str, Any]:
        return {"entity": self.entity, "entity_id": self.entity_id}


class UnavailableError(MarketplaceError):
    code = "PRODUCT_UNAVAILABLE"


class InsufficientStockError(MarketplaceError):
    code = "INSUFFICIENT_STOCK"

    def __init__(self, product_name: str, available: int, requested: int, message: str | None = None):
        super().__init__(message or f"{product_name}: Insufficient stock. Only {available} available")
        self.product_name = product_name
        self.available = available
        self.requested = requested

    def details(self) -> dict[str, Any]:
        return {
            "product_name": self.product_name,
            "available": self.available,
            "requested": self.requested,
        }


class InvalidQuantityError(MarketplaceError):
    code = "INVALID_QUANTITY"


class InvalidSlotError(MarketplaceError):
    code = "INVALID_SLOT"


class PastDateError(MarketplaceError):
    code = "PAST_DATE"


class LeadTimeTooShortError(MarketplaceError):
    code = "LEAD_TIME_TOO_SHORT"

    def __init__(self, message: str, minimum_instant: datetime):
        super().__init__(message)
        self.minimum_instant = minimum_instant

    def details(self) -> dict[str, Any]:
        return {"minimum_delivery_time": self.minimum_instant.isoformat()}


class CartEmptyError(MarketplaceError):
    code = "CART_EMPTY"

    def __init__(self, message: str = "Cart is empty"):
        super().__init__(message)


class CartInvalidError(MarketplaceError):
    code = "CART_INVALID"

    def __init__(self, reasons: list[str]):
        super().__init__(f"Cart validation failed: {', '.join(reasons)}")
        self.reasons = list(reasons)

    def details(self) -> dict[str, Any]:
        return {"reasons": self.reasons}


class InvalidStateError(MarketplaceError):
    code = "INVALID_STATE"

    def __init__(self, message: str, state: str | None = None):
        super().__init__(message)
        self.state = state

    def details(self) -> dict[str, Any]:
        return {"state": self.state}


class InvalidStatusError(MarketplaceError):
    code = "INVALID_STATUS"


class CheckoutConflictError(MarketplaceError):
    """Checkout kept losing optimistic-concurrency races and gave up."""

    code = "CHECKOUT_CONFLICT"
    status_code = 409

    def __init__(self, attempts: int):
        super().__init__("Checkout could not be completed due to concurrent updates, please retry")
        self.attempts = attempts

    def details(self) -> dict[str, Any]:
        return {"attempts": self.attempts}
