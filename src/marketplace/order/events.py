"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Order")
class OrderPlaced:
    """Checkout completed: stock was reserved and the cart emptied."""

    __version__ = 1

    order_id = String(required=True)
    user_id = Identifier(required=True)
    total_amount = Float(required=True)
    item_count = Integer(required=True)
    delivery_date = String(required=True)
    delivery_slot = String(required=True)
    placed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderStatusChanged:
    __version__ = 1

    order_id = String(required=True)
    user_id = Identifier(required=True)
    previous_status = String(required=True)
    status = String(required=True)
    changed_by = String()  # "customer" or "admin"
    changed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderPaymentRecorded:
    __version__ = 1

    order_id = String(required=True)
    user_id = Identifier(required=True)
    method = String(required=True)
    amount = Float(required=True)
    paid_at = DateTime(required=True)
