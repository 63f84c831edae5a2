"""Order aggregate (CQRS): a placed order and its fulfilment lifecycle.

Orders are identified by their human-readable number (``ORD-YYYYMMDD-NNN``).
Each line is a snapshot of the product's name and price at checkout, so later
catalogue edits never change a historical order, and ``total_amount`` is fixed
when the order is placed.

State Machine:
    pending → confirmed → preparing → out-for-delivery → delivered
    pending / confirmed / preparing / out-for-delivery → cancelled (buyers: pending only)
    delivered and cancelled are terminal.
"""

import re
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Date,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    ValueObject,
)

from marketplace.delivery.window import DeliverySlot
from marketplace.domain import marketplace
from marketplace.errors import InvalidStateError, InvalidStatusError
from marketplace.order.events import OrderPaymentRecorded, OrderPlaced, OrderStatusChanged
from marketplace.utils import money


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    OUT_FOR_DELIVERY = "out-for-delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value: str) -> "OrderStatus":
        try:
            return cls(value)
        except ValueError as exc:
            allowed = ", ".join(s.value for s in cls)
            raise InvalidStatusError(f"Invalid status. Must be one of: {allowed}") from exc


class PaymentMethod(Enum):
    WHATSAPP = "whatsapp"
    COD = "cod"
    RAZORPAY_LINK = "razorpay-link"


class PaymentStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class StatusActor(Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PREPARING, OrderStatus.CANCELLED},
    OrderStatus.PREPARING: {OrderStatus.OUT_FOR_DELIVERY, OrderStatus.CANCELLED},
    OrderStatus.OUT_FOR_DELIVERY: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

# Buyers may only cancel before the shop has acted on the order
_CUSTOMER_CANCELLABLE_STATES = {OrderStatus.PENDING}

_PHONE_PATTERN = re.compile(r"^[6-9]\d{9}$")


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@marketplace.value_object(part_of="Order")
class DeliveryDetails:
    """Where and when the order is to be delivered, as given at checkout."""

    address = String(required=True, min_length=10, max_length=300)
    phone = String(required=True, max_length=10)
    delivery_date = Date(required=True)
    delivery_slot = String(required=True, choices=DeliverySlot)

    @invariant.post
    def phone_must_be_a_mobile_number(self):
        if self.phone and not _PHONE_PATTERN.match(self.phone):
            raise ValidationError({"phone": ["Please provide a valid 10-digit phone number"]})


@marketplace.value_object(part_of="Order")
class Payment:
    method = String(choices=PaymentMethod, default=PaymentMethod.COD.value)
    status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    paid_at = DateTime()
    amount = Float()


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@marketplace.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    price = Float(required=True)
    quantity = Integer(required=True, min_value=1)
    subtotal = Float(required=True)


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------
@marketplace.aggregate
class Order:
    order_id = String(identifier=True, max_length=24)
    user_id = Identifier(required=True)
    items = HasMany(OrderItem)
    delivery = ValueObject(DeliveryDetails, required=True)
    order_notes = String(max_length=500)
    total_amount = Float(required=True, min_value=0.0)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment = ValueObject(Payment)
    cancelled_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, order_id, user_id, lines, delivery, order_notes=None, payment_method=None, placed_at=None):
        """Build a pending order from priced lines.

        ``lines`` is an iterable of dicts with product_id, name, price and
        quantity. Subtotals and the total are computed here, once.
        """
        now = placed_at or datetime.now(UTC)
        items = []
        for line in lines:
            subtotal = money.line_total(line["price"], line["quantity"])
            items.append(
                OrderItem(
                    product_id=line["product_id"],
                    name=line["name"],
                    price=money.as_float(money.to_decimal(line["price"])),
                    quantity=line["quantity"],
                    subtotal=money.as_float(subtotal),
                )
            )
        total_amount = money.total(item.subtotal for item in items)

        order = cls(
            order_id=order_id,
            user_id=user_id,
            delivery=delivery,
            order_notes=order_notes,
            total_amount=money.as_float(total_amount),
            status=OrderStatus.PENDING.value,
            payment=Payment(
                method=payment_method or PaymentMethod.COD.value,
                status=PaymentStatus.PENDING.value,
            ),
            created_at=now,
            updated_at=now,
        )
        for item in items:
            order.add_items(item)

        order.raise_(
            OrderPlaced(
                order_id=order_id,
                user_id=str(user_id),
                total_amount=order.total_amount,
                item_count=sum(i.quantity for i in items),
                delivery_date=delivery.delivery_date.isoformat(),
                delivery_slot=delivery.delivery_slot,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def current_status(self) -> OrderStatus:
        return OrderStatus(self.status)

    def is_owned_by(self, user_id) -> bool:
        return str(self.user_id) == str(user_id)

    def reserved_quantities(self) -> list[tuple[str, int]]:
        """(product_id, quantity) pairs that were taken out of stock for this order."""
        return [(str(item.product_id), item.quantity) for item in self.items]

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def _transition_to(self, target: OrderStatus, actor: StatusActor):
        current = self.current_status
        if target not in _VALID_TRANSITIONS[current]:
            raise InvalidStateError(
                f"Cannot change order status from {current.value} to {target.value}",
                state=current.value,
            )

        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now
        if target == OrderStatus.CANCELLED:
            self.cancelled_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=self.order_id,
                user_id=str(self.user_id),
                previous_status=current.value,
                status=target.value,
                changed_by=actor.value,
                changed_at=now,
            )
        )

    def cancel_by_customer(self):
        if self.current_status not in _CUSTOMER_CANCELLABLE_STATES:
            raise InvalidStateError(f"Cannot cancel order with status: {self.status}", state=self.status)
        self._transition_to(OrderStatus.CANCELLED, StatusActor.CUSTOMER)

    def change_status(self, target: OrderStatus) -> bool:
        """Administrative status change. Returns False when the order already has ``target``."""
        if self.current_status == target:
            return False
        self._transition_to(target, StatusActor.ADMIN)
        return True

    def record_payment(self):
        if self.current_status == OrderStatus.CANCELLED:
            raise InvalidStateError("Cannot record payment for a cancelled order", state=self.status)
        if self.payment and self.payment.status == PaymentStatus.COMPLETED.value:
            raise InvalidStateError("Payment has already been recorded for this order", state=self.status)

        now = datetime.now(UTC)
        method = self.payment.method if self.payment else PaymentMethod.COD.value
        self.payment = Payment(
            method=method,
            status=PaymentStatus.COMPLETED.value,
            paid_at=now,
            amount=self.total_amount,
        )
        self.updated_at = now

        self.raise_(
            OrderPaymentRecorded(
                order_id=self.order_id,
                user_id=str(self.user_id),
                method=method,
                amount=self.total_amount,
                paid_at=now,
            )
        )
