"""Tests for the Order aggregate: placement, totals and the status state machine."""

from datetime import date

import pytest
from protean.exceptions import ValidationError

from marketplace.errors import InvalidStateError, InvalidStatusError
from marketplace.order.events import OrderPaymentRecorded, OrderPlaced, OrderStatusChanged
from marketplace.order.order import DeliveryDetails, Order, OrderStatus, PaymentStatus


def _delivery(**overrides):
    defaults = {
        "address": "12 Beach Road, Fort Kochi",
        "phone": "9876543210",
        "delivery_date": date(2025, 12, 7),
        "delivery_slot": "16:00-20:00",
    }
    defaults.update(overrides)
    return DeliveryDetails(**defaults)


def _place(lines=None, **overrides):
    lines = lines or [
        {"product_id": "prod-a", "name": "Seer Fish", "price": 100.0, "quantity": 3},
        {"product_id": "prod-b", "name": "Tiger Prawn", "price": 50.0, "quantity": 2},
    ]
    defaults = {"order_id": "ORD-20251206-001", "user_id": "user-001", "lines": lines, "delivery": _delivery()}
    defaults.update(overrides)
    return Order.place(**defaults)


def _advance(order, *statuses):
    for status in statuses:
        order.change_status(status)
    return order


class TestPlacement:
    def test_totals_are_computed_once(self):
        order = _place()

        assert order.total_amount == 400.0
        assert [i.subtotal for i in order.items] == [300.0, 100.0]
        assert order.status == OrderStatus.PENDING.value
        assert order.payment.method == "cod"
        assert order.payment.status == PaymentStatus.PENDING.value

    def test_decimal_arithmetic_does_not_drift(self):
        order = _place(lines=[{"product_id": "p", "name": "Squid Rings", "price": 0.1, "quantity": 3}])
        assert order.total_amount == 0.3

    def test_placed_event(self):
        order = _place()

        event = order._events[0]
        assert isinstance(event, OrderPlaced)
        assert event.order_id == "ORD-20251206-001"
        assert event.item_count == 5
        assert event.delivery_slot == "16:00-20:00"

    def test_payment_method_carried(self):
        assert _place(payment_method="whatsapp").payment.method == "whatsapp"

    def test_reserved_quantities(self):
        assert _place().reserved_quantities() == [("prod-a", 3), ("prod-b", 2)]


class TestDeliveryDetails:
    def test_phone_must_be_indian_mobile(self):
        with pytest.raises(ValidationError) as exc:
            _delivery(phone="1234567890")
        assert "Please provide a valid 10-digit phone number" in str(exc.value)

    def test_address_too_short(self):
        with pytest.raises(ValidationError):
            _delivery(address="Kochi")

    def test_unknown_slot(self):
        with pytest.raises(ValidationError):
            _delivery(delivery_slot="20:00-23:00")


class TestStateMachine:
    def test_happy_path(self):
        order = _advance(
            _place(),
            OrderStatus.CONFIRMED,
            OrderStatus.PREPARING,
            OrderStatus.OUT_FOR_DELIVERY,
            OrderStatus.DELIVERED,
        )
        assert order.status == "delivered"

    def test_skipping_a_step_rejected(self):
        order = _place()
        with pytest.raises(InvalidStateError) as exc:
            order.change_status(OrderStatus.DELIVERED)
        assert exc.value.message == "Cannot change order status from pending to delivered"

    def test_delivered_is_terminal(self):
        order = _advance(
            _place(),
            OrderStatus.CONFIRMED,
            OrderStatus.PREPARING,
            OrderStatus.OUT_FOR_DELIVERY,
            OrderStatus.DELIVERED,
        )
        with pytest.raises(InvalidStateError):
            order.change_status(OrderStatus.CANCELLED)

    def test_cancelled_is_terminal(self):
        order = _advance(_place(), OrderStatus.CANCELLED)
        assert order.cancelled_at is not None
        with pytest.raises(InvalidStateError):
            order.change_status(OrderStatus.CONFIRMED)

    def test_admin_can_cancel_out_for_delivery(self):
        order = _advance(_place(), OrderStatus.CONFIRMED, OrderStatus.PREPARING, OrderStatus.OUT_FOR_DELIVERY)
        order.change_status(OrderStatus.CANCELLED)
        assert order.status == "cancelled"

    def test_same_status_is_noop(self):
        order = _place()
        order._events.clear()
        assert order.change_status(OrderStatus.PENDING) is False
        assert order._events == []

    def test_status_change_event(self):
        order = _place()
        order.change_status(OrderStatus.CONFIRMED)

        event = order._events[-1]
        assert isinstance(event, OrderStatusChanged)
        assert event.previous_status == "pending"
        assert event.status == "confirmed"
        assert event.changed_by == "admin"

    def test_parse_rejects_unknown_status(self):
        with pytest.raises(InvalidStatusError) as exc:
            OrderStatus.parse("shipped")
        assert "pending, confirmed, preparing, out-for-delivery, delivered, cancelled" in exc.value.message


class TestCustomerCancellation:
    def test_pending_order_cancelled(self):
        order = _place()
        order.cancel_by_customer()

        assert order.status == "cancelled"
        assert order._events[-1].changed_by == "customer"

    def test_confirmed_order_cannot_be_cancelled_by_customer(self):
        order = _advance(_place(), OrderStatus.CONFIRMED)
        with pytest.raises(InvalidStateError) as exc:
            order.cancel_by_customer()
        assert exc.value.message == "Cannot cancel order with status: confirmed"


class TestPayment:
    def test_record_payment(self):
        order = _place()
        order.record_payment()

        assert order.payment.status == "completed"
        assert order.payment.amount == 400.0
        assert order.payment.paid_at is not None
        assert isinstance(order._events[-1], OrderPaymentRecorded)

    def test_payment_recorded_once(self):
        order = _place()
        order.record_payment()
        with pytest.raises(InvalidStateError):
            order.record_payment()

    def test_no_payment_on_cancelled_order(self):
        order = _advance(_place(), OrderStatus.CANCELLED)
        with pytest.raises(InvalidStateError):
            order.record_payment()
