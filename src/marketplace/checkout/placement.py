"""Checkout: turning a buyer's cart into a placed order.

Everything the handler does runs inside the command handler's Unit of Work:
stock is reserved on every product, the day's order number is drawn, the order
is stored and the cart is emptied, or none of it happens. Every check runs
before the first mutation, so a rejected checkout never has anything to undo.

The day's order counter is created ahead of the Unit of Work, so checkout only
ever increments an existing record. Products, the cart and the daily counter
are all version-checked on save. When two checkouts race for the same stock or
the same order number, the loser's Unit of Work fails with
``ExpectedVersionError`` and ``place_order`` runs the whole checkout again
against fresh data, up to ``max_checkout_attempts`` times.
"""

import structlog
from protean import handle
from protean.exceptions import ExpectedVersionError, ValidationError
from protean.fields import Date, Identifier, String
from protean.utils.globals import current_domain

from marketplace.cart.cart import Cart
from marketplace.cart.queries import find_cart, inspect_cart
from marketplace.catalogue.product import Product
from marketplace.catalogue.queries import find_product
from marketplace.config import get_settings
from marketplace.delivery.window import validate_delivery_window
from marketplace.domain import marketplace
from marketplace.errors import (
    CartEmptyError,
    CartInvalidError,
    CheckoutConflictError,
    InsufficientStockError,
)
from marketplace.order.order import DeliveryDetails, Order, PaymentMethod
from marketplace.order.sequence import ensure_day_sequence, next_order_id
from marketplace.utils.clock import local_now

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class PlaceOrder:
    user_id = Identifier(required=True)
    address = String(required=True, max_length=300)
    phone = String(required=True, max_length=15)
    delivery_date = Date(required=True)
    delivery_slot = String(required=True, max_length=20)
    order_notes = String(max_length=500)
    payment_method = String(max_length=20)


@marketplace.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        now = local_now()

        cart = find_cart(command.user_id)

        # 1. Every line must still exist and be on sale; shortages surface as
        #    InsufficientStockError from the stock check below
        if cart is not None:
            problems = [p.message for p in inspect_cart(cart) if not p.stock_shortage]
            if problems:
                raise CartInvalidError(problems)

        # 2. Something to buy
        if cart is None or not cart.items:
            raise CartEmptyError()

        # 3. Delivery slot and lead time, then the rest of the delivery details
        window = validate_delivery_window(command.delivery_date, command.delivery_slot, now=now)
        delivery = DeliveryDetails(
            address=command.address,
            phone=command.phone,
            delivery_date=window.delivery_date,
            delivery_slot=window.slot.value,
        )
        payment_method = command.payment_method or PaymentMethod.COD.value
        if payment_method not in {m.value for m in PaymentMethod}:
            raise ValidationError({"payment_method": [f"Unsupported payment method: {payment_method}"]})

        # 4. Re-check stock against the products this transaction will write
        reservations = []
        for item in cart.items:
            product = find_product(item.product_id)
            if product is None:
                raise CartInvalidError(["Product no longer exists"])
            if item.quantity > product.stock:
                raise InsufficientStockError(product.name, available=product.stock, requested=item.quantity)
            reservations.append((product, item.quantity))

        # 5. Snapshot lines at today's prices
        lines = [
            {"product_id": str(product.id), "name": product.name, "price": product.price, "quantity": quantity}
            for product, quantity in reservations
        ]

        # 6. Reserve stock
        product_repo = current_domain.repository_for(Product)
        for product, quantity in reservations:
            product.reserve(quantity)
            product_repo.add(product)

        # 7-8. Number and store the order
        order_id = next_order_id(now)
        order = Order.place(
            order_id=order_id,
            user_id=command.user_id,
            lines=lines,
            delivery=delivery,
            order_notes=command.order_notes,
            payment_method=payment_method,
            placed_at=now,
        )
        current_domain.repository_for(Order).add(order)

        # 9. Empty the cart
        cart.clear()
        current_domain.repository_for(Cart).add(cart)

        logger.info(
            "Order placed",
            order_id=order_id,
            user_id=str(command.user_id),
            total_amount=order.total_amount,
            lines=len(lines),
        )
        return order_id


def place_order(command: PlaceOrder) -> str:
    """Run checkout, retrying when a concurrent checkout wins a version race.

    Returns the new order id. Business-rule failures propagate on the first
    attempt; only optimistic-concurrency conflicts are retried.
    """
    attempts = get_settings().max_checkout_attempts
    for attempt in range(1, attempts + 1):
        ensure_day_sequence(local_now())
        try:
            return current_domain.process(command, asynchronous=False)
        except ExpectedVersionError as exc:
            logger.warning(
                "Checkout conflict, retrying",
                user_id=str(command.user_id),
                attempt=attempt,
                max_attempts=attempts,
                error=str(exc),
            )

    logger.error("Checkout abandoned after repeated conflicts", user_id=str(command.user_id), attempts=attempts)
    raise CheckoutConflictError(attempts)
