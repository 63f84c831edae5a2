"""Buyer-initiated order cancellation: command and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product
from marketplace.catalogue.queries import find_product
from marketplace.domain import marketplace
from marketplace.order.order import Order
from marketplace.order.queries import get_user_order

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class CancelOrder:
    user_id = Identifier(required=True)
    order_id = String(required=True, max_length=24)


def release_reserved_stock(order: Order) -> None:
    """Put every line's quantity back on its product. Deleted products are skipped."""
    repo = current_domain.repository_for(Product)
    for product_id, quantity in order.reserved_quantities():
        product = find_product(product_id)
        if product is None:
            logger.warning(
                "Cannot restock deleted product",
                order_id=order.order_id,
                product_id=product_id,
                quantity=quantity,
            )
            continue
        product.release(quantity)
        repo.add(product)


@marketplace.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        order = get_user_order(command.user_id, command.order_id)
        order.cancel_by_customer()
        release_reserved_stock(order)
        current_domain.repository_for(Order).add(order)
        logger.info("Order cancelled by customer", order_id=order.order_id, user_id=str(command.user_id))
        return order.order_id
