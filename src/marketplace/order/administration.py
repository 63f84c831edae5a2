"""Administrative order actions: status changes and payment recording."""

import structlog
from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.cancellation import release_reserved_stock
from marketplace.order.order import Order, OrderStatus
from marketplace.order.queries import get_order

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class UpdateOrderStatus:
    order_id = String(required=True, max_length=24)
    status = String(required=True, max_length=30)


@marketplace.command(part_of="Order")
class RecordPayment:
    order_id = String(required=True, max_length=24)


@marketplace.command_handler(part_of=Order)
class AdministerOrderHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        order = get_order(command.order_id)
        target = OrderStatus.parse(command.status)

        previous = order.current_status
        if not order.change_status(target):
            return order.order_id

        # Stock goes back only when the order enters cancelled
        if target == OrderStatus.CANCELLED:
            release_reserved_stock(order)

        current_domain.repository_for(Order).add(order)
        logger.info(
            "Order status changed by admin",
            order_id=order.order_id,
            previous_status=previous.value,
            status=target.value,
        )
        return order.order_id

    @handle(RecordPayment)
    def record_payment(self, command):
        order = get_order(command.order_id)
        order.record_payment()
        current_domain.repository_for(Order).add(order)
        return order.order_id
