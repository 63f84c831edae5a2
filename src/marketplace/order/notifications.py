"""Buyer notifications driven by order events."""

import structlog
from protean.utils.mixins import handle

from marketplace.domain import marketplace
from marketplace.notifications import get_notifier
from marketplace.order.events import OrderPlaced, OrderStatusChanged
from marketplace.order.order import Order

logger = structlog.get_logger(__name__)


@marketplace.event_handler(part_of=Order)
class OrderNotificationHandler:
    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        get_notifier().order_placed(str(event.user_id), event.order_id, event.total_amount)

    @handle(OrderStatusChanged)
    def on_order_status_changed(self, event: OrderStatusChanged) -> None:
        logger.debug(
            "Order status changed",
            order_id=event.order_id,
            previous_status=event.previous_status,
            status=event.status,
            changed_by=event.changed_by,
        )
        get_notifier().order_status_changed(str(event.user_id), event.order_id, event.status)
