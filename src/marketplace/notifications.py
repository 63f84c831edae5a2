"""Outbound customer and staff notifications.

SMS/email providers sit outside the marketplace. Event handlers talk to a
``Notifier``; the default one only writes structured log lines, and a real
provider adapter can be installed with ``set_notifier`` at startup.
"""

from typing import Protocol

import structlog

logger = structlog.get_logger(__name__)


class Notifier(Protocol):
    def order_placed(self, user_id: str, order_id: str, total_amount: float) -> None: ...

    def order_status_changed(self, user_id: str, order_id: str, status: str) -> None: ...

    def product_sold_out(self, product_id: str, name: str) -> None: ...


class LoggingNotifier:
    def order_placed(self, user_id: str, order_id: str, total_amount: float) -> None:
        logger.info("notify.order_placed", user_id=user_id, order_id=order_id, total_amount=total_amount)

    def order_status_changed(self, user_id: str, order_id: str, status: str) -> None:
        logger.info("notify.order_status_changed", user_id=user_id, order_id=order_id, status=status)

    def product_sold_out(self, product_id: str, name: str) -> None:
        logger.warning("notify.product_sold_out", product_id=product_id, name=name)


_notifier: Notifier = LoggingNotifier()


def get_notifier() -> Notifier:
    return _notifier


def set_notifier(notifier: Notifier) -> None:
    global _notifier
    _notifier = notifier
