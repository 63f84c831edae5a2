"""Order reads for buyers and the admin dashboard."""

from datetime import datetime

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.errors import NotFoundError
from marketplace.order.order import Order, OrderStatus
from marketplace.order.sequence import orders_started_on
from marketplace.utils import money
from marketplace.utils.clock import local_now
from marketplace.utils.queries import Page, fetch_page, iter_all


def _orders():
    return current_domain.repository_for(Order)._dao.query


def find_order(order_id) -> Order | None:
    try:
        return current_domain.repository_for(Order).get(str(order_id))
    except ObjectNotFoundError:
        return None


def get_order(order_id) -> Order:
    order = find_order(order_id)
    if order is None:
        raise NotFoundError("Order not found", entity="Order", entity_id=str(order_id))
    return order


def get_user_order(user_id, order_id) -> Order:
    """A buyer's own order. Someone else's order is reported as not found."""
    order = find_order(order_id)
    if order is None or not order.is_owned_by(user_id):
        raise NotFoundError("Order not found", entity="Order", entity_id=str(order_id))
    return order


def _status_filter(status: str | None) -> dict:
    if not status:
        return {}
    return {"status": OrderStatus.parse(status).value}


def list_user_orders(user_id, status: str | None = None, page: int | None = None, limit: int | None = None) -> Page:
    criteria = {"user_id": str(user_id), **_status_filter(status)}
    return fetch_page(_orders().filter(**criteria).order_by("-created_at"), page, limit)


def list_all_orders(
    status: str | None = None,
    search: str | None = None,
    page: int | None = None,
    limit: int | None = None,
) -> Page:
    criteria = _status_filter(status)
    if search and search.strip():
        criteria["order_id__icontains"] = search.strip()
    return fetch_page(_orders().filter(**criteria).order_by("-created_at"), page, limit)


def _counts_by_status(**criteria) -> dict[str, int]:
    return {s.value: _orders().filter(status=s.value, **criteria).all().total for s in OrderStatus}


def _revenue(**criteria) -> float:
    amounts = (
        order.total_amount
        for status in OrderStatus
        if status != OrderStatus.CANCELLED
        for order in iter_all(_orders().filter(status=status.value, **criteria))
    )
    return money.as_float(money.total(amounts))


def customer_order_stats(user_id) -> dict:
    by_status = _counts_by_status(user_id=str(user_id))
    return {
        "total_orders": sum(by_status.values()),
        "by_status": by_status,
        "total_spent": _revenue(user_id=str(user_id)),
    }


def order_statistics(now: datetime | None = None) -> dict:
    """Dashboard figures: orders per status, revenue excluding cancellations, and today's order count."""
    by_status = _counts_by_status()
    return {
        "total_orders": sum(by_status.values()),
        "by_status": by_status,
        "total_revenue": _revenue(),
        "today_orders": orders_started_on(now or local_now()),
    }
