"""Marketplace HTTP API package."""

from marketplace.api.routes import (
    admin_router,
    cart_router,
    guest_cart_router,
    order_router,
    product_router,
)

__all__ = ["product_router", "cart_router", "guest_cart_router", "order_router", "admin_router"]
