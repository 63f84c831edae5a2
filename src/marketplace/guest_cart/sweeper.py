"""Periodic removal of expired guest carts.

Runs as a background asyncio task for the lifetime of the web app. The sweep
itself executes in a worker thread so a slow store never stalls request handling.
"""

import asyncio

import structlog

from marketplace.guest_cart.store import GuestCartStore

logger = structlog.get_logger(__name__)


async def sweep_guest_carts(store: GuestCartStore, interval_seconds: float) -> None:
    """Sweep ``store`` every ``interval_seconds`` until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        removed = await asyncio.to_thread(store.sweep_expired)
        if removed:
            logger.info("Expired guest carts removed", removed=removed)
