"""FastAPI application factory for the marketplace.

``create_app`` wires the routers, error handlers and per-request middleware
onto a fresh ``FastAPI`` instance. The guest cart store is injected so tests
can hand in an in-memory store with a controllable clock; by default it is
built from ``Settings`` (memory or Redis).
"""

import asyncio
import contextlib
import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from marketplace.api import admin_router, cart_router, guest_cart_router, order_router, product_router
from marketplace.api.errors import register_error_handlers
from marketplace.config import Settings, get_settings
from marketplace.domain import marketplace
from marketplace.guest_cart.service import GuestCartService
from marketplace.guest_cart.store import GuestCartStore, build_guest_cart_store
from marketplace.guest_cart.sweeper import sweep_guest_carts
from marketplace.utils.logging import add_context, clear_context

logger = structlog.get_logger(__name__)


def create_app(
    guest_cart_store: GuestCartStore | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    store = guest_cart_store if guest_cart_store is not None else build_guest_cart_store(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        sweeper = asyncio.create_task(sweep_guest_carts(store, settings.guest_cart_sweep_minutes * 60))
        logger.info("Guest cart sweeper started", interval_minutes=settings.guest_cart_sweep_minutes)
        try:
            yield
        finally:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper
            logger.info("Guest cart sweeper stopped")

    app = FastAPI(
        title="Marketplace API",
        description="Fresh seafood marketplace: catalogue, carts, checkout and orders",
        lifespan=lifespan,
    )
    app.state.guest_carts = GuestCartService(store)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        """Bind request details to the log context and push the domain context."""
        clear_context()
        add_context(
            request_id=request.headers.get("x-request-id") or uuid.uuid4().hex,
            method=request.method,
            path=request.url.path,
            user_id=request.headers.get("x-user-id"),
        )
        with marketplace.domain_context():
            response = await call_next(request)
        return response

    register_error_handlers(app)

    app.include_router(product_router)
    app.include_router(cart_router)
    app.include_router(guest_cart_router)
    app.include_router(order_router)
    app.include_router(admin_router)

    @app.get("/health")
    async def health():
        return JSONResponse(content={"status": "ok", "domain": marketplace.name})

    return app
