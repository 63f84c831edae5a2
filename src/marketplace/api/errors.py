"""Mapping marketplace errors onto HTTP responses.

Business-rule failures become 4xx bodies of the form
``{"error": <message>, "code": <CODE>, ...details}``. Protean's own field
validation errors are rendered by Protean's FastAPI integration. Anything
else is logged with the request context and answered with an opaque 500.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from marketplace.errors import MarketplaceError

logger = structlog.get_logger(__name__)


async def marketplace_error_handler(request: Request, exc: MarketplaceError) -> JSONResponse:
    logger.info(
        "Request rejected",
        code=exc.code,
        error=exc.message,
        method=request.method,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "code": exc.code, **exc.details()},
    )


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error",
        method=request.method,
        path=request.url.path,
        user_id=request.headers.get("x-user-id"),
        path_params=dict(request.path_params),
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={"error": "Something went wrong, please try again later", "code": "INTERNAL_ERROR"},
    )


def register_error_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)
    app.add_exception_handler(MarketplaceError, marketplace_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
