"""Marketplace FastAPI application.

Single-domain web server; every request runs inside the marketplace domain
context and commands are processed synchronously.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Logging and domain initialization
# ---------------------------------------------------------------------------
# PROTEAN_ENV selects the config overlay in domain.toml:
#   - "test"       → in-memory providers, testing flag on
#   - "production" → PostgreSQL via DATABASE_URL
import os

import structlog

from marketplace.utils.logging import configure_logging

configure_logging(log_dir=os.getenv("LOG_DIR", "logs"))
logger = structlog.get_logger(__name__)

from marketplace.domain import marketplace  # noqa: E402

marketplace.init()

from marketplace.api.application import create_app  # noqa: E402

app = create_app()
logger.info("Marketplace API ready", domain=marketplace.name)
