"""Logging configuration for the marketplace.

Standard-library handlers feed structlog, which renders JSON in
production/staging and a colourised console format everywhere else. File
logging is optional: pass ``log_dir`` to also write
``marketplace.log`` and ``marketplace_error.log`` there, rotated at 10 MB.

Request-scoped fields (request id, user id...) are bound with ``add_context``
by the HTTP middleware and appear on every line logged while the request runs.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any

import structlog

LOG_FILE_PREFIX = "marketplace"
_MAX_LOG_BYTES = 10 * 1024 * 1024
_JSON_ENVIRONMENTS = {"production", "staging"}
_LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}
_QUIET_LOGGERS = ("protean", "asyncio", "uvicorn.access")


def _environment() -> str:
    return (os.getenv("ENV") or os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


def get_log_level() -> str:
    """``LOG_LEVEL`` if set, else a default for the current environment."""
    return os.getenv("LOG_LEVEL", _LEVELS.get(_environment(), "INFO")).upper()


def _rotating_file(path: Path, level: str | int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(path, maxBytes=_MAX_LOG_BYTES, backupCount=5, encoding="utf-8")
    handler.setLevel(level)
    return handler


def _handlers(log_dir: str | Path | None, level: str) -> list[logging.Handler]:
    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    handlers: list[logging.Handler] = [console]

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(_rotating_file(log_dir / f"{LOG_FILE_PREFIX}.log", level))
        handlers.append(_rotating_file(log_dir / f"{LOG_FILE_PREFIX}_error.log", logging.ERROR))

    return handlers


def _renderer() -> Any:
    if _environment() in _JSON_ENVIRONMENTS:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=True,
        exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=False, max_frames=2),
    )


def shared_processors() -> list[Any]:
    """The processor chain every marketplace log line passes through, minus the renderer."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.MODULE,
                structlog.processors.CallsiteParameter.LINENO,
            ]
        ),
    ]


def configure_logging(log_dir: str | Path | None = None) -> None:
    """Configure stdlib handlers and structlog for the whole process."""
    level = get_log_level()

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = _handlers(log_dir, level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[*shared_processors(), _renderer()],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def add_context(**kwargs: Any) -> None:
    """Bind fields onto every log line emitted from the current context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
