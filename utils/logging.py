"""
Logging utilities for the Mailjet Slack relay.

Provides:
- Request ID tracking across async contexts
- Request ID middleware for FastAPI
- Root logger configuration (stdout, request_id-aware format)
"""

import logging
import sys
import uuid
from contextvars import ContextVar

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from config import Settings, get_settings

# Context variable to track request_id across async contexts
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s.%(funcName)s | %(request_id)s | %(message)s"


class RequestIdFilter(logging.Filter):
    """
    Logging filter that injects request_id into every log record.

    Records emitted outside a request (startup, the parse route registrar)
    get "-", so the formatter can always use %(request_id)s.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get("-")
        return True


class RequestIdMiddleware(BaseHTTPMiddleware):
    """
    FastAPI middleware that generates and tracks request IDs.

    - Reuses an incoming X-Request-ID header or generates a UUID
    - Sets it in the context variable for logging
    - Echoes it in the X-Request-ID response header
    """

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))

        token = request_id_var.set(request_id)

        try:
            response: Response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            request_id_var.reset(token)


def configure_logging(settings: Settings | None = None) -> None:
    """
    Configure the root logger with request_id-aware formatting.

    Args:
        settings: Source of the log level (if None, uses get_settings())
    """
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    # Stream to stdout (container-friendly)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(RequestIdFilter())

    root = logging.getLogger()
    root.handlers.clear()  # Avoid duplicate handlers on reload
    root.setLevel(level)
    root.addHandler(handler)

    # httpx logs every request at INFO, including the Slack token in the URL
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
