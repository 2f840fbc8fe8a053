"""
Structured logging configuration using structlog.
Follows project standards: no print statements, structured logs with context.

Every event carries the service name and environment. Inside a request it
also carries the request id, method, path and, for trip-scoped routes, the
trip id.
"""

import logging
import re
import sys
import uuid

import structlog

from tripmate.config import settings

SERVICE_NAME = "tripmate"

# /trips/{trip_id}/... ; "default" is the get-or-create endpoint, not an id
TRIP_PATH_PATTERN = re.compile(r"^/trips/(?!default(?:/|$))([^/]+)")


def add_service_context(logger, method_name: str, event_dict: dict) -> dict:
    """structlog processor stamping service and environment on every event."""
    event_dict.setdefault("service", SERVICE_NAME)
    event_dict.setdefault("environment", settings.environment)
    return event_dict


def trip_id_from_path(path: str) -> str | None:
    match = TRIP_PATH_PATTERN.match(path)
    return match.group(1) if match else None


def bind_request_context(method: str, path: str, request_id: str | None = None) -> str:
    """
    Reset the contextvars and bind the context of a new request.

    Args:
        method: HTTP method
        path: URL path
        request_id: Incoming X-Request-ID, generated when absent

    Returns:
        The request id bound to the log context
    """
    request_id = request_id or uuid.uuid4().hex
    structlog.contextvars.clear_contextvars()
    context = {"request_id": request_id, "method": method, "path": path}
    trip_id = trip_id_from_path(path)
    if trip_id:
        context["trip_id"] = trip_id
    structlog.contextvars.bind_contextvars(**context)
    return request_id


def configure_logging() -> None:
    """
    Configure structured logging for the application.

    Uses structlog with JSON or console output based on settings.
    """
    if settings.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            add_service_context,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper()),
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Logger for a module, e.g. get_logger(__name__)."""
    return structlog.get_logger(name)
