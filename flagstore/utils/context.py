"""
Request Context & Logging Setup.

Provides request IDs for log correlation and the structlog configuration
used by the application.

Usage:
    # At startup
    configure_logging(settings.log_level, settings.log_format)

    # Access anywhere in request lifecycle
    from flagstore.utils.context import get_request_id

    logger.info("Processing", request_id=get_request_id())
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import Any

import structlog


# Request-scoped id using contextvars (async-safe)
_request_id: ContextVar[str] = ContextVar("request_id", default="")


def get_request_id() -> str:
    """Get current request ID from context."""
    return _request_id.get()


def set_request_id(request_id: str):
    """Set request ID, returning the token needed to reset it."""
    return _request_id.set(request_id)


def reset_request_id(token) -> None:
    _request_id.reset(token)


# ============================================================
# STRUCTLOG PROCESSOR
# ============================================================

def add_request_context(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Structlog processor that adds the request id to all logs."""
    request_id = get_request_id()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def configure_logging(log_level: str = "INFO", log_format: str = "json") -> None:
    """
    Configure stdlib logging and structlog.

    log_format: "json" for production, "text" for human-readable console output.
    """
    level = logging.getLevelName(log_level.upper())
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    renderer = (
        structlog.processors.JSONRenderer()
        if log_format == "json"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_request_context,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )
