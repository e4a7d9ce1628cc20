"""
structlog setup for the inventory service.

Development gets a colored console; every other environment writes one JSON
object per line. Enum values (stock status, batch status, movement type)
are logged by value.
"""

import logging
import sys
from enum import Enum

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from salon_inventory.config.settings import get_settings

# Chatty third-party loggers kept at WARNING
_QUIET_LOGGERS = ("aiosqlite", "httpx", "uvicorn.access")


def add_service_fields(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Stamp the service name and environment onto every event."""
    settings = get_settings()
    event_dict.setdefault("service", settings.app_name)
    event_dict.setdefault("environment", settings.environment)
    return event_dict


def enum_values(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Log Enum members by value."""
    return {
        key: value.value if isinstance(value, Enum) else value
        for key, value in event_dict.items()
    }


def _renderers(environment: str) -> list[Processor]:
    """Final processors: console in development, JSON elsewhere."""
    if environment == "development":
        return [structlog.dev.ConsoleRenderer(colors=True)]
    return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]


def configure_logging() -> None:
    """Route structlog through stdlib logging at the configured level."""
    settings = get_settings()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        enum_values,
        add_service_fields,
        *_renderers(settings.environment),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=settings.log_level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Structured logger, usually called as ``get_logger(__name__)``."""
    return structlog.get_logger(name)

