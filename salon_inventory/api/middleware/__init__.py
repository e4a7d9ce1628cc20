"""API middleware."""

from salon_inventory.api.middleware.error_handler import ErrorHandlerMiddleware
from salon_inventory.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware", "ErrorHandlerMiddleware"]
