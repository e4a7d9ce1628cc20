"""
Error handling for the inventory API.

Every failure leaves the API as the same JSON shape (``ErrorResponse``):
a machine-readable ``error_code``, the domain ``message``, a recovery
``hint`` and the request ``path``.
"""

from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from salon_inventory.application.dto.responses import ErrorResponse
from salon_inventory.config import get_logger
from salon_inventory.core.exceptions import InventoryError, SalonInventoryError

logger = get_logger(__name__)


# error_code -> (HTTP status, hint)
KNOWN_ERRORS: dict[str, tuple[int, str]] = {
    "STOCK_NOT_FOUND": (
        status.HTTP_404_NOT_FOUND,
        "Add stock for the product first via POST /api/branches/{branch_id}/stocks.",
    ),
    "PURCHASE_ORDER_NOT_FOUND": (status.HTTP_404_NOT_FOUND, "Check the purchase order ID."),
    "INSUFFICIENT_STOCK": (
        status.HTTP_409_CONFLICT,
        "Deduct at most the available quantity or receive more stock first.",
    ),
    "CONCURRENCY_CONFLICT": (
        status.HTTP_409_CONFLICT,
        "Another request changed this stock. Retry the operation.",
    ),
    "INVALID_PURCHASE_ORDER_STATE": (
        status.HTTP_409_CONFLICT,
        "Only Approved or In Transit purchase orders can be delivered.",
    ),
    "MISSING_EXPIRATION_DATE": (
        status.HTTP_400_BAD_REQUEST,
        "Supply an expiration date for every product on the order.",
    ),
    "VALIDATION_ERROR": (status.HTTP_400_BAD_REQUEST, "Check the quantities and fields sent."),
    "DATABASE_ERROR": (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "The inventory database failed. Check server logs.",
    ),
}

_GENERIC_HINTS: dict[int, str] = {
    400: "Check the request parameters and body.",
    404: "Verify the ID in the URL.",
    409: "The request conflicts with the current inventory state.",
    422: "Check the request body fields and types.",
}


def _classify(exc: Exception) -> tuple[str, int]:
    """Error code and HTTP status for an exception."""
    if isinstance(exc, SalonInventoryError):
        if exc.code in KNOWN_ERRORS:
            return exc.code, KNOWN_ERRORS[exc.code][0]
        if isinstance(exc, InventoryError):
            return exc.code, status.HTTP_400_BAD_REQUEST
        return exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR
    if isinstance(exc, ValueError):
        return "ValueError", status.HTTP_400_BAD_REQUEST
    return exc.__class__.__name__, status.HTTP_500_INTERNAL_SERVER_ERROR


def _hint(error_code: str, status_code: int) -> str:
    if error_code in KNOWN_ERRORS:
        return KNOWN_ERRORS[error_code][1]
    return _GENERIC_HINTS.get(status_code, "An internal error occurred. Check server logs.")


def _error_json(status_code: int, body: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def build_error_response(request: Request, exc: Exception) -> JSONResponse:
    """Translate an exception raised while serving ``request`` into JSON."""
    error_code, status_code = _classify(exc)

    if isinstance(exc, SalonInventoryError):
        message, detail = exc.message, (str(exc.details) if exc.details else None)
    else:
        message, detail = str(exc), None

    if status_code >= 500:
        logger.error(
            "inventory_request_error", path=request.url.path, error_code=error_code, exc_info=exc
        )
    else:
        logger.warning(
            "inventory_request_rejected",
            path=request.url.path,
            error_code=error_code,
            error=message,
        )

    return _error_json(
        status_code,
        ErrorResponse(
            error_code=error_code,
            message=message,
            hint=_hint(error_code, status_code),
            detail=detail,
            path=request.url.path,
        ),
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Last-resort catch for exceptions that escape the route handlers."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            return build_error_response(request, exc)


def setup_exception_handlers(app: FastAPI) -> None:
    """Register JSON error handlers for domain, schema and HTTP errors."""

    @app.exception_handler(SalonInventoryError)
    async def inventory_error_handler(request: Request, exc: SalonInventoryError) -> JSONResponse:
        return build_error_response(request, exc)

    @app.exception_handler(RequestValidationError)
    async def request_schema_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        problems = [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        ]
        return _error_json(
            422,
            ErrorResponse(
                error_code="VALIDATION_ERROR",
                message="Request validation failed",
                hint=_GENERIC_HINTS[422],
                detail="; ".join(problems),
                path=request.url.path,
            ),
        )

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
        error_code = {
            404: "NOT_FOUND",
            405: "METHOD_NOT_ALLOWED",
            409: "CONFLICT",
        }.get(exc.status_code, "HTTP_ERROR")
        return _error_json(
            exc.status_code,
            ErrorResponse(
                error_code=error_code,
                message=str(exc.detail) if exc.detail else "An error occurred",
                hint=_hint(error_code, exc.status_code),
                path=request.url.path,
            ),
        )
