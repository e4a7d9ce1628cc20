"""
Domain exceptions for the salon inventory core.

Use cases raise these; the InventoryService boundary turns them into
failure results and the API middleware turns them into JSON errors.
"""

from typing import Any


class SalonInventoryError(Exception):
    """Base exception for all inventory core errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Storage Exceptions
class StorageError(SalonInventoryError):
    """Base exception for storage operations."""

    pass


class StockNotFoundError(StorageError):
    """Stock ledger record not found."""

    def __init__(self, stock_id: str | None = None, branch_id: str | None = None, product_id: str | None = None):
        if stock_id is not None:
            message = f"Stock not found: {stock_id}"
        else:
            message = f"Stock not found for product {product_id} at branch {branch_id}"
        super().__init__(
            message,
            code="STOCK_NOT_FOUND",
            details={"stock_id": stock_id, "branch_id": branch_id, "product_id": product_id},
        )


class PurchaseOrderNotFoundError(StorageError):
    """Purchase order not found."""

    def __init__(self, purchase_order_id: str):
        super().__init__(
            f"Purchase order not found: {purchase_order_id}",
            code="PURCHASE_ORDER_NOT_FOUND",
            details={"purchase_order_id": purchase_order_id},
        )


class ConcurrencyConflictError(StorageError):
    """A record changed between read and write (optimistic version mismatch)."""

    def __init__(self, collection: str, record_id: str, expected_version: int):
        super().__init__(
            f"Concurrent modification of {collection} record {record_id}",
            code="CONCURRENCY_CONFLICT",
            details={
                "collection": collection,
                "record_id": record_id,
                "expected_version": expected_version,
            },
        )


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


# Inventory Exceptions
class InventoryError(SalonInventoryError):
    """Base exception for stock and batch business rules."""

    pass


class InsufficientStockError(InventoryError):
    """Active batches cannot cover the requested deduction."""

    def __init__(self, branch_id: str, product_id: str, requested: int, available: int):
        super().__init__(
            f"Insufficient stock. Only {available} units available.",
            code="INSUFFICIENT_STOCK",
            details={
                "branch_id": branch_id,
                "product_id": product_id,
                "requested": requested,
                "available": available,
            },
        )
        self.requested = requested
        self.available = available


class InvalidPurchaseOrderStateError(InventoryError):
    """Purchase order cannot be delivered from its current status."""

    def __init__(self, purchase_order_id: str, status: str):
        super().__init__(
            f"Purchase order {purchase_order_id} cannot be delivered from status '{status}'",
            code="INVALID_PURCHASE_ORDER_STATE",
            details={"purchase_order_id": purchase_order_id, "status": status},
        )


class MissingExpirationDateError(InventoryError):
    """One or more delivered line items lack an expiration date."""

    def __init__(self, purchase_order_id: str, product_ids: list[str]):
        super().__init__(
            f"Expiration date required for {len(product_ids)} item(s) of {purchase_order_id}",
            code="MISSING_EXPIRATION_DATE",
            details={"purchase_order_id": purchase_order_id, "product_ids": product_ids},
        )


# Validation Exceptions
class ValidationError(SalonInventoryError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )

