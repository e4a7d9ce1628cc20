"""
Application layer - Use cases, DTOs and the in-process service boundary.

This layer orchestrates business logic by:
1. Defining request/response DTOs for API contracts
2. Implementing use cases that coordinate core services and stores
3. Exposing InventoryService, whose methods return result models
   instead of raising

Use cases are the entry point for API handlers.
"""

from salon_inventory.application.dto import (
    AddStockRequest,
    CreateBatchesRequest,
    DeductStockRequest,
    DeliverPurchaseOrderRequest,
    ErrorResponse,
    HealthResponse,
    OperationResult,
    ReduceStockRequest,
    UpdateStockRequest,
)
from salon_inventory.application.inventory_service import InventoryService
from salon_inventory.application.locks import KeyedLock, get_stock_locks

__all__ = [
    # Request DTOs
    "AddStockRequest",
    "ReduceStockRequest",
    "UpdateStockRequest",
    "CreateBatchesRequest",
    "DeductStockRequest",
    "DeliverPurchaseOrderRequest",
    # Response DTOs
    "ErrorResponse",
    "HealthResponse",
    # Service boundary
    "OperationResult",
    "InventoryService",
    # Locks
    "KeyedLock",
    "get_stock_locks",
]
