"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.
Result models: Success/failure envelopes of the in-process service.
"""

from salon_inventory.application.dto.requests import (
    AddStockRequest,
    BatchItemRequest,
    CreateBatchesRequest,
    DeductStockRequest,
    DeliverPurchaseOrderRequest,
    ReduceStockRequest,
    UpdateStockRequest,
)
from salon_inventory.application.dto.responses import (
    BatchDeductionResponse,
    BatchListResponse,
    BatchResponse,
    DeliveryResponse,
    ErrorResponse,
    ExpirationSweepResponse,
    FifoDeductionResponse,
    HealthResponse,
    InventoryStatsResponse,
    MovementListResponse,
    MovementResponse,
    DatabaseHealthResponse,
    StockChangeResponse,
    StockListResponse,
    StockResponse,
)
from salon_inventory.application.dto.results import (
    BatchListResult,
    DeductionResult,
    DeliveryResult,
    ExpirationSweepResult,
    InventoryStats,
    MovementListResult,
    OperationResult,
    StatsResult,
    StockListResult,
    StockResult,
)

__all__ = [
    # Requests
    "AddStockRequest",
    "ReduceStockRequest",
    "UpdateStockRequest",
    "BatchItemRequest",
    "CreateBatchesRequest",
    "DeductStockRequest",
    "DeliverPurchaseOrderRequest",
    # Responses
    "StockResponse",
    "StockListResponse",
    "StockChangeResponse",
    "MovementResponse",
    "MovementListResponse",
    "BatchDeductionResponse",
    "BatchResponse",
    "BatchListResponse",
    "FifoDeductionResponse",
    "ExpirationSweepResponse",
    "InventoryStatsResponse",
    "DeliveryResponse",
    "HealthResponse",
    "DatabaseHealthResponse",
    "ErrorResponse",
    # Results
    "OperationResult",
    "StockResult",
    "StockListResult",
    "BatchListResult",
    "DeductionResult",
    "ExpirationSweepResult",
    "MovementListResult",
    "InventoryStats",
    "StatsResult",
    "DeliveryResult",
]
