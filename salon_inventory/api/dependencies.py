"""
Dependency injection container for FastAPI.

Provides use case instances to route handlers.
"""

from functools import lru_cache

from salon_inventory.application.locks import get_stock_locks
from salon_inventory.application.use_cases import (
    AddStockUseCase,
    BatchQueriesUseCase,
    CreateProductBatchesUseCase,
    DeductStockFifoUseCase,
    ReceivePurchaseOrderDeliveryUseCase,
    ReduceStockUseCase,
    StockQueriesUseCase,
    UpdateExpirationStatusUseCase,
    UpdateStockUseCase,
)
from salon_inventory.config import Settings, get_settings


@lru_cache
def get_app_settings() -> Settings:
    """Get cached application settings."""
    return get_settings()


# Use case dependencies


def get_add_stock_use_case() -> AddStockUseCase:
    """Get add stock use case."""
    return AddStockUseCase(locks=get_stock_locks())


def get_reduce_stock_use_case() -> ReduceStockUseCase:
    """Get reduce stock use case."""
    return ReduceStockUseCase(locks=get_stock_locks())


def get_update_stock_use_case() -> UpdateStockUseCase:
    """Get update stock use case."""
    return UpdateStockUseCase(locks=get_stock_locks())


def get_stock_queries_use_case() -> StockQueriesUseCase:
    """Get stock queries use case."""
    return StockQueriesUseCase()


def get_create_batches_use_case() -> CreateProductBatchesUseCase:
    """Get create product batches use case."""
    return CreateProductBatchesUseCase()


def get_batch_queries_use_case() -> BatchQueriesUseCase:
    """Get batch queries use case."""
    return BatchQueriesUseCase()


def get_deduct_fifo_use_case() -> DeductStockFifoUseCase:
    """Get FIFO deduction use case."""
    return DeductStockFifoUseCase(locks=get_stock_locks())


def get_expiration_sweep_use_case() -> UpdateExpirationStatusUseCase:
    """Get expiration sweep use case."""
    return UpdateExpirationStatusUseCase()


def get_receive_delivery_use_case() -> ReceivePurchaseOrderDeliveryUseCase:
    """Get purchase order delivery use case."""
    return ReceivePurchaseOrderDeliveryUseCase(locks=get_stock_locks())
