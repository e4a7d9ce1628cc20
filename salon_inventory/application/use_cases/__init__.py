"""Application use cases."""

from salon_inventory.application.use_cases.add_stock import AddStockResult, AddStockUseCase
from salon_inventory.application.use_cases.batch_queries import BatchQueriesUseCase
from salon_inventory.application.use_cases.create_product_batches import (
    CreateBatchesResult,
    CreateProductBatchesUseCase,
    build_batches,
)
from salon_inventory.application.use_cases.deduct_stock_fifo import (
    DeductStockFifoUseCase,
    DeductStockResult,
)
from salon_inventory.application.use_cases.receive_delivery import (
    ReceiveDeliveryResult,
    ReceivePurchaseOrderDeliveryUseCase,
)
from salon_inventory.application.use_cases.reduce_stock import (
    ReduceStockResult,
    ReduceStockUseCase,
)
from salon_inventory.application.use_cases.stock_queries import StockQueriesUseCase, sort_stocks
from salon_inventory.application.use_cases.update_expiration_status import (
    ExpirySweepResult,
    UpdateExpirationStatusUseCase,
)
from salon_inventory.application.use_cases.update_stock import UpdateStockUseCase

__all__ = [
    "AddStockUseCase",
    "AddStockResult",
    "ReduceStockUseCase",
    "ReduceStockResult",
    "UpdateStockUseCase",
    "StockQueriesUseCase",
    "sort_stocks",
    "CreateProductBatchesUseCase",
    "CreateBatchesResult",
    "build_batches",
    "BatchQueriesUseCase",
    "DeductStockFifoUseCase",
    "DeductStockResult",
    "UpdateExpirationStatusUseCase",
    "ExpirySweepResult",
    "ReceivePurchaseOrderDeliveryUseCase",
    "ReceiveDeliveryResult",
]
