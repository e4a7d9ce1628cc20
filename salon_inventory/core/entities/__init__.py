"""Core domain entities."""

from salon_inventory.core.entities.batch import (
    Batch,
    BatchStatus,
    ExpiryStatus,
    classify_expiry,
    fifo_sort_key,
    format_batch_number,
    sort_fifo,
)
from salon_inventory.core.entities.inventory import (
    BatchDeduction,
    InventoryMovement,
    MovementType,
    StockRecord,
    StockStatus,
    derive_stock_status,
    utcnow,
)
from salon_inventory.core.entities.purchase_order import (
    DELIVERABLE_STATUSES,
    Product,
    PurchaseOrder,
    PurchaseOrderItem,
    PurchaseOrderStatus,
)

__all__ = [
    # Ledger entities
    "StockRecord",
    "StockStatus",
    "InventoryMovement",
    "MovementType",
    "BatchDeduction",
    "derive_stock_status",
    "utcnow",
    # Batch entities
    "Batch",
    "BatchStatus",
    "ExpiryStatus",
    "classify_expiry",
    "fifo_sort_key",
    "format_batch_number",
    "sort_fifo",
    # External collaborators
    "PurchaseOrder",
    "PurchaseOrderItem",
    "PurchaseOrderStatus",
    "DELIVERABLE_STATUSES",
    "Product",
]
