"""Core domain services."""

from salon_inventory.core.services.expiry_tracker import ExpiryTracker
from salon_inventory.core.services.fifo_allocator import FifoAllocation, FifoAllocator
from salon_inventory.core.services.stock_ledger import MovementInfo, StockDetails, StockLedger

__all__ = [
    "ExpiryTracker",
    "FifoAllocation",
    "FifoAllocator",
    "MovementInfo",
    "StockDetails",
    "StockLedger",
]
