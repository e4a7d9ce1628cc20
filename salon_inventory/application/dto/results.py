"""
Result models returned by InventoryService.

Every operation reports ``success`` and ``message``; failures also carry
the machine-readable ``error_code`` of the domain error behind them.
"""

from pydantic import BaseModel, Field

from salon_inventory.core.entities import (
    Batch,
    BatchDeduction,
    InventoryMovement,
    StockRecord,
)


class OperationResult(BaseModel):
    """Outcome of one inventory operation."""

    success: bool
    message: str = ""
    error_code: str | None = None


class StockResult(OperationResult):
    """Single stock record (add, reduce, update, get)."""

    stock: StockRecord | None = None
    movement: InventoryMovement | None = None


class StockListResult(OperationResult):
    stocks: list[StockRecord] = Field(default_factory=list)


class BatchListResult(OperationResult):
    """Batches, FIFO-ordered unless stated otherwise."""

    batches: list[Batch] = Field(default_factory=list)


class DeductionResult(OperationResult):
    """FIFO stock-out outcome; ``available`` is set on insufficient stock."""

    movement: InventoryMovement | None = None
    batch_deductions: list[BatchDeduction] = Field(default_factory=list)
    available: int | None = None


class ExpirationSweepResult(OperationResult):
    updated_count: int = 0


class MovementListResult(OperationResult):
    movements: list[InventoryMovement] = Field(default_factory=list)


class InventoryStats(BaseModel):
    """Aggregate figures for one branch."""

    total_products: int = 0
    total_value: float = 0.0
    in_stock_count: int = 0
    low_stock_count: int = 0
    out_of_stock_count: int = 0


class StatsResult(OperationResult):
    stats: InventoryStats | None = None


class DeliveryResult(OperationResult):
    """Batches and ledger records written by a purchase-order delivery."""

    batches: list[Batch] = Field(default_factory=list)
    stocks: list[StockRecord] = Field(default_factory=list)
