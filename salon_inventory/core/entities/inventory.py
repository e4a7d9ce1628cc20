"""Stock ledger and movement entities."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every stored datetime uses."""
    return datetime.now(UTC).replace(tzinfo=None)


class StockStatus(str, Enum):
    """Ledger status derived from current and minimum stock."""

    IN_STOCK = "In Stock"
    LOW_STOCK = "Low Stock"
    OUT_OF_STOCK = "Out of Stock"


class MovementType(str, Enum):
    """Types of stock movements."""

    STOCK_IN = "stock_in"
    STOCK_OUT = "stock_out"


def derive_stock_status(current_stock: int, min_stock: int) -> StockStatus:
    """Out of Stock at zero, Low Stock up to and including min_stock, else In Stock."""
    if current_stock <= 0:
        return StockStatus.OUT_OF_STOCK
    if current_stock <= min_stock:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


class StockRecord(BaseModel):
    """Aggregate stock for one product at one branch."""

    id: str | None = None
    branch_id: str
    product_id: str
    product_name: str = ""
    brand: str = ""
    category: str = ""
    current_stock: int = 0
    min_stock: int = 0
    max_stock: int = 0
    unit_cost: float = 0.0
    location: str = ""
    supplier: str = ""
    status: StockStatus = StockStatus.OUT_OF_STOCK
    last_updated: datetime = Field(default_factory=utcnow)
    last_restocked: datetime | None = None
    created_at: datetime = Field(default_factory=utcnow)
    version: int = 0

    @property
    def total_value(self) -> float:
        """Stock value at the latest cost basis."""
        return self.current_stock * self.unit_cost

    def refresh_status(self) -> StockStatus:
        """Recompute and store the derived status."""
        self.status = derive_stock_status(self.current_stock, self.min_stock)
        return self.status


class BatchDeduction(BaseModel):
    """How much one FIFO stock-out drew from one batch."""

    batch_id: str
    batch_number: str
    deducted: int
    remaining: int


class InventoryMovement(BaseModel):
    """Append-only record of a single stock-in or stock-out."""

    id: str | None = None
    branch_id: str
    product_id: str
    product_name: str = ""
    type: MovementType
    quantity: int
    previous_stock: int | None = None
    new_stock: int | None = None
    reason: str = ""
    notes: str = ""
    created_by: str = ""
    batch_deductions: list[BatchDeduction] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
