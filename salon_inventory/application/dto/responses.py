"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between use cases and API layer.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field

from salon_inventory.core.entities import (
    Batch,
    BatchDeduction,
    InventoryMovement,
    StockRecord,
)
from salon_inventory.core.services.expiry_tracker import ExpiryTracker


# --- Stock ledger ---


class StockResponse(BaseModel):
    """Stock record response DTO."""

    id: str
    branch_id: str
    product_id: str
    product_name: str
    brand: str
    category: str
    current_stock: int
    min_stock: int
    max_stock: int
    unit_cost: float
    total_value: float
    location: str
    supplier: str
    status: str
    last_updated: datetime
    last_restocked: datetime | None = None
    created_at: datetime

    @classmethod
    def from_entity(cls, stock: StockRecord) -> "StockResponse":
        return cls(
            id=stock.id or "",
            branch_id=stock.branch_id,
            product_id=stock.product_id,
            product_name=stock.product_name,
            brand=stock.brand,
            category=stock.category,
            current_stock=stock.current_stock,
            min_stock=stock.min_stock,
            max_stock=stock.max_stock,
            unit_cost=stock.unit_cost,
            total_value=stock.total_value,
            location=stock.location,
            supplier=stock.supplier,
            status=stock.status.value,
            last_updated=stock.last_updated,
            last_restocked=stock.last_restocked,
            created_at=stock.created_at,
        )


class StockListResponse(BaseModel):
    """Stock records of one branch."""

    stocks: list[StockResponse]
    total: int


class BatchDeductionResponse(BaseModel):
    """One batch drawn from by a FIFO stock-out."""

    batch_id: str
    batch_number: str
    deducted: int
    remaining: int

    @classmethod
    def from_entity(cls, deduction: BatchDeduction) -> "BatchDeductionResponse":
        return cls(**deduction.model_dump())


class MovementResponse(BaseModel):
    """Inventory movement response DTO."""

    id: str
    branch_id: str
    product_id: str
    product_name: str
    type: str
    quantity: int
    previous_stock: int | None = None
    new_stock: int | None = None
    reason: str
    notes: str
    created_by: str
    batch_deductions: list[BatchDeductionResponse] = Field(default_factory=list)
    created_at: datetime

    @classmethod
    def from_entity(cls, movement: InventoryMovement) -> "MovementResponse":
        return cls(
            id=movement.id or "",
            branch_id=movement.branch_id,
            product_id=movement.product_id,
            product_name=movement.product_name,
            type=movement.type.value,
            quantity=movement.quantity,
            previous_stock=movement.previous_stock,
            new_stock=movement.new_stock,
            reason=movement.reason,
            notes=movement.notes,
            created_by=movement.created_by,
            batch_deductions=[
                BatchDeductionResponse.from_entity(d) for d in movement.batch_deductions
            ],
            created_at=movement.created_at,
        )


class MovementListResponse(BaseModel):
    """Movements of one branch, newest first."""

    movements: list[MovementResponse]
    total: int


class StockChangeResponse(BaseModel):
    """Response for stock-in and stock-out operations."""

    stock: StockResponse
    movement: MovementResponse
    created: bool = False  # True if the ledger record was created
    message: str


class InventoryStatsResponse(BaseModel):
    """Aggregate figures for one branch."""

    branch_id: str
    total_products: int
    total_value: float
    in_stock_count: int
    low_stock_count: int
    out_of_stock_count: int


# --- Batches ---


class BatchResponse(BaseModel):
    """Product batch response DTO."""

    id: str
    batch_number: str
    product_id: str
    product_name: str
    branch_id: str
    purchase_order_id: str
    quantity: int
    remaining_quantity: int
    unit_cost: float
    expiration_date: date | None = None
    received_date: datetime
    received_by: str
    status: str
    expiry_status: str
    days_until_expiry: int | None = None

    @classmethod
    def from_entity(
        cls,
        batch: Batch,
        today: date,
        tracker: ExpiryTracker,
    ) -> "BatchResponse":
        return cls(
            id=batch.id or "",
            batch_number=batch.batch_number,
            product_id=batch.product_id,
            product_name=batch.product_name,
            branch_id=batch.branch_id,
            purchase_order_id=batch.purchase_order_id,
            quantity=batch.quantity,
            remaining_quantity=batch.remaining_quantity,
            unit_cost=batch.unit_cost,
            expiration_date=batch.expiration_date,
            received_date=batch.received_date,
            received_by=batch.received_by,
            status=batch.status.value,
            expiry_status=tracker.classify(batch, today).value,
            days_until_expiry=batch.days_until_expiry(today),
        )


class BatchListResponse(BaseModel):
    """Batches in FIFO draw order."""

    batches: list[BatchResponse]
    total: int
    message: str | None = None


class FifoDeductionResponse(BaseModel):
    """Response for a FIFO stock-out."""

    movement: MovementResponse
    batch_deductions: list[BatchDeductionResponse]
    stock: StockResponse | None = None
    message: str


class ExpirationSweepResponse(BaseModel):
    """Response for the expiration status sweep."""

    branch_id: str
    updated_count: int
    message: str


# --- Purchase orders ---


class DeliveryResponse(BaseModel):
    """Response for a purchase-order delivery."""

    purchase_order_id: str
    status: str
    batches: list[BatchResponse]
    stocks: list[StockResponse]
    message: str


# --- Common ---


class DatabaseHealthResponse(BaseModel):
    """Reachability of the inventory database."""

    name: str
    available: bool
    latency_ms: float | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: DatabaseHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. STOCK_NOT_FOUND)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)
