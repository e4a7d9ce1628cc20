"""
Request DTOs for API endpoints and use cases.

Quantities and costs are range-checked by the use cases so that
in-process callers and HTTP callers get the same ValidationError.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field


class AddStockRequest(BaseModel):
    """Request to add stock for a product at a branch."""

    product_id: str = Field(..., min_length=1, description="Product identifier")
    quantity: int = Field(..., description="Units received (must be positive)")
    unit_cost: float | None = Field(
        default=None,
        description="Cost basis per unit; catalog cost is used for new records when omitted",
    )
    min_stock: int | None = Field(default=None, description="Low-stock threshold")
    max_stock: int | None = Field(default=None, description="Maximum stock level")
    product_name: str | None = Field(default=None, description="Product display name")
    brand: str | None = Field(default=None, description="Product brand")
    category: str | None = Field(default=None, description="Product category")
    location: str | None = Field(default=None, description="Storage location")
    supplier: str | None = Field(default=None, description="Supplier name")
    reason: str = Field(default="Stock added", description="Movement reason")
    notes: str = Field(default="", description="Movement notes")
    created_by: str = Field(default="", description="User performing the change")


class ReduceStockRequest(BaseModel):
    """Request for a direct, clamped ledger decrement."""

    product_id: str = Field(..., min_length=1, description="Product identifier")
    quantity: int = Field(..., description="Units to remove (must be positive)")
    reason: str = Field(default="Stock reduced", description="Movement reason")
    notes: str = Field(default="", description="Movement notes")
    created_by: str = Field(default="", description="User performing the change")


class UpdateStockRequest(BaseModel):
    """Partial update of a stock record. Only fields that are set are applied."""

    current_stock: int | None = Field(default=None, description="Corrected on-hand quantity")
    min_stock: int | None = Field(default=None, description="Low-stock threshold")
    max_stock: int | None = Field(default=None, description="Maximum stock level")
    unit_cost: float | None = Field(default=None, description="Cost basis per unit")
    location: str | None = Field(default=None, description="Storage location")
    supplier: str | None = Field(default=None, description="Supplier name")


class BatchItemRequest(BaseModel):
    """One delivered line item."""

    product_id: str | None = Field(default=None, description="Product identifier")
    product_name: str = Field(default="", description="Product display name")
    quantity: int = Field(default=0, description="Units received")
    unit_price: float = Field(default=0.0, description="Cost basis per unit")
    expiration_date: date | None = Field(default=None, description="Lot expiration date")


class CreateBatchesRequest(BaseModel):
    """Request to create the batches of one delivery."""

    purchase_order_id: str | None = Field(
        default=None, description="Purchase order the lots arrived with"
    )
    items: list[BatchItemRequest] = Field(..., description="Delivered line items")
    received_by: str = Field(default="", description="User receiving the delivery")
    received_at: datetime | None = Field(
        default=None, description="Receipt timestamp (defaults to now)"
    )


class DeductStockRequest(BaseModel):
    """Request for a FIFO stock-out across batches."""

    product_id: str = Field(..., min_length=1, description="Product identifier")
    quantity: int = Field(..., description="Units to deduct (must be positive)")
    reason: str = Field(default="Stock reduced", description="Movement reason")
    notes: str = Field(default="", description="Movement notes")
    created_by: str = Field(default="", description="User performing the change")


class DeliverPurchaseOrderRequest(BaseModel):
    """Delivery confirmation for an approved purchase order."""

    expiration_dates: dict[str, date] = Field(
        default_factory=dict,
        description="Expiration date per product ID; every line item needs one",
    )
    received_by: str = Field(default="", description="User receiving the delivery")
    received_at: datetime | None = Field(
        default=None, description="Receipt timestamp (defaults to now)"
    )
