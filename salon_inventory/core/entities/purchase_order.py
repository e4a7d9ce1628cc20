"""Purchase order and product catalog entities (read from external collections)."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class PurchaseOrderStatus(str, Enum):
    """Approval workflow states of a purchase order."""

    PENDING = "Pending"
    APPROVED = "Approved"
    IN_TRANSIT = "In Transit"
    DELIVERED = "Delivered"
    REJECTED = "Rejected"
    CANCELLED = "Cancelled"


DELIVERABLE_STATUSES = frozenset({PurchaseOrderStatus.APPROVED, PurchaseOrderStatus.IN_TRANSIT})


class PurchaseOrderItem(BaseModel):
    """One ordered product line."""

    product_id: str
    product_name: str = ""
    quantity: int
    unit_price: float = 0.0


class PurchaseOrder(BaseModel):
    """Order to a supplier; its delivery creates batches."""

    id: str
    branch_id: str
    supplier_name: str = ""
    status: PurchaseOrderStatus = PurchaseOrderStatus.PENDING
    items: list[PurchaseOrderItem] = Field(default_factory=list)
    actual_delivery: datetime | None = None
    delivered_by: str | None = None

    @property
    def is_deliverable(self) -> bool:
        return self.status in DELIVERABLE_STATUSES


class Product(BaseModel):
    """Catalog entry used to fill stock record details."""

    id: str
    name: str
    brand: str = ""
    category: str = ""
    unit_cost: float = 0.0
