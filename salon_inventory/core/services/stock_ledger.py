"""
Stock ledger arithmetic.

Builds the next state of a StockRecord and the matching movement for a
stock-in or a stock-out. Persisting both in one transaction is the
store's job.
"""

from __future__ import annotations

from dataclasses import dataclass

from salon_inventory.core.entities.inventory import (
    BatchDeduction,
    InventoryMovement,
    MovementType,
    StockRecord,
    utcnow,
)
from salon_inventory.core.entities.purchase_order import Product


@dataclass
class StockDetails:
    """Optional descriptive fields supplied with a stock-in."""

    product_name: str | None = None
    brand: str | None = None
    category: str | None = None
    location: str | None = None
    supplier: str | None = None


@dataclass
class MovementInfo:
    """Audit fields copied onto a movement."""

    reason: str
    notes: str = ""
    created_by: str = ""


class StockLedger:
    """Pure stock-in / stock-out transitions on a single ledger record."""

    def stock_in(
        self,
        existing: StockRecord | None,
        branch_id: str,
        product_id: str,
        quantity: int,
        info: MovementInfo,
        unit_cost: float | None = None,
        min_stock: int | None = None,
        max_stock: int | None = None,
        details: StockDetails | None = None,
        product: Product | None = None,
    ) -> tuple[StockRecord, InventoryMovement]:
        """
        Create or increment a ledger record.

        New records take descriptive fields from ``details`` first and the
        catalog ``product`` second. Existing records keep their descriptive
        fields; thresholds and cost are replaced only when given.
        """
        details = details or StockDetails()
        now = utcnow()

        if existing is None:
            stock = StockRecord(
                branch_id=branch_id,
                product_id=product_id,
                product_name=details.product_name or (product.name if product else ""),
                brand=details.brand or (product.brand if product else ""),
                category=details.category or (product.category if product else ""),
                current_stock=quantity,
                min_stock=min_stock or 0,
                max_stock=max_stock or 0,
                unit_cost=(
                    unit_cost
                    if unit_cost is not None
                    else (product.unit_cost if product else 0.0)
                ),
                location=details.location or "",
                supplier=details.supplier or "",
                last_updated=now,
                last_restocked=now,
                created_at=now,
            )
            previous = 0
        else:
            stock = existing.model_copy(deep=True)
            previous = stock.current_stock
            stock.current_stock = previous + quantity
            if unit_cost is not None:
                stock.unit_cost = unit_cost
            if min_stock is not None:
                stock.min_stock = min_stock
            if max_stock is not None:
                stock.max_stock = max_stock
            stock.last_updated = now
            stock.last_restocked = now

        stock.refresh_status()

        movement = InventoryMovement(
            branch_id=branch_id,
            product_id=product_id,
            product_name=stock.product_name,
            type=MovementType.STOCK_IN,
            quantity=quantity,
            previous_stock=previous,
            new_stock=stock.current_stock,
            reason=info.reason,
            notes=info.notes,
            created_by=info.created_by,
            created_at=now,
        )
        return stock, movement

    def stock_out(
        self,
        existing: StockRecord,
        quantity: int,
        info: MovementInfo,
        batch_deductions: list[BatchDeduction] | None = None,
    ) -> tuple[StockRecord, InventoryMovement]:
        """Decrement a ledger record, clamping at zero."""
        now = utcnow()
        stock = existing.model_copy(deep=True)
        previous = stock.current_stock
        stock.current_stock = max(0, previous - quantity)
        stock.last_updated = now
        stock.refresh_status()

        movement = InventoryMovement(
            branch_id=stock.branch_id,
            product_id=stock.product_id,
            product_name=stock.product_name,
            type=MovementType.STOCK_OUT,
            quantity=quantity,
            previous_stock=previous,
            new_stock=stock.current_stock,
            reason=info.reason,
            notes=info.notes,
            created_by=info.created_by,
            batch_deductions=list(batch_deductions or []),
            created_at=now,
        )
        return stock, movement
