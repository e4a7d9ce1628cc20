"""
Stock ledger queries.

Branch stock listing with caller-chosen sort, single record lookup,
movement history and branch statistics.
"""

from typing import Literal

from salon_inventory.application.dto.results import InventoryStats
from salon_inventory.config import get_logger
from salon_inventory.core.entities.inventory import (
    InventoryMovement,
    MovementType,
    StockRecord,
    StockStatus,
)
from salon_inventory.core.exceptions import StockNotFoundError, ValidationError
from salon_inventory.core.interfaces.inventory_store import IInventoryStore

logger = get_logger(__name__)

SORTABLE_FIELDS = frozenset(
    {
        "product_name",
        "brand",
        "category",
        "current_stock",
        "min_stock",
        "max_stock",
        "unit_cost",
        "status",
        "location",
        "supplier",
        "last_updated",
        "created_at",
    }
)


def sort_stocks(
    stocks: list[StockRecord],
    order_by: str = "product_name",
    order_direction: Literal["asc", "desc"] = "asc",
) -> list[StockRecord]:
    """Sort stock records by one field; text compares case-insensitively."""
    if order_by not in SORTABLE_FIELDS:
        raise ValidationError("order_by", f"cannot sort by '{order_by}'", order_by)

    def key(stock: StockRecord) -> object:
        value = getattr(stock, order_by)
        if isinstance(value, StockStatus):
            return value.value.lower()
        if isinstance(value, str):
            return value.lower()
        return value

    return sorted(stocks, key=key, reverse=order_direction == "desc")


class StockQueriesUseCase:
    """Read-side operations over the stock ledger and movement log."""

    def __init__(self, inventory_store: IInventoryStore | None = None):
        self._inventory_store = inventory_store

    async def _get_inventory_store(self) -> IInventoryStore:
        if self._inventory_store is None:
            from salon_inventory.infrastructure.storage.sqlite import get_inventory_store

            self._inventory_store = await get_inventory_store()
        return self._inventory_store

    async def get_stock(self, stock_id: str) -> StockRecord:
        """Get one stock record or raise StockNotFoundError."""
        inv_store = await self._get_inventory_store()
        stock = await inv_store.get_stock(stock_id)
        if stock is None:
            raise StockNotFoundError(stock_id=stock_id)
        return stock

    async def list_stocks(
        self,
        branch_id: str,
        status: StockStatus | None = None,
        category: str | None = None,
        order_by: str = "product_name",
        order_direction: Literal["asc", "desc"] = "asc",
    ) -> list[StockRecord]:
        """List a branch's stock records, filtered and sorted."""
        inv_store = await self._get_inventory_store()
        stocks = await inv_store.list_stocks(branch_id, status=status, category=category)
        return sort_stocks(stocks, order_by, order_direction)

    async def list_movements(
        self,
        branch_id: str,
        movement_type: MovementType | None = None,
        product_id: str | None = None,
        limit: int | None = None,
    ) -> list[InventoryMovement]:
        """List a branch's movements, newest first."""
        if limit is not None and limit <= 0:
            raise ValidationError("limit", "must be greater than zero", limit)
        inv_store = await self._get_inventory_store()
        return await inv_store.list_movements(
            branch_id, movement_type=movement_type, product_id=product_id, limit=limit
        )

    async def stats(self, branch_id: str) -> InventoryStats:
        """Count records per status and total the stock value of a branch."""
        inv_store = await self._get_inventory_store()
        stocks = await inv_store.list_stocks(branch_id)

        stats = InventoryStats(
            total_products=len(stocks),
            total_value=sum(s.total_value for s in stocks),
            in_stock_count=sum(1 for s in stocks if s.status == StockStatus.IN_STOCK),
            low_stock_count=sum(1 for s in stocks if s.status == StockStatus.LOW_STOCK),
            out_of_stock_count=sum(1 for s in stocks if s.status == StockStatus.OUT_OF_STOCK),
        )
        logger.debug("inventory_stats_computed", branch_id=branch_id, total=stats.total_products)
        return stats
