"""Update Stock Use Case: patch thresholds, cost and location fields."""

from salon_inventory.application.dto.requests import UpdateStockRequest
from salon_inventory.application.dto.responses import StockResponse
from salon_inventory.application.locks import KeyedLock, get_stock_locks
from salon_inventory.application.use_cases.validation import require_non_negative
from salon_inventory.config import get_logger
from salon_inventory.core.entities.inventory import StockRecord, utcnow
from salon_inventory.core.exceptions import StockNotFoundError
from salon_inventory.core.interfaces.inventory_store import IInventoryStore

logger = get_logger(__name__)

NUMERIC_FIELDS = ("current_stock", "min_stock", "max_stock", "unit_cost")


class UpdateStockUseCase:
    """Apply a partial update to one stock record."""

    def __init__(
        self,
        inventory_store: IInventoryStore | None = None,
        locks: KeyedLock | None = None,
    ):
        self._inventory_store = inventory_store
        self._locks = locks or get_stock_locks()

    async def _get_inventory_store(self) -> IInventoryStore:
        if self._inventory_store is None:
            from salon_inventory.infrastructure.storage.sqlite import get_inventory_store

            self._inventory_store = await get_inventory_store()
        return self._inventory_store

    async def execute(self, stock_id: str, request: UpdateStockRequest) -> StockRecord:
        """
        Patch the given fields.

        Status is recomputed only when current_stock or min_stock is part
        of the patch, using stored values for whichever one is not.
        """
        patch = request.model_dump(exclude_unset=True, exclude_none=True)
        for field in NUMERIC_FIELDS:
            require_non_negative(patch.get(field), field)

        inv_store = await self._get_inventory_store()

        stock = await inv_store.get_stock(stock_id)
        if stock is None:
            raise StockNotFoundError(stock_id=stock_id)

        async with self._locks.hold(stock.branch_id, stock.product_id):
            # Re-read under the lock so the version check sees the latest write
            stock = await inv_store.get_stock(stock_id)
            if stock is None:
                raise StockNotFoundError(stock_id=stock_id)

            for field, value in patch.items():
                setattr(stock, field, value)
            if "current_stock" in patch or "min_stock" in patch:
                stock.refresh_status()
            stock.last_updated = utcnow()

            stock = await inv_store.update_stock(stock)

        logger.info(
            "stock_patched",
            stock_id=stock_id,
            fields=sorted(patch),
            status=stock.status,
        )
        return stock

    def to_response(self, stock: StockRecord) -> StockResponse:
        """Convert result to API response."""
        return StockResponse.from_entity(stock)
