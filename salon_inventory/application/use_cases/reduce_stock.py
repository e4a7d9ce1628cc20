"""Reduce Stock Use Case: direct ledger decrement, clamped at zero."""

from dataclasses import dataclass

from salon_inventory.application.dto.requests import ReduceStockRequest
from salon_inventory.application.dto.responses import (
    MovementResponse,
    StockChangeResponse,
    StockResponse,
)
from salon_inventory.application.locks import KeyedLock, get_stock_locks
from salon_inventory.application.use_cases.validation import require_positive_quantity
from salon_inventory.config import get_logger
from salon_inventory.core.entities.inventory import InventoryMovement, StockRecord
from salon_inventory.core.exceptions import StockNotFoundError
from salon_inventory.core.interfaces.inventory_store import IInventoryStore
from salon_inventory.core.services.stock_ledger import MovementInfo, StockLedger

logger = get_logger(__name__)


@dataclass
class ReduceStockResult:
    """Result of reducing stock."""

    stock: StockRecord
    movement: InventoryMovement

    @property
    def clamped(self) -> bool:
        """True when more was requested than the ledger held."""
        return (self.movement.previous_stock or 0) < self.movement.quantity


class ReduceStockUseCase:
    """
    Decrement the ledger without batch bookkeeping.

    Over-deduction is clamped to zero instead of rejected; the FIFO path
    is the one that rejects.
    """

    def __init__(
        self,
        inventory_store: IInventoryStore | None = None,
        locks: KeyedLock | None = None,
    ):
        self._inventory_store = inventory_store
        self._locks = locks or get_stock_locks()
        self._ledger = StockLedger()

    async def _get_inventory_store(self) -> IInventoryStore:
        if self._inventory_store is None:
            from salon_inventory.infrastructure.storage.sqlite import get_inventory_store

            self._inventory_store = await get_inventory_store()
        return self._inventory_store

    async def execute(self, branch_id: str, request: ReduceStockRequest) -> ReduceStockResult:
        """Execute reduce stock use case."""
        require_positive_quantity(request.quantity)

        logger.info(
            "reduce_stock_started",
            branch_id=branch_id,
            product_id=request.product_id,
            quantity=request.quantity,
        )

        inv_store = await self._get_inventory_store()

        async with self._locks.hold(branch_id, request.product_id):
            existing = await inv_store.get_stock_by_product(branch_id, request.product_id)
            if existing is None:
                raise StockNotFoundError(branch_id=branch_id, product_id=request.product_id)

            stock, movement = self._ledger.stock_out(
                existing,
                request.quantity,
                MovementInfo(
                    reason=request.reason,
                    notes=request.notes,
                    created_by=request.created_by,
                ),
            )
            stock, movement = await inv_store.record_stock_movement(stock, movement)

        result = ReduceStockResult(stock=stock, movement=movement)
        if result.clamped:
            logger.warning(
                "reduce_stock_clamped",
                stock_id=stock.id,
                requested=request.quantity,
                available=movement.previous_stock,
            )
        logger.info(
            "stock_reduced",
            stock_id=stock.id,
            previous_stock=movement.previous_stock,
            new_stock=stock.current_stock,
            status=stock.status,
        )
        return result

    def to_response(self, result: ReduceStockResult) -> StockChangeResponse:
        """Convert result to API response."""
        return StockChangeResponse(
            stock=StockResponse.from_entity(result.stock),
            movement=MovementResponse.from_entity(result.movement),
            message="Stock reduced successfully",
        )
