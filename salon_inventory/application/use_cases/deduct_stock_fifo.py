"""Deduct Stock FIFO Use Case: stock-out drawn from batches, soonest expiry first."""

from dataclasses import dataclass, field
from typing import Any

from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from salon_inventory.application.dto.requests import DeductStockRequest
from salon_inventory.application.dto.responses import (
    BatchDeductionResponse,
    FifoDeductionResponse,
    MovementResponse,
    StockResponse,
)
from salon_inventory.application.locks import KeyedLock, get_stock_locks
from salon_inventory.application.use_cases.validation import require_positive_quantity
from salon_inventory.config import get_logger, get_settings
from salon_inventory.core.entities.batch import BatchStatus
from salon_inventory.core.entities.inventory import (
    BatchDeduction,
    InventoryMovement,
    MovementType,
    StockRecord,
)
from salon_inventory.core.exceptions import ConcurrencyConflictError, InsufficientStockError
from salon_inventory.core.interfaces.inventory_store import IInventoryStore
from salon_inventory.core.services.fifo_allocator import FifoAllocator
from salon_inventory.core.services.stock_ledger import MovementInfo, StockLedger

logger = get_logger(__name__)


@dataclass
class DeductStockResult:
    """Result of a FIFO deduction."""

    movement: InventoryMovement
    stock: StockRecord | None = None
    batch_deductions: list[BatchDeduction] = field(default_factory=list)


class DeductStockFifoUseCase:
    """
    Deduct stock across active batches in FIFO order.

    Batches, the ledger decrement and the movement are written in one
    transaction. A shortfall raises InsufficientStockError before
    anything is written. A lost optimistic-concurrency race is retried
    from a fresh read of the batches.
    """

    def __init__(
        self,
        inventory_store: IInventoryStore | None = None,
        locks: KeyedLock | None = None,
    ):
        self._inventory_store = inventory_store
        self._locks = locks or get_stock_locks()
        self._allocator = FifoAllocator()
        self._ledger = StockLedger()

    async def _get_inventory_store(self) -> IInventoryStore:
        if self._inventory_store is None:
            from salon_inventory.infrastructure.storage.sqlite import get_inventory_store

            self._inventory_store = await get_inventory_store()
        return self._inventory_store

    def _get_retry_decorator(self) -> Any:
        """Get tenacity retry decorator with current settings."""
        settings = get_settings()
        delay = settings.inventory.fifo_retry_delay
        return retry(
            # First attempt plus the configured number of retries
            stop=stop_after_attempt(settings.inventory.fifo_max_retries + 1),
            wait=wait_exponential(multiplier=delay, min=delay, max=delay * 8),
            retry=retry_if_exception_type(ConcurrencyConflictError),
            before_sleep=self._log_retry,
            reraise=True,
        )

    @staticmethod
    def _log_retry(retry_state: RetryCallState) -> None:
        """Log retry attempts."""
        logger.warning(
            "fifo_deduction_retry",
            attempt=retry_state.attempt_number,
            error=str(retry_state.outcome.exception()) if retry_state.outcome else None,
        )

    async def execute(self, branch_id: str, request: DeductStockRequest) -> DeductStockResult:
        """Execute FIFO deduction use case."""
        require_positive_quantity(request.quantity)

        logger.info(
            "fifo_deduction_started",
            branch_id=branch_id,
            product_id=request.product_id,
            quantity=request.quantity,
        )

        async with self._locks.hold(branch_id, request.product_id):
            retry_decorator = self._get_retry_decorator()
            result = await retry_decorator(self._deduct)(branch_id, request)

        logger.info(
            "fifo_deduction_complete",
            movement_id=result.movement.id,
            batches_used=len(result.batch_deductions),
            new_stock=result.stock.current_stock if result.stock else None,
        )
        return result

    async def _deduct(self, branch_id: str, request: DeductStockRequest) -> DeductStockResult:
        """One read-allocate-write attempt."""
        inv_store = await self._get_inventory_store()

        batches = await inv_store.list_batches(
            branch_id, product_id=request.product_id, status=BatchStatus.ACTIVE
        )
        allocation = self._allocator.allocate(batches, request.quantity)
        if not allocation.is_satisfied:
            logger.warning(
                "fifo_insufficient_stock",
                branch_id=branch_id,
                product_id=request.product_id,
                requested=request.quantity,
                available=allocation.allocated,
            )
            raise InsufficientStockError(
                branch_id, request.product_id, request.quantity, allocation.allocated
            )

        info = MovementInfo(
            reason=request.reason,
            notes=request.notes,
            created_by=request.created_by,
        )
        existing = await inv_store.get_stock_by_product(branch_id, request.product_id)
        if existing is not None:
            stock, movement = self._ledger.stock_out(
                existing, request.quantity, info, batch_deductions=allocation.deductions
            )
        else:
            # Batches without a ledger row: the movement still records the draw
            logger.warning(
                "fifo_stock_record_missing",
                branch_id=branch_id,
                product_id=request.product_id,
            )
            stock = None
            movement = InventoryMovement(
                branch_id=branch_id,
                product_id=request.product_id,
                product_name=allocation.updated_batches[0].product_name,
                type=MovementType.STOCK_OUT,
                quantity=request.quantity,
                reason=info.reason,
                notes=info.notes,
                created_by=info.created_by,
                batch_deductions=allocation.deductions,
            )

        movement = await inv_store.record_fifo_deduction(
            allocation.updated_batches, stock, movement
        )
        return DeductStockResult(
            movement=movement,
            stock=stock,
            batch_deductions=allocation.deductions,
        )

    def to_response(self, result: DeductStockResult) -> FifoDeductionResponse:
        """Convert result to API response."""
        return FifoDeductionResponse(
            movement=MovementResponse.from_entity(result.movement),
            batch_deductions=[BatchDeductionResponse.from_entity(d) for d in result.batch_deductions],
            stock=StockResponse.from_entity(result.stock) if result.stock else None,
            message="Stock deducted successfully using FIFO",
        )
