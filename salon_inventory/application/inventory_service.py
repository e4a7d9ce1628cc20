"""
InventoryService - the in-process boundary of the inventory core.

Callers (UI pages, other services) check ``success`` on every result
instead of catching exceptions. Domain errors keep their error code;
anything unexpected is logged with its type and reported as a
DATABASE_ERROR failure.
"""

from collections.abc import Awaitable, Callable
from datetime import date, datetime
from typing import Any, Literal, TypeVar

from pydantic import ValidationError as PydanticValidationError

from salon_inventory.application.dto.requests import (
    AddStockRequest,
    BatchItemRequest,
    CreateBatchesRequest,
    DeductStockRequest,
    DeliverPurchaseOrderRequest,
    ReduceStockRequest,
    UpdateStockRequest,
)
from salon_inventory.application.dto.results import (
    BatchListResult,
    DeductionResult,
    DeliveryResult,
    ExpirationSweepResult,
    MovementListResult,
    OperationResult,
    StatsResult,
    StockListResult,
    StockResult,
)
from salon_inventory.application.locks import KeyedLock
from salon_inventory.application.use_cases import (
    AddStockUseCase,
    BatchQueriesUseCase,
    CreateProductBatchesUseCase,
    DeductStockFifoUseCase,
    ReceivePurchaseOrderDeliveryUseCase,
    ReduceStockUseCase,
    StockQueriesUseCase,
    UpdateExpirationStatusUseCase,
    UpdateStockUseCase,
)
from salon_inventory.config import get_logger
from salon_inventory.core.entities import BatchStatus, MovementType, StockStatus
from salon_inventory.core.exceptions import (
    DatabaseError,
    InsufficientStockError,
    SalonInventoryError,
    ValidationError,
)
from salon_inventory.core.interfaces import IInventoryStore, IProductCatalog, IPurchaseOrderStore

logger = get_logger(__name__)

R = TypeVar("R", bound=OperationResult)
E = TypeVar("E")


def _parse_enum(enum_type: type[E], value: Any, field: str) -> E | None:
    if value is None or isinstance(value, enum_type):
        return value
    try:
        return enum_type(value)  # type: ignore[call-arg]
    except ValueError:
        raise ValidationError(field, "unknown value", value) from None


class InventoryService:
    """
    Facade over the inventory use cases.

    Every method returns a result model and never raises.
    """

    def __init__(
        self,
        inventory_store: IInventoryStore | None = None,
        product_catalog: IProductCatalog | None = None,
        purchase_order_store: IPurchaseOrderStore | None = None,
        locks: KeyedLock | None = None,
    ):
        self._add_stock = AddStockUseCase(inventory_store, product_catalog, locks)
        self._reduce_stock = ReduceStockUseCase(inventory_store, locks)
        self._update_stock = UpdateStockUseCase(inventory_store, locks)
        self._stock_queries = StockQueriesUseCase(inventory_store)
        self._create_batches = CreateProductBatchesUseCase(inventory_store)
        self._batch_queries = BatchQueriesUseCase(inventory_store)
        self._deduct_fifo = DeductStockFifoUseCase(inventory_store, locks)
        self._expiration = UpdateExpirationStatusUseCase(inventory_store)
        self._delivery = ReceivePurchaseOrderDeliveryUseCase(
            inventory_store, purchase_order_store, product_catalog, locks
        )

    async def _run(
        self,
        operation: str,
        result_type: type[R],
        call: Callable[[], Awaitable[dict[str, Any]]],
    ) -> R:
        """Run one operation and wrap its outcome in ``result_type``."""
        try:
            fields = await call()
        except InsufficientStockError as e:
            logger.warning(
                "inventory_operation_failed",
                operation=operation,
                error_code=e.code,
                error=e.message,
            )
            extra = {"available": e.available} if "available" in result_type.model_fields else {}
            return result_type(success=False, message=e.message, error_code=e.code, **extra)
        except SalonInventoryError as e:
            logger.warning(
                "inventory_operation_failed",
                operation=operation,
                error_code=e.code,
                error=e.message,
            )
            return result_type(success=False, message=e.message, error_code=e.code)
        except PydanticValidationError as e:
            logger.warning("inventory_operation_invalid", operation=operation, error=str(e))
            return result_type(
                success=False,
                message=f"Invalid input: {e.error_count()} validation error(s)",
                error_code="VALIDATION_ERROR",
            )
        except Exception as e:
            logger.error(
                "inventory_operation_error",
                operation=operation,
                error=str(e),
                error_type=type(e).__name__,
            )
            err = DatabaseError(operation, str(e))
            return result_type(success=False, message=err.message, error_code=err.code)
        return result_type(success=True, **fields)

    # Stock ledger

    async def add_stock(
        self,
        branch_id: str,
        product_id: str,
        quantity: int,
        unit_cost: float | None = None,
        min_stock: int | None = None,
        max_stock: int | None = None,
        **metadata: Any,
    ) -> StockResult:
        """
        Create or increment a stock record.

        metadata: product_name, brand, category, location, supplier,
        reason, notes, created_by.
        """

        async def call() -> dict[str, Any]:
            request = AddStockRequest(
                product_id=product_id,
                quantity=quantity,
                unit_cost=unit_cost,
                min_stock=min_stock,
                max_stock=max_stock,
                **metadata,
            )
            result = await self._add_stock.execute(branch_id, request)
            return {
                "message": "Stock added successfully",
                "stock": result.stock,
                "movement": result.movement,
            }

        return await self._run("add_stock", StockResult, call)

    async def reduce_stock(
        self,
        branch_id: str,
        product_id: str,
        quantity: int,
        reason: str = "Stock reduced",
        **metadata: Any,
    ) -> StockResult:
        """Decrement the ledger directly, clamping at zero."""

        async def call() -> dict[str, Any]:
            request = ReduceStockRequest(
                product_id=product_id, quantity=quantity, reason=reason, **metadata
            )
            result = await self._reduce_stock.execute(branch_id, request)
            return {
                "message": "Stock reduced successfully",
                "stock": result.stock,
                "movement": result.movement,
            }

        return await self._run("reduce_stock", StockResult, call)

    async def update_stock(self, stock_id: str, **fields: Any) -> StockResult:
        """Patch min_stock, max_stock, unit_cost, location, supplier or current_stock."""

        async def call() -> dict[str, Any]:
            stock = await self._update_stock.execute(stock_id, UpdateStockRequest(**fields))
            return {"message": "Stock updated successfully", "stock": stock}

        return await self._run("update_stock", StockResult, call)

    async def get_stock(self, stock_id: str) -> StockResult:
        async def call() -> dict[str, Any]:
            return {"stock": await self._stock_queries.get_stock(stock_id)}

        return await self._run("get_stock", StockResult, call)

    async def get_branch_stocks(
        self,
        branch_id: str,
        status: StockStatus | str | None = None,
        category: str | None = None,
        order_by: str = "product_name",
        order_direction: Literal["asc", "desc"] = "asc",
    ) -> StockListResult:
        """Stock records of a branch, filtered and sorted."""

        async def call() -> dict[str, Any]:
            stocks = await self._stock_queries.list_stocks(
                branch_id,
                status=_parse_enum(StockStatus, status, "status"),
                category=category,
                order_by=order_by,
                order_direction=order_direction,
            )
            return {"stocks": stocks}

        return await self._run("get_branch_stocks", StockListResult, call)

    async def get_inventory_movements(
        self,
        branch_id: str,
        movement_type: MovementType | str | None = None,
        product_id: str | None = None,
        limit: int | None = None,
    ) -> MovementListResult:
        """Movements of a branch, newest first."""

        async def call() -> dict[str, Any]:
            movements = await self._stock_queries.list_movements(
                branch_id,
                movement_type=_parse_enum(MovementType, movement_type, "type"),
                product_id=product_id,
                limit=limit,
            )
            return {"movements": movements}

        return await self._run("get_inventory_movements", MovementListResult, call)

    async def get_inventory_stats(self, branch_id: str) -> StatsResult:
        async def call() -> dict[str, Any]:
            return {"stats": await self._stock_queries.stats(branch_id)}

        return await self._run("get_inventory_stats", StatsResult, call)

    # Batches

    async def create_product_batches(
        self,
        purchase_order_id: str | None,
        branch_id: str,
        items: Any,
        received_by: str = "",
        received_at: datetime | None = None,
    ) -> BatchListResult:
        """Create one active batch per valid line item, atomically. The ledger is not touched."""

        async def call() -> dict[str, Any]:
            if not isinstance(items, list):
                raise ValidationError("items", "Invalid delivery data: items array required", items)
            request = CreateBatchesRequest(
                purchase_order_id=purchase_order_id,
                items=[BatchItemRequest.model_validate(item) for item in items],
                received_by=received_by,
                received_at=received_at,
            )
            result = await self._create_batches.execute(branch_id, request)
            return {"message": result.message, "batches": result.batches}

        return await self._run("create_product_batches", BatchListResult, call)

    async def get_product_batches(
        self,
        branch_id: str,
        product_id: str,
        status: BatchStatus | str | None = None,
    ) -> BatchListResult:
        """One product's batches at a branch, FIFO-ordered."""
        return await self.get_branch_batches(branch_id, product_id=product_id, status=status)

    async def get_branch_batches(
        self,
        branch_id: str,
        product_id: str | None = None,
        status: BatchStatus | str | None = None,
    ) -> BatchListResult:
        """A branch's batches, FIFO-ordered."""

        async def call() -> dict[str, Any]:
            batches = await self._batch_queries.list_batches(
                branch_id,
                product_id=product_id,
                status=_parse_enum(BatchStatus, status, "status"),
            )
            return {"batches": batches}

        return await self._run("get_branch_batches", BatchListResult, call)

    async def deduct_stock_fifo(
        self,
        branch_id: str,
        product_id: str,
        quantity: int,
        reason: str = "Stock reduced",
        **metadata: Any,
    ) -> DeductionResult:
        """Deduct across active batches, soonest expiration first; all or nothing."""

        async def call() -> dict[str, Any]:
            request = DeductStockRequest(
                product_id=product_id, quantity=quantity, reason=reason, **metadata
            )
            result = await self._deduct_fifo.execute(branch_id, request)
            return {
                "message": "Stock deducted successfully using FIFO",
                "movement": result.movement,
                "batch_deductions": result.batch_deductions,
            }

        return await self._run("deduct_stock_fifo", DeductionResult, call)

    # Expiry

    async def update_batch_expiration_status(
        self, branch_id: str, today: date | None = None
    ) -> ExpirationSweepResult:
        """Flip active batches past their expiration date to expired."""

        async def call() -> dict[str, Any]:
            result = await self._expiration.execute(branch_id, today=today)
            return {"message": result.message, "updated_count": result.updated_count}

        return await self._run("update_batch_expiration_status", ExpirationSweepResult, call)

    async def get_expiring_batches(
        self,
        branch_id: str,
        days_ahead: int | None = None,
        today: date | None = None,
    ) -> BatchListResult:
        async def call() -> dict[str, Any]:
            batches = await self._batch_queries.expiring(branch_id, days_ahead, today)
            return {"batches": batches}

        return await self._run("get_expiring_batches", BatchListResult, call)

    async def get_expired_batches(self, branch_id: str, today: date | None = None) -> BatchListResult:
        async def call() -> dict[str, Any]:
            return {"batches": await self._batch_queries.expired(branch_id, today)}

        return await self._run("get_expired_batches", BatchListResult, call)

    # Purchase-order delivery

    async def receive_purchase_order_delivery(
        self,
        purchase_order_id: str,
        expiration_dates: dict[str, date],
        received_by: str = "",
        received_at: datetime | None = None,
    ) -> DeliveryResult:
        """Create batches, increment the ledger and mark the order Delivered in one transaction."""

        async def call() -> dict[str, Any]:
            request = DeliverPurchaseOrderRequest(
                expiration_dates=expiration_dates,
                received_by=received_by,
                received_at=received_at,
            )
            result = await self._delivery.execute(purchase_order_id, request)
            return {
                "message": result.message,
                "batches": result.batches,
                "stocks": result.stocks,
            }

        return await self._run("receive_purchase_order_delivery", DeliveryResult, call)

