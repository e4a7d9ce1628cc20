"""Add Stock Use Case: stock-in with ledger create-or-increment."""

from dataclasses import dataclass

from salon_inventory.application.dto.requests import AddStockRequest
from salon_inventory.application.dto.responses import (
    MovementResponse,
    StockChangeResponse,
    StockResponse,
)
from salon_inventory.application.locks import KeyedLock, get_stock_locks
from salon_inventory.application.use_cases.validation import (
    require_non_negative,
    require_positive_quantity,
)
from salon_inventory.config import get_logger
from salon_inventory.core.entities.inventory import InventoryMovement, StockRecord
from salon_inventory.core.interfaces.catalog import IProductCatalog
from salon_inventory.core.interfaces.inventory_store import IInventoryStore
from salon_inventory.core.services.stock_ledger import MovementInfo, StockDetails, StockLedger

logger = get_logger(__name__)


@dataclass
class AddStockResult:
    """Result of adding stock."""

    stock: StockRecord
    movement: InventoryMovement
    created: bool = False  # True if the ledger record was created


class AddStockUseCase:
    """Create or increment a stock record and append a stock_in movement."""

    def __init__(
        self,
        inventory_store: IInventoryStore | None = None,
        product_catalog: IProductCatalog | None = None,
        locks: KeyedLock | None = None,
    ):
        self._inventory_store = inventory_store
        self._product_catalog = product_catalog
        self._locks = locks or get_stock_locks()
        self._ledger = StockLedger()

    async def _get_inventory_store(self) -> IInventoryStore:
        if self._inventory_store is None:
            from salon_inventory.infrastructure.storage.sqlite import get_inventory_store

            self._inventory_store = await get_inventory_store()
        return self._inventory_store

    async def _get_product_catalog(self) -> IProductCatalog:
        if self._product_catalog is None:
            from salon_inventory.infrastructure.storage.sqlite import get_product_catalog

            self._product_catalog = await get_product_catalog()
        return self._product_catalog

    async def execute(self, branch_id: str, request: AddStockRequest) -> AddStockResult:
        """Execute add stock use case."""
        require_positive_quantity(request.quantity)
        require_non_negative(request.unit_cost, "unit_cost")
        require_non_negative(request.min_stock, "min_stock")
        require_non_negative(request.max_stock, "max_stock")

        logger.info(
            "add_stock_started",
            branch_id=branch_id,
            product_id=request.product_id,
            quantity=request.quantity,
        )

        inv_store = await self._get_inventory_store()

        async with self._locks.hold(branch_id, request.product_id):
            existing = await inv_store.get_stock_by_product(branch_id, request.product_id)

            product = None
            if existing is None and not request.product_name:
                catalog = await self._get_product_catalog()
                product = await catalog.get_product(request.product_id)

            stock, movement = self._ledger.stock_in(
                existing,
                branch_id=branch_id,
                product_id=request.product_id,
                quantity=request.quantity,
                info=MovementInfo(
                    reason=request.reason,
                    notes=request.notes,
                    created_by=request.created_by,
                ),
                unit_cost=request.unit_cost,
                min_stock=request.min_stock,
                max_stock=request.max_stock,
                details=StockDetails(
                    product_name=request.product_name,
                    brand=request.brand,
                    category=request.category,
                    location=request.location,
                    supplier=request.supplier,
                ),
                product=product,
            )
            stock, movement = await inv_store.record_stock_movement(stock, movement)

        logger.info(
            "stock_added",
            stock_id=stock.id,
            previous_stock=movement.previous_stock,
            new_stock=stock.current_stock,
            status=stock.status,
        )

        return AddStockResult(stock=stock, movement=movement, created=existing is None)

    def to_response(self, result: AddStockResult) -> StockChangeResponse:
        """Convert result to API response."""
        return StockChangeResponse(
            stock=StockResponse.from_entity(result.stock),
            movement=MovementResponse.from_entity(result.movement),
            created=result.created,
            message="Stock added successfully",
        )
