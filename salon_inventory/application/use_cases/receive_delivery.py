"""Receive Purchase Order Delivery Use Case: batches + ledger + Delivered, in one transaction."""

from contextlib import AsyncExitStack
from dataclasses import dataclass
from datetime import date

from salon_inventory.application.dto.requests import BatchItemRequest, DeliverPurchaseOrderRequest
from salon_inventory.application.dto.responses import (
    BatchResponse,
    DeliveryResponse,
    StockResponse,
)
from salon_inventory.application.locks import KeyedLock, get_stock_locks
from salon_inventory.application.use_cases.create_product_batches import build_batches
from salon_inventory.config import get_logger, get_settings
from salon_inventory.core.entities.batch import Batch
from salon_inventory.core.entities.inventory import InventoryMovement, StockRecord, utcnow
from salon_inventory.core.entities.purchase_order import PurchaseOrder
from salon_inventory.core.exceptions import (
    InvalidPurchaseOrderStateError,
    MissingExpirationDateError,
    PurchaseOrderNotFoundError,
)
from salon_inventory.core.interfaces.catalog import IProductCatalog, IPurchaseOrderStore
from salon_inventory.core.interfaces.inventory_store import IInventoryStore
from salon_inventory.core.services.expiry_tracker import ExpiryTracker
from salon_inventory.core.services.stock_ledger import MovementInfo, StockDetails, StockLedger

logger = get_logger(__name__)

DELIVERY_REASON = "Purchase order delivery"


@dataclass
class ReceiveDeliveryResult:
    """Result of receiving a purchase order delivery."""

    purchase_order: PurchaseOrder
    batches: list[Batch]
    stocks: list[StockRecord]

    @property
    def message(self) -> str:
        return (
            f"Purchase order {self.purchase_order.id} delivered: "
            f"created {len(self.batches)} product batches"
        )


class ReceivePurchaseOrderDeliveryUseCase:
    """
    Receive a delivered purchase order.

    Every line item must come with an expiration date. Batch creation,
    the ledger increments and the Delivered status commit together or
    not at all.
    """

    def __init__(
        self,
        inventory_store: IInventoryStore | None = None,
        purchase_order_store: IPurchaseOrderStore | None = None,
        product_catalog: IProductCatalog | None = None,
        locks: KeyedLock | None = None,
        tracker: ExpiryTracker | None = None,
    ):
        self._inventory_store = inventory_store
        self._purchase_order_store = purchase_order_store
        self._product_catalog = product_catalog
        self._locks = locks or get_stock_locks()
        self._ledger = StockLedger()
        self._tracker = tracker or ExpiryTracker.from_settings(get_settings().inventory)

    async def _get_inventory_store(self) -> IInventoryStore:
        if self._inventory_store is None:
            from salon_inventory.infrastructure.storage.sqlite import get_inventory_store

            self._inventory_store = await get_inventory_store()
        return self._inventory_store

    async def _get_purchase_order_store(self) -> IPurchaseOrderStore:
        if self._purchase_order_store is None:
            from salon_inventory.infrastructure.storage.sqlite import get_purchase_order_store

            self._purchase_order_store = await get_purchase_order_store()
        return self._purchase_order_store

    async def _get_product_catalog(self) -> IProductCatalog:
        if self._product_catalog is None:
            from salon_inventory.infrastructure.storage.sqlite import get_product_catalog

            self._product_catalog = await get_product_catalog()
        return self._product_catalog

    async def execute(
        self, purchase_order_id: str, request: DeliverPurchaseOrderRequest
    ) -> ReceiveDeliveryResult:
        """Execute delivery use case."""
        logger.info("delivery_started", purchase_order_id=purchase_order_id)

        po_store = await self._get_purchase_order_store()
        order = await po_store.get_purchase_order(purchase_order_id)
        if order is None:
            raise PurchaseOrderNotFoundError(purchase_order_id)
        if not order.is_deliverable:
            raise InvalidPurchaseOrderStateError(purchase_order_id, order.status.value)

        # 1. Collect every missing expiration date before writing anything
        lines = [item for item in order.items if item.product_id and item.quantity > 0]
        missing = [
            item.product_id for item in lines if request.expiration_dates.get(item.product_id) is None
        ]
        if missing:
            raise MissingExpirationDateError(purchase_order_id, missing)

        received_at = request.received_at or utcnow()
        batches = build_batches(
            order.id,
            order.branch_id,
            [
                BatchItemRequest(
                    product_id=item.product_id,
                    product_name=item.product_name,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    expiration_date=request.expiration_dates[item.product_id],
                )
                for item in lines
            ],
            received_by=request.received_by,
            received_at=received_at,
        )

        # 2. One ledger increment per product, summing duplicate lines
        quantities: dict[str, int] = {}
        for batch in batches:
            quantities[batch.product_id] = quantities.get(batch.product_id, 0) + batch.quantity

        inv_store = await self._get_inventory_store()
        catalog = await self._get_product_catalog()

        async with AsyncExitStack() as stack:
            # Sorted acquisition keeps concurrent deliveries from deadlocking
            for product_id in sorted(quantities):
                await stack.enter_async_context(self._locks.hold(order.branch_id, product_id))

            ledger_entries: list[tuple[StockRecord, InventoryMovement]] = []
            for product_id, quantity in quantities.items():
                first = next(b for b in batches if b.product_id == product_id)
                last = [b for b in batches if b.product_id == product_id][-1]

                existing = await inv_store.get_stock_by_product(order.branch_id, product_id)
                product = await catalog.get_product(product_id) if existing is None else None

                ledger_entries.append(
                    self._ledger.stock_in(
                        existing,
                        branch_id=order.branch_id,
                        product_id=product_id,
                        quantity=quantity,
                        info=MovementInfo(
                            reason=DELIVERY_REASON,
                            notes=f"Purchase order {order.id}",
                            created_by=request.received_by,
                        ),
                        unit_cost=last.unit_cost,
                        details=StockDetails(
                            product_name=first.product_name or None,
                            supplier=order.supplier_name or None,
                        ),
                        product=product,
                    )
                )

            order.actual_delivery = received_at
            order.delivered_by = request.received_by
            batches = await inv_store.record_delivery(order, batches, ledger_entries)

        stocks = [stock for stock, _ in ledger_entries]
        logger.info(
            "delivery_complete",
            purchase_order_id=order.id,
            branch_id=order.branch_id,
            batches=len(batches),
            products=len(stocks),
        )
        return ReceiveDeliveryResult(purchase_order=order, batches=batches, stocks=stocks)

    def to_response(self, result: ReceiveDeliveryResult, today: date | None = None) -> DeliveryResponse:
        """Convert result to API response."""
        today = today or date.today()
        return DeliveryResponse(
            purchase_order_id=result.purchase_order.id,
            status=result.purchase_order.status.value,
            batches=[BatchResponse.from_entity(b, today, self._tracker) for b in result.batches],
            stocks=[StockResponse.from_entity(s) for s in result.stocks],
            message=result.message,
        )
