"""Unit tests for batch, FIFO and delivery use cases with mocked stores."""

from datetime import date, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from salon_inventory.api.routes.batches import _batch_list
from salon_inventory.application.dto.requests import (
    BatchItemRequest,
    CreateBatchesRequest,
    DeductStockRequest,
    DeliverPurchaseOrderRequest,
)
from salon_inventory.application.dto.responses import BatchResponse
from salon_inventory.application.locks import KeyedLock
from salon_inventory.application.use_cases import create_product_batches as create_batches_module
from salon_inventory.application.use_cases import deduct_stock_fifo as deduct_module
from salon_inventory.application.use_cases import receive_delivery as delivery_module
from salon_inventory.application.use_cases import (
    BatchQueriesUseCase,
    CreateBatchesResult,
    CreateProductBatchesUseCase,
    DeductStockFifoUseCase,
    ReceiveDeliveryResult,
    ReceivePurchaseOrderDeliveryUseCase,
    UpdateExpirationStatusUseCase,
    build_batches,
)
from salon_inventory.config.settings import InventorySettings, Settings
from salon_inventory.core.entities import (
    Batch,
    BatchStatus,
    PurchaseOrder,
    PurchaseOrderItem,
    PurchaseOrderStatus,
    StockRecord,
)
from salon_inventory.core.exceptions import (
    ConcurrencyConflictError,
    InsufficientStockError,
    InvalidPurchaseOrderStateError,
    MissingExpirationDateError,
    PurchaseOrderNotFoundError,
    ValidationError,
)
from salon_inventory.core.services.expiry_tracker import ExpiryTracker


def _stamp_movement(batches, stock, movement):
    movement.id = "mv-1"
    return movement


@pytest.fixture
def inv_store():
    store = AsyncMock()
    store.record_fifo_deduction.side_effect = _stamp_movement
    store.create_batches.side_effect = lambda batches: batches
    store.record_delivery.side_effect = lambda order, batches, entries: batches
    return store


class TestBuildBatches:
    def test_numbers_accepted_items_only(self, today: date):
        items = [
            BatchItemRequest(product_id="PRD-001", quantity=5, expiration_date=today),
            BatchItemRequest(product_id=None, quantity=5),
            BatchItemRequest(product_id="PRD-002", quantity=0),
            BatchItemRequest(product_id="PRD-003", quantity=2, unit_price=3.0),
        ]

        batches = build_batches("PO-2025-0001", "BR-001", items, received_by="ana")

        assert [b.batch_number for b in batches] == [
            "PO-2025-0001-BATCH-001",
            "PO-2025-0001-BATCH-002",
        ]
        assert all(b.status == BatchStatus.ACTIVE for b in batches)
        assert all(b.remaining_quantity == b.quantity for b in batches)
        assert batches[1].unit_cost == 3.0
        assert batches[0].received_by == "ana"

    def test_prefix_without_order(self):
        [batch] = build_batches(None, "BR-001", [BatchItemRequest(product_id="PRD-001", quantity=1)])

        assert batch.batch_number == "PO-BATCH-001"
        assert batch.purchase_order_id == ""

    def test_received_at_applied(self):
        received = datetime(2025, 3, 1, 10, 30)
        [batch] = build_batches(
            "PO-1", "BR-001", [BatchItemRequest(product_id="PRD-001", quantity=1)], received_at=received
        )
        assert batch.received_date == received

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            build_batches("PO-1", "BR-001", [BatchItemRequest(product_id="PRD-001", quantity=1, unit_price=-2)])


class TestCreateProductBatchesUseCase:
    async def test_creates(self, inv_store):
        use_case = CreateProductBatchesUseCase(inv_store)

        result = await use_case.execute(
            "BR-001",
            CreateBatchesRequest(
                purchase_order_id="PO-1",
                items=[
                    BatchItemRequest(product_id="PRD-001", quantity=4),
                    BatchItemRequest(product_id="PRD-002", quantity=6),
                ],
            ),
        )

        assert len(result.batches) == 2
        assert result.message == "Created 2 product batches"
        inv_store.create_batches.assert_awaited_once()

    async def test_nothing_to_create(self, inv_store):
        use_case = CreateProductBatchesUseCase(inv_store)

        result = await use_case.execute(
            "BR-001", CreateBatchesRequest(items=[BatchItemRequest(product_id="PRD-001", quantity=0)])
        )

        assert result.batches == []
        assert result.message == "Created 0 product batches"
        inv_store.create_batches.assert_not_awaited()


class TestDeductStockFifoUseCase:
    async def test_deducts_in_fifo_order(self, inv_store, sample_batches: list[Batch], sample_stock: StockRecord):
        inv_store.list_batches.return_value = sample_batches
        inv_store.get_stock_by_product.return_value = sample_stock
        use_case = DeductStockFifoUseCase(inv_store, KeyedLock())

        result = await use_case.execute("BR-001", DeductStockRequest(product_id="PRD-001", quantity=15))

        assert [(d.batch_id, d.deducted, d.remaining) for d in result.batch_deductions] == [
            ("b-soon", 10, 0),
            ("b-later", 5, 5),
        ]
        assert result.stock.current_stock == 5
        assert result.movement.id == "mv-1"
        assert result.movement.batch_deductions == result.batch_deductions

        written_batches = inv_store.record_fifo_deduction.call_args.args[0]
        assert written_batches[0].status == BatchStatus.DEPLETED
        assert written_batches[1].status == BatchStatus.ACTIVE
        # Inputs untouched
        assert sample_batches[2].remaining_quantity == 10

    async def test_insufficient_writes_nothing(self, inv_store, sample_batches: list[Batch]):
        inv_store.list_batches.return_value = sample_batches
        use_case = DeductStockFifoUseCase(inv_store, KeyedLock())

        with pytest.raises(InsufficientStockError) as exc_info:
            await use_case.execute("BR-001", DeductStockRequest(product_id="PRD-001", quantity=31))

        assert exc_info.value.available == 30
        assert exc_info.value.message == "Insufficient stock. Only 30 units available."
        inv_store.record_fifo_deduction.assert_not_awaited()
        inv_store.get_stock_by_product.assert_not_awaited()

    async def test_no_active_batches(self, inv_store, sample_stock: StockRecord):
        inv_store.list_batches.return_value = []
        inv_store.get_stock_by_product.return_value = sample_stock
        use_case = DeductStockFifoUseCase(inv_store, KeyedLock())

        with pytest.raises(InsufficientStockError) as exc_info:
            await use_case.execute("BR-001", DeductStockRequest(product_id="PRD-001", quantity=1))

        assert exc_info.value.available == 0
        assert exc_info.value.code == "INSUFFICIENT_STOCK"
        inv_store.record_fifo_deduction.assert_not_awaited()

    async def test_retries_after_conflict(self, inv_store, sample_batches: list[Batch], sample_stock: StockRecord):
        inv_store.list_batches.return_value = sample_batches
        inv_store.get_stock_by_product.return_value = sample_stock
        calls = iter([ConcurrencyConflictError("product_batches", "b-soon", 0)])

        async def flaky(batches, stock, movement):
            for error in calls:
                raise error
            return _stamp_movement(batches, stock, movement)

        inv_store.record_fifo_deduction.side_effect = flaky
        use_case = DeductStockFifoUseCase(inv_store, KeyedLock())

        result = await use_case.execute("BR-001", DeductStockRequest(product_id="PRD-001", quantity=3))

        assert result.movement.id == "mv-1"
        assert inv_store.record_fifo_deduction.await_count == 2
        assert inv_store.list_batches.await_count == 2

    @pytest.mark.parametrize("retries", [0, 1, 3])
    async def test_retry_budget_counts_retries(
        self,
        inv_store,
        sample_batches: list[Batch],
        sample_stock: StockRecord,
        retries: int,
        monkeypatch: pytest.MonkeyPatch,
    ):
        settings = Settings(inventory=InventorySettings(fifo_max_retries=retries, fifo_retry_delay=0))
        monkeypatch.setattr(deduct_module, "get_settings", lambda: settings)
        inv_store.list_batches.return_value = sample_batches
        inv_store.get_stock_by_product.return_value = sample_stock
        inv_store.record_fifo_deduction.side_effect = ConcurrencyConflictError("product_batches", "b-soon", 0)
        use_case = DeductStockFifoUseCase(inv_store, KeyedLock())

        with pytest.raises(ConcurrencyConflictError):
            await use_case.execute("BR-001", DeductStockRequest(product_id="PRD-001", quantity=3))

        assert inv_store.record_fifo_deduction.await_count == retries + 1

    async def test_succeeds_on_last_retry(
        self, inv_store, sample_batches: list[Batch], sample_stock: StockRecord, monkeypatch: pytest.MonkeyPatch
    ):
        settings = Settings(inventory=InventorySettings(fifo_max_retries=3, fifo_retry_delay=0))
        monkeypatch.setattr(deduct_module, "get_settings", lambda: settings)
        inv_store.list_batches.return_value = sample_batches
        inv_store.get_stock_by_product.return_value = sample_stock
        conflicts = iter([ConcurrencyConflictError("product_batches", "b-soon", 0)] * 3)

        async def conflicting(batches, stock, movement):
            for error in conflicts:
                raise error
            return _stamp_movement(batches, stock, movement)

        inv_store.record_fifo_deduction.side_effect = conflicting
        use_case = DeductStockFifoUseCase(inv_store, KeyedLock())

        result = await use_case.execute("BR-001", DeductStockRequest(product_id="PRD-001", quantity=3))

        assert result.movement.id == "mv-1"
        assert inv_store.record_fifo_deduction.await_count == 4

    async def test_missing_ledger_row(self, inv_store, sample_batches: list[Batch]):
        inv_store.list_batches.return_value = sample_batches
        inv_store.get_stock_by_product.return_value = None
        use_case = DeductStockFifoUseCase(inv_store, KeyedLock())

        result = await use_case.execute("BR-001", DeductStockRequest(product_id="PRD-001", quantity=4))

        assert result.stock is None
        assert result.movement.previous_stock is None
        assert result.movement.new_stock is None
        assert result.movement.quantity == 4

    async def test_rejects_non_positive(self, inv_store):
        use_case = DeductStockFifoUseCase(inv_store, KeyedLock())

        with pytest.raises(ValidationError):
            await use_case.execute("BR-001", DeductStockRequest(product_id="PRD-001", quantity=0))
        inv_store.list_batches.assert_not_awaited()

    async def test_to_response_message(self, inv_store, sample_batches: list[Batch], sample_stock: StockRecord):
        inv_store.list_batches.return_value = sample_batches
        inv_store.get_stock_by_product.return_value = sample_stock
        use_case = DeductStockFifoUseCase(inv_store, KeyedLock())
        result = await use_case.execute("BR-001", DeductStockRequest(product_id="PRD-001", quantity=1))

        response = use_case.to_response(result)

        assert response.message == "Stock deducted successfully using FIFO"
        assert response.batch_deductions[0].batch_number == "PO-1-BATCH-001"


class TestUpdateExpirationStatusUseCase:
    async def test_expires_past_dates_only(self, inv_store, today: date):
        active = [
            Batch(
                id="old", batch_number="B-1", product_id="PRD-001", branch_id="BR-001",
                quantity=5, remaining_quantity=5, expiration_date=today - timedelta(days=1),
            ),
            Batch(
                id="today", batch_number="B-2", product_id="PRD-001", branch_id="BR-001",
                quantity=5, remaining_quantity=5, expiration_date=today,
            ),
            Batch(
                id="undated", batch_number="B-3", product_id="PRD-001", branch_id="BR-001",
                quantity=5, remaining_quantity=5,
            ),
        ]
        inv_store.list_batches.return_value = active
        use_case = UpdateExpirationStatusUseCase(inv_store)

        result = await use_case.execute("BR-001", today)

        assert [b.id for b in result.expired_batches] == ["old"]
        assert result.message == "Updated 1 batches to expired status"
        inv_store.expire_batches.assert_awaited_once()

    async def test_nothing_expired_writes_nothing(self, inv_store, today: date):
        inv_store.list_batches.return_value = []
        use_case = UpdateExpirationStatusUseCase(inv_store)

        result = await use_case.execute("BR-001", today)

        assert result.updated_count == 0
        inv_store.expire_batches.assert_not_awaited()


class TestBatchQueriesUseCase:
    async def test_negative_days_ahead(self, inv_store):
        with pytest.raises(ValidationError):
            await BatchQueriesUseCase(inv_store).expiring("BR-001", days_ahead=-1)

    async def test_expiring_window(self, inv_store, sample_batches: list[Batch], today: date):
        inv_store.list_batches.return_value = sample_batches

        soon = await BatchQueriesUseCase(inv_store).expiring("BR-001", days_ahead=7, today=today)

        assert [b.id for b in soon] == ["b-soon"]

    async def test_default_window(self, inv_store, sample_batches: list[Batch], today: date):
        inv_store.list_batches.return_value = sample_batches

        within = await BatchQueriesUseCase(inv_store).expiring("BR-001", today=today)

        assert [b.id for b in within] == ["b-soon", "b-later"]


class TestReceivePurchaseOrderDeliveryUseCase:
    @pytest.fixture(autouse=True)
    def _setup(self, inv_store, sample_purchase_order: PurchaseOrder, sample_product):
        self.inv_store = inv_store
        self.inv_store.get_stock_by_product.return_value = None
        self.po_store = AsyncMock()
        self.po_store.get_purchase_order.return_value = sample_purchase_order
        self.catalog = AsyncMock()
        self.catalog.get_product.return_value = sample_product
        self.order = sample_purchase_order
        self.use_case = ReceivePurchaseOrderDeliveryUseCase(
            self.inv_store, self.po_store, self.catalog, KeyedLock()
        )

    async def test_not_found(self):
        self.po_store.get_purchase_order.return_value = None

        with pytest.raises(PurchaseOrderNotFoundError):
            await self.use_case.execute("PO-404", DeliverPurchaseOrderRequest())

    @pytest.mark.parametrize(
        "status",
        [PurchaseOrderStatus.PENDING, PurchaseOrderStatus.DELIVERED, PurchaseOrderStatus.CANCELLED],
    )
    async def test_wrong_state(self, status: PurchaseOrderStatus, today: date):
        self.order.status = status

        with pytest.raises(InvalidPurchaseOrderStateError):
            await self.use_case.execute(
                self.order.id, DeliverPurchaseOrderRequest(expiration_dates={"PRD-001": today})
            )
        self.inv_store.record_delivery.assert_not_awaited()

    async def test_missing_expiration_dates(self, today: date):
        self.order.items.append(PurchaseOrderItem(product_id="PRD-002", quantity=5))

        with pytest.raises(MissingExpirationDateError) as exc_info:
            await self.use_case.execute(
                self.order.id, DeliverPurchaseOrderRequest(expiration_dates={"PRD-001": today})
            )

        assert exc_info.value.details["product_ids"] == ["PRD-002"]
        self.inv_store.record_delivery.assert_not_awaited()

    async def test_delivers(self, today: date):
        expires = today + timedelta(days=10)

        result = await self.use_case.execute(
            self.order.id,
            DeliverPurchaseOrderRequest(expiration_dates={"PRD-001": expires}, received_by="ana"),
        )

        assert [b.batch_number for b in result.batches] == ["PO-2025-0001-BATCH-001"]
        assert result.batches[0].expiration_date == expires
        assert result.stocks[0].current_stock == 100
        assert result.stocks[0].product_name == "Argan Oil Shampoo"
        assert result.stocks[0].supplier == "Beauty Supply Co"
        assert result.message == "Purchase order PO-2025-0001 delivered: created 1 product batches"
        assert self.order.delivered_by == "ana"

    async def test_duplicate_lines_summed(self, today: date):
        self.order.items.append(
            PurchaseOrderItem(product_id="PRD-001", product_name="Argan Oil Shampoo", quantity=20, unit_price=13.0)
        )

        result = await self.use_case.execute(
            self.order.id, DeliverPurchaseOrderRequest(expiration_dates={"PRD-001": today})
        )

        assert len(result.batches) == 2
        _, _, entries = self.inv_store.record_delivery.call_args.args
        assert len(entries) == 1
        stock, movement = entries[0]
        assert stock.current_stock == 120
        assert stock.unit_cost == 13.0
        assert movement.quantity == 120
        assert movement.reason == "Purchase order delivery"


class TestExpiryLabelsFollowSettings:
    """Every batch response labels expiry with the configured windows."""

    @pytest.fixture
    def narrow_settings(self, monkeypatch: pytest.MonkeyPatch) -> Settings:
        settings = Settings(inventory=InventorySettings(critical_days=3, expiring_soon_days=10))
        monkeypatch.setattr(create_batches_module, "get_settings", lambda: settings)
        monkeypatch.setattr(delivery_module, "get_settings", lambda: settings)
        return settings

    @pytest.fixture
    def five_day_batch(self, today: date) -> Batch:
        return Batch(
            id="b-5",
            batch_number="PO-2025-0001-BATCH-001",
            product_id="PRD-001",
            branch_id="BR-001",
            purchase_order_id="PO-2025-0001",
            quantity=100,
            remaining_quantity=100,
            expiration_date=today + timedelta(days=5),
        )

    def test_create_batches_response(self, narrow_settings: Settings, five_day_batch: Batch, today: date):
        response = CreateProductBatchesUseCase(AsyncMock()).to_response(
            CreateBatchesResult(batches=[five_day_batch]), today
        )

        assert response.batches[0].expiry_status == "Expiring Soon"

    def test_delivery_response(
        self,
        narrow_settings: Settings,
        five_day_batch: Batch,
        sample_purchase_order: PurchaseOrder,
        today: date,
    ):
        result = ReceiveDeliveryResult(purchase_order=sample_purchase_order, batches=[five_day_batch], stocks=[])

        response = ReceivePurchaseOrderDeliveryUseCase(AsyncMock(), AsyncMock(), AsyncMock(), KeyedLock()).to_response(
            result, today
        )

        assert response.batches[0].expiry_status == "Expiring Soon"

    def test_matches_batch_listing(self, narrow_settings: Settings, five_day_batch: Batch, today: date):
        created = CreateProductBatchesUseCase(AsyncMock()).to_response(
            CreateBatchesResult(batches=[five_day_batch]), today
        )
        listed = _batch_list([five_day_batch], today, narrow_settings)

        assert created.batches[0].expiry_status == listed.batches[0].expiry_status

    def test_injected_tracker_wins(self, five_day_batch: Batch, today: date):
        use_case = CreateProductBatchesUseCase(AsyncMock(), tracker=ExpiryTracker(critical_days=5, expiring_soon_days=10))

        response = use_case.to_response(CreateBatchesResult(batches=[five_day_batch]), today)

        assert response.batches[0].expiry_status == "Critical"
        assert response.batches[0].days_until_expiry == 5

    def test_batch_response_uses_given_tracker(self, five_day_batch: Batch, today: date):
        response = BatchResponse.from_entity(five_day_batch, today, ExpiryTracker(critical_days=1, expiring_soon_days=4))

        assert response.expiry_status == "Good"
