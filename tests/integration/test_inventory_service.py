"""End-to-end tests of InventoryService against a migrated SQLite database."""

import asyncio
from datetime import date, timedelta
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from salon_inventory.application.inventory_service import InventoryService
from salon_inventory.application.locks import KeyedLock
from salon_inventory.core.entities import (
    BatchStatus,
    Product,
    PurchaseOrder,
    PurchaseOrderStatus,
    StockStatus,
)
from salon_inventory.infrastructure.storage.sqlite import (
    SQLiteProductCatalog,
    SQLitePurchaseOrderStore,
)


def _item(product_id: str, quantity: int, expires: date | None = None, price: float = 10.0) -> dict:
    return {
        "product_id": product_id,
        "product_name": f"Product {product_id}",
        "quantity": quantity,
        "unit_price": price,
        "expiration_date": expires,
    }


async def _ledger_and_remaining(service: InventoryService, product_id: str) -> tuple[int, int]:
    """Ledger quantity and the summed remaining quantity of the product's batches."""
    stocks = (await service.get_branch_stocks("BR-001")).stocks
    ledger = next(s.current_stock for s in stocks if s.product_id == product_id)
    batches = (await service.get_product_batches("BR-001", product_id)).batches
    return ledger, sum(b.remaining_quantity for b in batches)


class TestInventoryService:
    @pytest.fixture(autouse=True)
    def _setup(self, inventory_db: Path):
        self.service = InventoryService(locks=KeyedLock())

    async def test_status_table(self):
        await self.service.add_stock("BR-001", "P-IN", 6, min_stock=5)
        await self.service.add_stock("BR-001", "P-LOW", 5, min_stock=5)
        await self.service.add_stock("BR-001", "P-OUT", 3, min_stock=5)
        await self.service.reduce_stock("BR-001", "P-OUT", 3)

        stocks = {s.product_id: s.status for s in (await self.service.get_branch_stocks("BR-001")).stocks}

        assert stocks == {
            "P-IN": StockStatus.IN_STOCK,
            "P-LOW": StockStatus.LOW_STOCK,
            "P-OUT": StockStatus.OUT_OF_STOCK,
        }

        stats = (await self.service.get_inventory_stats("BR-001")).stats
        assert (stats.in_stock_count, stats.low_stock_count, stats.out_of_stock_count) == (1, 1, 1)

    async def test_add_stock_uses_catalog(self, sample_product: Product):
        await SQLiteProductCatalog().save_product(sample_product)

        result = await self.service.add_stock("BR-001", "PRD-001", 10, min_stock=2)

        assert result.success
        assert result.message == "Stock added successfully"
        assert result.stock.product_name == "Argan Oil Shampoo"
        assert result.stock.unit_cost == 12.5
        assert result.movement.new_stock == 10

    async def test_reduce_clamps_at_zero(self):
        await self.service.add_stock("BR-001", "PRD-001", 4)

        result = await self.service.reduce_stock("BR-001", "PRD-001", 10)

        assert result.success
        assert result.stock.current_stock == 0
        assert result.movement.previous_stock == 4
        assert result.movement.new_stock == 0

    async def test_update_stock(self):
        created = await self.service.add_stock("BR-001", "PRD-001", 8, min_stock=2)

        result = await self.service.update_stock(created.stock.id, min_stock=10, location="Shelf A")

        assert result.success
        assert result.stock.status == StockStatus.LOW_STOCK
        stored = await self.service.get_stock(created.stock.id)
        assert stored.stock.location == "Shelf A"
        assert stored.stock.version == 1

    async def test_unknown_stock(self):
        result = await self.service.get_stock("nope")

        assert not result.success
        assert result.error_code == "STOCK_NOT_FOUND"

    async def test_invalid_quantity(self):
        result = await self.service.add_stock("BR-001", "PRD-001", -1)

        assert not result.success
        assert result.error_code == "VALIDATION_ERROR"
        assert (await self.service.get_branch_stocks("BR-001")).stocks == []

    async def test_fifo_order_across_batches(self, today: date):
        await self.service.create_product_batches(
            "PO-1",
            "BR-001",
            [
                _item("PRD-001", 10, today + timedelta(days=20)),
                _item("PRD-001", 10, None),
                _item("PRD-001", 10, today + timedelta(days=5)),
            ],
        )
        await self.service.add_stock("BR-001", "PRD-001", 30)

        result = await self.service.deduct_stock_fifo("BR-001", "PRD-001", 15)

        assert result.success
        assert [(d.batch_number, d.deducted, d.remaining) for d in result.batch_deductions] == [
            ("PO-1-BATCH-003", 10, 0),
            ("PO-1-BATCH-001", 5, 5),
        ]
        batches = {b.batch_number: b for b in (await self.service.get_branch_batches("BR-001")).batches}
        assert batches["PO-1-BATCH-003"].status == BatchStatus.DEPLETED
        assert batches["PO-1-BATCH-001"].remaining_quantity == 5
        assert batches["PO-1-BATCH-002"].remaining_quantity == 10
        assert await _ledger_and_remaining(self.service, "PRD-001") == (15, 15)

    async def test_insufficient_has_no_side_effects(self, today: date):
        await self.service.create_product_batches(
            "PO-1", "BR-001", [_item("PRD-001", 10, today + timedelta(days=5))]
        )
        await self.service.add_stock("BR-001", "PRD-001", 10)

        result = await self.service.deduct_stock_fifo("BR-001", "PRD-001", 11)

        assert not result.success
        assert result.error_code == "INSUFFICIENT_STOCK"
        assert result.available == 10
        assert result.message == "Insufficient stock. Only 10 units available."
        assert await _ledger_and_remaining(self.service, "PRD-001") == (10, 10)
        out = await self.service.get_inventory_movements("BR-001", movement_type="stock_out")
        assert out.movements == []

    async def test_ledger_without_batches_is_insufficient(self):
        await self.service.add_stock("BR-001", "PRD-001", 25)

        result = await self.service.deduct_stock_fifo("BR-001", "PRD-001", 1)

        assert not result.success
        assert result.error_code == "INSUFFICIENT_STOCK"
        assert result.available == 0
        assert result.message == "Insufficient stock. Only 0 units available."
        stocks = (await self.service.get_branch_stocks("BR-001")).stocks
        assert [s.current_stock for s in stocks] == [25]
        out = await self.service.get_inventory_movements("BR-001", movement_type="stock_out")
        assert out.movements == []

    async def test_expired_batches_are_not_drawn(self, today: date):
        await self.service.create_product_batches(
            "PO-1",
            "BR-001",
            [_item("PRD-001", 10, today - timedelta(days=1)), _item("PRD-001", 4, today + timedelta(days=3))],
        )
        await self.service.update_batch_expiration_status("BR-001", today)

        result = await self.service.deduct_stock_fifo("BR-001", "PRD-001", 5)

        assert not result.success
        assert result.available == 4

    async def test_expiration_sweep_is_idempotent(self, today: date):
        await self.service.create_product_batches(
            "PO-1",
            "BR-001",
            [
                _item("PRD-001", 5, today - timedelta(days=2)),
                _item("PRD-001", 5, today),
                _item("PRD-002", 5, None),
            ],
        )

        first = await self.service.update_batch_expiration_status("BR-001", today)
        second = await self.service.update_batch_expiration_status("BR-001", today)

        assert first.updated_count == 1
        assert first.message == "Updated 1 batches to expired status"
        assert second.updated_count == 0

        expired = (await self.service.get_expired_batches("BR-001", today)).batches
        assert [b.batch_number for b in expired] == ["PO-1-BATCH-001"]
        assert expired[0].remaining_quantity == 5

    async def test_expiring_window(self, today: date):
        await self.service.create_product_batches(
            "PO-1",
            "BR-001",
            [
                _item("PRD-001", 5, today + timedelta(days=40)),
                _item("PRD-001", 5, today + timedelta(days=3)),
                _item("PRD-002", 5, today + timedelta(days=30)),
            ],
        )

        within = await self.service.get_expiring_batches("BR-001", days_ahead=30, today=today)

        assert [b.batch_number for b in within.batches] == ["PO-1-BATCH-002", "PO-1-BATCH-003"]

    async def test_create_batches_rejects_non_list(self):
        result = await self.service.create_product_batches("PO-1", "BR-001", "not-a-list")

        assert not result.success
        assert result.error_code == "VALIDATION_ERROR"
        assert "items array required" in result.message

    async def test_create_batches_skips_invalid_items(self, today: date):
        result = await self.service.create_product_batches(
            "PO-1", "BR-001", [_item("PRD-001", 0, today), {"quantity": 5}, _item("PRD-002", 3, today)]
        )

        assert result.success
        assert result.message == "Created 1 product batches"
        assert result.batches[0].batch_number == "PO-1-BATCH-001"

    async def test_concurrent_deductions_never_oversell(self, today: date):
        await self.service.create_product_batches(
            "PO-1", "BR-001", [_item("PRD-001", 20, today + timedelta(days=10))]
        )
        await self.service.add_stock("BR-001", "PRD-001", 20)

        results = await asyncio.gather(
            *(self.service.deduct_stock_fifo("BR-001", "PRD-001", 5) for _ in range(5))
        )

        assert sum(1 for r in results if r.success) == 4
        assert [r.error_code for r in results if not r.success] == ["INSUFFICIENT_STOCK"]
        assert await _ledger_and_remaining(self.service, "PRD-001") == (0, 0)

    async def test_unexpected_error_reported_as_database_error(self):
        store = AsyncMock()
        store.get_stock.side_effect = RuntimeError("disk I/O error")
        service = InventoryService(inventory_store=store, locks=KeyedLock())

        result = await service.get_stock("stock-1")

        assert not result.success
        assert result.error_code == "DATABASE_ERROR"
        assert "disk I/O error" in result.message


class TestPurchaseOrderDelivery:
    @pytest.fixture(autouse=True)
    async def _setup(self, inventory_db: Path, sample_purchase_order: PurchaseOrder, sample_product: Product):
        self.service = InventoryService(locks=KeyedLock())
        self.po_store = SQLitePurchaseOrderStore()
        await self.po_store.save_purchase_order(sample_purchase_order)
        await SQLiteProductCatalog().save_product(sample_product)

    async def test_delivery_deduction_and_expiry(self, today: date):
        delivered = await self.service.receive_purchase_order_delivery(
            "PO-2025-0001", {"PRD-001": today + timedelta(days=10)}, received_by="manager"
        )

        assert delivered.success
        assert delivered.message == "Purchase order PO-2025-0001 delivered: created 1 product batches"
        [batch] = delivered.batches
        assert batch.batch_number == "PO-2025-0001-BATCH-001"
        assert batch.quantity == 100
        assert delivered.stocks[0].current_stock == 100
        order = await self.po_store.get_purchase_order("PO-2025-0001")
        assert order.status == PurchaseOrderStatus.DELIVERED
        assert order.delivered_by == "manager"

        deducted = await self.service.deduct_stock_fifo("BR-001", "PRD-001", 30)

        assert deducted.success
        assert [(d.batch_id, d.deducted, d.remaining) for d in deducted.batch_deductions] == [
            (batch.id, 30, 70)
        ]
        assert await _ledger_and_remaining(self.service, "PRD-001") == (70, 70)
        out = (await self.service.get_inventory_movements("BR-001", movement_type="stock_out")).movements
        assert len(out) == 1
        assert out[0].batch_deductions[0].deducted == 30
        assert out[0].batch_deductions[0].remaining == 70

        swept = await self.service.update_batch_expiration_status("BR-001", today + timedelta(days=11))

        assert swept.updated_count == 1
        [stored] = (await self.service.get_product_batches("BR-001", "PRD-001")).batches
        assert stored.status == BatchStatus.EXPIRED
        assert stored.remaining_quantity == 70

    async def test_second_delivery_rejected(self, today: date):
        dates = {"PRD-001": today + timedelta(days=10)}
        await self.service.receive_purchase_order_delivery("PO-2025-0001", dates)

        again = await self.service.receive_purchase_order_delivery("PO-2025-0001", dates)

        assert not again.success
        assert again.error_code == "INVALID_PURCHASE_ORDER_STATE"
        assert len((await self.service.get_branch_batches("BR-001")).batches) == 1

    async def test_missing_expiration_writes_nothing(self):
        result = await self.service.receive_purchase_order_delivery("PO-2025-0001", {})

        assert not result.success
        assert result.error_code == "MISSING_EXPIRATION_DATE"
        assert (await self.service.get_branch_batches("BR-001")).batches == []
        order = await self.po_store.get_purchase_order("PO-2025-0001")
        assert order.status == PurchaseOrderStatus.APPROVED

    async def test_unknown_order(self):
        result = await self.service.receive_purchase_order_delivery("PO-404", {})

        assert result.error_code == "PURCHASE_ORDER_NOT_FOUND"
