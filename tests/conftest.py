"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from datetime import date, datetime, timedelta
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from salon_inventory.core.entities import (
    Batch,
    BatchStatus,
    Product,
    PurchaseOrder,
    PurchaseOrderItem,
    PurchaseOrderStatus,
    StockRecord,
)
from salon_inventory.infrastructure.storage.sqlite import connection as conn_module
from salon_inventory.infrastructure.storage.sqlite.migrations import initialize_database

TODAY = date(2025, 3, 1)


@pytest.fixture
def today() -> date:
    """Fixed reference day for expiry tests."""
    return TODAY


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
def mock_settings(temp_db_path: Path):
    """Mock settings with temp database path."""
    mock = MagicMock()
    mock.storage.db_path = temp_db_path
    mock.storage.pool_size = 2
    mock.storage.busy_timeout = 5000
    return mock


@pytest.fixture
async def inventory_db(temp_db_path: Path, mock_settings) -> AsyncGenerator[Path, None]:
    """Migrated temporary database wired into the global connection pool."""
    await initialize_database(temp_db_path, create_backup_before=False)

    conn_module._pool = None
    with patch.object(conn_module, "get_settings", return_value=mock_settings):
        try:
            yield temp_db_path
        finally:
            await conn_module.close_pool()


@pytest.fixture
def sample_stock() -> StockRecord:
    """Stock record already persisted once."""
    return StockRecord(
        id="stock-1",
        branch_id="BR-001",
        product_id="PRD-001",
        product_name="Argan Oil Shampoo",
        brand="Luxe",
        category="Hair Care",
        current_stock=20,
        min_stock=5,
        max_stock=100,
        unit_cost=12.5,
    )


@pytest.fixture
def sample_batches(today: date) -> list[Batch]:
    """Three lots of one product: soon, later, undated."""
    received = datetime(2025, 2, 1, 9, 0, 0)
    return [
        Batch(
            id="b-later",
            batch_number="PO-1-BATCH-002",
            product_id="PRD-001",
            branch_id="BR-001",
            quantity=10,
            remaining_quantity=10,
            expiration_date=today + timedelta(days=20),
            received_date=received,
        ),
        Batch(
            id="b-undated",
            batch_number="PO-1-BATCH-003",
            product_id="PRD-001",
            branch_id="BR-001",
            quantity=10,
            remaining_quantity=10,
            expiration_date=None,
            received_date=received,
        ),
        Batch(
            id="b-soon",
            batch_number="PO-1-BATCH-001",
            product_id="PRD-001",
            branch_id="BR-001",
            quantity=10,
            remaining_quantity=10,
            expiration_date=today + timedelta(days=5),
            received_date=received,
            status=BatchStatus.ACTIVE,
        ),
    ]


@pytest.fixture
def sample_product() -> Product:
    return Product(
        id="PRD-001",
        name="Argan Oil Shampoo",
        brand="Luxe",
        category="Hair Care",
        unit_cost=12.5,
    )


@pytest.fixture
def sample_purchase_order() -> PurchaseOrder:
    return PurchaseOrder(
        id="PO-2025-0001",
        branch_id="BR-001",
        supplier_name="Beauty Supply Co",
        status=PurchaseOrderStatus.APPROVED,
        items=[
            PurchaseOrderItem(
                product_id="PRD-001",
                product_name="Argan Oil Shampoo",
                quantity=100,
                unit_price=12.5,
            ),
        ],
    )
