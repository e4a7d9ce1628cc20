"""SQLite implementation of the product catalog and purchase order lookups."""

import json
from datetime import datetime

import aiosqlite

from salon_inventory.config import get_logger
from salon_inventory.core.entities.purchase_order import (
    Product,
    PurchaseOrder,
    PurchaseOrderItem,
    PurchaseOrderStatus,
)
from salon_inventory.core.interfaces.catalog import IProductCatalog, IPurchaseOrderStore
from salon_inventory.infrastructure.storage.sqlite.connection import (
    get_connection,
    get_transaction,
)

logger = get_logger(__name__)


class SQLiteProductCatalog(IProductCatalog):
    """Product catalog backed by the products table."""

    async def get_product(self, product_id: str) -> Product | None:
        """Get catalog entry by product ID."""
        async with get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM products WHERE id = ?", (product_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_product(row)

    async def save_product(self, product: Product) -> Product:
        """Insert or replace a catalog entry."""
        async with get_transaction() as conn:
            await conn.execute(
                """
                INSERT INTO products (id, name, brand, category, unit_cost)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    brand = excluded.brand,
                    category = excluded.category,
                    unit_cost = excluded.unit_cost
                """,
                (product.id, product.name, product.brand, product.category, product.unit_cost),
            )
        logger.info("product_saved", product_id=product.id)
        return product

    @staticmethod
    def _row_to_product(row: aiosqlite.Row) -> Product:
        return Product(
            id=row["id"],
            name=row["name"],
            brand=row["brand"],
            category=row["category"],
            unit_cost=row["unit_cost"],
        )


class SQLitePurchaseOrderStore(IPurchaseOrderStore):
    """Purchase orders backed by the purchase_orders table."""

    async def get_purchase_order(self, purchase_order_id: str) -> PurchaseOrder | None:
        """Get purchase order with its line items."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM purchase_orders WHERE id = ?", (purchase_order_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_purchase_order(row)

    async def save_purchase_order(self, order: PurchaseOrder) -> PurchaseOrder:
        """Insert or replace a purchase order (approval workflow side)."""
        async with get_transaction() as conn:
            await conn.execute(
                """
                INSERT INTO purchase_orders (
                    id, branch_id, supplier_name, status, items_json,
                    actual_delivery, delivered_by
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    branch_id = excluded.branch_id,
                    supplier_name = excluded.supplier_name,
                    status = excluded.status,
                    items_json = excluded.items_json,
                    actual_delivery = excluded.actual_delivery,
                    delivered_by = excluded.delivered_by,
                    updated_at = datetime('now')
                """,
                (
                    order.id,
                    order.branch_id,
                    order.supplier_name,
                    order.status.value,
                    json.dumps([item.model_dump() for item in order.items]),
                    order.actual_delivery.isoformat() if order.actual_delivery else None,
                    order.delivered_by,
                ),
            )
        logger.info("purchase_order_saved", purchase_order_id=order.id, status=order.status)
        return order

    @staticmethod
    def _row_to_purchase_order(row: aiosqlite.Row) -> PurchaseOrder:
        return PurchaseOrder(
            id=row["id"],
            branch_id=row["branch_id"],
            supplier_name=row["supplier_name"],
            status=PurchaseOrderStatus(row["status"]),
            items=[
                PurchaseOrderItem.model_validate(item)
                for item in json.loads(row["items_json"] or "[]")
            ],
            actual_delivery=(
                datetime.fromisoformat(row["actual_delivery"]) if row["actual_delivery"] else None
            ),
            delivered_by=row["delivered_by"],
        )
