"""SQLite implementation of inventory storage."""

import json
import uuid
from datetime import date, datetime

import aiosqlite

from salon_inventory.config import get_logger
from salon_inventory.core.entities.batch import Batch, BatchStatus
from salon_inventory.core.entities.inventory import (
    BatchDeduction,
    InventoryMovement,
    MovementType,
    StockRecord,
    StockStatus,
    utcnow,
)
from salon_inventory.core.entities.purchase_order import (
    DELIVERABLE_STATUSES,
    PurchaseOrder,
    PurchaseOrderStatus,
)
from salon_inventory.core.exceptions import (
    ConcurrencyConflictError,
    InvalidPurchaseOrderStateError,
)
from salon_inventory.core.interfaces.inventory_store import IInventoryStore
from salon_inventory.infrastructure.storage.sqlite.connection import (
    get_connection,
    get_transaction,
)

logger = get_logger(__name__)


def _generate_id() -> str:
    return str(uuid.uuid4())


def _iso(value: datetime | date | None) -> str | None:
    return value.isoformat() if value else None


class SQLiteInventoryStore(IInventoryStore):
    """SQLite implementation of stock ledger, batch and movement storage."""

    # Stock ledger

    async def get_stock(self, stock_id: str) -> StockRecord | None:
        """Get stock record by ID."""
        async with get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM branch_stocks WHERE id = ?", (stock_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_stock(row)

    async def get_stock_by_product(self, branch_id: str, product_id: str) -> StockRecord | None:
        """Get the stock record of a product at a branch."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM branch_stocks WHERE branch_id = ? AND product_id = ?",
                (branch_id, product_id),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_stock(row)

    async def list_stocks(
        self,
        branch_id: str,
        status: StockStatus | None = None,
        category: str | None = None,
    ) -> list[StockRecord]:
        """List stock records of a branch, optionally filtered."""
        query = "SELECT * FROM branch_stocks WHERE branch_id = ?"
        params: list = [branch_id]

        if status:
            query += " AND status = ?"
            params.append(status.value)
        if category:
            query += " AND category = ?"
            params.append(category)

        query += " ORDER BY product_name"

        async with get_connection() as conn:
            cursor = await conn.execute(query, params)
            rows = await cursor.fetchall()
            return [self._row_to_stock(row) for row in rows]

    async def update_stock(self, stock: StockRecord) -> StockRecord:
        """Persist patched fields of an existing stock record."""
        async with get_transaction() as conn:
            await self._update_stock_row(conn, stock)
        logger.info("stock_updated", stock_id=stock.id, status=stock.status)
        return stock

    async def record_stock_movement(
        self, stock: StockRecord, movement: InventoryMovement
    ) -> tuple[StockRecord, InventoryMovement]:
        """Insert or update the stock record and append the movement, atomically."""
        async with get_transaction() as conn:
            await self._save_stock_row(conn, stock)
            await self._insert_movement(conn, movement)

        logger.info(
            "stock_movement_recorded",
            stock_id=stock.id,
            movement_id=movement.id,
            type=movement.type,
            qty=movement.quantity,
            new_stock=stock.current_stock,
        )
        return stock, movement

    # Batches

    async def get_batch(self, batch_id: str) -> Batch | None:
        """Get batch by ID."""
        async with get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM product_batches WHERE id = ?", (batch_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_batch(row)

    async def list_batches(
        self,
        branch_id: str,
        product_id: str | None = None,
        status: BatchStatus | None = None,
    ) -> list[Batch]:
        """List batches of a branch in FIFO draw order."""
        query = "SELECT * FROM product_batches WHERE branch_id = ?"
        params: list = [branch_id]

        if product_id:
            query += " AND product_id = ?"
            params.append(product_id)
        if status:
            query += " AND status = ?"
            params.append(status.value)

        # Undated batches last; ISO strings order chronologically
        query += " ORDER BY expiration_date IS NULL, expiration_date, received_date, batch_number"

        async with get_connection() as conn:
            cursor = await conn.execute(query, params)
            rows = await cursor.fetchall()
            return [self._row_to_batch(row) for row in rows]

    async def create_batches(self, batches: list[Batch]) -> list[Batch]:
        """Insert a group of batches atomically."""
        async with get_transaction() as conn:
            for batch in batches:
                await self._insert_batch(conn, batch)

        logger.info("batches_created", count=len(batches))
        return batches

    async def record_fifo_deduction(
        self,
        batches: list[Batch],
        stock: StockRecord | None,
        movement: InventoryMovement,
    ) -> InventoryMovement:
        """Write drawn-down batches, the ledger decrement and the movement atomically."""
        async with get_transaction() as conn:
            for batch in batches:
                await self._update_batch_row(conn, batch)
            if stock is not None:
                await self._update_stock_row(conn, stock)
            await self._insert_movement(conn, movement)

        logger.info(
            "fifo_deduction_recorded",
            movement_id=movement.id,
            product_id=movement.product_id,
            qty=movement.quantity,
            batches=len(batches),
        )
        return movement

    async def expire_batches(self, batches: list[Batch]) -> int:
        """Flip active batches to expired atomically; return how many changed."""
        if not batches:
            return 0

        async with get_transaction() as conn:
            for batch in batches:
                batch.status = BatchStatus.EXPIRED
                await self._update_batch_row(conn, batch, from_status=BatchStatus.ACTIVE)

        logger.info("batches_expired", count=len(batches))
        return len(batches)

    # Purchase-order delivery

    async def record_delivery(
        self,
        purchase_order: PurchaseOrder,
        batches: list[Batch],
        ledger_entries: list[tuple[StockRecord, InventoryMovement]],
    ) -> list[Batch]:
        """Create batches, apply ledger increments and mark the order delivered atomically."""
        async with get_transaction() as conn:
            for batch in batches:
                await self._insert_batch(conn, batch)

            for stock, movement in ledger_entries:
                await self._save_stock_row(conn, stock)
                await self._insert_movement(conn, movement)

            deliverable = [s.value for s in DELIVERABLE_STATUSES]
            cursor = await conn.execute(
                f"""
                UPDATE purchase_orders SET
                    status = ?,
                    actual_delivery = ?,
                    delivered_by = ?,
                    updated_at = ?
                WHERE id = ? AND status IN ({", ".join("?" * len(deliverable))})
                """,
                (
                    PurchaseOrderStatus.DELIVERED.value,
                    _iso(purchase_order.actual_delivery),
                    purchase_order.delivered_by,
                    utcnow().isoformat(),
                    purchase_order.id,
                    *deliverable,
                ),
            )
            if cursor.rowcount != 1:
                # Another delivery of the same order committed first
                raise InvalidPurchaseOrderStateError(
                    purchase_order.id, PurchaseOrderStatus.DELIVERED.value
                )

        purchase_order.status = PurchaseOrderStatus.DELIVERED
        logger.info(
            "delivery_recorded",
            purchase_order_id=purchase_order.id,
            batches=len(batches),
            ledger_entries=len(ledger_entries),
        )
        return batches

    # Movements

    async def list_movements(
        self,
        branch_id: str,
        movement_type: MovementType | None = None,
        product_id: str | None = None,
        limit: int | None = None,
    ) -> list[InventoryMovement]:
        """List movements of a branch, newest first."""
        query = "SELECT * FROM inventory_movements WHERE branch_id = ?"
        params: list = [branch_id]

        if movement_type:
            query += " AND type = ?"
            params.append(movement_type.value)
        if product_id:
            query += " AND product_id = ?"
            params.append(product_id)

        # rowid breaks ties between movements written in the same microsecond
        query += " ORDER BY created_at DESC, rowid DESC"
        if limit:
            query += " LIMIT ?"
            params.append(limit)

        async with get_connection() as conn:
            cursor = await conn.execute(query, params)
            rows = await cursor.fetchall()
            return [self._row_to_movement(row) for row in rows]

    # Row writers, always run inside a caller's transaction

    async def _save_stock_row(self, conn: aiosqlite.Connection, stock: StockRecord) -> None:
        if stock.id is None:
            await self._insert_stock(conn, stock)
        else:
            await self._update_stock_row(conn, stock)

    async def _insert_stock(self, conn: aiosqlite.Connection, stock: StockRecord) -> None:
        stock_id = _generate_id()
        try:
            await conn.execute(
                """
                INSERT INTO branch_stocks (
                    id, branch_id, product_id, product_name, brand, category,
                    current_stock, min_stock, max_stock, unit_cost,
                    location, supplier, status, last_updated, last_restocked,
                    created_at, version
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 0)
                """,
                (
                    stock_id,
                    stock.branch_id,
                    stock.product_id,
                    stock.product_name,
                    stock.brand,
                    stock.category,
                    stock.current_stock,
                    stock.min_stock,
                    stock.max_stock,
                    stock.unit_cost,
                    stock.location,
                    stock.supplier,
                    stock.status.value,
                    stock.last_updated.isoformat(),
                    _iso(stock.last_restocked),
                    stock.created_at.isoformat(),
                ),
            )
        except aiosqlite.IntegrityError as e:
            # (branch_id, product_id) is unique: someone created it first
            raise ConcurrencyConflictError(
                "branch_stocks", f"{stock.branch_id}/{stock.product_id}", 0
            ) from e
        stock.id = stock_id
        stock.version = 0

    async def _update_stock_row(self, conn: aiosqlite.Connection, stock: StockRecord) -> None:
        cursor = await conn.execute(
            """
            UPDATE branch_stocks SET
                product_name = ?,
                brand = ?,
                category = ?,
                current_stock = ?,
                min_stock = ?,
                max_stock = ?,
                unit_cost = ?,
                location = ?,
                supplier = ?,
                status = ?,
                last_updated = ?,
                last_restocked = ?,
                version = version + 1
            WHERE id = ? AND version = ?
            """,
            (
                stock.product_name,
                stock.brand,
                stock.category,
                stock.current_stock,
                stock.min_stock,
                stock.max_stock,
                stock.unit_cost,
                stock.location,
                stock.supplier,
                stock.status.value,
                stock.last_updated.isoformat(),
                _iso(stock.last_restocked),
                stock.id,
                stock.version,
            ),
        )
        if cursor.rowcount != 1:
            raise ConcurrencyConflictError("branch_stocks", stock.id or "", stock.version)
        stock.version += 1

    async def _insert_batch(self, conn: aiosqlite.Connection, batch: Batch) -> None:
        batch_id = batch.id or _generate_id()
        await conn.execute(
            """
            INSERT INTO product_batches (
                id, batch_number, product_id, product_name, branch_id,
                purchase_order_id, quantity, remaining_quantity, unit_cost,
                expiration_date, received_date, received_by, status,
                created_at, updated_at, version
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 0)
            """,
            (
                batch_id,
                batch.batch_number,
                batch.product_id,
                batch.product_name,
                batch.branch_id,
                batch.purchase_order_id,
                batch.quantity,
                batch.remaining_quantity,
                batch.unit_cost,
                _iso(batch.expiration_date),
                batch.received_date.isoformat(),
                batch.received_by,
                batch.status.value,
                batch.created_at.isoformat(),
                batch.updated_at.isoformat(),
            ),
        )
        batch.id = batch_id
        batch.version = 0

    async def _update_batch_row(
        self,
        conn: aiosqlite.Connection,
        batch: Batch,
        from_status: BatchStatus | None = None,
    ) -> None:
        batch.updated_at = utcnow()
        query = """
            UPDATE product_batches SET
                remaining_quantity = ?,
                status = ?,
                updated_at = ?,
                version = version + 1
            WHERE id = ? AND version = ?
        """
        params: list = [
            batch.remaining_quantity,
            batch.status.value,
            batch.updated_at.isoformat(),
            batch.id,
            batch.version,
        ]
        if from_status:
            query += " AND status = ?"
            params.append(from_status.value)

        cursor = await conn.execute(query, params)
        if cursor.rowcount != 1:
            raise ConcurrencyConflictError("product_batches", batch.id or "", batch.version)
        batch.version += 1

    async def _insert_movement(
        self, conn: aiosqlite.Connection, movement: InventoryMovement
    ) -> None:
        movement_id = _generate_id()
        await conn.execute(
            """
            INSERT INTO inventory_movements (
                id, branch_id, product_id, product_name, type, quantity,
                previous_stock, new_stock, reason, notes, created_by,
                batch_deductions_json, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                movement_id,
                movement.branch_id,
                movement.product_id,
                movement.product_name,
                movement.type.value,
                movement.quantity,
                movement.previous_stock,
                movement.new_stock,
                movement.reason,
                movement.notes,
                movement.created_by,
                json.dumps([d.model_dump() for d in movement.batch_deductions]),
                movement.created_at.isoformat(),
            ),
        )
        movement.id = movement_id

    # Row converters

    @staticmethod
    def _row_to_stock(row: aiosqlite.Row) -> StockRecord:
        return StockRecord(
            id=row["id"],
            branch_id=row["branch_id"],
            product_id=row["product_id"],
            product_name=row["product_name"],
            brand=row["brand"],
            category=row["category"],
            current_stock=row["current_stock"],
            min_stock=row["min_stock"],
            max_stock=row["max_stock"],
            unit_cost=row["unit_cost"],
            location=row["location"],
            supplier=row["supplier"],
            status=StockStatus(row["status"]),
            last_updated=datetime.fromisoformat(row["last_updated"]),
            last_restocked=(
                datetime.fromisoformat(row["last_restocked"]) if row["last_restocked"] else None
            ),
            created_at=datetime.fromisoformat(row["created_at"]),
            version=row["version"],
        )

    @staticmethod
    def _row_to_batch(row: aiosqlite.Row) -> Batch:
        return Batch(
            id=row["id"],
            batch_number=row["batch_number"],
            product_id=row["product_id"],
            product_name=row["product_name"],
            branch_id=row["branch_id"],
            purchase_order_id=row["purchase_order_id"],
            quantity=row["quantity"],
            remaining_quantity=row["remaining_quantity"],
            unit_cost=row["unit_cost"],
            expiration_date=(
                date.fromisoformat(row["expiration_date"]) if row["expiration_date"] else None
            ),
            received_date=datetime.fromisoformat(row["received_date"]),
            received_by=row["received_by"],
            status=BatchStatus(row["status"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
            version=row["version"],
        )

    @staticmethod
    def _row_to_movement(row: aiosqlite.Row) -> InventoryMovement:
        return InventoryMovement(
            id=row["id"],
            branch_id=row["branch_id"],
            product_id=row["product_id"],
            product_name=row["product_name"],
            type=MovementType(row["type"]),
            quantity=row["quantity"],
            previous_stock=row["previous_stock"],
            new_stock=row["new_stock"],
            reason=row["reason"],
            notes=row["notes"],
            created_by=row["created_by"],
            batch_deductions=[
                BatchDeduction.model_validate(d)
                for d in json.loads(row["batch_deductions_json"] or "[]")
            ],
            created_at=datetime.fromisoformat(row["created_at"]),
        )
