"""Abstract interface for inventory storage.

Methods that write more than one record are atomic: either every write
lands or none does. Updates of stock records and batches are guarded by
the record's ``version`` and raise ConcurrencyConflictError when the
stored version moved on since the record was read.
"""

from abc import ABC, abstractmethod

from salon_inventory.core.entities.batch import Batch, BatchStatus
from salon_inventory.core.entities.inventory import (
    InventoryMovement,
    MovementType,
    StockRecord,
    StockStatus,
)
from salon_inventory.core.entities.purchase_order import PurchaseOrder


class IInventoryStore(ABC):
    """Interface for stock ledger, batch and movement persistence."""

    # Stock ledger

    @abstractmethod
    async def get_stock(self, stock_id: str) -> StockRecord | None:
        """Get stock record by ID."""
        pass

    @abstractmethod
    async def get_stock_by_product(self, branch_id: str, product_id: str) -> StockRecord | None:
        """Get the stock record of a product at a branch."""
        pass

    @abstractmethod
    async def list_stocks(
        self,
        branch_id: str,
        status: StockStatus | None = None,
        category: str | None = None,
    ) -> list[StockRecord]:
        """List stock records of a branch, optionally filtered."""
        pass

    @abstractmethod
    async def update_stock(self, stock: StockRecord) -> StockRecord:
        """Persist patched fields of an existing stock record."""
        pass

    @abstractmethod
    async def record_stock_movement(
        self, stock: StockRecord, movement: InventoryMovement
    ) -> tuple[StockRecord, InventoryMovement]:
        """Insert or update the stock record and append the movement, atomically."""
        pass

    # Batches

    @abstractmethod
    async def get_batch(self, batch_id: str) -> Batch | None:
        """Get batch by ID."""
        pass

    @abstractmethod
    async def list_batches(
        self,
        branch_id: str,
        product_id: str | None = None,
        status: BatchStatus | None = None,
    ) -> list[Batch]:
        """List batches of a branch in FIFO draw order."""
        pass

    @abstractmethod
    async def create_batches(self, batches: list[Batch]) -> list[Batch]:
        """Insert a group of batches atomically."""
        pass

    @abstractmethod
    async def record_fifo_deduction(
        self,
        batches: list[Batch],
        stock: StockRecord | None,
        movement: InventoryMovement,
    ) -> InventoryMovement:
        """Write drawn-down batches, the ledger decrement and the movement atomically."""
        pass

    @abstractmethod
    async def expire_batches(self, batches: list[Batch]) -> int:
        """Flip active batches to expired atomically; return how many changed."""
        pass

    # Purchase-order delivery

    @abstractmethod
    async def record_delivery(
        self,
        purchase_order: PurchaseOrder,
        batches: list[Batch],
        ledger_entries: list[tuple[StockRecord, InventoryMovement]],
    ) -> list[Batch]:
        """Create batches, apply ledger increments and mark the order delivered atomically."""
        pass

    # Movements

    @abstractmethod
    async def list_movements(
        self,
        branch_id: str,
        movement_type: MovementType | None = None,
        product_id: str | None = None,
        limit: int | None = None,
    ) -> list[InventoryMovement]:
        """List movements of a branch, newest first."""
        pass
