"""
Batch queries.

FIFO-ordered batch listings and the expiring / expired views used by
the expiry dashboard.
"""

from datetime import date

from salon_inventory.config import get_logger, get_settings
from salon_inventory.core.entities.batch import Batch, BatchStatus
from salon_inventory.core.exceptions import ValidationError
from salon_inventory.core.interfaces.inventory_store import IInventoryStore
from salon_inventory.core.services.expiry_tracker import ExpiryTracker

logger = get_logger(__name__)


class BatchQueriesUseCase:
    """Read-side operations over product batches."""

    def __init__(
        self,
        inventory_store: IInventoryStore | None = None,
        tracker: ExpiryTracker | None = None,
    ):
        self._inventory_store = inventory_store
        settings = get_settings()
        self._default_days_ahead = settings.inventory.default_days_ahead
        self._tracker = tracker or ExpiryTracker.from_settings(settings.inventory)

    async def _get_inventory_store(self) -> IInventoryStore:
        if self._inventory_store is None:
            from salon_inventory.infrastructure.storage.sqlite import get_inventory_store

            self._inventory_store = await get_inventory_store()
        return self._inventory_store

    async def list_batches(
        self,
        branch_id: str,
        product_id: str | None = None,
        status: BatchStatus | None = None,
    ) -> list[Batch]:
        """Batches of a branch (optionally one product) in FIFO draw order."""
        inv_store = await self._get_inventory_store()
        return await inv_store.list_batches(branch_id, product_id=product_id, status=status)

    async def expiring(
        self,
        branch_id: str,
        days_ahead: int | None = None,
        today: date | None = None,
    ) -> list[Batch]:
        """Active batches with stock expiring within the window, soonest first."""
        days_ahead = self._default_days_ahead if days_ahead is None else days_ahead
        if days_ahead < 0:
            raise ValidationError("days_ahead", "must not be negative", days_ahead)
        today = today or date.today()

        inv_store = await self._get_inventory_store()
        active = await inv_store.list_batches(branch_id, status=BatchStatus.ACTIVE)
        expiring = self._tracker.expiring_within(active, today, days_ahead)

        logger.info(
            "expiring_batches_checked",
            branch_id=branch_id,
            days_ahead=days_ahead,
            count=len(expiring),
        )
        return expiring

    async def expired(self, branch_id: str, today: date | None = None) -> list[Batch]:
        """Batches marked expired plus active ones past their date still holding stock."""
        today = today or date.today()
        inv_store = await self._get_inventory_store()
        batches = await inv_store.list_batches(branch_id)
        expired = self._tracker.expired_with_stock(batches, today)

        logger.info("expired_batches_checked", branch_id=branch_id, count=len(expired))
        return expired
