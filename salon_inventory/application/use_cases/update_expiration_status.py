"""Update Expiration Status Use Case: flip past-date active batches to expired."""

from dataclasses import dataclass, field
from datetime import date

from salon_inventory.application.dto.responses import ExpirationSweepResponse
from salon_inventory.config import get_logger, get_settings
from salon_inventory.core.entities.batch import Batch, BatchStatus
from salon_inventory.core.interfaces.inventory_store import IInventoryStore
from salon_inventory.core.services.expiry_tracker import ExpiryTracker

logger = get_logger(__name__)


@dataclass
class ExpirySweepResult:
    """Result of one expiration sweep."""

    branch_id: str
    expired_batches: list[Batch] = field(default_factory=list)

    @property
    def updated_count(self) -> int:
        return len(self.expired_batches)

    @property
    def message(self) -> str:
        return f"Updated {self.updated_count} batches to expired status"


class UpdateExpirationStatusUseCase:
    """
    Sweep one branch's active batches against today's date.

    Only the status changes; remaining quantities are left as they are.
    Depleted batches are never considered. Nothing is written when no
    batch is newly expired, so repeated runs on the same day are no-ops.
    """

    def __init__(
        self,
        inventory_store: IInventoryStore | None = None,
        tracker: ExpiryTracker | None = None,
    ):
        self._inventory_store = inventory_store
        self._tracker = tracker or ExpiryTracker.from_settings(get_settings().inventory)

    async def _get_inventory_store(self) -> IInventoryStore:
        if self._inventory_store is None:
            from salon_inventory.infrastructure.storage.sqlite import get_inventory_store

            self._inventory_store = await get_inventory_store()
        return self._inventory_store

    async def execute(self, branch_id: str, today: date | None = None) -> ExpirySweepResult:
        """Execute the expiration sweep for a branch."""
        today = today or date.today()
        inv_store = await self._get_inventory_store()

        active = await inv_store.list_batches(branch_id, status=BatchStatus.ACTIVE)
        expired = self._tracker.newly_expired(active, today)

        if expired:
            await inv_store.expire_batches(expired)

        logger.info(
            "expiration_sweep_complete",
            branch_id=branch_id,
            today=today.isoformat(),
            scanned=len(active),
            expired=len(expired),
        )
        return ExpirySweepResult(branch_id=branch_id, expired_batches=expired)

    def to_response(self, result: ExpirySweepResult) -> ExpirationSweepResponse:
        """Convert result to API response."""
        return ExpirationSweepResponse(
            branch_id=result.branch_id,
            updated_count=result.updated_count,
            message=result.message,
        )
