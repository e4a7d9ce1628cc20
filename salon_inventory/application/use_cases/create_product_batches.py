"""Create Product Batches Use Case: one active batch per delivered line item."""

from dataclasses import dataclass
from datetime import date, datetime

from salon_inventory.application.dto.requests import BatchItemRequest, CreateBatchesRequest
from salon_inventory.application.dto.responses import BatchListResponse, BatchResponse
from salon_inventory.application.use_cases.validation import require_non_negative
from salon_inventory.config import get_logger, get_settings
from salon_inventory.core.entities.batch import Batch, BatchStatus, format_batch_number
from salon_inventory.core.entities.inventory import utcnow
from salon_inventory.core.interfaces.inventory_store import IInventoryStore
from salon_inventory.core.services.expiry_tracker import ExpiryTracker

logger = get_logger(__name__)


def build_batches(
    purchase_order_id: str | None,
    branch_id: str,
    items: list[BatchItemRequest],
    received_by: str = "",
    received_at: datetime | None = None,
) -> list[Batch]:
    """
    Turn delivered line items into new active batches.

    Items without a product ID or with a non-positive quantity are
    skipped. Batch numbers are sequenced over the accepted items only.

    Args:
        purchase_order_id: Order the lots arrived with; the configured
            prefix is used in batch numbers when missing.
        branch_id: Receiving branch.
        items: Delivered line items.
        received_by: User receiving the delivery.
        received_at: Receipt timestamp (defaults to now).

    Returns:
        Unsaved batches in line-item order.
    """
    prefix = purchase_order_id or get_settings().inventory.batch_number_prefix
    received_date = received_at or utcnow()

    batches: list[Batch] = []
    for item in items:
        if not item.product_id or item.quantity <= 0:
            continue
        require_non_negative(item.unit_price, "unit_price")

        batches.append(
            Batch(
                batch_number=format_batch_number(prefix, len(batches) + 1),
                product_id=item.product_id,
                product_name=item.product_name,
                branch_id=branch_id,
                purchase_order_id=purchase_order_id or "",
                quantity=item.quantity,
                remaining_quantity=item.quantity,
                unit_cost=item.unit_price,
                expiration_date=item.expiration_date,
                received_date=received_date,
                received_by=received_by,
                status=BatchStatus.ACTIVE,
            )
        )
    return batches


@dataclass
class CreateBatchesResult:
    """Result of creating the batches of one delivery."""

    batches: list[Batch]

    @property
    def message(self) -> str:
        return f"Created {len(self.batches)} product batches"


class CreateProductBatchesUseCase:
    """Insert all batches of one delivery in a single transaction.

    The stock ledger is not touched here; the delivery pipeline does both.
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

    async def execute(self, branch_id: str, request: CreateBatchesRequest) -> CreateBatchesResult:
        """Execute create product batches use case."""
        batches = build_batches(
            request.purchase_order_id,
            branch_id,
            request.items,
            received_by=request.received_by,
            received_at=request.received_at,
        )
        skipped = len(request.items) - len(batches)

        if batches:
            inv_store = await self._get_inventory_store()
            batches = await inv_store.create_batches(batches)

        logger.info(
            "product_batches_created",
            branch_id=branch_id,
            purchase_order_id=request.purchase_order_id,
            count=len(batches),
            skipped=skipped,
        )
        return CreateBatchesResult(batches=batches)

    def to_response(self, result: CreateBatchesResult, today: date | None = None) -> BatchListResponse:
        """Convert result to API response."""
        today = today or date.today()
        return BatchListResponse(
            batches=[BatchResponse.from_entity(b, today, self._tracker) for b in result.batches],
            total=len(result.batches),
            message=result.message,
        )
