"""
FIFO allocation over product batches.

Plans which batches a stock-out draws from, soonest expiration first.
Pure computation: nothing here touches storage, so a plan that cannot
be satisfied simply reports its shortfall and is never written.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from salon_inventory.core.entities.batch import Batch, BatchStatus, sort_fifo
from salon_inventory.core.entities.inventory import BatchDeduction


@dataclass
class FifoAllocation:
    """Outcome of walking the FIFO order for one requested quantity."""

    requested: int
    allocated: int = 0
    deductions: list[BatchDeduction] = field(default_factory=list)
    updated_batches: list[Batch] = field(default_factory=list)

    @property
    def is_satisfied(self) -> bool:
        return self.allocated >= self.requested

    @property
    def shortfall(self) -> int:
        return max(0, self.requested - self.allocated)


class FifoAllocator:
    """Allocates a requested quantity across active batches."""

    def allocate(self, batches: list[Batch], quantity: int) -> FifoAllocation:
        """
        Walk active batches in FIFO order taking min(remaining, still needed).

        Returns copies of the touched batches with remaining quantity and
        status already applied; the input batches are left unchanged.

        Args:
            batches: Candidate batches for one branch and product.
            quantity: Units to deduct.

        Returns:
            FifoAllocation with per-batch deductions in draw order.
        """
        allocation = FifoAllocation(requested=quantity)
        still_needed = quantity

        for batch in sort_fifo([b for b in batches if b.status == BatchStatus.ACTIVE]):
            if still_needed <= 0:
                break
            if batch.remaining_quantity <= 0:
                continue

            taken = min(batch.remaining_quantity, still_needed)
            remaining = batch.remaining_quantity - taken
            still_needed -= taken

            updated = batch.model_copy(deep=True)
            updated.remaining_quantity = remaining
            if remaining == 0:
                updated.status = BatchStatus.DEPLETED

            allocation.updated_batches.append(updated)
            allocation.deductions.append(
                BatchDeduction(
                    batch_id=batch.id or "",
                    batch_number=batch.batch_number,
                    deducted=taken,
                    remaining=remaining,
                )
            )

        allocation.allocated = quantity - still_needed
        return allocation
