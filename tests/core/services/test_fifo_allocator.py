"""Tests for FIFO allocation across batches."""

from salon_inventory.core.entities import Batch, BatchStatus
from salon_inventory.core.services import FifoAllocator


class TestFifoAllocator:
    def test_draws_soonest_expiry_first(self, sample_batches: list[Batch]):
        """15 units: all of the 5-day lot, then 5 of the 20-day lot, undated untouched."""
        allocation = FifoAllocator().allocate(sample_batches, 15)

        assert allocation.is_satisfied
        assert [(d.batch_id, d.deducted, d.remaining) for d in allocation.deductions] == [
            ("b-soon", 10, 0),
            ("b-later", 5, 5),
        ]
        assert "b-undated" not in {b.id for b in allocation.updated_batches}

    def test_exact_depletion_sets_depleted(self, sample_batches: list[Batch]):
        allocation = FifoAllocator().allocate(sample_batches, 10)

        [updated] = allocation.updated_batches
        assert updated.id == "b-soon"
        assert updated.remaining_quantity == 0
        assert updated.status == BatchStatus.DEPLETED

    def test_partial_draw_stays_active(self, sample_batches: list[Batch]):
        allocation = FifoAllocator().allocate(sample_batches, 4)

        [updated] = allocation.updated_batches
        assert updated.remaining_quantity == 6
        assert updated.status == BatchStatus.ACTIVE

    def test_inputs_not_mutated(self, sample_batches: list[Batch]):
        FifoAllocator().allocate(sample_batches, 25)
        assert all(b.remaining_quantity == 10 for b in sample_batches)
        assert all(b.status == BatchStatus.ACTIVE for b in sample_batches)

    def test_shortfall_reported(self, sample_batches: list[Batch]):
        allocation = FifoAllocator().allocate(sample_batches, 45)

        assert not allocation.is_satisfied
        assert allocation.allocated == 30
        assert allocation.shortfall == 15

    def test_skips_non_active_and_empty(self, sample_batches: list[Batch]):
        sample_batches[2].status = BatchStatus.EXPIRED  # b-soon
        sample_batches[0].remaining_quantity = 0  # b-later

        allocation = FifoAllocator().allocate(sample_batches, 3)

        assert [d.batch_id for d in allocation.deductions] == ["b-undated"]

    def test_no_batches(self):
        allocation = FifoAllocator().allocate([], 1)
        assert allocation.allocated == 0
        assert allocation.deductions == []
