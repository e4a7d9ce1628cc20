"""
Expiry tracking over product batches.

Evaluates batches against a given day; the caller decides when to run
it (dashboard load, CLI, API). No background scheduler.
"""

from __future__ import annotations

from datetime import date, timedelta

from salon_inventory.core.entities.batch import Batch, BatchStatus, ExpiryStatus, classify_expiry


class ExpiryTracker:
    """Date-truncated expiry rules for batches."""

    def __init__(self, critical_days: int = 7, expiring_soon_days: int = 30) -> None:
        self.critical_days = critical_days
        self.expiring_soon_days = expiring_soon_days

    @classmethod
    def from_settings(cls, inventory) -> ExpiryTracker:
        """Tracker using the configured critical and expiring-soon windows."""
        return cls(
            critical_days=inventory.critical_days,
            expiring_soon_days=inventory.expiring_soon_days,
        )

    def classify(self, batch: Batch, today: date) -> ExpiryStatus:
        """Display classification, independent of the stored status."""
        return classify_expiry(
            batch.expiration_date,
            today,
            critical_days=self.critical_days,
            expiring_soon_days=self.expiring_soon_days,
        )

    def newly_expired(self, batches: list[Batch], today: date) -> list[Batch]:
        """Active batches whose expiration date is strictly before today."""
        return [
            b
            for b in batches
            if b.status == BatchStatus.ACTIVE and b.is_past_expiration(today)
        ]

    def expiring_within(self, batches: list[Batch], today: date, days_ahead: int) -> list[Batch]:
        """Active batches with stock expiring between today and today + days_ahead."""
        horizon = today + timedelta(days=days_ahead)
        expiring = [
            b
            for b in batches
            if b.status == BatchStatus.ACTIVE
            and b.remaining_quantity > 0
            and b.expiration_date is not None
            and today <= b.expiration_date <= horizon
        ]
        return sorted(expiring, key=lambda b: (b.expiration_date, b.batch_number))

    def expired_with_stock(self, batches: list[Batch], today: date) -> list[Batch]:
        """Batches marked expired plus active ones past expiration still holding stock."""
        expired = [b for b in batches if b.status == BatchStatus.EXPIRED]
        expired.extend(
            b
            for b in batches
            if b.status == BatchStatus.ACTIVE
            and b.is_past_expiration(today)
            and b.remaining_quantity > 0
        )
        return expired
