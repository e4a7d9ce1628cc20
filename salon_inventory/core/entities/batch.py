"""Product batch entity with expiration tracking."""

from datetime import UTC, date, datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from salon_inventory.core.entities.inventory import utcnow


class BatchStatus(str, Enum):
    """Lifecycle of a received lot.

    active -> depleted when a deduction empties it,
    active -> expired when the sweep finds it past its expiration date.
    Both targets are terminal.
    """

    ACTIVE = "active"
    EXPIRED = "expired"
    DEPLETED = "depleted"


class ExpiryStatus(str, Enum):
    """Display classification of a batch's expiration date."""

    NO_EXPIRY = "No Expiry"
    EXPIRED = "Expired"
    CRITICAL = "Critical"
    EXPIRING_SOON = "Expiring Soon"
    GOOD = "Good"


def classify_expiry(
    expiration_date: date | None,
    today: date,
    critical_days: int = 7,
    expiring_soon_days: int = 30,
) -> ExpiryStatus:
    """Classify an expiration date relative to today."""
    if expiration_date is None:
        return ExpiryStatus.NO_EXPIRY
    days = (expiration_date - today).days
    if days < 0:
        return ExpiryStatus.EXPIRED
    if days <= critical_days:
        return ExpiryStatus.CRITICAL
    if days <= expiring_soon_days:
        return ExpiryStatus.EXPIRING_SOON
    return ExpiryStatus.GOOD


def format_batch_number(prefix: str, sequence: int) -> str:
    """Batch number for the n-th (1-based) batch of one delivery."""
    return f"{prefix}-BATCH-{sequence:03d}"


class Batch(BaseModel):
    """A lot of one product received at one branch."""

    id: str | None = None
    batch_number: str
    product_id: str
    product_name: str = ""
    branch_id: str
    purchase_order_id: str = ""
    quantity: int
    remaining_quantity: int
    unit_cost: float = 0.0
    expiration_date: date | None = None
    received_date: datetime = Field(default_factory=utcnow)
    received_by: str = ""
    status: BatchStatus = BatchStatus.ACTIVE
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    version: int = 0

    @field_validator("received_date")
    @classmethod
    def naive_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is not None:
            return v.astimezone(UTC).replace(tzinfo=None)
        return v

    def days_until_expiry(self, today: date) -> int | None:
        """Days until expiration, negative once past it, None if undated."""
        if self.expiration_date is None:
            return None
        return (self.expiration_date - today).days

    def is_past_expiration(self, today: date) -> bool:
        """True when the expiration date is strictly before today."""
        return self.expiration_date is not None and self.expiration_date < today


def fifo_sort_key(batch: Batch) -> tuple:
    """Dated batches first by expiration, then undated by receipt."""
    if batch.expiration_date is not None:
        return (0, batch.expiration_date.toordinal(), batch.received_date, batch.batch_number)
    return (1, 0, batch.received_date, batch.batch_number)


def sort_fifo(batches: list[Batch]) -> list[Batch]:
    """Return batches in canonical FIFO draw order."""
    return sorted(batches, key=fifo_sort_key)
