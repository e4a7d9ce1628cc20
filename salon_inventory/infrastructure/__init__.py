"""Infrastructure layer implementations."""

from salon_inventory.infrastructure import storage

__all__ = ["storage"]
