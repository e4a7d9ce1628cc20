"""Core interfaces (ports) for dependency injection."""

from salon_inventory.core.interfaces.catalog import IProductCatalog, IPurchaseOrderStore
from salon_inventory.core.interfaces.inventory_store import IInventoryStore

__all__ = [
    "IInventoryStore",
    "IProductCatalog",
    "IPurchaseOrderStore",
]
