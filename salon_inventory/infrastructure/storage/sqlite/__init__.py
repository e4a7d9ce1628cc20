"""SQLite storage implementations."""

from salon_inventory.infrastructure.storage.sqlite.catalog_store import (
    SQLiteProductCatalog,
    SQLitePurchaseOrderStore,
)
from salon_inventory.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from salon_inventory.infrastructure.storage.sqlite.inventory_store import SQLiteInventoryStore

# Singleton instances
_inventory_store: SQLiteInventoryStore | None = None
_product_catalog: SQLiteProductCatalog | None = None
_purchase_order_store: SQLitePurchaseOrderStore | None = None


async def get_inventory_store() -> SQLiteInventoryStore:
    """Get singleton inventory store instance."""
    global _inventory_store
    if _inventory_store is None:
        _inventory_store = SQLiteInventoryStore()
    return _inventory_store


async def get_product_catalog() -> SQLiteProductCatalog:
    """Get singleton product catalog instance."""
    global _product_catalog
    if _product_catalog is None:
        _product_catalog = SQLiteProductCatalog()
    return _product_catalog


async def get_purchase_order_store() -> SQLitePurchaseOrderStore:
    """Get singleton purchase order store instance."""
    global _purchase_order_store
    if _purchase_order_store is None:
        _purchase_order_store = SQLitePurchaseOrderStore()
    return _purchase_order_store


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    # Store classes
    "SQLiteInventoryStore",
    "SQLiteProductCatalog",
    "SQLitePurchaseOrderStore",
    # Factory functions
    "get_inventory_store",
    "get_product_catalog",
    "get_purchase_order_store",
]
