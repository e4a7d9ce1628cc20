"""Storage infrastructure implementations."""

from salon_inventory.infrastructure.storage.sqlite import (
    SQLiteInventoryStore,
    SQLiteProductCatalog,
    SQLitePurchaseOrderStore,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)

__all__ = [
    # SQLite stores
    "SQLiteInventoryStore",
    "SQLiteProductCatalog",
    "SQLitePurchaseOrderStore",
    # Connection pool
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
]
