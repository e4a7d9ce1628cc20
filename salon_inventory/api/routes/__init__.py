"""API route modules."""

from salon_inventory.api.routes.batches import router as batches_router
from salon_inventory.api.routes.health import router as health_router
from salon_inventory.api.routes.purchase_orders import router as purchase_orders_router
from salon_inventory.api.routes.stocks import router as stocks_router

__all__ = [
    "health_router",
    "stocks_router",
    "batches_router",
    "purchase_orders_router",
]
