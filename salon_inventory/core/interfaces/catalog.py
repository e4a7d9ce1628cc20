"""Read-only ports to collaborators outside the inventory core."""

from abc import ABC, abstractmethod

from salon_inventory.core.entities.purchase_order import Product, PurchaseOrder


class IProductCatalog(ABC):
    """Product catalog lookup (name, brand, category, base cost)."""

    @abstractmethod
    async def get_product(self, product_id: str) -> Product | None:
        """Get catalog entry by product ID."""
        pass


class IPurchaseOrderStore(ABC):
    """Purchase order records owned by the approval workflow."""

    @abstractmethod
    async def get_purchase_order(self, purchase_order_id: str) -> PurchaseOrder | None:
        """Get purchase order with its line items."""
        pass
