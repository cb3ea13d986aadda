from .cart_service import CartService
from .inventory_service import InventoryService, StockMovement
from .snapshot_service import CartLine, CartSnapshotService, PricedCart, PricedLine

__all__ = [
    "CartService",
    "CartLine",
    "CartSnapshotService",
    "InventoryService",
    "PricedCart",
    "PricedLine",
    "StockMovement",
]
