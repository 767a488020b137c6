"""
Inventory (single stock figure per item).

Models:
- InventoryItem (stock-tracked product, quantity on hand)
- InventoryMovement (append-only in/out records explaining every change)
"""

from .item import InventoryItem
from .movement import InventoryMovement, MOVEMENT_IN, MOVEMENT_OUT

__all__ = ["InventoryItem", "InventoryMovement", "MOVEMENT_IN", "MOVEMENT_OUT"]
