"""
Inventory ledger tables.

Models:
- Inventory (current quantity per product per warehouse)
- InventoryMovement (append-only deltas, the audit trail behind the quantity)
"""

from .stock import Inventory
from .movement import InventoryMovement

__all__ = ["Inventory", "InventoryMovement"]
