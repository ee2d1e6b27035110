"""
Inventory ledger payloads.

- InventoryOpen: stock a product at an additional warehouse
- InventoryMovementCreate: signed delta with a reason
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class InventoryOpen(BaseModel):
    product_id: UUID
    warehouse_id: UUID
    quantity: int = Field(default=0, ge=0)

    @field_validator("quantity", mode="before")
    @classmethod
    def _default_quantity(cls, v):
        return 0 if v is None else v


class InventoryMovementCreate(BaseModel):
    product_id: UUID
    warehouse_id: UUID
    change_amount: int
    reason: str

    @field_validator("reason")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("field is required")
        return v

    @field_validator("change_amount")
    @classmethod
    def _non_zero(cls, v: int) -> int:
        if v == 0:
            raise ValueError("change_amount must be non-zero")
        return v


class InventoryStockOut(BaseModel):
    product_id: UUID
    warehouse_id: UUID
    quantity: int


class InventoryMovementOut(BaseModel):
    movement_id: UUID
    inventory_id: UUID
    sequence: int
    change_amount: int
    reason: str
    created_at: Optional[datetime] = None


class StockAdjustmentOut(BaseModel):
    movement_id: UUID
    inventory_id: UUID
    product_id: UUID
    warehouse_id: UUID
    change_amount: int
    reason: str
    quantity: int
