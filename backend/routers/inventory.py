from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.dependencies import get_inventory_service
from db.database import get_async_session
from schemas.inventory import (
    InventoryMovementCreate,
    InventoryMovementOut,
    InventoryOpen,
    InventoryStockOut,
    StockAdjustmentOut,
)
from services.inventory import InventoryService

router = APIRouter()


@router.post("/", response_model=InventoryStockOut, status_code=status.HTTP_201_CREATED)
async def open_stock(
    payload: InventoryOpen,
    db: AsyncSession = Depends(get_async_session),
    inventory: InventoryService = Depends(get_inventory_service),
):
    """Start stocking an existing product at another warehouse."""
    inv = await inventory.open_stock(
        db, product_id=payload.product_id, warehouse_id=payload.warehouse_id, quantity=payload.quantity
    )
    return InventoryStockOut(product_id=inv.product_id, warehouse_id=inv.warehouse_id, quantity=inv.quantity)


@router.post("/movements", response_model=StockAdjustmentOut, status_code=status.HTTP_201_CREATED)
async def create_movement(
    payload: InventoryMovementCreate,
    db: AsyncSession = Depends(get_async_session),
    inventory: InventoryService = Depends(get_inventory_service),
):
    entry = await inventory.adjust(
        db,
        product_id=payload.product_id,
        warehouse_id=payload.warehouse_id,
        delta=payload.change_amount,
        reason=payload.reason,
    )
    return StockAdjustmentOut(
        movement_id=entry.movement_id,
        inventory_id=entry.inventory_id,
        product_id=entry.product_id,
        warehouse_id=entry.warehouse_id,
        change_amount=entry.change_amount,
        reason=entry.reason,
        quantity=entry.quantity,
    )


@router.get("/{product_id}/{warehouse_id}", response_model=InventoryStockOut)
async def get_stock(
    product_id: UUID,
    warehouse_id: UUID,
    db: AsyncSession = Depends(get_async_session),
    inventory: InventoryService = Depends(get_inventory_service),
):
    qty = await inventory.quantity(db, product_id=product_id, warehouse_id=warehouse_id)
    return InventoryStockOut(product_id=product_id, warehouse_id=warehouse_id, quantity=qty)


@router.get("/{product_id}/{warehouse_id}/movements", response_model=List[InventoryMovementOut])
async def list_movements(
    product_id: UUID,
    warehouse_id: UUID,
    limit: int = Query(100, ge=1, le=1000),
    db: AsyncSession = Depends(get_async_session),
    inventory: InventoryService = Depends(get_inventory_service),
):
    items = await inventory.movements(db, product_id=product_id, warehouse_id=warehouse_id, limit=limit)
    return [InventoryMovementOut(**m.to_schema) for m in items]
