from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from core.dependencies import get_alert_engine
from db.database import get_async_session
from schemas.alerts import LowStockAlertList
from services.alerts import AlertEngine

router = APIRouter()


@router.get("/{company_id}/alerts/low-stock", response_model=LowStockAlertList)
async def low_stock_alerts(
    company_id: UUID,
    warehouse_id: Optional[UUID] = None,
    db: AsyncSession = Depends(get_async_session),
    engine: AlertEngine = Depends(get_alert_engine),
):
    """
    Low-stock alerts across the company's warehouses.

    Only products sold within the trailing sales window are considered.
    """
    return await engine.low_stock_alerts(db, company_id, warehouse_id=warehouse_id)
