from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel


class AlertSupplier(BaseModel):
    id: UUID
    name: str
    contact: Optional[str] = None


class LowStockAlert(BaseModel):
    product_id: UUID
    product_name: str
    sku: str
    warehouse_id: UUID
    warehouse_name: str
    current_stock: int
    threshold: int
    # None only with the velocity estimator when nothing sold at that warehouse
    days_until_stockout: Optional[int] = None
    supplier: Optional[AlertSupplier] = None


class LowStockAlertList(BaseModel):
    alerts: List[LowStockAlert]
    total_alerts: int
