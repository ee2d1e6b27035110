import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import ErrorKind, NotFoundError, ValidationError
from db.database import utcnow
from repositories.catalog import CatalogRepository
from repositories.ledger import InventoryLedger, StockLevel
from repositories.sales import SalesActivityFeed
from repositories.suppliers import SupplierDirectory
from schemas.alerts import AlertSupplier, LowStockAlert, LowStockAlertList
from services.stockout import ClampedStockEstimator, StockoutEstimator

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 30


class AlertEngine:
    """
    Low-stock alerts for one company.

    Stages: candidates (recent sales) -> enrichment (stock, warehouse,
    supplier) -> filter (stock < threshold) -> stockout estimate -> format.
    The reads are not wrapped in one transaction; alerts are advisory and a
    product selling through between two reads is acceptable.
    """

    def __init__(
        self,
        sales: SalesActivityFeed,
        ledger: InventoryLedger,
        catalog: CatalogRepository,
        suppliers: SupplierDirectory,
        estimator: Optional[StockoutEstimator] = None,
        window_days: int = DEFAULT_WINDOW_DAYS,
    ):
        if window_days <= 0:
            raise ValueError("window_days must be positive")
        self.sales = sales
        self.ledger = ledger
        self.catalog = catalog
        self.suppliers = suppliers
        self.estimator = estimator or ClampedStockEstimator()
        self.window_days = window_days

    async def low_stock_alerts(
        self,
        db: AsyncSession,
        company_id: UUID,
        *,
        warehouse_id: Optional[UUID] = None,
        now: Optional[datetime] = None,
    ) -> LowStockAlertList:
        company = await self.catalog.get_company(db, company_id)
        if company is None:
            raise NotFoundError("Company not found", kind=ErrorKind.COMPANY_NOT_FOUND)

        since = (now or utcnow()) - timedelta(days=self.window_days)

        candidates = await self.sales.recently_sold(db, company_id=company_id, since=since)
        if not candidates:
            return LowStockAlertList(alerts=[], total_alerts=0)

        levels = await self.ledger.stock_levels(
            db, company_id=company_id, product_ids=candidates, warehouse_id=warehouse_id
        )
        suppliers = await self.suppliers.primary_suppliers(db, candidates)

        low = [level for level in levels if self._is_low(level)]

        velocity: Dict[Tuple[UUID, UUID], int] = {}
        if low and self.estimator.needs_sales_velocity:
            velocity = await self.sales.units_sold(
                db, product_ids={level.product_id for level in low}, since=since
            )

        alerts: List[LowStockAlert] = []
        for level in low:
            rate = velocity.get((level.product_id, level.warehouse_id), 0) / self.window_days
            supplier = suppliers.get(level.product_id)
            alerts.append(
                LowStockAlert(
                    product_id=level.product_id,
                    product_name=level.product_name,
                    sku=level.sku,
                    warehouse_id=level.warehouse_id,
                    warehouse_name=level.warehouse_name,
                    current_stock=level.quantity,
                    threshold=level.threshold,
                    days_until_stockout=self.estimator.estimate(level.quantity, rate),
                    supplier=AlertSupplier(**supplier.to_schema) if supplier is not None else None,
                )
            )

        logger.info(
            "Company %s: %d candidates, %d stock rows, %d low-stock alerts",
            company_id, len(candidates), len(levels), len(alerts),
        )
        return LowStockAlertList(alerts=alerts, total_alerts=len(alerts))

    @staticmethod
    def _is_low(level: StockLevel) -> bool:
        if level.threshold is None:
            raise ValidationError(
                f"Product '{level.sku}' has no low-stock threshold",
                kind=ErrorKind.MISSING_THRESHOLD,
                details={"product_id": str(level.product_id)},
            )
        return level.quantity < level.threshold
