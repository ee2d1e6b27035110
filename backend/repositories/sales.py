"""
Sales Activity Feed.

The feed is owned by the order system; this service only reads it to decide
which products are worth alerting on and, optionally, how fast they sell.
"""

from datetime import datetime
from typing import Dict, Iterable, Set, Tuple
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from db.product import Product
from db.sales import SalesActivity


class SalesActivityFeed:
    async def recently_sold(self, db: AsyncSession, *, company_id: UUID, since: datetime) -> Set[UUID]:
        raise NotImplementedError

    async def units_sold(
        self, db: AsyncSession, *, product_ids: Iterable[UUID], since: datetime
    ) -> Dict[Tuple[UUID, UUID], int]:
        """Units sold since `since`, keyed by (product_id, warehouse_id)."""
        raise NotImplementedError


class SqlSalesActivityFeed(SalesActivityFeed):
    async def recently_sold(self, db, *, company_id, since):
        res = await db.execute(
            select(SalesActivity.product_id)
            .join(Product, SalesActivity.product_id == Product.product_id)
            .where(Product.company_id == company_id)
            .where(SalesActivity.sold_at >= since)
            .distinct()
        )
        return set(res.scalars().all())

    async def units_sold(self, db, *, product_ids, since):
        product_ids = list(product_ids)
        if not product_ids:
            return {}

        res = await db.execute(
            select(
                SalesActivity.product_id,
                SalesActivity.warehouse_id,
                func.sum(SalesActivity.quantity).label("units"),
            )
            .where(SalesActivity.product_id.in_(product_ids))
            .where(SalesActivity.sold_at >= since)
            .group_by(SalesActivity.product_id, SalesActivity.warehouse_id)
        )
        return {(r.product_id, r.warehouse_id): int(r.units or 0) for r in res.all()}
