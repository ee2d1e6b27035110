from typing import Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from db.supplier import Supplier, supplier_products


class SupplierDirectory:
    async def get_supplier(self, db: AsyncSession, supplier_id: UUID) -> Optional[Supplier]:
        raise NotImplementedError

    async def list_suppliers(self, db: AsyncSession, company_id: UUID) -> List[Supplier]:
        raise NotImplementedError

    async def add_supplier(self, db: AsyncSession, supplier: Supplier) -> Supplier:
        raise NotImplementedError

    async def is_linked(self, db: AsyncSession, *, supplier_id: UUID, product_id: UUID) -> bool:
        raise NotImplementedError

    async def link_product(self, db: AsyncSession, *, supplier_id: UUID, product_id: UUID) -> None:
        raise NotImplementedError

    async def primary_suppliers(self, db: AsyncSession, product_ids: Iterable[UUID]) -> Dict[UUID, Supplier]:
        """At most one supplier per product: lowest name first, then lowest id."""
        raise NotImplementedError


class SqlSupplierDirectory(SupplierDirectory):
    async def get_supplier(self, db, supplier_id):
        return await db.get(Supplier, supplier_id)

    async def list_suppliers(self, db, company_id):
        res = await db.execute(
            select(Supplier)
            .where(Supplier.company_id == company_id)
            .order_by(func.lower(Supplier.name).asc())
        )
        return list(res.scalars().all())

    async def add_supplier(self, db, supplier):
        db.add(supplier)
        await db.flush()
        return supplier

    async def is_linked(self, db, *, supplier_id, product_id):
        res = await db.execute(
            select(supplier_products.c.supplier_id).where(
                supplier_products.c.supplier_id == supplier_id,
                supplier_products.c.product_id == product_id,
            )
        )
        return res.first() is not None

    async def link_product(self, db, *, supplier_id, product_id):
        await db.execute(insert(supplier_products).values(supplier_id=supplier_id, product_id=product_id))

    async def primary_suppliers(self, db, product_ids):
        product_ids = list(product_ids)
        if not product_ids:
            return {}

        res = await db.execute(
            select(supplier_products.c.product_id, Supplier)
            .join(Supplier, Supplier.supplier_id == supplier_products.c.supplier_id)
            .where(supplier_products.c.product_id.in_(product_ids))
            .order_by(supplier_products.c.product_id, Supplier.name, Supplier.supplier_id)
        )
        out: Dict[UUID, Supplier] = {}
        for product_id, supplier in res.all():
            out.setdefault(product_id, supplier)
        return out
