"""
Catalog Store: companies, warehouses, products and bundle composition.

`CatalogRepository` is the port the services depend on; `SqlCatalogRepository`
is the SQLAlchemy adapter. Writes only flush; the caller owns the commit.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db.company import Company
from db.product import Product, ProductBundle
from db.warehouse import Warehouse


class CatalogRepository:
    async def get_company(self, db: AsyncSession, company_id: UUID) -> Optional[Company]:
        raise NotImplementedError

    async def get_warehouse(self, db: AsyncSession, warehouse_id: UUID) -> Optional[Warehouse]:
        raise NotImplementedError

    async def get_product(self, db: AsyncSession, product_id: UUID) -> Optional[Product]:
        raise NotImplementedError

    async def find_product_by_sku(self, db: AsyncSession, *, company_id: UUID, sku: str) -> Optional[Product]:
        raise NotImplementedError

    async def add_company(self, db: AsyncSession, company: Company) -> Company:
        raise NotImplementedError

    async def add_warehouse(self, db: AsyncSession, warehouse: Warehouse) -> Warehouse:
        raise NotImplementedError

    async def add_product(self, db: AsyncSession, product: Product) -> Product:
        """Insert and flush so `product.product_id` is assigned; nothing is committed."""
        raise NotImplementedError

    async def get_bundle_component(
        self, db: AsyncSession, *, bundle_id: UUID, component_id: UUID
    ) -> Optional[ProductBundle]:
        raise NotImplementedError

    async def add_bundle_component(self, db: AsyncSession, component: ProductBundle) -> ProductBundle:
        raise NotImplementedError

    async def list_bundle_components(self, db: AsyncSession, bundle_id: UUID) -> List[ProductBundle]:
        raise NotImplementedError


class SqlCatalogRepository(CatalogRepository):
    async def get_company(self, db, company_id):
        return await db.get(Company, company_id)

    async def get_warehouse(self, db, warehouse_id):
        return await db.get(Warehouse, warehouse_id)

    async def get_product(self, db, product_id):
        return await db.get(Product, product_id)

    async def find_product_by_sku(self, db, *, company_id, sku):
        res = await db.execute(
            select(Product).where(Product.company_id == company_id, Product.sku == sku)
        )
        return res.scalar_one_or_none()

    async def add_company(self, db, company):
        db.add(company)
        await db.flush()
        return company

    async def add_warehouse(self, db, warehouse):
        db.add(warehouse)
        await db.flush()
        return warehouse

    async def add_product(self, db, product):
        db.add(product)
        await db.flush()
        return product

    async def get_bundle_component(self, db, *, bundle_id, component_id):
        return await db.get(ProductBundle, (bundle_id, component_id))

    async def add_bundle_component(self, db, component):
        db.add(component)
        await db.flush()
        return component

    async def list_bundle_components(self, db, bundle_id):
        res = await db.execute(
            select(ProductBundle).where(ProductBundle.bundle_id == bundle_id)
        )
        return list(res.scalars().all())
