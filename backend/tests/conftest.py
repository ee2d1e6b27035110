"""
Pytest fixtures: a fresh SQLite database per test, sessions, an HTTP client
wired to that database, and a small factory for catalog rows.
"""
import os

# The app engine is created at import time; keep it off Postgres in tests
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import timedelta

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from db.company import Company
from db.database import create_db_and_tables, enable_sqlite_foreign_keys, get_async_session, utcnow
from db.sales import SalesActivity
from db.supplier import Supplier
from db.warehouse import Warehouse
from main import app
from repositories.catalog import SqlCatalogRepository
from repositories.ledger import SqlInventoryLedger
from repositories.suppliers import SqlSupplierDirectory
from schemas.products import ProductCreate
from services.onboarding import ProductOnboarding


@pytest.fixture
async def engine(tmp_path):
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'inventory.db'}")
    enable_sqlite_foreign_keys(eng)
    await create_db_and_tables(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
async def client(session_maker):
    async def _session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_async_session] = _session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


class Factory:
    def __init__(self, db):
        self.db = db
        self.onboarding = ProductOnboarding(SqlCatalogRepository(), SqlInventoryLedger(), default_threshold=10)

    async def _save(self, obj):
        # Detached rows keep their loaded ids even after a failed call rolls the session back
        self.db.add(obj)
        await self.db.commit()
        self.db.expunge(obj)
        return obj

    async def company(self, name="Acme"):
        return await self._save(Company(name=name))

    async def warehouse(self, company, name="Main", location=None):
        return await self._save(Warehouse(company_id=company.company_id, name=name, location=location))

    async def product(self, warehouse, sku="X1", price="10.00", quantity=None, threshold=5, is_bundle=False, name=None):
        data = {
            "name": name or f"Product {sku}",
            "sku": sku,
            "price": price,
            "warehouse_id": str(warehouse.warehouse_id),
            "low_stock_threshold": threshold,
            "is_bundle": is_bundle,
        }
        if quantity is not None:
            data["initial_quantity"] = quantity
        result = await self.onboarding.onboard(self.db, ProductCreate.parse(data))
        return result.product_id

    async def sale(self, product_id, warehouse_id, quantity=1, days_ago=1):
        self.db.add(
            SalesActivity(
                product_id=product_id,
                warehouse_id=warehouse_id,
                quantity=quantity,
                sold_at=utcnow() - timedelta(days=days_ago),
            )
        )
        await self.db.commit()

    async def supplier(self, company, name="Supplier", contact=None, products=()):
        directory = SqlSupplierDirectory()
        supplier = await directory.add_supplier(
            self.db, Supplier(company_id=company.company_id, name=name, contact_info=contact)
        )
        for product_id in products:
            await directory.link_product(self.db, supplier_id=supplier.supplier_id, product_id=product_id)
        await self.db.commit()
        self.db.expunge(supplier)
        return supplier


@pytest.fixture
def factory(db):
    return Factory(db)
