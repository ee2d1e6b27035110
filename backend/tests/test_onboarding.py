import asyncio
import uuid
from decimal import Decimal

import pytest
from sqlalchemy import exc as sa_exc
from sqlalchemy import func, select

from core.errors import ConflictError, ErrorKind, IntegrityError, NotFoundError, UnexpectedError, ValidationError
from db.database import is_unique_violation
from db.inventory import Inventory, InventoryMovement
from db.product import Product
from db.warehouse import Warehouse
from repositories.catalog import SqlCatalogRepository
from repositories.ledger import SqlInventoryLedger
from schemas.products import ProductCreate
from services.onboarding import ProductOnboarding


def _payload(warehouse, **overrides):
    data = {"name": "Widget", "sku": "W-1", "price": "12.50", "warehouse_id": str(warehouse.warehouse_id)}
    data.update(overrides)
    return data


async def _count(db, model, *where):
    res = await db.execute(select(func.count()).select_from(model).where(*where))
    return res.scalar_one()


class BlindCatalog(SqlCatalogRepository):
    """Misses every SKU lookup, as if a concurrent writer had not committed yet."""

    async def find_product_by_sku(self, db, *, company_id, sku):
        return None


class PhantomWarehouseCatalog(SqlCatalogRepository):
    """Hands back a warehouse that was never stored, as if deleted after the lookup."""

    def __init__(self, company_id):
        self.company_id = company_id

    async def get_warehouse(self, db, warehouse_id):
        return Warehouse(warehouse_id=warehouse_id, company_id=self.company_id, name="Gone")


class BrokenLedger(SqlInventoryLedger):
    async def open(self, db, **kwargs):
        raise sa_exc.OperationalError("INSERT INTO inventory ...", {}, Exception("disk I/O error"))


@pytest.fixture
def onboarding():
    return ProductOnboarding(SqlCatalogRepository(), SqlInventoryLedger(), default_threshold=10)


async def test_creates_product_and_inventory_together(db, factory, onboarding):
    company = await factory.company()
    warehouse = await factory.warehouse(company)

    result = await onboarding.onboard(db, ProductCreate.parse(_payload(warehouse, initial_quantity=7)))

    assert result.warehouse_id == warehouse.warehouse_id
    assert result.initial_quantity == 7
    product = await db.get(Product, result.product_id)
    assert product.company_id == company.company_id
    qty = await SqlInventoryLedger().get_quantity(db, product_id=result.product_id, warehouse_id=warehouse.warehouse_id)
    assert qty == 7


async def test_initial_stock_is_recorded_as_a_movement(db, factory, onboarding):
    company = await factory.company()
    warehouse = await factory.warehouse(company)

    result = await onboarding.onboard(db, ProductCreate.parse(_payload(warehouse, initial_quantity=4)))

    movements = await SqlInventoryLedger().list_movements(
        db, product_id=result.product_id, warehouse_id=warehouse.warehouse_id
    )
    assert [(m.change_amount, m.reason) for m in movements] == [(4, "initial_stock")]


async def test_missing_initial_quantity_defaults_to_zero(db, factory, onboarding):
    company = await factory.company()
    warehouse = await factory.warehouse(company)

    result = await onboarding.onboard(db, ProductCreate.parse(_payload(warehouse)))

    assert result.initial_quantity == 0
    qty = await SqlInventoryLedger().get_quantity(db, product_id=result.product_id, warehouse_id=warehouse.warehouse_id)
    assert qty == 0
    assert await _count(db, InventoryMovement) == 0


async def test_null_initial_quantity_defaults_to_zero(db, factory):
    warehouse = await factory.warehouse(await factory.company())
    assert ProductCreate.parse(_payload(warehouse, initial_quantity=None)).initial_quantity == 0


async def test_threshold_falls_back_to_default(db, factory, onboarding):
    warehouse = await factory.warehouse(await factory.company())

    result = await onboarding.onboard(db, ProductCreate.parse(_payload(warehouse)))

    product = await db.get(Product, result.product_id)
    assert product.low_stock_threshold == 10


async def test_string_and_numeric_price_store_the_same_decimal(db, factory, onboarding):
    warehouse = await factory.warehouse(await factory.company())

    a = await onboarding.onboard(db, ProductCreate.parse(_payload(warehouse, sku="A", price="12.50")))
    b = await onboarding.onboard(db, ProductCreate.parse(_payload(warehouse, sku="B", price=12.50)))

    res = await db.execute(
        select(Product.product_id, Product.price).where(Product.product_id.in_([a.product_id, b.product_id]))
    )
    prices = {pid: price for pid, price in res.all()}
    assert prices[a.product_id] == Decimal("12.50")
    assert prices[b.product_id] == Decimal("12.50")


async def test_duplicate_sku_is_rejected_before_writing(db, factory, onboarding):
    warehouse = await factory.warehouse(await factory.company())
    await onboarding.onboard(db, ProductCreate.parse(_payload(warehouse)))

    with pytest.raises(ConflictError) as excinfo:
        await onboarding.onboard(db, ProductCreate.parse(_payload(warehouse, name="Other")))

    assert excinfo.value.kind == ErrorKind.DUPLICATE_SKU
    assert await _count(db, Product) == 1
    assert await _count(db, Inventory) == 1


async def test_same_sku_is_allowed_in_another_company(db, factory, onboarding):
    w1 = await factory.warehouse(await factory.company("Acme"))
    w2 = await factory.warehouse(await factory.company("Globex"))

    await onboarding.onboard(db, ProductCreate.parse(_payload(w1)))
    await onboarding.onboard(db, ProductCreate.parse(_payload(w2)))

    assert await _count(db, Product, Product.sku == "W-1") == 2


async def test_lost_race_rolls_back_and_reports_integrity_error(db, factory):
    warehouse = await factory.warehouse(await factory.company())
    onboarding = ProductOnboarding(BlindCatalog(), SqlInventoryLedger(), default_threshold=10)
    await onboarding.onboard(db, ProductCreate.parse(_payload(warehouse, initial_quantity=3)))

    with pytest.raises(IntegrityError) as excinfo:
        await onboarding.onboard(db, ProductCreate.parse(_payload(warehouse, initial_quantity=5)))

    assert excinfo.value.kind == ErrorKind.RACE_LOST_UNIQUENESS
    assert await _count(db, Product) == 1
    assert await _count(db, Inventory) == 1
    assert await _count(db, InventoryMovement) == 1


async def test_concurrent_identical_skus_yield_one_product(session_maker, factory):
    warehouse = await factory.warehouse(await factory.company())
    onboarding = ProductOnboarding(SqlCatalogRepository(), SqlInventoryLedger(), default_threshold=10)

    async def attempt():
        async with session_maker() as session:
            return await onboarding.onboard(session, ProductCreate.parse(_payload(warehouse, initial_quantity=1)))

    results = await asyncio.gather(attempt(), attempt(), return_exceptions=True)

    successes = [r for r in results if not isinstance(r, Exception)]
    failures = [r for r in results if isinstance(r, Exception)]
    assert len(successes) == 1
    assert len(failures) == 1
    assert isinstance(failures[0], (ConflictError, IntegrityError))

    async with session_maker() as session:
        assert await _count(session, Product) == 1
        assert await _count(session, Inventory) == 1


async def test_storage_failure_leaves_no_partial_rows(db, factory):
    warehouse = await factory.warehouse(await factory.company())
    onboarding = ProductOnboarding(SqlCatalogRepository(), BrokenLedger(), default_threshold=10)

    with pytest.raises(UnexpectedError) as excinfo:
        await onboarding.onboard(db, ProductCreate.parse(_payload(warehouse, initial_quantity=2)))

    assert "disk I/O" not in excinfo.value.message
    assert await _count(db, Product) == 0
    assert await _count(db, Inventory) == 0


async def test_foreign_key_failure_is_not_reported_as_a_sku_race(db, factory):
    company = await factory.company()
    onboarding = ProductOnboarding(PhantomWarehouseCatalog(company.company_id), SqlInventoryLedger(), default_threshold=10)
    payload = ProductCreate.parse(
        {"name": "Widget", "sku": "S", "price": "1.00", "warehouse_id": str(uuid.uuid4()), "initial_quantity": 1}
    )

    with pytest.raises(UnexpectedError) as excinfo:
        await onboarding.onboard(db, payload)

    assert excinfo.value.kind == ErrorKind.UNEXPECTED
    assert await _count(db, Product) == 0
    assert await _count(db, Inventory) == 0


async def test_unknown_warehouse(db, onboarding):
    payload = ProductCreate.parse(
        {"name": "Widget", "sku": "W-1", "price": "1.00", "warehouse_id": "00000000-0000-0000-0000-000000000001"}
    )
    with pytest.raises(NotFoundError) as excinfo:
        await onboarding.onboard(db, payload)
    assert excinfo.value.kind == ErrorKind.WAREHOUSE_NOT_FOUND


class _PgError(Exception):
    def __init__(self, sqlstate):
        super().__init__(f"sqlstate {sqlstate}")
        self.sqlstate = sqlstate


@pytest.mark.parametrize(
    "orig,expected",
    [
        (_PgError("23505"), True),
        (_PgError("23503"), False),
        (Exception("UNIQUE constraint failed: products.company_id, products.sku"), True),
        (Exception("FOREIGN KEY constraint failed"), False),
    ],
)
def test_unique_violation_detection(orig, expected):
    assert is_unique_violation(sa_exc.IntegrityError("INSERT ...", {}, orig)) is expected
