"""
Seed a demo company with two warehouses, a handful of products, suppliers and
recent sales so the low-stock alert endpoint has something to show.

Run locally:
  python backend/scripts/seed_demo_data.py

It uses the same DATABASE_* env vars as the backend (dotenv supported by core.config).
Re-running is a no-op once the demo company exists.
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from sqlalchemy import select

from core.config import settings
from core.dependencies import catalog_repository, inventory_ledger, supplier_directory
from db.company import Company
from db.database import async_session_maker, create_db_and_tables, utcnow
from db.sales import SalesActivity
from db.supplier import Supplier
from db.warehouse import Warehouse
from schemas.products import ProductCreate
from services.onboarding import ProductOnboarding

DEMO_COMPANY = "Demo Hardware Co"


@dataclass(frozen=True)
class SeedProduct:
    name: str
    sku: str
    price: str
    quantity: int
    threshold: int
    supplier: Optional[str] = None
    units_sold_last_month: int = 0


SEED_SUPPLIERS = [
    ("Fastener Wholesale", "orders@fastener.example"),
    ("Tooling Direct", "+1 555 0100"),
]

SEED_PRODUCTS: list[SeedProduct] = [
    SeedProduct("Wood screw 4x40 (box of 200)", "SCR-440", "7.95", 3, 20, "Fastener Wholesale", 90),
    SeedProduct("Hex nut M8 (box of 100)", "NUT-M8", "4.50", 12, 10, "Fastener Wholesale", 30),
    SeedProduct("Claw hammer 16oz", "HAM-16", "24.99", 2, 5, "Tooling Direct", 6),
    SeedProduct("Spirit level 600mm", "LVL-600", "18.00", 1, 4, None, 2),
    SeedProduct("Tape measure 5m", "TAP-5M", "9.25", 40, 10, "Tooling Direct", 15),
    # Below threshold but no recent sales: must not alert
    SeedProduct("Brass hinge 75mm (legacy)", "HNG-75", "3.10", 0, 10, None, 0),
]


async def main() -> None:
    await create_db_and_tables()
    onboarding = ProductOnboarding(
        catalog_repository, inventory_ledger, default_threshold=settings.default_low_stock_threshold
    )

    async with async_session_maker() as db:
        res = await db.execute(select(Company).where(Company.name == DEMO_COMPANY))
        if res.scalar_one_or_none():
            print(f"{DEMO_COMPANY!r} already exists, nothing to do.")
            return

        company = await catalog_repository.add_company(db, Company(name=DEMO_COMPANY))
        main_wh = await catalog_repository.add_warehouse(
            db, Warehouse(company_id=company.company_id, name="Main", location="Unit 4, Riverside")
        )
        await catalog_repository.add_warehouse(
            db, Warehouse(company_id=company.company_id, name="Overflow", location="Unit 9, Riverside")
        )
        suppliers = {}
        for name, contact in SEED_SUPPLIERS:
            suppliers[name] = await supplier_directory.add_supplier(
                db, Supplier(company_id=company.company_id, name=name, contact_info=contact)
            )
        await db.commit()

        now = utcnow()
        alerts_expected = 0
        for p in SEED_PRODUCTS:
            result = await onboarding.onboard(
                db,
                ProductCreate.parse(
                    {
                        "name": p.name,
                        "sku": p.sku,
                        "price": p.price,
                        "warehouse_id": main_wh.warehouse_id,
                        "initial_quantity": p.quantity,
                        "low_stock_threshold": p.threshold,
                    }
                ),
            )
            if p.supplier:
                await supplier_directory.link_product(
                    db, supplier_id=suppliers[p.supplier].supplier_id, product_id=result.product_id
                )

            # Spread the month's units over a few sale events
            remaining = p.units_sold_last_month
            while remaining > 0:
                qty = min(remaining, random.randint(1, 10))
                db.add(
                    SalesActivity(
                        product_id=result.product_id,
                        warehouse_id=main_wh.warehouse_id,
                        quantity=qty,
                        sold_at=now - timedelta(days=random.randint(0, 27), hours=random.randint(0, 23)),
                    )
                )
                remaining -= qty
            await db.commit()

            if p.units_sold_last_month and p.quantity < p.threshold:
                alerts_expected += 1

        print(
            f"Done. Company {company.company_id} seeded with {len(SEED_PRODUCTS)} products "
            f"and {len(SEED_SUPPLIERS)} suppliers; {alerts_expected} low-stock alerts expected."
        )


if __name__ == "__main__":
    asyncio.run(main())
