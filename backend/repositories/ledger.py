"""
Inventory Ledger: the current quantity per (product, warehouse) plus its
append-only movement log.

Every accepted change updates `inventory.quantity` and bumps `inventory.version`
with a single conditional UPDATE, then inserts exactly one `inventory_movements`
row numbered by that version. Movements are ordered by this number, never by
timestamp.
Concurrent writers to the same row are serialized by the database, not here.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import ErrorKind, NotFoundError, ValidationError
from db.inventory import Inventory, InventoryMovement
from db.product import Product
from db.warehouse import Warehouse

INITIAL_STOCK_REASON = "initial_stock"


@dataclass(frozen=True)
class LedgerEntry:
    movement_id: UUID
    inventory_id: UUID
    product_id: UUID
    warehouse_id: UUID
    change_amount: int
    reason: str
    quantity: int


@dataclass(frozen=True)
class StockLevel:
    product_id: UUID
    product_name: str
    sku: str
    threshold: Optional[int]
    warehouse_id: UUID
    warehouse_name: str
    quantity: int


class InventoryLedger:
    async def get_inventory(self, db: AsyncSession, *, product_id: UUID, warehouse_id: UUID) -> Optional[Inventory]:
        raise NotImplementedError

    async def get_quantity(self, db: AsyncSession, *, product_id: UUID, warehouse_id: UUID) -> Optional[int]:
        raise NotImplementedError

    async def open(
        self,
        db: AsyncSession,
        *,
        product_id: UUID,
        warehouse_id: UUID,
        quantity: int = 0,
        reason: str = INITIAL_STOCK_REASON,
    ) -> Inventory:
        raise NotImplementedError

    async def adjust(
        self,
        db: AsyncSession,
        *,
        product_id: UUID,
        warehouse_id: UUID,
        delta: int,
        reason: str,
    ) -> LedgerEntry:
        raise NotImplementedError

    async def list_movements(
        self, db: AsyncSession, *, product_id: UUID, warehouse_id: UUID, limit: int = 100
    ) -> List[InventoryMovement]:
        raise NotImplementedError

    async def stock_levels(
        self,
        db: AsyncSession,
        *,
        company_id: UUID,
        product_ids: Iterable[UUID],
        warehouse_id: Optional[UUID] = None,
    ) -> List[StockLevel]:
        raise NotImplementedError


class SqlInventoryLedger(InventoryLedger):
    async def get_inventory(self, db, *, product_id, warehouse_id):
        res = await db.execute(
            select(Inventory).where(
                Inventory.product_id == product_id,
                Inventory.warehouse_id == warehouse_id,
            )
        )
        return res.scalar_one_or_none()

    async def get_quantity(self, db, *, product_id, warehouse_id):
        res = await db.execute(
            select(Inventory.quantity).where(
                Inventory.product_id == product_id,
                Inventory.warehouse_id == warehouse_id,
            )
        )
        return res.scalar_one_or_none()

    async def open(self, db, *, product_id, warehouse_id, quantity=0, reason=INITIAL_STOCK_REASON):
        if quantity < 0:
            raise ValidationError("quantity cannot be negative", kind=ErrorKind.INVALID_FIELD)

        inv = Inventory(
            product_id=product_id, warehouse_id=warehouse_id, quantity=quantity, version=1 if quantity else 0
        )
        db.add(inv)
        await db.flush()

        # Opening stock is a movement too, so quantity == sum(change_amount) holds
        if quantity:
            db.add(
                InventoryMovement(inventory_id=inv.inventory_id, sequence=1, change_amount=quantity, reason=reason)
            )
            await db.flush()
        return inv

    async def adjust(self, db, *, product_id, warehouse_id, delta, reason):
        delta = int(delta)
        reason = (reason or "").strip()
        if delta == 0:
            raise ValidationError("change_amount must be non-zero", kind=ErrorKind.INVALID_FIELD)
        if not reason:
            raise ValidationError("reason must not be blank", kind=ErrorKind.INVALID_FIELD,
                                  details={"fields": ["reason"]})

        stmt = (
            update(Inventory)
            .where(
                Inventory.product_id == product_id,
                Inventory.warehouse_id == warehouse_id,
                Inventory.quantity + delta >= 0,
            )
            .values(quantity=Inventory.quantity + delta, version=Inventory.version + 1)
            .returning(Inventory.inventory_id, Inventory.quantity, Inventory.version)
            .execution_options(synchronize_session=False)
        )
        row = (await db.execute(stmt)).first()

        if row is None:
            current = await self.get_quantity(db, product_id=product_id, warehouse_id=warehouse_id)
            if current is None:
                raise NotFoundError(
                    "No inventory for this product at this warehouse",
                    kind=ErrorKind.INVENTORY_NOT_FOUND,
                )
            raise ValidationError(
                f"Insufficient stock: {current} on hand, cannot apply change of {delta}",
                kind=ErrorKind.INSUFFICIENT_STOCK,
                details={"quantity": current, "change_amount": delta},
            )

        movement = InventoryMovement(
            inventory_id=row.inventory_id, sequence=row.version, change_amount=delta, reason=reason
        )
        db.add(movement)
        await db.flush()

        return LedgerEntry(
            movement_id=movement.movement_id,
            inventory_id=row.inventory_id,
            product_id=product_id,
            warehouse_id=warehouse_id,
            change_amount=delta,
            reason=reason,
            quantity=int(row.quantity),
        )

    async def list_movements(self, db, *, product_id, warehouse_id, limit=100):
        res = await db.execute(
            select(InventoryMovement)
            .join(Inventory, InventoryMovement.inventory_id == Inventory.inventory_id)
            .where(Inventory.product_id == product_id, Inventory.warehouse_id == warehouse_id)
            .order_by(InventoryMovement.sequence.desc())
            .limit(limit)
        )
        return list(res.scalars().all())

    async def stock_levels(self, db, *, company_id, product_ids, warehouse_id=None):
        product_ids = list(product_ids)
        if not product_ids:
            return []

        stmt = (
            select(
                Inventory.product_id,
                Product.name.label("product_name"),
                Product.sku,
                Product.low_stock_threshold.label("threshold"),
                Inventory.warehouse_id,
                Warehouse.name.label("warehouse_name"),
                Inventory.quantity,
            )
            .join(Product, Inventory.product_id == Product.product_id)
            .join(Warehouse, Inventory.warehouse_id == Warehouse.warehouse_id)
            .where(Product.company_id == company_id)
            .where(Warehouse.company_id == company_id)
            .where(Product.product_id.in_(product_ids))
            # Bundles are never alerted on directly, only their components
            .where(Product.is_bundle.is_(False))
            .order_by(Product.name, Warehouse.name)
        )
        if warehouse_id is not None:
            stmt = stmt.where(Inventory.warehouse_id == warehouse_id)

        res = await db.execute(stmt)
        return [
            StockLevel(
                product_id=r.product_id,
                product_name=r.product_name,
                sku=r.sku,
                threshold=r.threshold,
                warehouse_id=r.warehouse_id,
                warehouse_name=r.warehouse_name,
                quantity=int(r.quantity or 0),
            )
            for r in res.all()
        ]
