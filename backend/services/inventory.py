import logging
from typing import List
from uuid import UUID

from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import (
    ConflictError,
    ErrorKind,
    IntegrityError,
    InventoryError,
    NotFoundError,
    UnexpectedError,
    ValidationError,
)
from db.database import atomic, is_unique_violation
from db.inventory import Inventory, InventoryMovement
from repositories.catalog import CatalogRepository
from repositories.ledger import InventoryLedger, LedgerEntry

logger = logging.getLogger(__name__)


class InventoryService:
    """Runs each ledger write in its own commit-or-rollback scope."""

    def __init__(self, catalog: CatalogRepository, ledger: InventoryLedger):
        self.catalog = catalog
        self.ledger = ledger

    async def quantity(self, db: AsyncSession, *, product_id: UUID, warehouse_id: UUID) -> int:
        qty = await self.ledger.get_quantity(db, product_id=product_id, warehouse_id=warehouse_id)
        if qty is None:
            raise NotFoundError("No inventory for this product at this warehouse", kind=ErrorKind.INVENTORY_NOT_FOUND)
        return qty

    async def movements(
        self, db: AsyncSession, *, product_id: UUID, warehouse_id: UUID, limit: int = 100
    ) -> List[InventoryMovement]:
        await self.quantity(db, product_id=product_id, warehouse_id=warehouse_id)
        return await self.ledger.list_movements(db, product_id=product_id, warehouse_id=warehouse_id, limit=limit)

    async def open_stock(
        self, db: AsyncSession, *, product_id: UUID, warehouse_id: UUID, quantity: int = 0
    ) -> Inventory:
        """Start tracking a product at another warehouse of the same company."""
        product = await self.catalog.get_product(db, product_id)
        if product is None:
            raise NotFoundError("Product not found", kind=ErrorKind.PRODUCT_NOT_FOUND)
        warehouse = await self.catalog.get_warehouse(db, warehouse_id)
        if warehouse is None:
            raise NotFoundError("Warehouse not found", kind=ErrorKind.WAREHOUSE_NOT_FOUND)
        if warehouse.company_id != product.company_id:
            raise ValidationError(
                "Warehouse belongs to a different company than the product",
                kind=ErrorKind.INVALID_FIELD,
            )

        existing = await self.ledger.get_inventory(db, product_id=product_id, warehouse_id=warehouse_id)
        if existing is not None:
            raise ConflictError(
                "Inventory already exists for this product at this warehouse",
                kind=ErrorKind.DUPLICATE_INVENTORY,
                details={"inventory_id": str(existing.inventory_id)},
            )

        try:
            async with atomic(db):
                inv = await self.ledger.open(db, product_id=product_id, warehouse_id=warehouse_id, quantity=quantity)
        except sa_exc.IntegrityError as e:
            if not is_unique_violation(e):
                logger.exception("Opening stock failed for product %s at warehouse %s", product_id, warehouse_id)
                raise UnexpectedError("Failed to create inventory") from e
            logger.warning("Lost inventory race for product %s at warehouse %s", product_id, warehouse_id)
            raise IntegrityError(
                "Inventory for this product at this warehouse was created concurrently",
                kind=ErrorKind.RACE_LOST_UNIQUENESS,
            ) from None
        except InventoryError:
            raise
        except sa_exc.SQLAlchemyError as e:
            logger.exception("Opening stock failed for product %s at warehouse %s", product_id, warehouse_id)
            raise UnexpectedError("Failed to create inventory") from e

        logger.info("Opened stock for product %s at warehouse %s with %d units", product_id, warehouse_id, quantity)
        return inv

    async def adjust(
        self, db: AsyncSession, *, product_id: UUID, warehouse_id: UUID, delta: int, reason: str
    ) -> LedgerEntry:
        try:
            async with atomic(db):
                entry = await self.ledger.adjust(
                    db, product_id=product_id, warehouse_id=warehouse_id, delta=delta, reason=reason
                )
        except InventoryError as e:
            if e.kind == ErrorKind.INSUFFICIENT_STOCK:
                logger.warning("Rejected change of %d for product %s at warehouse %s: %s",
                               delta, product_id, warehouse_id, e.message)
            raise
        except sa_exc.SQLAlchemyError as e:
            logger.exception("Stock adjustment failed for product %s at warehouse %s", product_id, warehouse_id)
            raise UnexpectedError("Failed to record stock movement") from e

        logger.info("Applied change of %d (%s) to product %s at warehouse %s, now %d",
                    entry.change_amount, entry.reason, product_id, warehouse_id, entry.quantity)
        return entry
