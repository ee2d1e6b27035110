import logging
from dataclasses import dataclass
from typing import Optional
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
)
from db.database import atomic, is_unique_violation
from db.product import Product
from repositories.catalog import CatalogRepository
from repositories.ledger import InventoryLedger
from schemas.products import ProductCreate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OnboardingResult:
    product_id: UUID
    warehouse_id: UUID
    initial_quantity: int


class ProductOnboarding:
    """
    Creates a product together with its first inventory row.

    Either both rows are committed or neither is. The SKU lookup done up front
    only produces a friendlier error; the (company_id, sku) unique constraint
    is what actually protects against concurrent creators.
    """

    def __init__(
        self,
        catalog: CatalogRepository,
        ledger: InventoryLedger,
        default_threshold: Optional[int] = None,
    ):
        self.catalog = catalog
        self.ledger = ledger
        self.default_threshold = default_threshold

    async def onboard(self, db: AsyncSession, payload: ProductCreate) -> OnboardingResult:
        warehouse = await self.catalog.get_warehouse(db, payload.warehouse_id)
        if warehouse is None:
            raise NotFoundError("Warehouse not found", kind=ErrorKind.WAREHOUSE_NOT_FOUND)
        company_id = warehouse.company_id

        existing = await self.catalog.find_product_by_sku(db, company_id=company_id, sku=payload.sku)
        if existing is not None:
            logger.warning("Rejected duplicate sku %r for company %s", payload.sku, company_id)
            raise ConflictError(
                f"SKU '{payload.sku}' already exists",
                kind=ErrorKind.DUPLICATE_SKU,
                details={"existing_product_id": str(existing.product_id)},
            )

        threshold = payload.low_stock_threshold
        if threshold is None:
            threshold = self.default_threshold

        try:
            async with atomic(db):
                product = await self.catalog.add_product(
                    db,
                    Product(
                        company_id=company_id,
                        name=payload.name,
                        sku=payload.sku,
                        price=payload.price,
                        is_bundle=payload.is_bundle,
                        low_stock_threshold=threshold,
                    ),
                )
                product_id = product.product_id
                await self.ledger.open(
                    db,
                    product_id=product_id,
                    warehouse_id=warehouse.warehouse_id,
                    quantity=payload.initial_quantity,
                )
        except sa_exc.IntegrityError as e:
            if not is_unique_violation(e):
                logger.exception("Product onboarding failed for sku %r", payload.sku)
                raise UnexpectedError("Failed to create product") from e
            # Another writer committed the same sku between the lookup and our flush/commit
            logger.warning("Lost sku race for %r in company %s, rolled back", payload.sku, company_id)
            raise IntegrityError(
                f"SKU '{payload.sku}' was created concurrently",
                kind=ErrorKind.RACE_LOST_UNIQUENESS,
            ) from None
        except InventoryError:
            raise
        except sa_exc.SQLAlchemyError as e:
            logger.exception("Product onboarding failed for sku %r", payload.sku)
            raise UnexpectedError("Failed to create product") from e

        logger.info(
            "Created product %s (sku %r) with %d units at warehouse %s",
            product_id, payload.sku, payload.initial_quantity, warehouse.warehouse_id,
        )
        return OnboardingResult(
            product_id=product_id,
            warehouse_id=warehouse.warehouse_id,
            initial_quantity=payload.initial_quantity,
        )
