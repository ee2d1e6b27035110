import logging
from typing import List
from uuid import UUID

from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import ConflictError, ErrorKind, IntegrityError, NotFoundError, UnexpectedError, ValidationError
from db.database import atomic, is_unique_violation
from db.product import ProductBundle
from repositories.catalog import CatalogRepository

logger = logging.getLogger(__name__)


class BundleService:
    """
    Bundle composition.

    Bundles are one level deep: a component must be a plain product, so stock
    questions about a bundle never need recursive resolution.
    """

    def __init__(self, catalog: CatalogRepository):
        self.catalog = catalog

    async def add_component(
        self, db: AsyncSession, *, bundle_id: UUID, component_id: UUID, quantity: int
    ) -> ProductBundle:
        if quantity <= 0:
            raise ValidationError("quantity must be a positive integer", kind=ErrorKind.INVALID_FIELD)
        if bundle_id == component_id:
            raise ValidationError("A bundle cannot contain itself", kind=ErrorKind.INVALID_BUNDLE)

        bundle = await self.catalog.get_product(db, bundle_id)
        if bundle is None:
            raise NotFoundError("Bundle not found", kind=ErrorKind.PRODUCT_NOT_FOUND)
        if not bundle.is_bundle:
            raise ValidationError("Product is not a bundle", kind=ErrorKind.INVALID_BUNDLE)

        component = await self.catalog.get_product(db, component_id)
        if component is None:
            raise NotFoundError("Component product not found", kind=ErrorKind.PRODUCT_NOT_FOUND)
        if component.company_id != bundle.company_id:
            raise ValidationError("Component belongs to a different company", kind=ErrorKind.INVALID_BUNDLE)
        if component.is_bundle:
            raise ValidationError("Nested bundles are not supported", kind=ErrorKind.INVALID_BUNDLE)

        if await self.catalog.get_bundle_component(db, bundle_id=bundle_id, component_id=component_id):
            raise ConflictError("Component already part of this bundle", kind=ErrorKind.DUPLICATE_BUNDLE_COMPONENT)

        try:
            async with atomic(db):
                link = await self.catalog.add_bundle_component(
                    db, ProductBundle(bundle_id=bundle_id, component_id=component_id, quantity=quantity)
                )
        except sa_exc.IntegrityError as e:
            if not is_unique_violation(e):
                logger.exception("Adding %s to bundle %s failed", component_id, bundle_id)
                raise UnexpectedError("Failed to add bundle component") from e
            raise IntegrityError(
                "Component was added to this bundle concurrently",
                kind=ErrorKind.RACE_LOST_UNIQUENESS,
            ) from None

        logger.info("Added %d x %s to bundle %s", quantity, component_id, bundle_id)
        return link

    async def components(self, db: AsyncSession, bundle_id: UUID) -> List[ProductBundle]:
        bundle = await self.catalog.get_product(db, bundle_id)
        if bundle is None:
            raise NotFoundError("Bundle not found", kind=ErrorKind.PRODUCT_NOT_FOUND)
        return await self.catalog.list_bundle_components(db, bundle_id)
