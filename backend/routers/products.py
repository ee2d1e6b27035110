from typing import Any, Dict, List
from uuid import UUID

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.dependencies import get_bundle_service, get_catalog, get_onboarding
from core.errors import ErrorKind, NotFoundError
from db.database import get_async_session
from repositories.catalog import CatalogRepository
from schemas.products import (
    BundleComponentCreate,
    BundleComponentRead,
    ProductCreate,
    ProductCreated,
    ProductRead,
)
from services.bundles import BundleService
from services.onboarding import ProductOnboarding

router = APIRouter()


@router.post("/", response_model=ProductCreated, status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_async_session),
    onboarding: ProductOnboarding = Depends(get_onboarding),
):
    """
    Create a product with its initial stock at one warehouse.

    Required: name, sku, price, warehouse_id. initial_quantity defaults to 0.
    """
    data = ProductCreate.parse(payload)
    result = await onboarding.onboard(db, data)
    return ProductCreated(
        product_id=result.product_id,
        warehouse_id=result.warehouse_id,
        initial_quantity=result.initial_quantity,
    )


@router.get("/{product_id}", response_model=ProductRead)
async def get_product(
    product_id: UUID,
    db: AsyncSession = Depends(get_async_session),
    catalog: CatalogRepository = Depends(get_catalog),
):
    product = await catalog.get_product(db, product_id)
    if product is None:
        raise NotFoundError("Product not found", kind=ErrorKind.PRODUCT_NOT_FOUND)
    return ProductRead(**product.to_schema)


@router.post("/{bundle_id}/components", response_model=BundleComponentRead, status_code=status.HTTP_201_CREATED)
async def add_bundle_component(
    bundle_id: UUID,
    payload: BundleComponentCreate,
    db: AsyncSession = Depends(get_async_session),
    bundles: BundleService = Depends(get_bundle_service),
):
    link = await bundles.add_component(
        db, bundle_id=bundle_id, component_id=payload.component_id, quantity=payload.quantity
    )
    return BundleComponentRead(bundle_id=link.bundle_id, component_id=link.component_id, quantity=link.quantity)


@router.get("/{bundle_id}/components", response_model=List[BundleComponentRead])
async def list_bundle_components(
    bundle_id: UUID,
    db: AsyncSession = Depends(get_async_session),
    bundles: BundleService = Depends(get_bundle_service),
):
    items = await bundles.components(db, bundle_id)
    return [BundleComponentRead(bundle_id=c.bundle_id, component_id=c.component_id, quantity=c.quantity) for c in items]
