from fastapi import APIRouter, Depends, status
from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from uuid import UUID

from core.dependencies import get_catalog, get_supplier_directory
from core.errors import ConflictError, ErrorKind, IntegrityError, NotFoundError, UnexpectedError, ValidationError
from db.database import atomic, get_async_session, is_unique_violation
from db.supplier import Supplier as SupplierModel
from repositories.catalog import CatalogRepository
from repositories.suppliers import SupplierDirectory
from schemas.suppliers import SupplierCreate, SupplierProductLink, SupplierRead

router = APIRouter()


@router.get("/companies/{company_id}/suppliers", response_model=List[SupplierRead])
async def list_suppliers(
    company_id: UUID,
    db: AsyncSession = Depends(get_async_session),
    suppliers: SupplierDirectory = Depends(get_supplier_directory),
):
    items = await suppliers.list_suppliers(db, company_id)
    return [SupplierRead(**s.to_schema) for s in items]


@router.post("/companies/{company_id}/suppliers", response_model=SupplierRead, status_code=status.HTTP_201_CREATED)
async def create_supplier(
    company_id: UUID,
    payload: SupplierCreate,
    db: AsyncSession = Depends(get_async_session),
    catalog: CatalogRepository = Depends(get_catalog),
    suppliers: SupplierDirectory = Depends(get_supplier_directory),
):
    if not await catalog.get_company(db, company_id):
        raise NotFoundError("Company not found", kind=ErrorKind.COMPANY_NOT_FOUND)

    async with atomic(db):
        m = await suppliers.add_supplier(
            db, SupplierModel(company_id=company_id, name=payload.name, contact_info=payload.contact)
        )
    return SupplierRead(**m.to_schema)


@router.post("/suppliers/products", response_model=SupplierProductLink, status_code=status.HTTP_201_CREATED)
async def link_supplier_product(
    payload: SupplierProductLink,
    db: AsyncSession = Depends(get_async_session),
    catalog: CatalogRepository = Depends(get_catalog),
    suppliers: SupplierDirectory = Depends(get_supplier_directory),
):
    supplier = await suppliers.get_supplier(db, payload.supplier_id)
    if not supplier:
        raise NotFoundError("Supplier not found", kind=ErrorKind.SUPPLIER_NOT_FOUND)
    product = await catalog.get_product(db, payload.product_id)
    if not product:
        raise NotFoundError("Product not found", kind=ErrorKind.PRODUCT_NOT_FOUND)
    if supplier.company_id != product.company_id:
        raise ValidationError("Supplier and product belong to different companies", kind=ErrorKind.INVALID_FIELD)
    if await suppliers.is_linked(db, supplier_id=supplier.supplier_id, product_id=product.product_id):
        raise ConflictError("Supplier already linked to this product", kind=ErrorKind.DUPLICATE_SUPPLIER_LINK)

    try:
        async with atomic(db):
            await suppliers.link_product(db, supplier_id=payload.supplier_id, product_id=payload.product_id)
    except sa_exc.IntegrityError as e:
        if not is_unique_violation(e):
            raise UnexpectedError("Failed to link supplier to product") from e
        raise IntegrityError("Supplier was linked to this product concurrently") from None
    return payload
