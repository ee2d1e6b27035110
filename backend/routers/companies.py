from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.dependencies import get_catalog
from core.errors import ErrorKind, NotFoundError
from db.company import Company as CompanyModel
from db.database import atomic, get_async_session
from db.warehouse import Warehouse as WarehouseModel
from repositories.catalog import CatalogRepository
from schemas.companies import CompanyCreate, CompanyRead, WarehouseCreate, WarehouseRead

router = APIRouter()


@router.post("/", response_model=CompanyRead, status_code=status.HTTP_201_CREATED)
async def create_company(
    payload: CompanyCreate,
    db: AsyncSession = Depends(get_async_session),
    catalog: CatalogRepository = Depends(get_catalog),
):
    async with atomic(db):
        m = await catalog.add_company(db, CompanyModel(name=payload.name))
    return CompanyRead(**m.to_schema)


@router.get("/{company_id}", response_model=CompanyRead)
async def get_company(
    company_id: UUID,
    db: AsyncSession = Depends(get_async_session),
    catalog: CatalogRepository = Depends(get_catalog),
):
    m = await catalog.get_company(db, company_id)
    if not m:
        raise NotFoundError("Company not found", kind=ErrorKind.COMPANY_NOT_FOUND)
    return CompanyRead(**m.to_schema)


@router.post("/{company_id}/warehouses", response_model=WarehouseRead, status_code=status.HTTP_201_CREATED)
async def create_warehouse(
    company_id: UUID,
    payload: WarehouseCreate,
    db: AsyncSession = Depends(get_async_session),
    catalog: CatalogRepository = Depends(get_catalog),
):
    if not await catalog.get_company(db, company_id):
        raise NotFoundError("Company not found", kind=ErrorKind.COMPANY_NOT_FOUND)

    async with atomic(db):
        m = await catalog.add_warehouse(
            db, WarehouseModel(company_id=company_id, name=payload.name, location=payload.location)
        )
    return WarehouseRead(**m.to_schema)
