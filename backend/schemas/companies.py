from pydantic import BaseModel, field_validator
from typing import Optional
from uuid import UUID


class CompanyCreate(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("field is required")
        return v


class CompanyRead(BaseModel):
    company_id: UUID
    name: str


class WarehouseCreate(BaseModel):
    name: str
    location: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("field is required")
        return v


class WarehouseRead(BaseModel):
    warehouse_id: UUID
    company_id: UUID
    name: str
    location: Optional[str] = None
