from pydantic import BaseModel, field_validator
from typing import Optional
from uuid import UUID


class SupplierRead(BaseModel):
    id: UUID
    name: str
    contact: Optional[str] = None


class SupplierCreate(BaseModel):
    name: str
    contact: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("field is required")
        return v


class SupplierProductLink(BaseModel):
    supplier_id: UUID
    product_id: UUID
