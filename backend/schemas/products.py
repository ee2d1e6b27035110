from decimal import Decimal, InvalidOperation
from typing import Any, List, Mapping, Optional
from uuid import UUID

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator

from core.errors import ErrorKind, ValidationError
from schemas.validation import validation_error_from_pydantic

CENT = Decimal("0.01")
# DECIMAL(12,2): at most 10 integer digits
MAX_PRICE = Decimal("1e10")

REQUIRED_PRODUCT_FIELDS = ("name", "sku", "price", "warehouse_id")


def parse_price(v: Any) -> Decimal:
    """Parse a price without going through binary floating point arithmetic.

    Floats arrive from JSON decoding; `str()` gives back the shortest literal
    that round-trips, so 12.50 and "12.50" both become Decimal("12.50").
    """
    if isinstance(v, bool):
        raise ValueError("price must be a number")
    if isinstance(v, (int, float)):
        v = str(v)
    if isinstance(v, str):
        try:
            d = Decimal(v.strip())
        except InvalidOperation:
            raise ValueError("price must be a decimal number")
    elif isinstance(v, Decimal):
        d = v
    else:
        raise ValueError("price must be a decimal number")

    if not d.is_finite():
        raise ValueError("price must be a finite number")
    if d < 0:
        raise ValueError("price cannot be negative")
    if d >= MAX_PRICE:
        raise ValueError("price is too large")
    q = d.quantize(CENT)
    if q != d:
        raise ValueError("price cannot have more than 2 decimal places")
    return q


class ProductCreate(BaseModel):
    name: str
    sku: str
    price: Decimal
    warehouse_id: UUID
    initial_quantity: int = Field(default=0, ge=0)
    low_stock_threshold: Optional[int] = Field(default=None, ge=0)
    is_bundle: bool = False

    @field_validator("name", "sku")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("field is required")
        return v

    @field_validator("price", mode="before")
    @classmethod
    def _price(cls, v: Any) -> Decimal:
        return parse_price(v)

    @field_validator("initial_quantity", mode="before")
    @classmethod
    def _default_quantity(cls, v: Any) -> Any:
        return 0 if v is None else v

    @classmethod
    def parse(cls, data: Any) -> "ProductCreate":
        """Validate a loosely typed request body, raising the service's ValidationError."""
        if not isinstance(data, Mapping):
            raise ValidationError("Request body must be a JSON object", kind=ErrorKind.INVALID_FIELD)

        missing: List[str] = []
        for field in REQUIRED_PRODUCT_FIELDS:
            value = data.get(field)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(field)
        if missing:
            raise ValidationError(
                f"Missing required fields: {', '.join(missing)}",
                kind=ErrorKind.MISSING_FIELD,
                details={"fields": missing},
            )

        try:
            return cls.model_validate(dict(data))
        except PydanticValidationError as e:
            raise validation_error_from_pydantic(e.errors(), required=REQUIRED_PRODUCT_FIELDS) from None


class ProductCreated(BaseModel):
    message: str = "Product created successfully"
    product_id: UUID
    warehouse_id: UUID
    initial_quantity: int


class ProductRead(BaseModel):
    product_id: UUID
    company_id: UUID
    name: str
    sku: str
    price: Decimal
    is_bundle: bool
    low_stock_threshold: Optional[int] = None


class BundleComponentCreate(BaseModel):
    component_id: UUID
    quantity: int = Field(default=1, gt=0)


class BundleComponentRead(BaseModel):
    bundle_id: UUID
    component_id: UUID
    quantity: int
