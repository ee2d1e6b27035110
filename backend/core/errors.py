"""
Error taxonomy shared by the services and the HTTP layer.

Every error carries a machine readable ``kind`` and a message that is safe to
return to the caller. Storage exceptions are never surfaced verbatim.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    MISSING_FIELD = "MissingField"
    INVALID_FIELD = "InvalidField"
    INVALID_PRICE = "InvalidPrice"
    INSUFFICIENT_STOCK = "InsufficientStock"
    MISSING_THRESHOLD = "MissingThreshold"
    INVALID_BUNDLE = "InvalidBundle"

    COMPANY_NOT_FOUND = "CompanyNotFound"
    WAREHOUSE_NOT_FOUND = "WarehouseNotFound"
    PRODUCT_NOT_FOUND = "ProductNotFound"
    SUPPLIER_NOT_FOUND = "SupplierNotFound"
    INVENTORY_NOT_FOUND = "InventoryNotFound"

    DUPLICATE_SKU = "DuplicateSKU"
    DUPLICATE_INVENTORY = "DuplicateInventory"
    DUPLICATE_BUNDLE_COMPONENT = "DuplicateBundleComponent"
    DUPLICATE_SUPPLIER_LINK = "DuplicateSupplierLink"
    RACE_LOST_UNIQUENESS = "RaceLostUniqueness"

    UNEXPECTED = "Unexpected"


class InventoryError(Exception):
    status_code: int = 500
    default_kind: ErrorKind = ErrorKind.UNEXPECTED

    def __init__(
        self,
        message: str,
        *,
        kind: Optional[ErrorKind] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.kind = kind or self.default_kind
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"error": self.kind.value, "message": self.message}
        if self.details:
            out["details"] = self.details
        return out


class ValidationError(InventoryError):
    status_code = 400
    default_kind = ErrorKind.INVALID_FIELD


class NotFoundError(InventoryError):
    status_code = 404
    default_kind = ErrorKind.PRODUCT_NOT_FOUND


class ConflictError(InventoryError):
    """Raised when a uniqueness rule is violated before any write happened."""

    status_code = 409
    default_kind = ErrorKind.DUPLICATE_SKU


class IntegrityError(InventoryError):
    """Raised when the storage layer rejected a write at flush/commit time.

    Only raised after the atomic scope has been rolled back.
    """

    status_code = 409
    default_kind = ErrorKind.RACE_LOST_UNIQUENESS


class UnexpectedError(InventoryError):
    status_code = 500
    default_kind = ErrorKind.UNEXPECTED

    def __init__(self, message: str = "An unexpected error occurred, please try again later", **kwargs):
        super().__init__(message, **kwargs)
