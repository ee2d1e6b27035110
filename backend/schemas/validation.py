"""Translate pydantic validation failures into the service's ValidationError kinds."""

from typing import Any, Collection, Iterable, List, Mapping, Sequence

from core.errors import ErrorKind, ValidationError

# Fields whose failures get a dedicated kind instead of InvalidField
FIELD_KINDS = {
    "price": ErrorKind.INVALID_PRICE,
}


def _field_name(loc: Sequence[Any]) -> str:
    parts = [str(p) for p in loc if p != "body"]
    return ".".join(parts) if parts else "body"


def _is_missing(err: Mapping[str, Any], required: Collection[str]) -> bool:
    if err.get("type") == "missing":
        return True
    # null or blank only means "missing" for fields that must be present
    if _field_name(err.get("loc", ())) not in required:
        return False
    value = err.get("input")
    return value is None or (isinstance(value, str) and not value.strip())


def validation_error_from_pydantic(
    errors: Iterable[Mapping[str, Any]], required: Collection[str] = ()
) -> ValidationError:
    errors = list(errors)
    missing: List[str] = [_field_name(e.get("loc", ())) for e in errors if _is_missing(e, required)]
    if missing:
        return ValidationError(
            f"Missing required fields: {', '.join(missing)}",
            kind=ErrorKind.MISSING_FIELD,
            details={"fields": missing},
        )

    first = errors[0] if errors else {}
    field = _field_name(first.get("loc", ()))
    kind = FIELD_KINDS.get(field, ErrorKind.INVALID_FIELD)
    msg = str(first.get("msg", "invalid value"))
    # pydantic prefixes errors raised from validators with "Value error, "
    msg = msg.replace("Value error, ", "", 1)
    return ValidationError(
        f"Invalid {field}: {msg}",
        kind=kind,
        details={"fields": [_field_name(e.get("loc", ())) for e in errors]},
    )
