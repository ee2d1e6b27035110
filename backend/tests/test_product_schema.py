from decimal import Decimal
from uuid import uuid4

import pytest

from core.errors import ErrorKind, ValidationError
from schemas.products import ProductCreate


def _data(**overrides):
    data = {"name": "Widget", "sku": "W-1", "price": "9.99", "warehouse_id": str(uuid4())}
    data.update(overrides)
    return data


@pytest.mark.parametrize("field", ["name", "sku", "price", "warehouse_id"])
def test_missing_required_field(field):
    data = _data()
    del data[field]
    with pytest.raises(ValidationError) as excinfo:
        ProductCreate.parse(data)
    assert excinfo.value.kind == ErrorKind.MISSING_FIELD
    assert excinfo.value.details["fields"] == [field]


def test_blank_and_null_fields_count_as_missing():
    with pytest.raises(ValidationError) as excinfo:
        ProductCreate.parse(_data(name="   ", sku=None))
    assert excinfo.value.kind == ErrorKind.MISSING_FIELD
    assert excinfo.value.details["fields"] == ["name", "sku"]


def test_null_optional_field_is_invalid_not_missing():
    with pytest.raises(ValidationError) as excinfo:
        ProductCreate.parse(_data(is_bundle=None))
    assert excinfo.value.kind == ErrorKind.INVALID_FIELD
    assert excinfo.value.details["fields"] == ["is_bundle"]


@pytest.mark.parametrize("price", ["abc", "12.345", -1, "NaN", "Infinity", True, "1e12", [1]])
def test_invalid_price(price):
    with pytest.raises(ValidationError) as excinfo:
        ProductCreate.parse(_data(price=price))
    assert excinfo.value.kind == ErrorKind.INVALID_PRICE


@pytest.mark.parametrize("price", ["12.50", 12.50, "12.5", Decimal("12.50"), "12.500"])
def test_price_is_exact(price):
    assert ProductCreate.parse(_data(price=price)).price == Decimal("12.50")


def test_integer_price():
    assert ProductCreate.parse(_data(price=3)).price == Decimal("3.00")


def test_negative_initial_quantity():
    with pytest.raises(ValidationError) as excinfo:
        ProductCreate.parse(_data(initial_quantity=-1))
    assert excinfo.value.kind == ErrorKind.INVALID_FIELD
    assert excinfo.value.details["fields"] == ["initial_quantity"]


def test_malformed_warehouse_id():
    with pytest.raises(ValidationError) as excinfo:
        ProductCreate.parse(_data(warehouse_id="not-a-uuid"))
    assert excinfo.value.kind == ErrorKind.INVALID_FIELD


def test_body_must_be_an_object():
    with pytest.raises(ValidationError):
        ProductCreate.parse(["name"])


def test_names_are_stripped():
    parsed = ProductCreate.parse(_data(name="  Widget ", sku=" W-1 "))
    assert parsed.name == "Widget"
    assert parsed.sku == "W-1"
