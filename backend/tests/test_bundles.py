import pytest

from core.errors import ConflictError, ErrorKind, ValidationError
from repositories.catalog import SqlCatalogRepository
from services.bundles import BundleService


@pytest.fixture
def bundles():
    return BundleService(SqlCatalogRepository())


async def test_add_and_list_components(db, factory, bundles):
    warehouse = await factory.warehouse(await factory.company())
    kit = await factory.product(warehouse, sku="KIT", is_bundle=True)
    screw = await factory.product(warehouse, sku="SCREW")
    nut = await factory.product(warehouse, sku="NUT")

    await bundles.add_component(db, bundle_id=kit, component_id=screw, quantity=4)
    await bundles.add_component(db, bundle_id=kit, component_id=nut, quantity=2)

    items = await bundles.components(db, kit)
    assert {(c.component_id, c.quantity) for c in items} == {(screw, 4), (nut, 2)}


async def test_nested_bundles_are_rejected(db, factory, bundles):
    warehouse = await factory.warehouse(await factory.company())
    outer = await factory.product(warehouse, sku="OUTER", is_bundle=True)
    inner = await factory.product(warehouse, sku="INNER", is_bundle=True)

    with pytest.raises(ValidationError) as excinfo:
        await bundles.add_component(db, bundle_id=outer, component_id=inner, quantity=1)
    assert excinfo.value.kind == ErrorKind.INVALID_BUNDLE


async def test_plain_product_cannot_take_components(db, factory, bundles):
    warehouse = await factory.warehouse(await factory.company())
    plain = await factory.product(warehouse, sku="PLAIN")
    other = await factory.product(warehouse, sku="OTHER")

    with pytest.raises(ValidationError) as excinfo:
        await bundles.add_component(db, bundle_id=plain, component_id=other, quantity=1)
    assert excinfo.value.kind == ErrorKind.INVALID_BUNDLE


async def test_bundle_rules(db, factory, bundles):
    acme = await factory.warehouse(await factory.company("Acme"))
    globex = await factory.warehouse(await factory.company("Globex"))
    kit = await factory.product(acme, sku="KIT", is_bundle=True)
    part = await factory.product(acme, sku="PART")
    foreign = await factory.product(globex, sku="PART")

    with pytest.raises(ValidationError):
        await bundles.add_component(db, bundle_id=kit, component_id=kit, quantity=1)
    with pytest.raises(ValidationError):
        await bundles.add_component(db, bundle_id=kit, component_id=part, quantity=0)
    with pytest.raises(ValidationError):
        await bundles.add_component(db, bundle_id=kit, component_id=foreign, quantity=1)

    await bundles.add_component(db, bundle_id=kit, component_id=part, quantity=1)
    with pytest.raises(ConflictError):
        await bundles.add_component(db, bundle_id=kit, component_id=part, quantity=3)
