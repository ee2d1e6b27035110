"""FastAPI providers for repositories and services; override them in tests via `app.dependency_overrides`."""

from core.config import settings
from repositories.catalog import CatalogRepository, SqlCatalogRepository
from repositories.ledger import SqlInventoryLedger
from repositories.sales import SqlSalesActivityFeed
from repositories.suppliers import SqlSupplierDirectory, SupplierDirectory
from services.alerts import AlertEngine
from services.bundles import BundleService
from services.inventory import InventoryService
from services.onboarding import ProductOnboarding
from services.stockout import get_stockout_estimator

catalog_repository = SqlCatalogRepository()
inventory_ledger = SqlInventoryLedger()
supplier_directory = SqlSupplierDirectory()
sales_feed = SqlSalesActivityFeed()


def get_catalog() -> CatalogRepository:
    return catalog_repository


def get_supplier_directory() -> SupplierDirectory:
    return supplier_directory


def get_onboarding() -> ProductOnboarding:
    return ProductOnboarding(
        catalog_repository,
        inventory_ledger,
        default_threshold=settings.default_low_stock_threshold,
    )


def get_inventory_service() -> InventoryService:
    return InventoryService(catalog_repository, inventory_ledger)


def get_bundle_service() -> BundleService:
    return BundleService(catalog_repository)


def get_alert_engine() -> AlertEngine:
    return AlertEngine(
        sales_feed,
        inventory_ledger,
        catalog_repository,
        supplier_directory,
        estimator=get_stockout_estimator(settings.stockout_estimator),
        window_days=settings.sales_window_days,
    )
