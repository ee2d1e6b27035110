import uuid

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship

from .database import Base, utcnow


class Product(Base):
    """Warehouse-independent catalog entry; stock lives in `inventory`."""
    __tablename__ = "products"
    __table_args__ = (
        UniqueConstraint("company_id", "sku", name="ux_products_company_sku"),
    )

    product_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    company_id = Column(Uuid, ForeignKey("companies.company_id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    sku = Column(String, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    is_bundle = Column(Boolean, nullable=False, default=False)
    # Filled by onboarding; NULL only for rows written outside it
    low_stock_threshold = Column(Integer, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    company = relationship("Company", back_populates="products")
    suppliers = relationship("Supplier", secondary="supplier_products", back_populates="products")
    components = relationship(
        "ProductBundle",
        foreign_keys="ProductBundle.bundle_id",
        back_populates="bundle",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def to_schema(self):
        return {
            "product_id": self.product_id,
            "company_id": self.company_id,
            "name": self.name,
            "sku": self.sku,
            "price": self.price,
            "is_bundle": bool(self.is_bundle),
            "low_stock_threshold": self.low_stock_threshold,
        }


class ProductBundle(Base):
    """Association object: a bundle product made of `quantity` units of a component product."""
    __tablename__ = "product_bundles"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_product_bundles_quantity_positive"),
        CheckConstraint("bundle_id <> component_id", name="ck_product_bundles_not_self"),
    )

    bundle_id = Column(Uuid, ForeignKey("products.product_id", ondelete="CASCADE"), primary_key=True)
    component_id = Column(Uuid, ForeignKey("products.product_id", ondelete="CASCADE"), primary_key=True)
    quantity = Column(Integer, nullable=False)

    bundle = relationship("Product", foreign_keys=[bundle_id], back_populates="components")
    component = relationship("Product", foreign_keys=[component_id])
