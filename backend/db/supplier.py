import uuid

from sqlalchemy import Column, ForeignKey, String, Table, Text, Uuid
from sqlalchemy.orm import relationship

from .database import Base


supplier_products = Table(
    "supplier_products",
    Base.metadata,
    Column("supplier_id", Uuid, ForeignKey("suppliers.supplier_id", ondelete="CASCADE"), primary_key=True),
    Column("product_id", Uuid, ForeignKey("products.product_id", ondelete="CASCADE"), primary_key=True),
)


class Supplier(Base):
    __tablename__ = "suppliers"

    supplier_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    company_id = Column(Uuid, ForeignKey("companies.company_id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False, index=True)
    contact_info = Column(Text, nullable=True)

    company = relationship("Company", back_populates="suppliers")
    products = relationship("Product", secondary=supplier_products, back_populates="suppliers")

    @property
    def to_schema(self):
        return {
            "id": self.supplier_id,
            "name": self.name,
            "contact": self.contact_info,
        }
