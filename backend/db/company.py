import uuid

from sqlalchemy import Column, DateTime, String, Uuid
from sqlalchemy.orm import relationship

from .database import Base, utcnow


class Company(Base):
    """Identity root: owns warehouses, products and suppliers."""
    __tablename__ = "companies"

    company_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    warehouses = relationship("Warehouse", back_populates="company", cascade="all, delete-orphan", passive_deletes=True)
    products = relationship("Product", back_populates="company", cascade="all, delete-orphan", passive_deletes=True)
    suppliers = relationship("Supplier", back_populates="company", cascade="all, delete-orphan", passive_deletes=True)

    @property
    def to_schema(self):
        return {
            "company_id": self.company_id,
            "name": self.name,
        }
