import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import relationship

from .database import Base, utcnow


class Warehouse(Base):
    __tablename__ = "warehouses"

    warehouse_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    company_id = Column(Uuid, ForeignKey("companies.company_id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    location = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    company = relationship("Company", back_populates="warehouses")

    @property
    def to_schema(self):
        return {
            "warehouse_id": self.warehouse_id,
            "company_id": self.company_id,
            "name": self.name,
            "location": self.location,
        }
