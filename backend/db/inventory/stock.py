import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from ..database import Base, utcnow


class Inventory(Base):
    __tablename__ = "inventory"
    __table_args__ = (
        UniqueConstraint("product_id", "warehouse_id", name="ux_inventory_product_warehouse"),
        CheckConstraint("quantity >= 0", name="ck_inventory_quantity_non_negative"),
    )

    inventory_id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    product_id = Column(
        Uuid,
        ForeignKey("products.product_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    warehouse_id = Column(
        Uuid,
        ForeignKey("warehouses.warehouse_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    quantity = Column(Integer, nullable=False, default=0)
    # Bumped in the same UPDATE as quantity; numbers this row's movements
    version = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    product = relationship("Product")
    warehouse = relationship("Warehouse")
    movements = relationship("InventoryMovement", back_populates="inventory", cascade="all, delete-orphan", passive_deletes=True)
