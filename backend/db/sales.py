import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, Uuid

from .database import Base, utcnow


class SalesActivity(Base):
    """
    Sales fact stream fed by the order system.

    Read-only from this service's point of view: nothing here writes it.
    """
    __tablename__ = "sales_activity"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_sales_activity_quantity_positive"),
    )

    sale_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    product_id = Column(Uuid, ForeignKey("products.product_id", ondelete="CASCADE"), nullable=False, index=True)
    warehouse_id = Column(Uuid, ForeignKey("warehouses.warehouse_id", ondelete="CASCADE"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    sold_at = Column(DateTime, nullable=False, default=utcnow, index=True)
