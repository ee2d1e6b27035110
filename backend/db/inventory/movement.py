import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from ..database import Base, utcnow


class InventoryMovement(Base):
    """Immutable signed delta; rows are only ever inserted."""
    __tablename__ = "inventory_movements"
    __table_args__ = (
        UniqueConstraint("inventory_id", "sequence", name="ux_inventory_movements_sequence"),
    )

    movement_id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    inventory_id = Column(
        Uuid,
        ForeignKey("inventory.inventory_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # 1, 2, 3... per inventory row, in commit order
    sequence = Column(Integer, nullable=False)
    change_amount = Column(Integer, nullable=False)
    reason = Column(Text, nullable=False)

    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)

    inventory = relationship("Inventory", back_populates="movements")

    @property
    def to_schema(self):
        return {
            "movement_id": self.movement_id,
            "inventory_id": self.inventory_id,
            "sequence": self.sequence,
            "change_amount": self.change_amount,
            "reason": self.reason,
            "created_at": self.created_at,
        }
