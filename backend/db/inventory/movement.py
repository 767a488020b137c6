import uuid

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Numeric, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


MOVEMENT_IN = "in"
MOVEMENT_OUT = "out"


class InventoryMovement(Base):
    __tablename__ = "inventory_movements"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    item_id = Column(
        UUID(as_uuid=True),
        ForeignKey("inventory_items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    type = Column(Enum(MOVEMENT_IN, MOVEMENT_OUT, name="movement_type"), nullable=False)
    quantity = Column(Numeric(10, 2), nullable=False)  # always positive; direction is in `type`
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, nullable=False, server_default=func.now(), index=True)
    created_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)

    item = relationship("InventoryItem", back_populates="movements")
    created_by_user = relationship("User")

    @property
    def signed_quantity(self):
        return self.quantity if self.type == MOVEMENT_IN else -self.quantity

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "item_id": self.item_id,
            "type": self.type,
            "quantity": float(self.quantity),
            "notes": self.notes,
            "created_at": self.created_at,
            "created_by": self.created_by,
        }
