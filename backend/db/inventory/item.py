import uuid

from sqlalchemy import Column, DateTime, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class InventoryItem(Base):
    __tablename__ = "inventory_items"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    name = Column(String, nullable=False)
    sku = Column(Text, nullable=True, unique=True)
    quantity = Column(Numeric(10, 2), nullable=False, default=0)
    unit = Column(Text, nullable=False, default="un")
    min_quantity = Column(Numeric(10, 2), nullable=True, default=0)

    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    movements = relationship("InventoryMovement", back_populates="item", cascade="all, delete-orphan")

    @property
    def is_low_stock(self) -> bool:
        # min_quantity of 0/None means "no threshold"
        if not self.min_quantity:
            return False
        return self.quantity <= self.min_quantity

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "name": self.name,
            "sku": self.sku,
            "quantity": float(self.quantity or 0),
            "unit": self.unit,
            "min_quantity": float(self.min_quantity) if self.min_quantity is not None else None,
            "low_stock": self.is_low_stock,
        }
