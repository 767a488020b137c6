import uuid
from sqlalchemy import CheckConstraint, Column, DateTime, Enum, ForeignKey, Integer, Numeric, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from .database import Base


ITEM_SERVICE = "SERVICE"
ITEM_PRODUCT = "PRODUCT"


class Transaction(Base):
    """One customer checkout: a barber, a payment method and one or more lines."""
    __tablename__ = "transactions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    barber_id = Column(UUID(as_uuid=True), ForeignKey("barbers.id", ondelete="RESTRICT"), nullable=False, index=True)
    total = Column(Numeric(10, 2), nullable=False)
    payment_method_id = Column(
        UUID(as_uuid=True), ForeignKey("payment_methods.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    notes = Column(Text, nullable=True)
    created_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now(), index=True)

    barber = relationship("Barber")
    payment_method = relationship("PaymentMethod")
    created_by_user = relationship("User")
    items = relationship("TransactionItem", back_populates="transaction", cascade="all, delete-orphan")


class TransactionItem(Base):
    __tablename__ = "transaction_items"
    __table_args__ = (
        # A line is either a service or a product, never both
        CheckConstraint(
            "(type = 'SERVICE' AND service_id IS NOT NULL AND inventory_item_id IS NULL) OR "
            "(type = 'PRODUCT' AND inventory_item_id IS NOT NULL AND service_id IS NULL)",
            name="check_item_type",
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    transaction_id = Column(
        UUID(as_uuid=True), ForeignKey("transactions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type = Column(
        Enum(ITEM_SERVICE, ITEM_PRODUCT, name="transaction_item_type"),
        nullable=False,
        default=ITEM_SERVICE,
    )
    service_id = Column(UUID(as_uuid=True), ForeignKey("services.id", ondelete="RESTRICT"), nullable=True, index=True)
    inventory_item_id = Column(UUID(as_uuid=True), ForeignKey("inventory_items.id"), nullable=True, index=True)

    price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    commission = Column(Numeric(10, 2), nullable=True, default=0)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    transaction = relationship("Transaction", back_populates="items")
    service = relationship("Service")
    inventory_item = relationship("InventoryItem")
