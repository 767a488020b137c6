from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from core.exceptions import ItemKindError


ItemType = Literal["SERVICE", "PRODUCT"]
Period = Literal["today", "week", "month", "all"]


def validate_item_kind(item_type: str, service_id: Optional[UUID], inventory_item_id: Optional[UUID]) -> str:
    """
    Gate a transaction line: SERVICE lines carry only a service id, PRODUCT
    lines only an inventory item id. Returns the type, raises ItemKindError.
    """
    if item_type == "SERVICE":
        if service_id is None or inventory_item_id is not None:
            raise ItemKindError("SERVICE items require service_id and no inventory_item_id")
        return item_type
    if item_type == "PRODUCT":
        if inventory_item_id is None or service_id is not None:
            raise ItemKindError("PRODUCT items require inventory_item_id and no service_id")
        return item_type
    raise ItemKindError(f"Unknown item type: {item_type}")


class TransactionItemCreate(BaseModel):
    type: ItemType
    service_id: Optional[UUID] = None
    inventory_item_id: Optional[UUID] = None
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    quantity: int = 1
    commission: Decimal = Field(Decimal("0"), ge=0, max_digits=10, decimal_places=2)

    @field_validator("quantity")
    @classmethod
    def _quantity_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("quantity must be > 0")
        return v

    @model_validator(mode="after")
    def _validate_kind(self):
        validate_item_kind(self.type, self.service_id, self.inventory_item_id)
        return self


class TransactionCreate(BaseModel):
    barber_id: UUID
    payment_method_id: UUID
    notes: Optional[str] = None
    items: List[TransactionItemCreate]

    @field_validator("items")
    @classmethod
    def _items_required(cls, v: List[TransactionItemCreate]) -> List[TransactionItemCreate]:
        if not v:
            raise ValueError("at least one item is required")
        return v

    @field_validator("notes")
    @classmethod
    def _strip_notes(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None


class TransactionItemRead(BaseModel):
    id: UUID
    type: ItemType
    service_id: Optional[UUID] = None
    service_name: Optional[str] = None
    inventory_item_id: Optional[UUID] = None
    inventory_item_name: Optional[str] = None
    price: float
    quantity: int
    commission: float


class TransactionRead(BaseModel):
    id: UUID
    barber_id: UUID
    barber_name: Optional[str] = None
    payment_method_id: UUID
    payment_method_name: Optional[str] = None
    total: float
    commission_total: float
    notes: Optional[str] = None
    created_by: UUID
    created_at: Optional[datetime] = None
    items: List[TransactionItemRead]
