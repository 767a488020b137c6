from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


MovementType = Literal["in", "out"]

# Stock columns are Numeric(10,2)
STOCK_DIGITS = dict(max_digits=10, decimal_places=2)


class InventoryItemCreate(BaseModel):
    name: str
    sku: Optional[str] = None
    quantity: Decimal = Field(Decimal("0"), ge=0, **STOCK_DIGITS)
    unit: str = "un"
    min_quantity: Optional[Decimal] = Field(Decimal("0"), ge=0, **STOCK_DIGITS)

    @field_validator("name", "unit")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("field is required")
        return v

    @field_validator("sku")
    @classmethod
    def _strip_nullable(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None


class InventoryItemUpdate(BaseModel):
    # quantity is deliberately absent: stock only changes through movements
    name: Optional[str] = None
    sku: Optional[str] = None
    unit: Optional[str] = None
    min_quantity: Optional[Decimal] = Field(None, ge=0, **STOCK_DIGITS)

    @field_validator("name", "unit")
    @classmethod
    def _strip_optional(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = (v or "").strip()
        if not v:
            raise ValueError("cannot be empty")
        return v


class InventoryMovementCreate(BaseModel):
    type: MovementType
    quantity: Decimal = Field(gt=0, **STOCK_DIGITS)
    notes: Optional[str] = None

    @field_validator("notes")
    @classmethod
    def _strip_notes(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None


class InventoryItemOut(BaseModel):
    id: UUID
    name: str
    sku: Optional[str] = None
    quantity: float
    unit: str
    min_quantity: Optional[float] = None
    low_stock: bool


class InventoryMovementOut(BaseModel):
    id: UUID
    item_id: UUID
    type: MovementType
    quantity: float
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    created_by: UUID


class InventoryMovementResult(BaseModel):
    movement: InventoryMovementOut
    item: InventoryItemOut
